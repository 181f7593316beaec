"""Tests for intent classification."""

from __future__ import annotations

import pytest

from orderbot.models import IntentKind
from orderbot.routing.classifier import PRODUCT_KEYWORDS, classify, extract_search_terms


class TestOrderLookup:
    """Messages starting with the OF prefix are order lookups."""

    def test_plain_order_number(self) -> None:
        intent = classify("OF12345")
        assert intent.kind == IntentKind.ORDER_LOOKUP
        assert intent.order_number == "OF12345"

    def test_lowercase_with_question_mark(self) -> None:
        intent = classify("of12345?")
        assert intent.kind == IntentKind.ORDER_LOOKUP
        assert intent.order_number == "OF12345"

    def test_surrounding_whitespace_trimmed(self) -> None:
        assert classify("  OF17001?  ").order_number == "OF17001"

    def test_only_one_trailing_question_mark_stripped(self) -> None:
        assert classify("OF9999??").order_number == "OF9999?"

    def test_prefix_wins_over_product_keywords(self) -> None:
        intent = classify("of order price")
        assert intent.kind == IntentKind.ORDER_LOOKUP
        assert intent.order_number == "OF ORDER PRICE"

    def test_raw_text_preserved(self) -> None:
        assert classify("of1?").raw_text == "of1?"


class TestProductQuery:
    """Keyword substring matches route to the catalog."""

    def test_french_price_question(self) -> None:
        intent = classify("quel est le prix du produit X")
        assert intent.kind == IntentKind.PRODUCT_QUERY
        assert intent.raw_text == "quel est le prix du produit X"
        assert intent.search_terms == "quel est"

    def test_keyword_matched_as_substring(self) -> None:
        # "lists" contains "list"
        intent = classify("Show me your lists")
        assert intent.kind == IntentKind.PRODUCT_QUERY

    def test_keyword_match_is_case_insensitive(self) -> None:
        assert classify("PRICE of doors").kind == IntentKind.PRODUCT_QUERY

    def test_terms_drop_short_tokens_and_punctuation(self) -> None:
        intent = classify("Do you have insulated doors in stock?")
        assert intent.search_terms == "you have insulated doors"

    def test_terms_fall_back_to_raw_text(self) -> None:
        intent = classify("prix ?")
        assert intent.search_terms == "prix ?"


class TestGeneralChat:
    def test_greeting_is_general_chat(self) -> None:
        intent = classify("Bonjour, comment allez-vous ?")
        assert intent.kind == IntentKind.GENERAL_CHAT
        assert intent.raw_text == "Bonjour, comment allez-vous ?"
        assert intent.order_number is None
        assert intent.search_terms is None

    def test_empty_string(self) -> None:
        intent = classify("")
        assert intent.kind == IntentKind.GENERAL_CHAT
        assert intent.raw_text == ""

    def test_whitespace_only(self) -> None:
        assert classify("   ").kind == IntentKind.GENERAL_CHAT


@pytest.mark.parametrize("text", ["", "OF1", "prix", "salut", "???", "of", "Ö"])
def test_classify_is_deterministic(text: str) -> None:
    assert classify(text) == classify(text)


def test_keywords_are_lowercase() -> None:
    assert all(keyword == keyword.lower() for keyword in PRODUCT_KEYWORDS)


def test_extract_search_terms_removes_keywords() -> None:
    assert extract_search_terms("catalogue portes frigorifiques") == "portes frigorifiques"
