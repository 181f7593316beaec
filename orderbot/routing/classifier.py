"""Intent classification for inbound chat messages.

Every message maps to exactly one intent:
- order lookup when the text starts with the ``OF`` order prefix
- product query when it mentions a catalog keyword
- general chat otherwise
"""

from __future__ import annotations

import re

from orderbot.models import Intent, IntentKind

ORDER_PREFIX = "OF"

# Matched as case-insensitive substrings, not whole words.
PRODUCT_KEYWORDS: tuple[str, ...] = (
    "product",
    "products",
    "available",
    "list",
    "price",
    "buy",
    "order",
    "stock",
    "catalog",
    "produit",
    "produits",
    "disponible",
    "liste",
    "prix",
    "tarif",
    "acheter",
    "commande",
    "commander",
    "catalogue",
)

_PUNCTUATION = re.compile(r"[^\w\s]")
_MIN_TERM_LENGTH = 3


def classify(text: str) -> Intent:
    """Classify a raw message text into an intent.

    Args:
        text: The message body as received.

    Returns:
        The Intent for the text. Empty text is general chat.
    """
    normalized = text.strip().upper()
    if normalized.startswith(ORDER_PREFIX):
        # Only a single trailing "?" is dropped.
        order_number = normalized[:-1] if normalized.endswith("?") else normalized
        return Intent(
            kind=IntentKind.ORDER_LOOKUP,
            raw_text=text,
            order_number=order_number,
        )

    lowered = text.lower()
    if any(keyword in lowered for keyword in PRODUCT_KEYWORDS):
        return Intent(
            kind=IntentKind.PRODUCT_QUERY,
            raw_text=text,
            search_terms=extract_search_terms(text),
        )

    return Intent(kind=IntentKind.GENERAL_CHAT, raw_text=text)


def extract_search_terms(text: str) -> str:
    """Reduce a product question to catalog search terms.

    Falls back to the raw text when nothing survives filtering.
    """
    cleaned = _PUNCTUATION.sub("", text.lower())
    terms = [
        token for token in cleaned.split()
        if len(token) >= _MIN_TERM_LENGTH and token not in PRODUCT_KEYWORDS
    ]
    return " ".join(terms) or text
