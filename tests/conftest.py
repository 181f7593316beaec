"""Shared test fixtures for orderbot."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from orderbot.audit.logger import EventLogger
from orderbot.config import CatalogConfig
from orderbot.models import InboundMessage, LookupStatus, OrderEnvelope


@pytest.fixture
def mock_event_logger() -> MagicMock:
    return MagicMock(spec=EventLogger)


@pytest.fixture
def catalog_config() -> CatalogConfig:
    return CatalogConfig(
        base_url="https://shop.example.com",
        consumer_key="ck_test",
        consumer_secret="cs_test",
    )


# --- Factory functions for test data ---


def make_inbound_message(**kwargs: Any) -> InboundMessage:
    """Factory for InboundMessage with sensible defaults."""
    defaults: dict[str, Any] = {
        "text": "Bonjour",
        "origin_id": "33600000000",
        "message_id": "wamid.test",
    }
    defaults.update(kwargs)
    return InboundMessage(**defaults)


def make_order_envelope(**kwargs: Any) -> OrderEnvelope:
    """Factory for OrderEnvelope with sensible defaults."""
    defaults: dict[str, Any] = {
        "status": LookupStatus.SUCCESS,
        "record": {"Numéro": "OF17001", "Statut": "Expédié"},
    }
    defaults.update(kwargs)
    return OrderEnvelope(**defaults)


def make_product_item(**kwargs: Any) -> dict[str, Any]:
    """Factory for a WooCommerce REST product object."""
    defaults: dict[str, Any] = {
        "id": 42,
        "name": "Porte isotherme",
        "price": "199.00",
        "regular_price": "199.00",
        "sale_price": "",
        "short_description": "<p>Porte <strong>isotherme</strong> pour chambre froide.</p>",
        "description": "",
        "stock_status": "instock",
        "sku": "PI-42",
        "permalink": "https://shop.example.com/produit/porte-isotherme",
    }
    defaults.update(kwargs)
    return defaults


def make_gemini_body(text: str = "Bonjour ! Comment puis-je vous aider ?") -> dict[str, Any]:
    """Factory for a generateContent response body."""
    return {
        "candidates": [
            {"content": {"role": "model", "parts": [{"text": text}]}},
        ],
    }


def make_async_client(
    response: Any = None, side_effect: Any = None,
) -> AsyncMock:
    """AsyncMock standing in for an ``httpx.AsyncClient`` context manager."""
    client = AsyncMock()
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=False)
    for method in (client.get, client.post):
        if side_effect is not None:
            method.side_effect = side_effect
        else:
            method.return_value = response
    return client


def make_http_response(status_code: int = 200, json_body: Any = None) -> MagicMock:
    """MagicMock standing in for an ``httpx.Response``."""
    resp = MagicMock(status_code=status_code)
    if isinstance(json_body, Exception):
        resp.json.side_effect = json_body
    else:
        resp.json.return_value = json_body
    return resp
