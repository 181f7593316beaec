"""Shared Pydantic data models for orderbot."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

# Flat field map returned by the order API; missing keys read as "".
OrderRecord = dict[str, str]


# --- Enums ---


class IntentKind(str, Enum):
    ORDER_LOOKUP = "order_lookup"
    PRODUCT_QUERY = "product_query"
    GENERAL_CHAT = "general_chat"


class StockStatus(str, Enum):
    IN_STOCK = "instock"
    OUT_OF_STOCK = "outofstock"


class LookupStatus(str, Enum):
    SUCCESS = "success"
    NOT_FOUND = "not_found"
    ERROR = "error"


class HandlingOutcome(str, Enum):
    ORDER_FOUND = "order_found"
    ORDER_NOT_FOUND = "order_not_found"
    ORDER_ERROR = "order_error"
    CHAT_REPLY = "chat_reply"
    CONFIG_MISSING = "config_missing"
    UPSTREAM_ERROR = "upstream_error"
    INTERNAL_FAULT = "internal_fault"


# --- Message Models ---


class InboundMessage(BaseModel):
    """One inbound chat message, consumed once by the router."""

    model_config = ConfigDict(frozen=True)

    text: str
    origin_id: str
    message_id: str = ""


class Intent(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: IntentKind
    raw_text: str
    order_number: str | None = None
    search_terms: str | None = None


# --- Upstream Models ---


class OrderEnvelope(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: LookupStatus
    record: OrderRecord = Field(default_factory=dict)
    message: str | None = None


class ProductRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    price: str
    sale_price: str | None = None
    short_description: str = ""
    stock_status: StockStatus
    sku: str | None = None
    permalink: str = ""


# --- Event Log Models ---


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class MessageEvent(BaseModel):
    timestamp: str = Field(default_factory=_now_iso)
    origin_id: str
    intent: IntentKind | None = None
    outcome: HandlingOutcome
    detail: str | None = None
