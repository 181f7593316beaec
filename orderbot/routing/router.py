"""Per-message entry point.

Classifies each inbound message, calls the matching upstream and turns
every outcome into exactly one reply string. No exception raised while
handling a message escapes the router.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from orderbot.models import (
    HandlingOutcome,
    InboundMessage,
    IntentKind,
    LookupStatus,
    MessageEvent,
)
from orderbot.routing.classifier import classify
from orderbot.routing.formatter import format_order
from orderbot.upstream.catalog import build_catalog_context
from orderbot.upstream.gemini import ChatResponderError, ConfigurationMissingError

if TYPE_CHECKING:
    from orderbot.audit.logger import EventLogger
    from orderbot.models import Intent
    from orderbot.upstream.catalog import CatalogSearchClient
    from orderbot.upstream.gemini import ChatResponder
    from orderbot.upstream.orders import OrderLookupClient

logger = logging.getLogger(__name__)

ORDER_NOT_FOUND_TEMPLATE = (
    "Numéro de commande '{order_number}' introuvable. Veuillez vérifier et réessayer."
)
ORDER_FAILURE_REPLY = (
    "Désolé, une erreur technique est survenue lors de la tentative de "
    "récupération des données de commande. Veuillez réessayer plus tard."
)
CHAT_FAILURE_REPLY = (
    "Désolé, je n'ai pas pu traiter votre demande pour le moment. "
    "L'IA a rencontré une erreur."
)
AI_KEY_MISSING_REPLY = (
    "Désolé, je ne peux pas répondre pour le moment. La clé API de l'IA est manquante."
)

SendReply = Callable[[str, str], Awaitable[object]]


class MessageRouter:
    """Routes one inbound message to one reply."""

    def __init__(
        self,
        order_client: OrderLookupClient,
        catalog_client: CatalogSearchClient,
        responder: ChatResponder,
        event_logger: EventLogger | None = None,
    ) -> None:
        self._orders = order_client
        self._catalog = catalog_client
        self._responder = responder
        self._events = event_logger

    async def handle(self, message: InboundMessage) -> str:
        """Return the reply for a message. Never raises."""
        intent: Intent | None = None
        detail: str | None = None
        try:
            intent = classify(message.text)
            logger.info("Message from %s classified as %s", message.origin_id, intent.kind.value)
            if intent.kind == IntentKind.ORDER_LOOKUP:
                reply, outcome = await self._handle_order(intent)
            elif intent.kind == IntentKind.PRODUCT_QUERY:
                reply, outcome = await self._handle_product(intent)
            else:
                reply = await self._responder.respond(intent.raw_text)
                outcome = HandlingOutcome.CHAT_REPLY
        except ConfigurationMissingError as exc:
            reply, outcome, detail = AI_KEY_MISSING_REPLY, HandlingOutcome.CONFIG_MISSING, str(exc)
        except Exception as exc:
            logger.exception("Failed to handle message from %s", message.origin_id)
            is_order = intent is not None and intent.kind == IntentKind.ORDER_LOOKUP
            reply = ORDER_FAILURE_REPLY if is_order else CHAT_FAILURE_REPLY
            outcome = (
                HandlingOutcome.UPSTREAM_ERROR
                if isinstance(exc, ChatResponderError)
                else HandlingOutcome.INTERNAL_FAULT
            )
            detail = f"{type(exc).__name__}: {exc}"

        await self._record(message, intent, outcome, detail)
        return reply

    async def handle_and_reply(self, message: InboundMessage, send: SendReply) -> str:
        """Handle a message and deliver its reply through ``send`` exactly once."""
        reply = await self.handle(message)
        await send(message.origin_id, reply)
        return reply

    async def _handle_order(self, intent: Intent) -> tuple[str, HandlingOutcome]:
        order_number = intent.order_number or ""
        envelope = await self._orders.lookup(order_number)

        if envelope.status == LookupStatus.SUCCESS:
            formatted = format_order(envelope.record)
            if formatted:
                return formatted, HandlingOutcome.ORDER_FOUND
            logger.warning("Order %s returned no displayable fields", order_number)
            return (
                ORDER_NOT_FOUND_TEMPLATE.format(order_number=order_number),
                HandlingOutcome.ORDER_NOT_FOUND,
            )

        if envelope.status == LookupStatus.NOT_FOUND:
            return (
                ORDER_NOT_FOUND_TEMPLATE.format(order_number=order_number),
                HandlingOutcome.ORDER_NOT_FOUND,
            )

        logger.error("Order lookup failed for %s: %s", order_number, envelope.message)
        return ORDER_FAILURE_REPLY, HandlingOutcome.ORDER_ERROR

    async def _handle_product(self, intent: Intent) -> tuple[str, HandlingOutcome]:
        products = await self._catalog.search(intent.search_terms or intent.raw_text)
        context = build_catalog_context(products)
        reply = await self._responder.respond(intent.raw_text, context)
        return reply, HandlingOutcome.CHAT_REPLY

    async def _record(
        self,
        message: InboundMessage,
        intent: Intent | None,
        outcome: HandlingOutcome,
        detail: str | None,
    ) -> None:
        if self._events is None:
            return
        event = MessageEvent(
            origin_id=message.origin_id,
            intent=intent.kind if intent is not None else None,
            outcome=outcome,
            detail=detail,
        )
        # File append and flock block; keep them off the event loop.
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, self._events.log, event)
        except OSError as exc:
            logger.warning("Could not write message event: %s", exc)
