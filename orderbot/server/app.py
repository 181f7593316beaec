"""FastAPI application: status, health, WhatsApp webhook and outbound send."""

from __future__ import annotations

import json
import logging
import os

from fastapi import BackgroundTasks, FastAPI, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel

from orderbot import __version__
from orderbot.audit.logger import EventLogger
from orderbot.config import BotSettings
from orderbot.models import InboundMessage
from orderbot.routing.router import MessageRouter, SendReply
from orderbot.server.auth_middleware import AuthMiddleware
from orderbot.upstream.catalog import CatalogSearchClient
from orderbot.upstream.gemini import ChatResponder
from orderbot.upstream.orders import OrderLookupClient
from orderbot.webhook.whatsapp import WhatsAppRelay, normalize_recipient

logger = logging.getLogger(__name__)

WEBHOOK_PATH = "/webhook/whatsapp"


class SendRequest(BaseModel):
    number: str = ""
    message: str = ""


def configure_logging(level_name: str) -> None:
    level = getattr(logging, level_name.upper(), logging.INFO)
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )
    logging.getLogger("orderbot").setLevel(level)


def build_router(settings: BotSettings) -> MessageRouter:
    """Wire the upstream clients and event log described by the settings."""
    event_logger = (
        EventLogger(
            settings.event_log_path,
            max_bytes=settings.event_log_max_bytes,
            backup_count=settings.event_log_backup_count,
        )
        if settings.event_log_path
        else None
    )
    return MessageRouter(
        order_client=OrderLookupClient(settings.order_api_url, timeout=settings.order_api_timeout),
        catalog_client=CatalogSearchClient(settings.catalog, timeout=settings.catalog_timeout),
        responder=ChatResponder(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            api_base=settings.gemini_api_base,
            timeout=settings.gemini_timeout,
            currency=settings.catalog_currency,
        ),
        event_logger=event_logger,
    )


def create_app_from_env() -> FastAPI:
    """Factory for uvicorn --factory: reads config from environment variables."""
    settings = BotSettings.from_env()
    configure_logging(settings.log_level)
    for name in settings.missing_optional():
        logger.warning("%s is not configured; the related feature is degraded", name)

    relay = (
        WhatsAppRelay.from_config(settings.whatsapp)
        if settings.whatsapp.is_configured
        else None
    )
    return create_app(build_router(settings), relay, settings.send_api_token)


def create_app(
    router: MessageRouter,
    relay: WhatsAppRelay | None = None,
    send_api_token: str = "",
) -> FastAPI:
    """Create the bot app. Without a relay, webhook and send answer 503."""
    app = FastAPI(docs_url=None, redoc_url=None)

    async def _reply(message: InboundMessage, send: SendReply) -> None:
        await router.handle_and_reply(message, send)

    @app.get("/")
    async def status() -> dict[str, str]:
        return {
            "service": "orderbot",
            "version": __version__,
            "transport": "ready" if relay else "not configured",
        }

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get(WEBHOOK_PATH)
    async def verify_webhook(request: Request) -> Response:
        if relay is None:
            return JSONResponse({"error": "WhatsApp transport not configured"}, status_code=503)
        result = relay.handle_verification(dict(request.query_params))
        if result is None:
            return JSONResponse({"error": "Unsupported hub.mode"}, status_code=400)
        if result["status_code"] != 200:
            return JSONResponse({"error": result["error"]}, status_code=result["status_code"])
        return PlainTextResponse(result["content"])

    @app.post(WEBHOOK_PATH)
    async def receive_webhook(request: Request, background: BackgroundTasks) -> Response:
        if relay is None:
            return JSONResponse({"error": "WhatsApp transport not configured"}, status_code=503)

        body = await request.body()
        if not relay.verify_signature(dict(request.headers), body):
            return JSONResponse({"error": "Invalid signature"}, status_code=401)

        try:
            payload = json.loads(body)
        except json.JSONDecodeError:
            return JSONResponse({"error": "Invalid JSON"}, status_code=400)
        if not isinstance(payload, dict):
            return JSONResponse({"error": "Invalid payload"}, status_code=400)

        messages = relay.extract_messages(payload)
        for message in messages:
            background.add_task(_reply, message, relay.send_response)
        return JSONResponse({"status": "accepted", "messages": len(messages)})

    @app.post("/send")
    async def send(request: SendRequest) -> Response:
        if not request.number.strip() or not request.message.strip():
            return JSONResponse(
                {"error": "Number and message are required in the request body."},
                status_code=400,
            )
        if relay is None:
            return JSONResponse({"error": "WhatsApp transport not configured"}, status_code=503)

        recipient = normalize_recipient(request.number)
        if not await relay.send_response(recipient, request.message):
            return JSONResponse({"error": "Failed to send message."}, status_code=502)
        logger.info("Message sent to %s via /send", recipient)
        return JSONResponse({
            "success": True,
            "message": f"Message sent to {request.number}",
        })

    app.add_middleware(AuthMiddleware, token=send_api_token)

    return app


def main() -> None:  # pragma: no cover - process entry point
    import uvicorn

    uvicorn.run(
        "orderbot.server.app:create_app_from_env",
        factory=True,
        host="0.0.0.0",
        port=int(os.environ.get("PORT", "3000")),
    )
