"""WhatsApp Business Cloud API transport.

Handles webhook HMAC verification, the Meta verification challenge,
extraction of inbound text messages and delivery of replies.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
from typing import Any

import httpx

from orderbot.config import WhatsAppConfig
from orderbot.models import InboundMessage

logger = logging.getLogger(__name__)

_WHATSAPP_API_BASE = "https://graph.facebook.com/v18.0"
_SEND_TIMEOUT_SECONDS = 15.0
_LEGACY_CHAT_SUFFIX = "@c.us"


def normalize_recipient(number: str) -> str:
    """Reduce a phone number or legacy chat id to Graph API digits."""
    cleaned = number.strip().removesuffix(_LEGACY_CHAT_SUFFIX)
    return "".join(ch for ch in cleaned if ch.isdigit())


class WhatsAppRelay:
    """Receives WhatsApp webhook updates and sends text replies."""

    def __init__(
        self,
        app_secret: str,
        verify_token: str,
        phone_number_id: str,
        access_token: str,
    ) -> None:
        self._app_secret = app_secret
        self._verify_token = verify_token
        self._phone_number_id = phone_number_id
        self._access_token = access_token

    @classmethod
    def from_config(cls, config: WhatsAppConfig) -> WhatsAppRelay:
        return cls(
            app_secret=config.app_secret,
            verify_token=config.verify_token,
            phone_number_id=config.phone_number_id,
            access_token=config.access_token,
        )

    def verify_signature(self, headers: dict[str, str], body: bytes) -> bool:
        """Verify the ``x-hub-signature-256`` HMAC-SHA256 header in constant time."""
        signature = headers.get("x-hub-signature-256", "")
        if not signature.startswith("sha256="):
            return False

        expected = hmac.new(
            self._app_secret.encode(), body, hashlib.sha256,
        ).hexdigest()
        return hmac.compare_digest(signature[7:], expected)

    def handle_verification(
        self, params: dict[str, str],
    ) -> dict[str, Any] | None:
        """Answer the Meta webhook verification challenge.

        Returns None for non-subscribe modes.
        """
        mode = params.get("hub.mode")
        if mode != "subscribe":
            return None

        token = params.get("hub.verify_token", "")
        if hmac.compare_digest(token, self._verify_token):
            return {
                "status_code": 200,
                "content": params.get("hub.challenge", ""),
            }
        return {"status_code": 403, "error": "Invalid verify token"}

    def extract_messages(self, payload: dict[str, Any]) -> list[InboundMessage]:
        """Extract text messages from a webhook payload.

        Status updates (delivered, read) and non-text messages are ignored.
        """
        messages: list[InboundMessage] = []
        for entry in payload.get("entry", []):
            for change in entry.get("changes", []):
                value = change.get("value", {})
                for msg in value.get("messages", []):
                    if msg.get("type") != "text":
                        continue
                    messages.append(InboundMessage(
                        text=msg.get("text", {}).get("body", ""),
                        origin_id=msg.get("from", ""),
                        message_id=msg.get("id", ""),
                    ))
        return messages

    async def send_response(self, recipient: str, text: str) -> bool:
        """Send a text reply through the Graph API.

        One attempt with TLS verification. Returns False when delivery
        failed; the failure is logged.
        """
        url = f"{_WHATSAPP_API_BASE}/{self._phone_number_id}/messages"
        payload = {
            "messaging_product": "whatsapp",
            "to": normalize_recipient(recipient),
            "type": "text",
            "text": {"body": text},
        }
        headers = {"Authorization": f"Bearer {self._access_token}"}

        try:
            async with httpx.AsyncClient(verify=True) as client:
                resp = await client.post(
                    url, json=payload, headers=headers, timeout=_SEND_TIMEOUT_SECONDS,
                )
        except httpx.HTTPError as exc:
            logger.error("WhatsApp send to %s failed: %s", recipient, exc)
            return False

        if resp.status_code >= 400:
            logger.error(
                "WhatsApp send to %s returned HTTP %s", recipient, resp.status_code,
            )
            return False
        return True
