"""Order-tracking API client.

Maps the API's JSON envelope onto an OrderEnvelope. Transport failures,
timeouts and malformed responses are folded into the error status; the
client never raises for them.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from orderbot.models import LookupStatus, OrderEnvelope

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT_SECONDS = 10.0
_UNKNOWN_ERROR = "Erreur inconnue de l'API."


class OrderLookupClient:
    """Looks up a single order by number. One attempt, bounded timeout."""

    def __init__(
        self,
        api_url: str,
        timeout: float = _DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._api_url = api_url
        self._timeout = timeout

    async def lookup(self, order_number: str) -> OrderEnvelope:
        if not self._api_url:
            logger.warning("Order API URL not configured; cannot look up %s", order_number)
            return OrderEnvelope(
                status=LookupStatus.ERROR, message="Order API not configured",
            )

        try:
            # Apps Script web apps answer with a redirect to the content host.
            async with httpx.AsyncClient(follow_redirects=True) as client:
                resp = await client.get(
                    self._api_url,
                    params={"orderNumber": order_number},
                    timeout=self._timeout,
                )
        except httpx.HTTPError as exc:
            logger.error("Order API request failed for %s: %s", order_number, exc)
            return OrderEnvelope(status=LookupStatus.ERROR, message=str(exc) or "transport error")

        if resp.status_code >= 400:
            logger.error("Order API returned HTTP %s for %s", resp.status_code, order_number)
            return OrderEnvelope(
                status=LookupStatus.ERROR, message=f"HTTP {resp.status_code}",
            )

        try:
            body = resp.json()
        except ValueError:
            logger.error("Order API returned a non-JSON body for %s", order_number)
            return OrderEnvelope(status=LookupStatus.ERROR, message="Invalid JSON response")

        return parse_envelope(body)


def parse_envelope(body: Any) -> OrderEnvelope:
    """Map a decoded order API response onto an OrderEnvelope."""
    if not isinstance(body, dict):
        return OrderEnvelope(status=LookupStatus.ERROR, message="Unexpected response shape")

    status = body.get("status")
    if status == "success":
        data = body.get("data")
        if data is None:
            data = {}
        if not isinstance(data, dict):
            return OrderEnvelope(status=LookupStatus.ERROR, message="Unexpected data shape")
        record = {
            str(key): "" if value is None else str(value)
            for key, value in data.items()
        }
        return OrderEnvelope(status=LookupStatus.SUCCESS, record=record)

    if status == "not_found":
        return OrderEnvelope(status=LookupStatus.NOT_FOUND)

    message = body.get("message") or _UNKNOWN_ERROR
    logger.error("Order API error response: %s", body)
    return OrderEnvelope(status=LookupStatus.ERROR, message=str(message))
