"""ASGI middleware guarding outbound-send endpoints with a Bearer token."""

from __future__ import annotations

import hmac
import logging

from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Receive, Scope, Send

logger = logging.getLogger(__name__)

# Paths that require a Bearer token (exact match)
PROTECTED_PATHS = frozenset({"/send"})


class AuthMiddleware:
    """Validates Bearer tokens on protected paths using constant-time comparison.

    All other paths (status, health, webhooks) pass through untouched. With
    no token configured, protected paths are disabled.
    """

    def __init__(
        self,
        app: ASGIApp,
        token: str,
        protected_paths: frozenset[str] = PROTECTED_PATHS,
    ) -> None:
        self.app = app
        self._token = token.encode()
        self._protected_paths = protected_paths

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope)
        path = request.url.path

        if path not in self._protected_paths:
            await self.app(scope, receive, send)
            return

        if not self._token:
            response = JSONResponse(
                {"error": "Endpoint disabled: SEND_API_TOKEN is not configured"},
                status_code=503,
            )
            await response(scope, receive, send)
            return

        auth_header = request.headers.get("authorization", "")

        if not auth_header.startswith("Bearer "):
            response = JSONResponse({"error": "Authentication required"}, status_code=401)
            self._log_failure(request, "missing_token" if not auth_header else "invalid_format")
            await response(scope, receive, send)
            return

        provided_token = auth_header[7:].encode()

        if not hmac.compare_digest(provided_token, self._token):
            response = JSONResponse({"error": "Access denied"}, status_code=403)
            self._log_failure(request, "invalid_token")
            await response(scope, receive, send)
            return

        await self.app(scope, receive, send)

    def _log_failure(self, request: Request, reason: str) -> None:
        logger.warning(
            "Rejected %s %s from %s: %s",
            request.method,
            request.url.path,
            request.client.host if request.client else "unknown",
            reason,
        )
