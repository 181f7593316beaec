"""Chat replies from the Gemini generative-language REST API."""

from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

_DEFAULT_API_BASE = "https://generativelanguage.googleapis.com"

GENERATION_CONFIG: dict[str, Any] = {
    "temperature": 0.7,
    "topK": 40,
    "topP": 0.95,
    "maxOutputTokens": 1024,
}

CHAT_DIRECTIVE = (
    "Tu es l'assistant WhatsApp de l'entreprise. Réponds en français, "
    "de façon concise et aimable, au message suivant."
)

CATALOG_PREAMBLE = (
    "Tu es l'assistant commercial WhatsApp de la boutique. "
    "Voici les informations du catalogue correspondant à la demande du client :"
)


class ConfigurationMissingError(Exception):
    """Raised when the generative API key is not configured."""


class ChatResponderError(Exception):
    """Raised when the generative API call fails or returns no usable text."""


def build_prompt(user_text: str, context: str = "", currency: str = "EUR") -> str:
    """Compose the single text prompt sent to the model."""
    if not context:
        return f"{CHAT_DIRECTIVE}\n\nMessage du client : {user_text}"

    instructions = "\n".join([
        "Instructions :",
        f"- Indique toujours les prix en {currency}.",
        "- N'invente aucune information (prix, stock, caractéristique) "
        "qui ne figure pas ci-dessus.",
        "- Si l'information demandée n'est pas disponible, dis-le simplement.",
        "- Réponds de préférence en français, de façon concise et aimable.",
    ])
    return (
        f"{CATALOG_PREAMBLE}\n\n{context}\n\n{instructions}\n\n"
        f"Question du client : {user_text}"
    )


class ChatResponder:
    """Sends one prompt per message to Gemini and returns the reply text."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.0-flash",
        api_base: str = _DEFAULT_API_BASE,
        timeout: float = 30.0,
        currency: str = "EUR",
    ) -> None:
        self._api_key = api_key
        self._model = model.strip().removeprefix("models/")
        self._api_base = api_base
        self._timeout = timeout
        self._currency = currency

    async def respond(self, user_text: str, context: str = "") -> str:
        """Generate a reply to the user's text.

        Raises:
            ConfigurationMissingError: If no API key is configured.
            ChatResponderError: On transport failure or an unusable response.
        """
        if not self._api_key:
            logger.error("GEMINI_API_KEY is not configured")
            raise ConfigurationMissingError("GEMINI_API_KEY is not configured")

        url = f"{self._api_base.rstrip('/')}/v1beta/models/{self._model}:generateContent"
        payload = {
            "contents": [
                {"parts": [{"text": build_prompt(user_text, context, self._currency)}]},
            ],
            "generationConfig": GENERATION_CONFIG,
        }
        headers = {
            "x-goog-api-key": self._api_key,
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient(verify=True) as client:
                resp = await client.post(
                    url, json=payload, headers=headers, timeout=self._timeout,
                )
        except httpx.HTTPError as exc:
            raise ChatResponderError(f"Gemini request failed: {exc}") from exc

        if resp.status_code >= 400:
            raise ChatResponderError(f"Gemini returned HTTP {resp.status_code}")

        try:
            body = resp.json()
        except ValueError as exc:
            raise ChatResponderError("Gemini returned a non-JSON body") from exc

        return extract_text(body)


def extract_text(body: Any) -> str:
    """Return the first candidate's text from a generateContent response."""
    try:
        text = body["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as exc:
        raise ChatResponderError("Gemini response has no candidate text") from exc
    if not isinstance(text, str):
        raise ChatResponderError("Gemini candidate text is not a string")
    if not text.strip():
        raise ChatResponderError("Gemini candidate text is empty")
    return text.strip()
