"""Natural-language commentary for an analysis.

The commentator is optional. The pipeline treats any failure here as
"no commentary" and carries on.

Usage:
    from marketsignal.signals.commentary import GeminiCommentator

    commentator = GeminiCommentator(api_key, model="gemini-2.0-flash")
    text = commentator.explain(payload)
"""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Protocol

import httpx

logger = logging.getLogger(__name__)


class Commentator(Protocol):
    """Turns an analysis payload into free text."""

    def explain(self, payload: Mapping[str, Any]) -> str:
        raise NotImplementedError


class GeminiCommentator:
    """Google Generative Language (Gemini) commentator."""

    DEFAULT_MODEL = "gemini-2.0-flash"
    BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

    PROMPT_PREFIX = (
        "Analyze the following market OHLCV data and provide trading suggestions "
        "based on technical analysis: "
    )

    def __init__(
        self,
        api_key: str,
        model: str | None = None,
        *,
        timeout: float = 60.0,
        client: httpx.Client | None = None,
    ):
        """Initialize the commentator.

        Args:
            api_key: Gemini API key (sent as a header, never in the URL)
            model: Model name (default: gemini-2.0-flash)
            timeout: Request timeout in seconds
            client: Optional pre-built httpx client (tests inject a mock transport)
        """
        if not api_key:
            raise ValueError("api_key is required")
        self._api_key = api_key
        self.model = model or self.DEFAULT_MODEL
        self.timeout = timeout
        self._client = client if client is not None else httpx.Client(timeout=timeout)

    @property
    def url(self) -> str:
        return f"{self.BASE_URL}/models/{self.model}:generateContent"

    def build_request(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        text = self.PROMPT_PREFIX + json.dumps(payload, default=str)
        return {"contents": [{"parts": [{"text": text}]}]}

    @staticmethod
    def extract_text(response: Mapping[str, Any]) -> str:
        """Pull candidates[0].content.parts[0].text, or "" when absent."""
        candidates = response.get("candidates") or []
        if not candidates:
            return ""
        parts = (candidates[0].get("content") or {}).get("parts") or []
        if not parts:
            return ""
        return str(parts[0].get("text") or "")

    def explain(self, payload: Mapping[str, Any]) -> str:
        """Ask Gemini for commentary.

        Raises:
            httpx.HTTPError: On transport failure or a non-2xx status
        """
        response = self._client.post(
            self.url,
            json=self.build_request(payload),
            headers={"x-goog-api-key": self._api_key, "Content-Type": "application/json"},
            timeout=self.timeout,
        )
        response.raise_for_status()
        text = self.extract_text(response.json())
        logger.info(f"Gemini commentary received for {payload.get('symbol', '?')} ({len(text)} chars)")
        return text

    def close(self) -> None:
        self._client.close()
