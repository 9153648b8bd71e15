"""
Gemini API client module.

Provides an async HTTP client for the Gemini ``generateContent`` endpoint.
One call per request; no retries.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from .codec import encode
from .config import settings
from .errors import GenerationError
from .models import ImageRepresentation, Part, TextPart

logger = logging.getLogger("avatar_studio.gemini_client")

RESPONSE_MODALITIES = ["IMAGE", "TEXT"]


def serialize_parts(parts: Sequence[Part]) -> List[Dict[str, Any]]:
    """Convert builder parts into the JSON parts list of a request body."""
    out: List[Dict[str, Any]] = []
    for part in parts:
        if isinstance(part, ImageRepresentation):
            out.append(encode(part))
        elif isinstance(part, TextPart):
            out.append({"text": part.text})
        else:
            raise TypeError(f"Unsupported prompt part: {type(part).__name__}")
    return out


class GeminiClient:
    """
    Async HTTP client for the Gemini generative image API.

    Handles:
    - Request body assembly (parts + response modalities)
    - API key header
    - Error handling and response parsing
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.GEMINI_API_KEY
        self.model = model or settings.GEMINI_MODEL
        self.base = (base_url or settings.GEMINI_BASE_URL).rstrip("/")
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-goog-api-key": self.api_key or "",
        }

    def build_body(self, parts: Sequence[Part]) -> Dict[str, Any]:
        return {
            "contents": [{"parts": serialize_parts(parts)}],
            "generationConfig": {"responseModalities": list(RESPONSE_MODALITIES)},
        }

    async def generate_content(self, parts: Sequence[Part]) -> Dict[str, Any]:
        """
        Issue one generateContent call and return the response envelope.

        Args:
            parts: Ordered prompt parts (images and text)

        Returns:
            Parsed JSON response envelope

        Raises:
            GenerationError: On missing key, transport failure, error status
                or non-JSON response
        """
        if not self.api_key:
            raise GenerationError("GEMINI_API_KEY is not configured")

        url = f"{self.base}/models/{self.model}:generateContent"
        body = self.build_body(parts)
        logger.debug("POST %s with %d parts", url, len(body["contents"][0]["parts"]))

        # No local timeout; the remote call's own behavior applies.
        async with httpx.AsyncClient(timeout=None, transport=self._transport) as client:
            try:
                resp = await client.post(url, json=body, headers=self._headers())
            except httpx.RequestError as e:
                raise GenerationError(f"Gemini request error: {e}") from e

        if resp.status_code >= 400:
            raise GenerationError(
                f"Gemini request failed: {resp.status_code} {resp.text}"
            )

        try:
            return resp.json()
        except ValueError as e:
            raise GenerationError("Gemini returned non-JSON response") from e
