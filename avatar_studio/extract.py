"""
Response extractor: pulls the first image out of a generateContent envelope.

Handles both key spellings the API and its SDKs emit:
- {"inlineData": {"data": ..., "mimeType": ...}}
- {"inline_data": {"data": ..., "mime_type": ...}}
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from .codec import decode_from_local_url
from .errors import MalformedLocalImageError
from .models import ImageRepresentation

logger = logging.getLogger("avatar_studio.extract")

# Media type assumed for returned image parts that omit one.
RESPONSE_DEFAULT_MEDIA_TYPE = "image/png"


def _first_candidate_parts(envelope: Any) -> Optional[List[Any]]:
    if not isinstance(envelope, dict):
        return None
    candidates = envelope.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        logger.warning("No candidates in response")
        return None
    content = candidates[0].get("content") if isinstance(candidates[0], dict) else None
    if not isinstance(content, dict) or not isinstance(content.get("parts"), list):
        logger.warning("No content parts in response")
        return None
    return content["parts"]


def _inline_blob(part: Any) -> Optional[Dict[str, Any]]:
    if not isinstance(part, dict):
        return None
    blob = part.get("inlineData") or part.get("inline_data")
    return blob if isinstance(blob, dict) else None


def extract_data_url(envelope: Any) -> Optional[str]:
    """Return the first image part as a data URL, or None.

    A payload that already is a ``data:`` URL is passed through unchanged.
    """
    parts = _first_candidate_parts(envelope)
    if parts is None:
        return None

    for part in parts:
        blob = _inline_blob(part)
        if blob is None:
            continue
        data = blob.get("data")
        if not data or not isinstance(data, str):
            continue
        media_type = blob.get("mimeType") or blob.get("mime_type") or RESPONSE_DEFAULT_MEDIA_TYPE
        logger.debug("Found inline data, mime=%s len=%d", media_type, len(data))
        if data.startswith("data:"):
            return data
        return f"data:{media_type};base64,{data}"

    logger.warning("No image found in response")
    return None


def extract(envelope: Any) -> Optional[ImageRepresentation]:
    """Return the first image in the envelope, or None when there is none."""
    data_url = extract_data_url(envelope)
    if data_url is None:
        return None
    # Only the first image-bearing part counts; later parts are not tried.
    try:
        return decode_from_local_url(data_url)
    except MalformedLocalImageError as e:
        logger.warning("Discarding malformed image part: %s", e)
        return None


def extract_text(envelope: Any) -> str:
    """Concatenate the text parts of the first candidate (used for logging)."""
    parts = _first_candidate_parts(envelope) or []
    texts = [p["text"] for p in parts if isinstance(p, dict) and isinstance(p.get("text"), str)]
    return "\n".join(texts)
