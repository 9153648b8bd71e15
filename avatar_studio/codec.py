"""
Payload codec: converts between local image strings and the wire form of the
generative API.

Local form is a self-contained data URL ``data:<media type>;base64,<payload>``.
Wire form is ``{"inlineData": {"data": <base64>, "mimeType": <media type>}}``.
Remote http(s) images are fetched with httpx and re-encoded.
"""

from __future__ import annotations

import base64
import binascii
import logging
import mimetypes
import re
from pathlib import Path
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from .config import settings
from .errors import MalformedLocalImageError, MissingInputError, RemoteFetchError
from .models import ImageRepresentation

logger = logging.getLogger("avatar_studio.codec")

# Media type assumed for remote images served without a Content-Type.
REMOTE_DEFAULT_MEDIA_TYPE = "image/jpeg"

# scheme + media type, ";base64", then exactly one "," before the payload
_DATA_URL_RE = re.compile(r"^data:([^;,\s]+);base64,([^,]+)$")


def encode(image: ImageRepresentation) -> Dict[str, Any]:
    """Wrap an image into the inline-data part the generative API expects."""
    if not image.payload:
        raise MissingInputError("image")
    return {
        "inlineData": {
            "data": base64.b64encode(image.payload).decode("ascii"),
            "mimeType": image.media_type,
        }
    }


def to_data_url(image: ImageRepresentation) -> str:
    b64 = base64.b64encode(image.payload).decode("ascii")
    return f"data:{image.media_type};base64,{b64}"


def decode_from_local_url(url: str) -> ImageRepresentation:
    """Parse a ``data:image/...;base64,...`` string.

    Raises:
        MalformedLocalImageError: on any deviation from that exact shape,
            including an empty or undecodable payload.
    """
    m = _DATA_URL_RE.match(url or "")
    if not m:
        raise MalformedLocalImageError("Invalid data URL format")

    media_type, payload = m.group(1), m.group(2)
    if not media_type.startswith("image/"):
        raise MalformedLocalImageError(f"Not an image media type: {media_type}")

    try:
        raw = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedLocalImageError(f"Invalid base64 payload: {e}") from e
    if not raw:
        raise MalformedLocalImageError("Empty image payload")

    return ImageRepresentation(payload=raw, media_type=media_type)


async def _read_capped(client: httpx.AsyncClient, url: str, max_bytes: int):
    async with client.stream("GET", url) as resp:
        resp.raise_for_status()
        declared = resp.headers.get("content-length", "")
        if declared.isdigit() and int(declared) > max_bytes:
            raise RemoteFetchError(f"Remote image larger than {max_bytes} bytes: {url}")
        chunks = []
        total = 0
        async for chunk in resp.aiter_bytes():
            total += len(chunk)
            if total > max_bytes:
                raise RemoteFetchError(f"Remote image larger than {max_bytes} bytes: {url}")
            chunks.append(chunk)
        return resp.headers.get("content-type", ""), b"".join(chunks)


async def decode_from_remote_url(
    url: str,
    client: Optional[httpx.AsyncClient] = None,
    max_bytes: Optional[int] = None,
) -> ImageRepresentation:
    """Fetch an image over HTTP and return it as an ImageRepresentation.

    The media type comes from the response ``Content-Type`` (parameters
    stripped), defaulting to ``image/jpeg``. The body is streamed and capped
    at ``max_bytes`` (``MAX_UPLOAD_MB`` by default). No local timeout is
    applied.

    Raises:
        RemoteFetchError: on transport failure, error status, an oversized or
            empty body, or a non-image content type.
    """
    if max_bytes is None:
        max_bytes = settings.MAX_UPLOAD_MB * 1024 * 1024
    logger.debug("Fetching remote image %s", url)
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=None, follow_redirects=True) as c:
                content_type, body = await _read_capped(c, url, max_bytes)
        else:
            content_type, body = await _read_capped(client, url, max_bytes)
    except httpx.HTTPError as e:
        raise RemoteFetchError(f"Failed to fetch remote image: {e}") from e

    media_type = content_type.split(";", 1)[0].strip().lower() or REMOTE_DEFAULT_MEDIA_TYPE

    try:
        return ImageRepresentation(payload=body, media_type=media_type)
    except ValidationError as e:
        raise RemoteFetchError(f"Remote resource is not a usable image: {url}") from e


async def decode_image_url(
    url: str,
    client: Optional[httpx.AsyncClient] = None,
) -> ImageRepresentation:
    """Decode a data URL locally, or fetch anything else remotely."""
    if url.startswith("data:"):
        return decode_from_local_url(url)
    return await decode_from_remote_url(url, client=client)


def read_image_file(path: Path) -> ImageRepresentation:
    """Load an image from disk; media type is guessed from the extension."""
    media_type, _ = mimetypes.guess_type(str(path))
    return ImageRepresentation(
        payload=Path(path).read_bytes(),
        media_type=media_type or REMOTE_DEFAULT_MEDIA_TYPE,
    )
