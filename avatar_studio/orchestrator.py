"""
Avatar studio: image request orchestrator.

Each operation is one stateless round trip:
  1. check required inputs (no network on failure)
  2. decode local/remote image URLs
  3. build the prompt parts
  4. issue exactly one generateContent call
  5. extract the first returned image

Every failure is logged and turned into ``None``; callers only distinguish
"got an image" from "did not". No retries, no cancellation, no local timeout.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from .audit import audit_event
from .codec import decode_image_url
from .errors import GenerationError, MalformedLocalImageError, MissingInputError, RemoteFetchError
from .extract import extract, extract_text
from .gemini_client import GeminiClient
from .models import HotspotPoint, ImageRepresentation, PromptRequest
from .prompts import (
    build_composition_prompt,
    build_retouch_prompt,
    build_single_image_prompt,
    build_text_only_prompt,
    require_inputs,
)

logger = logging.getLogger("avatar_studio.orchestrator")


async def _send(
    operation: str,
    parts: PromptRequest,
    client: Optional[GeminiClient],
) -> Optional[ImageRepresentation]:
    gemini = client or GeminiClient()
    envelope = await gemini.generate_content(parts)

    text = extract_text(envelope)
    if text:
        logger.info("%s: model text: %s", operation, text[:200])

    image = extract(envelope)
    audit_event(
        "generate_result",
        operation=operation,
        produced_image=image is not None,
        media_type=image.media_type if image else None,
    )
    return image


async def _guarded(operation: str, coro) -> Optional[ImageRepresentation]:
    try:
        return await coro
    except MissingInputError as e:
        logger.warning("%s: %s", operation, e)
    except (MalformedLocalImageError, RemoteFetchError) as e:
        logger.error("%s: could not decode input image: %s", operation, e)
    except GenerationError as e:
        logger.error("%s: generation request failed: %s", operation, e)
    except Exception:
        logger.exception("%s: unexpected failure", operation)
    return None


async def generate_from_prompt(
    image_url: str,
    prompt: str,
    client: Optional[GeminiClient] = None,
) -> Optional[ImageRepresentation]:
    """Edit one image from a free-text prompt."""

    async def run() -> Optional[ImageRepresentation]:
        require_inputs(image=image_url, prompt=prompt)
        image = await decode_image_url(image_url)
        parts = build_single_image_prompt(image, prompt)
        return await _send("edit", parts, client)

    audit_event("generate_request", operation="edit", prompt_len=len(prompt or ""))
    return await _guarded("edit", run())


async def generate_from_template_and_photo(
    template_url: str,
    photo_url: str,
    prompt: str = "",
    client: Optional[GeminiClient] = None,
) -> Optional[ImageRepresentation]:
    """Render the subject photo in the template's style.

    Both images are decoded concurrently; if either fails the whole call fails.
    """

    async def run() -> Optional[ImageRepresentation]:
        require_inputs(template=template_url, photo=photo_url)
        template_image, photo_image = await asyncio.gather(
            decode_image_url(template_url),
            decode_image_url(photo_url),
        )
        parts = build_composition_prompt(template_image, photo_image, prompt)
        return await _send("compose", parts, client)

    audit_event("generate_request", operation="compose", prompt_len=len(prompt or ""))
    return await _guarded("compose", run())


async def retouch_image(
    image_url: str,
    prompt: str,
    hotspot: HotspotPoint,
    client: Optional[GeminiClient] = None,
) -> Optional[ImageRepresentation]:
    """Re-generate the region around ``hotspot`` following ``prompt``."""

    async def run() -> Optional[ImageRepresentation]:
        require_inputs(image=image_url, prompt=prompt)
        image = await decode_image_url(image_url)
        parts = build_retouch_prompt(image, prompt, hotspot)
        return await _send("retouch", parts, client)

    audit_event("generate_request", operation="retouch", x=hotspot.x, y=hotspot.y)
    return await _guarded("retouch", run())


async def generate_from_text(
    prompt: str,
    client: Optional[GeminiClient] = None,
) -> Optional[ImageRepresentation]:
    """Generate an image from text alone."""

    async def run() -> Optional[ImageRepresentation]:
        parts = build_text_only_prompt(prompt)
        return await _send("text", parts, client)

    audit_event("generate_request", operation="text", prompt_len=len(prompt or ""))
    return await _guarded("text", run())
