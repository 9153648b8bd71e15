"""
Image validation and processing utilities.

Provides:
- Upload validation (media type, size limit, minimum dimensions)
- Rectangular and circular cropping
- Download payload/filename helpers
"""

from __future__ import annotations

import base64
import binascii
import mimetypes
import re
import time
from io import BytesIO
from typing import Optional, Tuple
from urllib.parse import quote

from PIL import Image, ImageChops, ImageDraw, UnidentifiedImageError

from .codec import decode_from_local_url
from .config import settings
from .errors import CropRegionTooLarge, MalformedLocalImageError, UploadRejected
from .models import CropShape, ImageRepresentation


def _max_bytes(max_mb: int) -> int:
    return int(max_mb) * 1024 * 1024


def get_image_dimensions(image_bytes: bytes) -> Tuple[int, int]:
    """
    Get image dimensions without fully loading the image.

    Args:
        image_bytes: Raw image bytes

    Returns:
        Tuple of (width, height) in pixels

    Raises:
        ValueError: If image cannot be read
    """
    try:
        img = Image.open(BytesIO(image_bytes))
        return img.size
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as e:
        raise ValueError(f"Cannot read image dimensions: {e}") from e


def validate_upload(
    content_type: Optional[str],
    data: bytes,
    max_mb: Optional[int] = None,
    min_width: Optional[int] = None,
    min_height: Optional[int] = None,
) -> Tuple[int, int]:
    """
    Validate an uploaded image file.

    Checks run in this order, stopping at the first failure:
    1. Media type starts with ``image/``
    2. Size is within the cap (before any decoding)
    3. File decodes as an image
    4. Dimensions meet the minimums

    Returns:
        (width, height) of the accepted image

    Raises:
        UploadRejected: with reason "type", "size", "invalid" or "dimensions"
    """
    max_mb = settings.MAX_UPLOAD_MB if max_mb is None else max_mb
    min_width = settings.MIN_WIDTH if min_width is None else min_width
    min_height = settings.MIN_HEIGHT if min_height is None else min_height

    if not (content_type or "").startswith("image/"):
        raise UploadRejected("type", content_type=content_type)

    if len(data) > _max_bytes(max_mb):
        raise UploadRejected("size", size=max_mb)

    if not data:
        raise UploadRejected("invalid")

    try:
        width, height = get_image_dimensions(data)
    except ValueError as e:
        raise UploadRejected("invalid", error=str(e)) from e

    if width < min_width or height < min_height:
        raise UploadRejected("dimensions", width=min_width, height=min_height)

    return width, height


def crop_image(
    image: ImageRepresentation,
    x: int,
    y: int,
    width: int,
    height: int,
    shape: CropShape = "rect",
) -> ImageRepresentation:
    """
    Cut a ``width`` x ``height`` region starting at (x, y) out of ``image``.

    Regions reaching past the source edge are transparent, but the region
    itself may not be wider or taller than the source. ``circle`` keeps
    only the inscribed circle of diameter ``min(width, height)``. The result
    is always PNG.

    Raises:
        MalformedLocalImageError: if the payload cannot be decoded
        CropRegionTooLarge: if the region exceeds the source dimensions
    """
    try:
        src = Image.open(BytesIO(image.payload))
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as e:
        raise MalformedLocalImageError(f"Cannot decode image: {e}") from e

    src_width, src_height = src.size
    if width > src_width or height > src_height:
        raise CropRegionTooLarge(width, height, src_width, src_height)

    try:
        src.load()
    except OSError as e:
        raise MalformedLocalImageError(f"Cannot decode image: {e}") from e

    region = src.convert("RGBA").crop((x, y, x + width, y + height))

    if shape == "circle":
        mask = Image.new("L", (width, height), 0)
        radius = min(width, height) / 2
        cx, cy = width / 2, height / 2
        ImageDraw.Draw(mask).ellipse(
            (cx - radius, cy - radius, cx + radius, cy + radius), fill=255
        )
        region.putalpha(ImageChops.multiply(region.getchannel("A"), mask))

    out = BytesIO()
    region.save(out, format="PNG")
    return ImageRepresentation(payload=out.getvalue(), media_type="image/png")


def download_payload(image: str) -> ImageRepresentation:
    """
    Turn a download request's image string into bytes.

    A ``data:`` URL is parsed strictly; anything else is taken to be a bare
    base64 PNG payload.

    Raises:
        MalformedLocalImageError: if the string cannot be decoded
    """
    if image.startswith("data:"):
        return decode_from_local_url(image)
    try:
        raw = base64.b64decode(image, validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedLocalImageError(f"Invalid base64 payload: {e}") from e
    if not raw:
        raise MalformedLocalImageError("Empty image payload")
    return ImageRepresentation(payload=raw, media_type="image/png")


def download_filename(prefix: str, media_type: str = "image/png") -> str:
    """``<prefix>-<epoch ms><ext>``, e.g. ``generated-1718000000000.png``."""
    ext = mimetypes.guess_extension(media_type) or ".png"
    return f"{prefix}-{int(time.time() * 1000)}{ext}"


_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def content_disposition(filename: str) -> str:
    """
    Build an ``attachment`` Content-Disposition header for ``filename``.

    Any directory part is dropped. The quoted ``filename`` keeps only
    ``[A-Za-z0-9._-]``; when that changes the name, the exact name is also
    sent as RFC 6266 ``filename*``.
    """
    name = filename.replace("\\", "/").rsplit("/", 1)[-1]
    safe = _UNSAFE_FILENAME_CHARS.sub("_", name).strip("._") or "avatar.png"
    if not name or safe == name:
        return f'attachment; filename="{safe}"'
    return f"attachment; filename=\"{safe}\"; filename*=UTF-8''{quote(name, safe='')}"
