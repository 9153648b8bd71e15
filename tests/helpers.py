"""
Shared test helpers.
"""

import base64
from io import BytesIO

from PIL import Image


def make_image_bytes(width: int = 100, height: int = 100, fmt: str = "PNG") -> bytes:
    """Create a valid image of the given format for testing."""
    mode = "RGBA" if fmt == "PNG" else "RGB"
    color = (255, 0, 0, 255) if mode == "RGBA" else (0, 255, 0)
    im = Image.new(mode, (width, height), color=color)
    out = BytesIO()
    im.save(out, format=fmt)
    return out.getvalue()


def to_data_url(data: bytes, media_type: str = "image/png") -> str:
    return f"data:{media_type};base64,{base64.b64encode(data).decode('ascii')}"


def image_envelope(data: bytes, media_type: str | None = "image/png") -> dict:
    """A generateContent response carrying one text part and one image part."""
    blob = {"data": base64.b64encode(data).decode("ascii")}
    if media_type:
        blob["mimeType"] = media_type
    return {
        "candidates": [
            {
                "content": {
                    "parts": [
                        {"text": "Here is your avatar."},
                        {"inlineData": blob},
                    ]
                }
            }
        ]
    }
