"""
Pydantic models for the image data flowing through the service and for the
HTTP request/response contract.
"""

from __future__ import annotations

from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


Locale = Literal["zh", "en"]
CropShape = Literal["rect", "circle"]


# ---------------------------------------------------------------------------
# Core data model
# ---------------------------------------------------------------------------


class ImageRepresentation(BaseModel):
    """Raw image bytes plus their declared media type.

    Instances are frozen: every operation produces a new one.
    """

    model_config = ConfigDict(frozen=True)

    payload: bytes
    media_type: str

    @field_validator("media_type")
    @classmethod
    def _image_media_type(cls, v: str) -> str:
        if not v.startswith("image/"):
            raise ValueError(f"not an image media type: {v!r}")
        return v

    @field_validator("payload")
    @classmethod
    def _non_empty(cls, v: bytes) -> bytes:
        if not v:
            raise ValueError("image payload is empty")
        return v


class TextPart(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str


class HotspotPoint(BaseModel):
    """Pixel coordinates in the original (unscaled) image."""

    model_config = ConfigDict(frozen=True)

    x: int = Field(..., ge=0)
    y: int = Field(..., ge=0)


Part = Union[ImageRepresentation, TextPart]

# Ordered parts of one generative call. Composition order is
# template image, subject image, text.
PromptRequest = List[Part]


# ---------------------------------------------------------------------------
# HTTP requests
# ---------------------------------------------------------------------------


class ComposeRequest(BaseModel):
    """Template + photo composition."""
    template_id: str = Field(default="", description="Catalog id of the selected template")
    photo: str = Field(default="", description="Uploaded photo as a data URL")
    prompt: Optional[str] = Field(
        default=None,
        description="Personalised prompt; the template prompt is used when omitted"
    )
    locale: Optional[Locale] = None


class EditRequest(BaseModel):
    image: str = Field(default="", description="Image to edit as a data URL or http(s) URL")
    prompt: str = Field(default="", description="Free-text edit instruction")
    locale: Optional[Locale] = None


class RetouchRequest(BaseModel):
    image: str = Field(default="", description="Image to retouch as a data URL or http(s) URL")
    prompt: str = Field(default="", description="Instruction applied at the hotspot")
    hotspot: HotspotPoint
    locale: Optional[Locale] = None


class TextGenerateRequest(BaseModel):
    prompt: str = Field(default="", description="Text-only generation prompt")
    locale: Optional[Locale] = None


class CropRequest(BaseModel):
    image: str = Field(default="", description="Image to crop as a data URL")
    x: int = Field(..., ge=0)
    y: int = Field(..., ge=0)
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)
    shape: CropShape = "rect"
    locale: Optional[Locale] = None


class DownloadRequest(BaseModel):
    image: str = Field(default="", description="Data URL or bare base64 PNG payload")
    filename: Optional[str] = None
    locale: Optional[Locale] = None


# ---------------------------------------------------------------------------
# HTTP responses
# ---------------------------------------------------------------------------


class ImageResponse(BaseModel):
    """A freshly produced image."""
    image: str = Field(..., description="Self-contained data URL")
    filename: str


class UploadResponse(ImageResponse):
    width: int
    height: int


class TemplateModel(BaseModel):
    id: str
    name: str
    prompt: str
    image_url: str


class TemplatesResponse(BaseModel):
    locale: Locale
    templates: List[TemplateModel]


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    model: str
    api_key_configured: bool
    templates: int
