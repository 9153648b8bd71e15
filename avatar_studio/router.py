"""
Avatar studio: FastAPI router.

All endpoints are mounted under ``/v1``. This is the only layer that turns an
absent result into a user-visible (localized) error message.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, File, Form, HTTPException, Query, UploadFile
from fastapi.responses import Response

from . import orchestrator
from .codec import decode_from_local_url, read_image_file, to_data_url
from .config import settings
from .errors import CropRegionTooLarge, MalformedLocalImageError, UploadRejected
from .i18n import pick_locale, translate
from .models import (
    ComposeRequest,
    CropRequest,
    DownloadRequest,
    EditRequest,
    ImageRepresentation,
    ImageResponse,
    Locale,
    RetouchRequest,
    TemplateModel,
    TemplatesResponse,
    TextGenerateRequest,
    UploadResponse,
)
from .prompts import build_combined_prompt
from .templates import Template, TemplateCatalog, load_templates, resolve
from .utils_images import (
    content_disposition,
    crop_image,
    download_filename,
    download_payload,
    validate_upload,
)

logger = logging.getLogger("avatar_studio.router")

router = APIRouter(prefix="/v1", tags=["avatars"])

_catalog: Optional[TemplateCatalog] = None


def get_catalog() -> TemplateCatalog:
    """Load the template catalog once per process."""
    global _catalog
    if _catalog is None:
        _catalog = load_templates(settings.TEMPLATES_DIR)
    return _catalog


def _fail(status_code: int, key: str, locale: str, **kwargs: object) -> HTTPException:
    return HTTPException(status_code=status_code, detail=translate(key, locale, **kwargs))


def _image_response(image: ImageRepresentation, prefix: str) -> ImageResponse:
    return ImageResponse(
        image=to_data_url(image),
        filename=download_filename(prefix, image.media_type),
    )


def _template_image_url(template: Template, locale: str) -> str:
    """Template image as a data URL read from disk.

    The public ``image_url`` is relative to this service, so there is nothing
    to fetch when the file is missing.
    """
    if not template.image_path.is_file():
        logger.error("Template %s image missing at %s", template.id, template.image_path)
        raise _fail(500, "template_image_missing", locale, template_id=template.id)
    return to_data_url(read_image_file(template.image_path))


def _require_data_image(value: str, locale: str) -> None:
    # Only data URLs are accepted from callers; the server never fetches
    # caller-supplied URLs.
    if not value.startswith("data:image/"):
        raise _fail(400, "invalid_image", locale)


# ------------------------------------------------------------------
# Templates
# ------------------------------------------------------------------


@router.get("/templates", response_model=TemplatesResponse)
def list_templates(locale: Optional[Locale] = Query(default=None)) -> TemplatesResponse:
    """Return the catalog with name/prompt resolved for ``locale``."""
    loc = pick_locale(locale)
    return TemplatesResponse(
        locale=loc,
        templates=[
            TemplateModel(
                id=t.id,
                name=resolve(t.name, loc),
                prompt=resolve(t.prompt, loc),
                image_url=t.image_url,
            )
            for t in get_catalog()
        ],
    )


# ------------------------------------------------------------------
# Upload
# ------------------------------------------------------------------


@router.post("/upload", response_model=UploadResponse)
async def upload_photo(
    file: UploadFile = File(..., description="Photo to turn into an avatar"),
    locale: Optional[Locale] = Form(default=None),
) -> UploadResponse:
    """Validate an uploaded photo and return it as a data URL."""
    loc = pick_locale(locale)
    data = await file.read()
    try:
        width, height = validate_upload(file.content_type, data)
    except UploadRejected as exc:
        logger.info("Upload rejected: %s", exc)
        raise _fail(400, f"upload.{exc.reason}", loc, **exc.params) from exc

    image = ImageRepresentation(payload=data, media_type=file.content_type or "image/png")
    return UploadResponse(
        image=to_data_url(image),
        filename=file.filename or download_filename("upload", image.media_type),
        width=width,
        height=height,
    )


# ------------------------------------------------------------------
# Generation
# ------------------------------------------------------------------


@router.post("/avatars/compose", response_model=ImageResponse)
async def compose_avatar(req: ComposeRequest) -> ImageResponse:
    """Render the uploaded photo in the selected template's style."""
    loc = pick_locale(req.locale)
    if not req.photo:
        raise _fail(400, "missing.photo", loc)
    if not req.template_id:
        raise _fail(400, "missing.template", loc)
    _require_data_image(req.photo, loc)

    try:
        template = get_catalog().get(req.template_id)
    except KeyError as exc:
        raise _fail(404, "template_not_found", loc, template_id=req.template_id) from exc

    user_prompt = req.prompt if req.prompt is not None else resolve(template.prompt, loc)
    result = await orchestrator.generate_from_template_and_photo(
        _template_image_url(template, loc),
        req.photo,
        build_combined_prompt(user_prompt),
    )
    if result is None:
        raise _fail(502, "generation_failed", loc)
    return _image_response(result, "generated")


@router.post("/avatars/edit", response_model=ImageResponse)
async def edit_avatar(req: EditRequest) -> ImageResponse:
    """Edit an image from a free-text prompt."""
    loc = pick_locale(req.locale)
    if not req.image:
        raise _fail(400, "missing.image", loc)
    if not req.prompt:
        raise _fail(400, "missing.prompt", loc)
    _require_data_image(req.image, loc)

    result = await orchestrator.generate_from_prompt(req.image, req.prompt)
    if result is None:
        raise _fail(502, "generation_failed", loc)
    return _image_response(result, "generated")


@router.post("/avatars/retouch", response_model=ImageResponse)
async def retouch_avatar(req: RetouchRequest) -> ImageResponse:
    """Re-generate the region around a hotspot."""
    loc = pick_locale(req.locale)
    if not req.image:
        raise _fail(400, "missing.image", loc)
    if not req.prompt:
        raise _fail(400, "missing.prompt", loc)
    _require_data_image(req.image, loc)

    result = await orchestrator.retouch_image(req.image, req.prompt, req.hotspot)
    if result is None:
        raise _fail(502, "retouch_failed", loc)
    return _image_response(result, "retouched")


@router.post("/avatars/generate", response_model=ImageResponse)
async def generate_avatar(req: TextGenerateRequest) -> ImageResponse:
    """Generate an image from a text prompt only."""
    loc = pick_locale(req.locale)
    if not req.prompt:
        raise _fail(400, "missing.prompt", loc)

    result = await orchestrator.generate_from_text(req.prompt)
    if result is None:
        raise _fail(502, "generation_failed", loc)
    return _image_response(result, "generated")


# ------------------------------------------------------------------
# Crop / download
# ------------------------------------------------------------------


@router.post("/avatars/crop", response_model=ImageResponse)
def crop_avatar(req: CropRequest) -> ImageResponse:
    """Crop a rectangle or circle out of an image; the result is PNG."""
    loc = pick_locale(req.locale)
    if not req.image:
        raise _fail(400, "missing.image", loc)
    try:
        source = decode_from_local_url(req.image)
        cropped = crop_image(source, req.x, req.y, req.width, req.height, req.shape)
    except MalformedLocalImageError as exc:
        logger.warning("Crop failed: %s", exc)
        raise _fail(400, "crop_failed", loc) from exc
    except CropRegionTooLarge as exc:
        logger.warning("Crop rejected: %s", exc)
        raise _fail(400, "crop_region", loc, width=exc.max_width, height=exc.max_height) from exc
    return _image_response(cropped, "cropped")


@router.post("/avatars/download")
def download_avatar(req: DownloadRequest) -> Response:
    """Return the image bytes as a file attachment."""
    loc = pick_locale(req.locale)
    if not req.image:
        raise _fail(400, "missing.image", loc)
    try:
        image = download_payload(req.image)
    except MalformedLocalImageError as exc:
        logger.warning("Download failed: %s", exc)
        raise _fail(400, "download_failed", loc) from exc

    filename = req.filename or download_filename("avatar", image.media_type)
    return Response(
        content=image.payload,
        media_type=image.media_type,
        headers={"Content-Disposition": content_disposition(filename)},
    )
