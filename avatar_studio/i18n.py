"""
User-facing messages in zh/en.

The locale is always passed in explicitly by the caller; there is no
process-wide "current language".
"""

from __future__ import annotations

from typing import Dict, Optional

from .config import settings
from .models import Locale

FALLBACK_LOCALE: Locale = "en"

MESSAGES: Dict[str, Dict[str, str]] = {
    "zh": {
        "missing.image": "请先上传图片",
        "missing.photo": "请先上传头像",
        "missing.template": "请先选择一个模板",
        "missing.prompt": "请输入提示词",
        "invalid_image": "图片格式无效，请重新上传",
        "template_not_found": "模板不存在: {template_id}",
        "template_image_missing": "模板图片缺失: {template_id}",
        "generation_failed": "生成失败，请重试",
        "retouch_failed": "修饰失败，请重试",
        "crop_failed": "裁剪失败：无效的图片数据",
        "crop_region": "裁剪区域不能超过图片尺寸 {width}x{height}",
        "download_failed": "下载失败，请重试",
        "upload.type": "请上传图片文件",
        "upload.size": "文件大小不能超过 {size}MB",
        "upload.dimensions": "图片尺寸至少为 {width}x{height} 像素",
        "upload.invalid": "无法读取图片文件",
    },
    "en": {
        "missing.image": "Please upload an image first",
        "missing.photo": "Please upload a photo first",
        "missing.template": "Please select a template first",
        "missing.prompt": "Please enter a prompt",
        "invalid_image": "Invalid image format, please upload again",
        "template_not_found": "Template not found: {template_id}",
        "template_image_missing": "Template image is missing: {template_id}",
        "generation_failed": "Generation failed, please retry",
        "retouch_failed": "Retouch failed, please retry",
        "crop_failed": "Crop failed: invalid image data",
        "crop_region": "Crop region must fit within the {width}x{height} image",
        "download_failed": "Download failed, please retry",
        "upload.type": "Please upload an image file",
        "upload.size": "File size must not exceed {size}MB",
        "upload.dimensions": "Image must be at least {width}x{height} pixels",
        "upload.invalid": "Could not read the image file",
    },
}


def pick_locale(requested: Optional[str]) -> Locale:
    """Requested locale if supported, else the configured default, else en."""
    for candidate in (requested, settings.DEFAULT_LOCALE):
        if candidate in MESSAGES:
            return candidate  # type: ignore[return-value]
    return FALLBACK_LOCALE


def translate(key: str, locale: str, **kwargs: object) -> str:
    """Format message ``key`` for ``locale``, falling back to en, then the key."""
    table = MESSAGES.get(locale, {})
    template = table.get(key) or MESSAGES[FALLBACK_LOCALE].get(key) or key
    return template.format(**kwargs)
