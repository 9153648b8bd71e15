"""
Request builder: assembles the ordered parts of one generative call.

All wording sent to the model lives here so the contract can be tested
without touching the network.
"""

from __future__ import annotations

from typing import Optional

from .errors import MissingInputError
from .models import HotspotPoint, ImageRepresentation, PromptRequest, TextPart


DEFAULT_COMPOSITION_INSTRUCTION = (
    "Use the first image as the style template and render the person from the "
    "second image in that style. Preserve the person's identity and facial "
    "features. Produce a square, high-resolution 800x800 image at 72dpi."
)

RETOUCH_TEMPLATE = "at image coordinates x={x}, y={y}: {instruction}"

COMBINED_PROMPT_TEMPLATE = (
    "Follow these steps to generate an 800x800, 72dpi photo. Keep the person "
    "accurate; the pose may be adjusted slightly to look more natural:{prompt}\n"
    "Generate a high-quality 800x800, 72dpi photo."
)


def build_single_image_prompt(
    image: Optional[ImageRepresentation],
    prompt_text: str,
) -> PromptRequest:
    """[image, text]"""
    if image is None:
        raise MissingInputError("image")
    if not prompt_text:
        raise MissingInputError("prompt")
    return [image, TextPart(text=prompt_text)]


def build_composition_prompt(
    template_image: Optional[ImageRepresentation],
    subject_image: Optional[ImageRepresentation],
    prompt_text: str = "",
) -> PromptRequest:
    """[template, subject, text]; an empty prompt gets the default instruction."""
    if template_image is None:
        raise MissingInputError("template")
    if subject_image is None:
        raise MissingInputError("photo")
    text = prompt_text or DEFAULT_COMPOSITION_INSTRUCTION
    return [template_image, subject_image, TextPart(text=text)]


def build_retouch_prompt(
    image: Optional[ImageRepresentation],
    prompt_text: str,
    hotspot: HotspotPoint,
) -> PromptRequest:
    """[image, text] with the hotspot coordinates placed before the instruction."""
    if image is None:
        raise MissingInputError("image")
    if not prompt_text:
        raise MissingInputError("prompt")
    text = RETOUCH_TEMPLATE.format(x=hotspot.x, y=hotspot.y, instruction=prompt_text)
    return [image, TextPart(text=text)]


def build_text_only_prompt(prompt_text: str) -> PromptRequest:
    if not prompt_text:
        raise MissingInputError("prompt")
    return [TextPart(text=prompt_text)]


def build_combined_prompt(user_prompt: Optional[str]) -> str:
    """Frame a personalised prompt for template composition.

    The empty-prompt branch produces the same framing with an empty
    interpolation; see DESIGN.md before changing it.
    """
    if user_prompt:
        return COMBINED_PROMPT_TEMPLATE.format(prompt=user_prompt)
    else:
        return COMBINED_PROMPT_TEMPLATE.format(prompt=user_prompt or "")


def require_inputs(**inputs: object) -> None:
    """Raise MissingInputError naming the first empty input, in argument order."""
    for name, value in inputs.items():
        if not value:
            raise MissingInputError(name)
