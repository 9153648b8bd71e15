"""
Tests for the request builder: part order and exact wording sent to the model.
"""

import pytest

from avatar_studio.errors import MissingInputError
from avatar_studio.models import HotspotPoint, ImageRepresentation, TextPart
from avatar_studio.prompts import (
    COMBINED_PROMPT_TEMPLATE,
    DEFAULT_COMPOSITION_INSTRUCTION,
    build_combined_prompt,
    build_composition_prompt,
    build_retouch_prompt,
    build_single_image_prompt,
    build_text_only_prompt,
    require_inputs,
)


TEMPLATE = ImageRepresentation(payload=b"template", media_type="image/jpeg")
SUBJECT = ImageRepresentation(payload=b"subject", media_type="image/png")


class TestSingleImagePrompt:

    def test_image_then_text(self):
        parts = build_single_image_prompt(SUBJECT, "make it sunset")
        assert parts == [SUBJECT, TextPart(text="make it sunset")]

    def test_missing_image(self):
        with pytest.raises(MissingInputError) as exc:
            build_single_image_prompt(None, "make it sunset")
        assert exc.value.field == "image"

    def test_missing_prompt(self):
        with pytest.raises(MissingInputError) as exc:
            build_single_image_prompt(SUBJECT, "")
        assert exc.value.field == "prompt"


class TestCompositionPrompt:

    def test_template_subject_text_order(self):
        parts = build_composition_prompt(TEMPLATE, SUBJECT, "add a hat")
        assert parts == [TEMPLATE, SUBJECT, TextPart(text="add a hat")]

    def test_empty_prompt_uses_default_instruction(self):
        first = build_composition_prompt(TEMPLATE, SUBJECT, "")
        second = build_composition_prompt(TEMPLATE, SUBJECT, "")
        assert first[2].text == DEFAULT_COMPOSITION_INSTRUCTION
        assert first == second
        assert DEFAULT_COMPOSITION_INSTRUCTION

    @pytest.mark.parametrize("template,subject,field", [
        (None, SUBJECT, "template"),
        (TEMPLATE, None, "photo"),
    ])
    def test_missing_image(self, template, subject, field):
        with pytest.raises(MissingInputError) as exc:
            build_composition_prompt(template, subject, "add a hat")
        assert exc.value.field == field


class TestRetouchPrompt:

    def test_coordinates_precede_instruction(self):
        parts = build_retouch_prompt(SUBJECT, "brighten", HotspotPoint(x=120, y=340))
        assert parts[0] == SUBJECT
        text = parts[1].text
        assert text == "at image coordinates x=120, y=340: brighten"
        assert text.index("120") < text.index("340") < text.index("brighten")

    def test_missing_prompt(self):
        with pytest.raises(MissingInputError):
            build_retouch_prompt(SUBJECT, "", HotspotPoint(x=0, y=0))

    def test_negative_hotspot_rejected(self):
        with pytest.raises(ValueError):
            HotspotPoint(x=-1, y=5)


class TestTextOnlyPrompt:

    def test_single_text_part(self):
        assert build_text_only_prompt("a red fox") == [TextPart(text="a red fox")]

    def test_missing_prompt(self):
        with pytest.raises(MissingInputError):
            build_text_only_prompt("")


class TestCombinedPrompt:

    def test_user_prompt_is_framed(self):
        text = build_combined_prompt("add a hat")
        assert "add a hat" in text
        assert "800x800" in text

    def test_empty_and_none_prompts_share_the_frame(self):
        expected = COMBINED_PROMPT_TEMPLATE.format(prompt="")
        assert build_combined_prompt("") == expected
        assert build_combined_prompt(None) == expected


def test_require_inputs_names_first_missing():
    with pytest.raises(MissingInputError) as exc:
        require_inputs(image="data:...", prompt="", other="")
    assert exc.value.field == "prompt"
