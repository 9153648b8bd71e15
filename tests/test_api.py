"""
Endpoint tests for templates, generation and health.

The generative call is replaced by a fake that records its parts.
"""

import pytest

from avatar_studio import config
from avatar_studio import gemini_client
from avatar_studio.codec import decode_from_local_url
from avatar_studio.models import ImageRepresentation, TextPart
from avatar_studio.prompts import COMBINED_PROMPT_TEMPLATE

from .helpers import image_envelope, make_image_bytes, to_data_url


RESULT = make_image_bytes(8, 8)
PHOTO = to_data_url(make_image_bytes(20, 20))


@pytest.fixture
def calls(monkeypatch):
    recorded = []

    async def fake(self, parts):
        recorded.append(list(parts))
        return image_envelope(RESULT)

    monkeypatch.setattr(gemini_client.GeminiClient, "generate_content", fake)
    return recorded


@pytest.fixture
def failing(monkeypatch):
    async def fake(self, parts):
        return {"candidates": [{"content": {"parts": [{"text": "no"}]}}]}

    monkeypatch.setattr(gemini_client.GeminiClient, "generate_content", fake)


class TestTemplatesEndpoint:

    def test_default_locale_is_zh(self, client):
        body = client.get("/v1/templates").json()
        assert body["locale"] == "zh"
        assert [t["name"] for t in body["templates"]] == ["水彩风格", "Vintage"]
        assert body["templates"][0]["image_url"] == "/templates/images/template1.jpg"

    def test_english(self, client):
        body = client.get("/v1/templates", params={"locale": "en"}).json()
        assert body["templates"][0] == {
            "id": "1",
            "name": "Watercolor",
            "prompt": "watercolor style",
            "image_url": "/templates/images/template1.jpg",
        }
        assert body["templates"][1]["prompt"] == "vintage look"


class TestCompose:

    def test_uses_template_prompt_when_omitted(self, client, calls):
        r = client.post("/v1/avatars/compose", json={
            "template_id": "1", "photo": PHOTO, "locale": "en",
        })
        assert r.status_code == 200
        body = r.json()
        assert decode_from_local_url(body["image"]).payload == RESULT
        assert body["filename"].startswith("generated-")

        (parts,) = calls
        assert parts[0].media_type == "image/jpeg"
        assert parts[1] == decode_from_local_url(PHOTO)
        assert parts[2] == TextPart(text=COMBINED_PROMPT_TEMPLATE.format(prompt="watercolor style"))

    def test_personal_prompt_overrides_template(self, client, calls):
        client.post("/v1/avatars/compose", json={
            "template_id": "2", "photo": PHOTO, "prompt": "add a hat",
        })
        assert calls[0][2].text == COMBINED_PROMPT_TEMPLATE.format(prompt="add a hat")

    def test_missing_photo_checked_first(self, client, calls):
        r = client.post("/v1/avatars/compose", json={"locale": "zh"})
        assert r.status_code == 400
        assert r.json()["detail"] == "请先上传头像"
        assert calls == []

    def test_missing_template(self, client, calls):
        r = client.post("/v1/avatars/compose", json={"photo": PHOTO, "locale": "en"})
        assert r.status_code == 400
        assert r.json()["detail"] == "Please select a template first"

    def test_photo_must_be_image_data_url(self, client, calls):
        r = client.post("/v1/avatars/compose", json={
            "template_id": "1", "photo": "https://example.com/me.jpg", "locale": "en",
        })
        assert r.status_code == 400
        assert r.json()["detail"] == "Invalid image format, please upload again"

    def test_unknown_template(self, client, calls):
        r = client.post("/v1/avatars/compose", json={
            "template_id": "42", "photo": PHOTO, "locale": "en",
        })
        assert r.status_code == 404
        assert r.json()["detail"] == "Template not found: 42"

    def test_missing_template_image(self, client, calls, templates_dir):
        for image in (templates_dir / "images").iterdir():
            image.unlink()
        r = client.post("/v1/avatars/compose", json={
            "template_id": "1", "photo": PHOTO, "locale": "en",
        })
        assert r.status_code == 500
        assert r.json()["detail"] == "Template image is missing: 1"
        assert calls == []

    def test_no_image_in_response(self, client, failing):
        r = client.post("/v1/avatars/compose", json={"template_id": "1", "photo": PHOTO})
        assert r.status_code == 502
        assert r.json()["detail"] == "生成失败，请重试"


class TestEditRetouchGenerate:

    def test_edit(self, client, calls):
        r = client.post("/v1/avatars/edit", json={"image": PHOTO, "prompt": "make it sunset"})
        assert r.status_code == 200
        assert calls[0][1] == TextPart(text="make it sunset")

    def test_edit_missing_prompt(self, client, calls):
        r = client.post("/v1/avatars/edit", json={"image": PHOTO, "locale": "en"})
        assert r.status_code == 400
        assert r.json()["detail"] == "Please enter a prompt"
        assert calls == []

    @pytest.mark.parametrize("path,extra", [
        ("/v1/avatars/edit", {}),
        ("/v1/avatars/retouch", {"hotspot": {"x": 1, "y": 1}}),
    ])
    @pytest.mark.parametrize("image", [
        "http://127.0.0.1:8080/internal/admin",
        "https://example.com/me.png",
        "file:///etc/passwd",
    ])
    def test_caller_urls_are_not_fetched(self, client, calls, monkeypatch, path, extra, image):
        async def no_fetch(url, client=None, max_bytes=None):
            raise AssertionError(f"unexpected fetch of {url}")

        monkeypatch.setattr("avatar_studio.codec.decode_from_remote_url", no_fetch)
        r = client.post(path, json={"image": image, "prompt": "x", "locale": "en", **extra})
        assert r.status_code == 400
        assert r.json()["detail"] == "Invalid image format, please upload again"
        assert calls == []

    def test_retouch(self, client, calls):
        r = client.post("/v1/avatars/retouch", json={
            "image": PHOTO, "prompt": "brighten", "hotspot": {"x": 120, "y": 340},
        })
        assert r.status_code == 200
        assert r.json()["filename"].startswith("retouched-")
        assert calls[0][1].text == "at image coordinates x=120, y=340: brighten"

    def test_retouch_negative_hotspot(self, client, calls):
        r = client.post("/v1/avatars/retouch", json={
            "image": PHOTO, "prompt": "brighten", "hotspot": {"x": -1, "y": 0},
        })
        assert r.status_code == 422

    def test_retouch_failure_message(self, client, failing):
        r = client.post("/v1/avatars/retouch", json={
            "image": PHOTO, "prompt": "brighten", "hotspot": {"x": 1, "y": 1}, "locale": "en",
        })
        assert r.status_code == 502
        assert r.json()["detail"] == "Retouch failed, please retry"

    def test_generate_from_text(self, client, calls):
        r = client.post("/v1/avatars/generate", json={"prompt": "a red fox"})
        assert r.status_code == 200
        assert calls == [[TextPart(text="a red fox")]]

    def test_generate_missing_prompt(self, client, calls):
        r = client.post("/v1/avatars/generate", json={"locale": "en"})
        assert r.status_code == 400
        assert r.json()["detail"] == "Please enter a prompt"

    def test_missing_api_key_is_generation_failure(self, client):
        config.settings.GEMINI_API_KEY = None
        r = client.post("/v1/avatars/generate", json={"prompt": "a red fox", "locale": "en"})
        assert r.status_code == 502
        assert r.json()["detail"] == "Generation failed, please retry"


class TestHealth:

    def test_health(self, client):
        body = client.get("/health").json()
        assert body["status"] == "ok"
        assert body["service"] == "avatar-studio"
        assert body["api_key_configured"] is True
        assert body["templates"] == 2

    def test_liveness(self, client):
        assert client.get("/health/live").json() == {"status": "alive"}
