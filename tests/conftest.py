"""
Pytest configuration and shared fixtures.
"""

import json

import pytest

from .helpers import make_image_bytes


@pytest.fixture(autouse=True)
def reset_settings():
    """Give every test a configured API key and default limits."""
    from avatar_studio import config

    original = {
        "GEMINI_API_KEY": config.settings.GEMINI_API_KEY,
        "MAX_UPLOAD_MB": config.settings.MAX_UPLOAD_MB,
        "MIN_WIDTH": config.settings.MIN_WIDTH,
        "MIN_HEIGHT": config.settings.MIN_HEIGHT,
        "DEFAULT_LOCALE": config.settings.DEFAULT_LOCALE,
    }

    config.settings.GEMINI_API_KEY = "test-key"
    config.settings.MAX_UPLOAD_MB = 10
    config.settings.MIN_WIDTH = 400
    config.settings.MIN_HEIGHT = 400
    config.settings.DEFAULT_LOCALE = "zh"

    yield

    for key, value in original.items():
        setattr(config.settings, key, value)


@pytest.fixture
def templates_dir(tmp_path):
    """A catalog with one localized and one plain template, with images."""
    root = tmp_path / "templates"
    (root / "images").mkdir(parents=True)
    catalog = {
        "templates": [
            {
                "name": {"zh": "水彩风格", "en": "Watercolor"},
                "prompt": {"zh": "水彩画风格", "en": "watercolor style"},
            },
            {"name": "Vintage", "prompt": "vintage look"},
        ]
    }
    (root / "template.json").write_text(json.dumps(catalog), encoding="utf-8")
    for n in (1, 2):
        (root / "images" / f"template{n}.jpg").write_bytes(
            make_image_bytes(64, 64, fmt="JPEG")
        )
    return root


@pytest.fixture
def client(templates_dir, monkeypatch):
    """Test client serving the temporary template catalog."""
    from fastapi.testclient import TestClient

    from avatar_studio import router as router_module
    from avatar_studio.main import app
    from avatar_studio.templates import load_templates

    monkeypatch.setattr(router_module, "_catalog", load_templates(templates_dir))
    return TestClient(app)
