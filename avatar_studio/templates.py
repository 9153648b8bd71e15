"""
Avatar studio: template catalog.

The catalog is a JSON document ``template.json`` holding
``{"templates": [{"name": ..., "prompt": ...}, ...]}`` where ``name`` and
``prompt`` are either a plain string or a ``{"zh": ..., "en": ...}`` object.
Entry N (1-based) is assigned id ``"N"`` and the image
``/templates/images/template<N>.jpg``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, List, Sequence, Tuple, Union

logger = logging.getLogger("avatar_studio.templates")

DEFAULT_FALLBACKS: Tuple[str, ...] = ("zh", "en")


@dataclass(frozen=True)
class Plain:
    text: str


@dataclass(frozen=True)
class Localized:
    zh: str
    en: str

    def get(self, locale: str) -> str:
        return getattr(self, locale, "") or ""


LocalizedText = Union[Plain, Localized]


def parse_localized(value: Any) -> LocalizedText:
    """Build a LocalizedText from catalog JSON.

    Raises:
        ValueError: if the value is neither a string nor an object with both
            ``zh`` and ``en`` keys.
    """
    if isinstance(value, str):
        return Plain(value)
    if isinstance(value, dict) and "zh" in value and "en" in value:
        return Localized(zh=str(value["zh"]), en=str(value["en"]))
    raise ValueError(f"Expected a string or {{zh, en}} object, got: {value!r}")


def resolve(
    text: LocalizedText,
    locale: str,
    fallbacks: Sequence[str] = DEFAULT_FALLBACKS,
) -> str:
    """Pick the display string for ``locale``.

    Tries the requested locale, then each fallback in order, and returns the
    first non-empty value ("" if all are empty).
    """
    if isinstance(text, Plain):
        return text.text
    for candidate in (locale, *fallbacks):
        value = text.get(candidate)
        if value:
            return value
    return ""


@dataclass(frozen=True)
class Template:
    id: str
    name: LocalizedText
    prompt: LocalizedText
    image_url: str
    image_path: Path


class TemplateCatalog:
    """Immutable, ordered set of templates loaded once at startup."""

    def __init__(self, templates: List[Template]):
        self._items = tuple(templates)
        self._by_id: Dict[str, Template] = {t.id: t for t in self._items}

    def __iter__(self) -> Iterator[Template]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def get(self, template_id: str) -> Template:
        """Raises KeyError for unknown ids."""
        return self._by_id[template_id]


def load_templates(templates_dir: Path) -> TemplateCatalog:
    """Read ``<templates_dir>/template.json`` into a catalog.

    A missing or unreadable catalog is logged and yields an empty catalog.
    Plain-string names are promoted to ``Localized(zh=name, en=name)``.
    """
    templates_dir = Path(templates_dir)
    catalog_path = templates_dir / "template.json"
    try:
        data = json.loads(catalog_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.error("Failed to load template catalog %s: %s", catalog_path, e)
        return TemplateCatalog([])

    entries = data.get("templates") if isinstance(data, dict) else None
    if not isinstance(entries, list):
        logger.error("Template catalog %s has no 'templates' list", catalog_path)
        return TemplateCatalog([])

    templates: List[Template] = []
    for index, entry in enumerate(entries, start=1):
        try:
            name = parse_localized(entry["name"])
            prompt = parse_localized(entry["prompt"])
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping template #%d: %s", index, e)
            continue
        if isinstance(name, Plain):
            name = Localized(zh=name.text, en=name.text)
        templates.append(
            Template(
                id=str(index),
                name=name,
                prompt=prompt,
                image_url=f"/templates/images/template{index}.jpg",
                image_path=templates_dir / "images" / f"template{index}.jpg",
            )
        )

    logger.info("Loaded %d templates from %s", len(templates), catalog_path)
    return TemplateCatalog(templates)
