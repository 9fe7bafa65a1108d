"""Utility helpers shared by the pattern site configuration loader."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from pattern_pages.artifact import PageMeta
from pattern_pages.catalog import CatalogEntry, CatalogSection
from pattern_pages.errors import SiteConfigError

DEFAULT_META_TITLE = "Patterns: Async + Event-Driven"
DEFAULT_META_DESCRIPTION = (
    "A collection of software architecture patterns for asynchronous flows"
)


def _optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _string_tuple(value: object | None, *, field: str) -> tuple[str, ...]:
    """Normalize a YAML list (or single string) into a tuple of strings."""
    match value:
        case None:
            return ()
        case str() as text:
            return (text,) if text.strip() else ()
        case list() | tuple():
            return tuple(str(item).strip() for item in value if str(item).strip())
        case _:
            msg = f"'{field}' must be a string or a list of strings."
            raise SiteConfigError(msg)


def _resolve_dir(value: object | None, default: Path, base_dir: Path) -> Path:
    """Resolve a configured directory relative to the config file location."""
    path = Path(str(value)) if value else default
    return path if path.is_absolute() else base_dir / path


def _build_meta(payload: typ.Mapping[str, typ.Any] | None) -> PageMeta:
    """Build the shared page meta, falling back to the patterns index copy."""
    payload = payload or {}
    return PageMeta(
        title=_optional_str(payload.get("title")) or DEFAULT_META_TITLE,
        description=_optional_str(payload.get("description"))
        or DEFAULT_META_DESCRIPTION,
        image=_optional_str(payload.get("image")),
    )


def _build_entry(payload: object, section_title: str) -> CatalogEntry:
    """Build a CatalogEntry from one ``articles`` item."""
    if not isinstance(payload, dict):
        msg = f"Articles in section '{section_title}' must be mappings."
        raise SiteConfigError(msg)
    slug = _optional_str(payload.get("slug"))
    title = _optional_str(payload.get("title"))
    if not slug or not title:
        msg = f"Every article in section '{section_title}' needs 'slug' and 'title'."
        raise SiteConfigError(msg)
    return CatalogEntry(
        identifier=slug,
        title=title,
        subtitle=_optional_str(payload.get("subtitle")) or "",
        tags=_string_tuple(payload.get("tags"), field=f"{slug}.tags"),
        section=section_title,
    )


def _build_sections(raw_sections: object) -> list[CatalogSection]:
    """Build catalog sections from the ``sections`` YAML list."""
    if not isinstance(raw_sections, list) or not raw_sections:
        msg = "No sections defined in pattern configuration."
        raise SiteConfigError(msg)
    sections: list[CatalogSection] = []
    for payload in raw_sections:
        if not isinstance(payload, dict):
            msg = "Each section must be a mapping with 'title' and 'articles'."
            raise SiteConfigError(msg)
        title = _optional_str(payload.get("title")) or "Patterns"
        articles = payload.get("articles") or []
        if not isinstance(articles, list):
            msg = f"Section '{title}' must list its articles."
            raise SiteConfigError(msg)
        sections.append(
            CatalogSection(
                title=title,
                articles=tuple(_build_entry(item, title) for item in articles),
            )
        )
    return sections


__all__ = [
    "DEFAULT_META_DESCRIPTION",
    "DEFAULT_META_TITLE",
    "_build_entry",
    "_build_meta",
    "_build_sections",
    "_optional_str",
    "_resolve_dir",
    "_string_tuple",
]
