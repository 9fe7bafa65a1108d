"""Typed dataclasses describing pattern site configuration structures."""

from __future__ import annotations

import dataclasses as dc
from pathlib import Path

from pattern_pages._constants import (
    CONTENT_SUFFIX,
    DEFAULT_OUTLINE_LEVELS,
    DEFAULT_PYGMENTS_STYLE,
    PLACEHOLDER_SLUG,
)
from pattern_pages.artifact import PageMeta
from pattern_pages.catalog import Catalog


@dc.dataclass(slots=True)
class BuildDefaults:
    """Filesystem locations and rendering options shared by every page."""

    content_dir: Path = Path("content/patterns")
    output_dir: Path = Path("public/patterns")
    suffix: str = CONTENT_SUFFIX
    pygments_style: str = DEFAULT_PYGMENTS_STYLE
    outline_levels: tuple[int, ...] = DEFAULT_OUTLINE_LEVELS
    placeholder_slugs: tuple[str, ...] = (PLACEHOLDER_SLUG,)


@dc.dataclass(slots=True)
class SiteConfig:
    """Resolved configuration for a pattern pages build."""

    defaults: BuildDefaults
    meta: PageMeta
    catalog: Catalog
    source_path: Path | None = None

    def select_identifiers(self, page_id: str | None) -> tuple[str, ...]:
        """Return the identifiers to build: one requested page or every page."""
        if page_id is None:
            return self.catalog.list_identifiers()
        self.catalog.lookup_listing(page_id)
        return (page_id,)


__all__ = ["BuildDefaults", "SiteConfig"]
