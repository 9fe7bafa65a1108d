"""Load pattern site configuration YAML into typed dataclasses."""

from __future__ import annotations

import typing as typ

from ruamel.yaml import YAML

from pattern_pages.catalog import Catalog
from pattern_pages.errors import SiteConfigError

from .helpers import _build_meta, _build_sections, _resolve_dir, _string_tuple
from .models import BuildDefaults, SiteConfig

if typ.TYPE_CHECKING:
    from pathlib import Path


def load_site_config(path: Path) -> SiteConfig:
    """Load the YAML configuration describing the pattern catalog and build.

    Parameters
    ----------
    path : Path
        Filesystem path to the YAML configuration file (for example,
        ``config/patterns.yaml``).

    Returns
    -------
    SiteConfig
        Build defaults with directories resolved against the config file's
        directory, the shared page meta, and the immutable catalog.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    SiteConfigError
        If the top-level structure is not a mapping, no sections are defined,
        or an article is missing its slug or title.
    YAMLError
        If the YAML content cannot be parsed by the underlying loader.

    Examples
    --------
    >>> from pathlib import Path
    >>> from pattern_pages.config import load_site_config
    >>> config = load_site_config(Path("config/patterns.yaml"))  # doctest: +SKIP
    >>> config.catalog.list_identifiers()[:1]  # doctest: +SKIP
    ('throttling',)
    """
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise SiteConfigError(msg)
    raw: dict[str, typ.Any] = dict(loaded)
    defaults = _build_defaults(raw.get("defaults") or {}, base_dir=path.parent)
    catalog = Catalog(
        _build_sections(raw.get("sections")),
        placeholder_slugs=defaults.placeholder_slugs,
    )
    return SiteConfig(
        defaults=defaults,
        meta=_build_meta(raw.get("meta")),
        catalog=catalog,
        source_path=path,
    )


def load_catalog(path: Path) -> Catalog:
    """Return only the catalog described by the configuration at ``path``."""
    return load_site_config(path).catalog


def _build_defaults(payload: typ.Mapping[str, typ.Any], *, base_dir: Path) -> BuildDefaults:
    """Build BuildDefaults from the ``defaults`` mapping."""
    if not isinstance(payload, dict):
        msg = "'defaults' must be a mapping."
        raise SiteConfigError(msg)
    base = BuildDefaults()
    levels = payload.get("outline_levels", list(base.outline_levels))
    if not isinstance(levels, list) or not all(
        isinstance(level, int) and 1 <= level <= 6 for level in levels
    ):
        msg = "'outline_levels' must be a list of heading levels between 1 and 6."
        raise SiteConfigError(msg)
    placeholders = payload.get("placeholder_slugs")
    return BuildDefaults(
        content_dir=_resolve_dir(payload.get("content_dir"), base.content_dir, base_dir),
        output_dir=_resolve_dir(payload.get("output_dir"), base.output_dir, base_dir),
        suffix=str(payload.get("suffix", base.suffix)),
        pygments_style=str(payload.get("pygments_style", base.pygments_style)),
        outline_levels=tuple(levels),
        placeholder_slugs=(
            base.placeholder_slugs
            if placeholders is None
            else _string_tuple(placeholders, field="placeholder_slugs")
        ),
    )


__all__ = ["load_catalog", "load_site_config"]
