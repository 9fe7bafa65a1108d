"""Load and validate the pattern site configuration.

This subpackage parses ``config/patterns.yaml``, applies build defaults,
resolves content and output directories relative to the configuration file,
and returns a :class:`SiteConfig` holding the immutable
:class:`~pattern_pages.catalog.Catalog` that drives every build. The primary
entry point is :func:`load_site_config`.

Examples
--------
>>> from pathlib import Path
>>> from pattern_pages.config import load_site_config
>>> site = load_site_config(Path("config/patterns.yaml"))  # doctest: +SKIP
>>> site.catalog.lookup_listing("throttling").title  # doctest: +SKIP
'Throttling'
"""

from pattern_pages.errors import SiteConfigError

from .loader import load_catalog, load_site_config
from .models import BuildDefaults, SiteConfig

__all__ = [
    "BuildDefaults",
    "SiteConfig",
    "SiteConfigError",
    "load_catalog",
    "load_site_config",
]
