r"""Slug generation shared by the heading outline and the anchor linker.

Both the outline extractor and the anchor linker turn a heading's visible
text into an id through this module. Keeping one implementation guarantees
that every jump link in the outline points at an ``id`` the rendered page
really carries.

Example
-------
>>> from pattern_pages.slugs import SlugRegistry, slugify
>>> slugify("Hello World!")
'hello-world'
>>> registry = SlugRegistry()
>>> registry.claim("Setup"), registry.claim("setup")
('setup', 'setup-2')
"""

from __future__ import annotations

import re

from ._constants import FALLBACK_SLUG

SEPARATOR_PATTERN = re.compile(r"[\W_]+")


def slugify(text: str) -> str:
    """Normalise visible heading text into a URL-safe slug.

    The text is lower-cased, every run of non-alphanumeric characters becomes a
    single ``-``, and separators are trimmed from both ends. Text without any
    alphanumerics falls back to ``"section"``.
    """
    slug = SEPARATOR_PATTERN.sub("-", text.lower()).strip("-")
    return slug or FALLBACK_SLUG


def unique_slug(base: str, used: set[str]) -> str:
    """Generate a unique slug, appending numeric suffixes when needed."""
    candidate = base
    suffix = 2
    while candidate in used:
        candidate = f"{base}-{suffix}"
        suffix += 1
    used.add(candidate)
    return candidate


class SlugRegistry:
    """Hand out document-unique slugs in the order headings are seen.

    One registry covers one document; call :meth:`reset` before reusing it.
    """

    def __init__(self) -> None:
        self._used: set[str] = set()

    def claim(self, text: str) -> str:
        """Return the unique slug for visible heading ``text``."""
        return unique_slug(slugify(text), self._used)

    def reset(self) -> None:
        """Forget every slug claimed so far."""
        self._used.clear()

    def __contains__(self, slug: object) -> bool:
        return slug in self._used


__all__ = ["SlugRegistry", "slugify", "unique_slug"]
