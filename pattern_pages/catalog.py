"""Immutable catalog of known pattern pages.

The catalog mirrors the listing shown on the patterns index: ordered sections,
each holding articles with a slug (the content identifier), title, subtitle,
and tags. It is built once at startup and passed explicitly into the build
pipeline; nothing mutates it afterwards.

Articles whose slug is a placeholder (``#TODO`` by default) are listed in
their section so the index can show them as upcoming, but they are never
enumerated for building and cannot be looked up.

Examples
--------
>>> from pattern_pages.catalog import Catalog, CatalogEntry, CatalogSection
>>> section = CatalogSection(
...     title="Flow control",
...     articles=(
...         CatalogEntry("throttling", "Throttling", "Limit work", ("flow",)),
...         CatalogEntry("#TODO", "Backpressure", "Soon", ()),
...     ),
... )
>>> Catalog([section]).list_identifiers()
('throttling',)
"""

from __future__ import annotations

import dataclasses as dc
import types
import typing as typ

from ._constants import PLACEHOLDER_SLUG
from .errors import SiteConfigError, UnknownIdentifierError

if typ.TYPE_CHECKING:
    import collections.abc as cabc


@dc.dataclass(frozen=True, slots=True)
class CatalogEntry:
    """Listing metadata for one pattern page.

    Attributes
    ----------
    identifier : str
        Content identifier (the page slug).
    title : str
        Display title shown on the index and page header.
    subtitle : str
        One-line summary.
    tags : tuple[str, ...]
        Display tags, in display order.
    section : str or None
        Title of the section listing the entry.
    """

    identifier: str
    title: str
    subtitle: str
    tags: tuple[str, ...] = ()
    section: str | None = None


@dc.dataclass(frozen=True, slots=True)
class CatalogSection:
    """Titled group of catalog entries."""

    title: str
    articles: tuple[CatalogEntry, ...]


class Catalog:
    """Read-only lookup table mapping identifiers to listings."""

    def __init__(
        self,
        sections: cabc.Iterable[CatalogSection],
        *,
        placeholder_slugs: cabc.Iterable[str] = (PLACEHOLDER_SLUG,),
    ) -> None:
        """Build the lookup table.

        Parameters
        ----------
        sections : Iterable[CatalogSection]
            Sections in display order.
        placeholder_slugs : Iterable[str], optional
            Slugs marking articles without content yet. Defaults to
            ``("#TODO",)``.

        Raises
        ------
        SiteConfigError
            If two buildable articles share an identifier.
        """
        self._sections = tuple(sections)
        self._placeholders = frozenset(placeholder_slugs)
        entries: dict[str, CatalogEntry] = {}
        for section in self._sections:
            for article in section.articles:
                if article.identifier in self._placeholders:
                    continue
                if article.identifier in entries:
                    msg = f"Duplicate pattern identifier '{article.identifier}'."
                    raise SiteConfigError(msg)
                entries[article.identifier] = dc.replace(
                    article, section=article.section or section.title
                )
        self._entries = types.MappingProxyType(entries)

    @property
    def sections(self) -> tuple[CatalogSection, ...]:
        """Return every section, placeholders included."""
        return self._sections

    def is_placeholder(self, identifier: str) -> bool:
        """Return True when ``identifier`` marks an article without content."""
        return identifier in self._placeholders

    def list_identifiers(self) -> tuple[str, ...]:
        """Return buildable identifiers in catalog order, placeholders excluded."""
        return tuple(self._entries)

    def lookup_listing(self, identifier: str) -> CatalogEntry:
        """Return the listing for ``identifier``.

        Raises
        ------
        UnknownIdentifierError
            If the identifier is not a buildable catalog entry.
        """
        try:
            return self._entries[identifier]
        except KeyError as exc:
            raise UnknownIdentifierError(identifier, self.list_identifiers()) from exc

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._entries

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["Catalog", "CatalogEntry", "CatalogSection"]
