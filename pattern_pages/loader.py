"""Locate and read the authored document behind a content identifier.

Every pattern page is backed by one file, ``<content_dir>/<identifier>.mdx``.
:class:`ContentLoader` validates identifiers before touching the filesystem so
an identifier can never resolve outside the content directory.

Example
-------
>>> from pathlib import Path
>>> from pattern_pages.loader import ContentLoader
>>> loader = ContentLoader(Path("content/patterns"))  # doctest: +SKIP
>>> loader.load("throttling")[:3]  # doctest: +SKIP
'---'
"""

from __future__ import annotations

import asyncio
import dataclasses as dc
import logging
import re
import types
import typing as typ

from ._constants import CONTENT_SUFFIX
from .errors import ContentNotFoundError, InvalidIdentifierError
from .front_matter import split

if typ.TYPE_CHECKING:
    from pathlib import Path

    from .front_matter import MetadataValue

logger = logging.getLogger(__name__)

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


@dc.dataclass(frozen=True, slots=True)
class Document:
    """An authored document split into metadata and body.

    Attributes
    ----------
    identifier : str
        Content identifier the document was loaded for.
    raw_text : str
        Full file contents.
    metadata : Mapping[str, MetadataValue]
        Read-only front-matter metadata.
    body : str
        Markdown body with front matter removed.
    """

    identifier: str
    raw_text: str
    metadata: typ.Mapping[str, MetadataValue]
    body: str


def validate_identifier(identifier: str) -> str:
    """Return ``identifier`` when it is a safe, non-empty content token."""
    if not IDENTIFIER_PATTERN.match(identifier or "") or ".." in identifier:
        raise InvalidIdentifierError(identifier)
    return identifier


class ContentLoader:
    """Read raw pattern documents from a content directory."""

    def __init__(self, content_dir: Path, *, suffix: str = CONTENT_SUFFIX) -> None:
        """Initialize the loader.

        Parameters
        ----------
        content_dir : Path
            Directory holding one document per identifier.
        suffix : str, optional
            File extension appended to identifiers. Defaults to ``".mdx"``.
        """
        self.content_dir = content_dir
        self.suffix = suffix

    def path_for(self, identifier: str) -> Path:
        """Return the file path backing ``identifier``."""
        return self.content_dir / f"{validate_identifier(identifier)}{self.suffix}"

    def load(self, identifier: str) -> str:
        """Return the raw text of the document for ``identifier``.

        Raises
        ------
        InvalidIdentifierError
            If ``identifier`` is empty or contains path characters.
        ContentNotFoundError
            If no document exists for ``identifier``.
        OSError
            Any other read failure, propagated unchanged.
        """
        path = self.path_for(identifier)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise ContentNotFoundError(identifier, str(path)) from exc
        logger.debug("loaded %s (%d chars)", path, len(text))
        return text

    async def load_async(self, identifier: str) -> str:
        """Read the document for ``identifier`` in a worker thread."""
        return await asyncio.to_thread(self.load, identifier)

    def read(self, identifier: str) -> Document:
        """Load ``identifier`` and split it into a :class:`Document`."""
        raw = self.load(identifier)
        metadata, body = split(raw)
        return Document(
            identifier=identifier,
            raw_text=raw,
            metadata=types.MappingProxyType(metadata),
            body=body,
        )


__all__ = ["ContentLoader", "Document", "validate_identifier"]
