"""Compiled page artifacts and their byte-stable JSON encoding.

:class:`CompiledArtifact` is what :class:`~pattern_pages.compiler.DocumentCompiler`
returns for one document. :class:`PageProps` merges an artifact with its
catalog listing and the site-wide page meta; it is the payload the rendering
layer reads from ``<output_dir>/<identifier>.json``. Encoding is
deterministic: the same props always produce the same bytes.
"""

from __future__ import annotations

import dataclasses as dc
import hashlib
import types
import typing as typ

import msgspec.json as msgspec_json

from .headings import Heading

if typ.TYPE_CHECKING:
    from .front_matter import MetadataValue


@dc.dataclass(frozen=True, slots=True)
class CompiledArtifact:
    """Pre-rendered document body with its outline and metadata scope.

    Attributes
    ----------
    identifier : str or None
        Content identifier the artifact was compiled for.
    compiled_source : str
        Rendered HTML body; consumers treat it as opaque.
    headings : tuple[Heading, ...]
        Outline entries in document order.
    scope : Mapping[str, MetadataValue]
        Read-only values injected into the body during compilation.
    checksum : str
        SHA-256 hex digest of ``compiled_source``.
    """

    identifier: str | None
    compiled_source: str
    headings: tuple[Heading, ...]
    scope: typ.Mapping[str, MetadataValue]
    checksum: str

    @classmethod
    def build(
        cls,
        *,
        identifier: str | None,
        compiled_source: str,
        headings: tuple[Heading, ...],
        scope: typ.Mapping[str, MetadataValue],
    ) -> CompiledArtifact:
        """Construct an artifact, freezing the scope and computing the checksum."""
        digest = hashlib.sha256(compiled_source.encode("utf-8")).hexdigest()
        return cls(
            identifier=identifier,
            compiled_source=compiled_source,
            headings=tuple(headings),
            scope=types.MappingProxyType(dict(scope)),
            checksum=digest,
        )


@dc.dataclass(frozen=True, slots=True)
class PageMeta:
    """Site-wide ``<head>`` metadata shared by every pattern page."""

    title: str
    description: str
    image: str | None = None


@dc.dataclass(frozen=True, slots=True)
class PageProps:
    """Everything the rendering layer needs to display one pattern page."""

    identifier: str
    title: str
    subtitle: str
    tags: tuple[str, ...]
    section: str | None
    headings: tuple[Heading, ...]
    compiled_source: str
    scope: typ.Mapping[str, MetadataValue]
    checksum: str
    meta: PageMeta


def _enc_hook(value: object) -> object:
    """Teach msgspec to encode read-only mappings."""
    if isinstance(value, types.MappingProxyType):
        return dict(value)
    msg = f"Cannot encode objects of type {type(value).__name__}"
    raise NotImplementedError(msg)


def encode_artifact(props: PageProps) -> bytes:
    """Encode ``props`` as deterministic JSON bytes terminated by a newline."""
    return msgspec_json.encode(props, enc_hook=_enc_hook, order="deterministic") + b"\n"


def decode_artifact(payload: bytes | str) -> PageProps:
    """Decode bytes written by :func:`encode_artifact` back into :class:`PageProps`."""
    raw = msgspec_json.decode(payload)
    return PageProps(
        identifier=raw["identifier"],
        title=raw["title"],
        subtitle=raw["subtitle"],
        tags=tuple(raw["tags"]),
        section=raw.get("section"),
        headings=tuple(Heading(**heading) for heading in raw["headings"]),
        compiled_source=raw["compiled_source"],
        scope=types.MappingProxyType(raw["scope"]),
        checksum=raw["checksum"],
        meta=PageMeta(**raw["meta"]),
    )


__all__ = [
    "CompiledArtifact",
    "PageMeta",
    "PageProps",
    "decode_artifact",
    "encode_artifact",
]
