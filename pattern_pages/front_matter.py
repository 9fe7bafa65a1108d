r"""Split pattern documents into front-matter metadata and Markdown body.

A document may open with a YAML block fenced by ``---`` lines. The block must
describe a flat mapping whose values are scalars or sequences of strings;
anything else is rejected with :class:`MalformedFrontMatterError`, which names
the offending line. Documents without an opening fence are returned untouched
with empty metadata.

Example
-------
>>> from pattern_pages.front_matter import split
>>> split("---\ntitle: X\ntags: [a, b]\n---\n## Hello World\ntext")
({'title': 'X', 'tags': ['a', 'b']}, '## Hello World\ntext')
>>> split("no front matter")
({}, 'no front matter')
"""

from __future__ import annotations

import datetime as dt

from ruamel.yaml import YAML
from ruamel.yaml.error import MarkedYAMLError, YAMLError

from ._constants import FRONT_MATTER_CLOSERS, FRONT_MATTER_FENCE
from .errors import MalformedFrontMatterError

MetadataValue = str | int | float | bool | None | list[str]
Metadata = dict[str, MetadataValue]


def _find_closing_fence(lines: list[str]) -> int | None:
    """Return the index of the closing fence line, skipping the opening fence."""
    for idx in range(1, len(lines)):
        if lines[idx].rstrip() in FRONT_MATTER_CLOSERS:
            return idx
    return None


def _line_at(lines: list[str], index: int) -> tuple[int, str]:
    """Return the 1-based line number and text for a raw line index."""
    bounded = min(max(index, 0), len(lines) - 1)
    return bounded + 1, lines[bounded].rstrip("\r\n")


def _convert_scalar(value: object) -> MetadataValue:
    """Convert a YAML scalar into a plain Python value."""
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, int):
        return int(value)
    if isinstance(value, float):
        return float(value)
    if isinstance(value, dt.date):
        return value.isoformat()
    if isinstance(value, str):
        return str(value)
    msg = f"unsupported value of type {type(value).__name__}"
    raise TypeError(msg)


def _convert_value(key: str, value: object) -> MetadataValue:
    """Convert one metadata value, rejecting nested structures."""
    if isinstance(value, dict):
        msg = f"key '{key}' holds a nested mapping"
        raise TypeError(msg)
    if isinstance(value, list):
        items: list[str] = []
        for item in value:
            if not isinstance(item, str):
                msg = f"key '{key}' must be a sequence of strings"
                raise TypeError(msg)
            items.append(str(item))
        return items
    return _convert_scalar(value)


def _parse_block(block: str, lines: list[str]) -> Metadata:
    """Parse the YAML block between the fences into flat metadata."""
    loader = YAML()
    loader.version = (1, 2)
    try:
        loaded = loader.load(block)
    except MarkedYAMLError as exc:
        mark = exc.problem_mark or exc.context_mark
        line_number, line = _line_at(lines, (mark.line if mark else 0) + 1)
        reason = exc.problem or str(exc)
        raise MalformedFrontMatterError(
            reason, line_number=line_number, line=line
        ) from exc
    except YAMLError as exc:
        line_number, line = _line_at(lines, 1)
        raise MalformedFrontMatterError(
            str(exc), line_number=line_number, line=line
        ) from exc

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        line_number, line = _line_at(lines, 1)
        raise MalformedFrontMatterError(
            "expected a mapping of keys to values", line_number=line_number, line=line
        )

    metadata: Metadata = {}
    for key, value in loaded.items():
        try:
            metadata[str(key)] = _convert_value(str(key), value)
        except TypeError as exc:
            key_line = loaded.lc.key(key)[0] if hasattr(loaded, "lc") else 0
            line_number, line = _line_at(lines, key_line + 1)
            raise MalformedFrontMatterError(
                str(exc), line_number=line_number, line=line
            ) from exc
    return metadata


def split(raw: str) -> tuple[Metadata, str]:
    """Separate front-matter metadata from the document body.

    Parameters
    ----------
    raw : str
        Full document text.

    Returns
    -------
    tuple[dict[str, MetadataValue], str]
        The parsed metadata and the body. When ``raw`` does not open with a
        ``---`` fence the metadata is empty and the body is ``raw`` unchanged;
        otherwise the body is trimmed of leading and trailing whitespace.

    Raises
    ------
    MalformedFrontMatterError
        If the block is never closed, is not valid YAML, or contains values
        other than scalars and string sequences.
    """
    lines = raw.splitlines(keepends=True)
    if not lines or lines[0].rstrip() != FRONT_MATTER_FENCE:
        return {}, raw

    closing = _find_closing_fence(lines)
    if closing is None:
        line_number, line = _line_at(lines, 0)
        raise MalformedFrontMatterError(
            "front matter block is never closed", line_number=line_number, line=line
        )

    block = "".join(lines[1:closing])
    metadata = _parse_block(block, lines)
    body = "".join(lines[closing + 1 :]).strip()
    return metadata, body


__all__ = ["Metadata", "MetadataValue", "split"]
