r"""Extract the navigable heading outline of a pattern document.

The outline is read from the element tree Python-Markdown builds for the
body, so it contains exactly the headings the page renders: ATX and setext
headings at the top level as well as those nested in block quotes and list
items. Fenced code, highlighted ``<pre>`` blocks and raw HTML blocks never
produce headings. Titles are the visible text of each heading element and
slugs come from :class:`~pattern_pages.slugs.SlugRegistry`.

:func:`collect_headings` is the tree walk shared with the anchor linker. Both
passes parse the same text with :func:`build_markdown`, which is what keeps
outline links and rendered ``id`` attributes in step.

Example
-------
>>> from pattern_pages.headings import extract_headings
>>> [h.slug for h in extract_headings("## Setup\ntext\n\n> ## Setup")]
['setup', 'setup-2']
"""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ
from html import unescape

from markdown import Markdown, util
from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor

from ._constants import MARKDOWN_EXTENSIONS
from .highlighter import HighlightedBlockExtension, mask_code_regions
from .slugs import SlugRegistry

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from xml.etree.ElementTree import Element

HEADING_TAGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6"})
TAG_PATTERN = re.compile(r"</?[A-Za-z][^>]*>")
ESCAPED_CHAR_PATTERN = re.compile(f"{util.STX}([0-9]+){util.ETX}")
WHITESPACE_PATTERN = re.compile(r"\s+")
OUTLINE_PROCESSOR = "pattern_heading_outline"


@dc.dataclass(frozen=True, slots=True)
class Heading:
    """One entry of a document outline.

    Attributes
    ----------
    title : str
        Display text with inline markup stripped.
    slug : str
        Anchor id unique within the document.
    level : int
        Heading depth, ``1`` for ``#`` through ``6`` for ``######``.
    """

    title: str
    slug: str
    level: int


def build_markdown(*extensions: Extension | str) -> Markdown:
    """Return a Markdown instance configured the way pattern bodies render."""
    return Markdown(
        extensions=[HighlightedBlockExtension(), *extensions, *MARKDOWN_EXTENSIONS],
        output_format="html",
    )


def heading_text(element: Element, md: Markdown) -> str:
    """Return the text a reader sees for ``element`` once rendering finishes."""
    text = "".join(element.itertext())

    def _from_stash(match: re.Match[str]) -> str:
        raw = md.htmlStash.rawHtmlBlocks[int(match.group(1))]
        if not isinstance(raw, str):
            raw = "".join(raw.itertext())
        return TAG_PATTERN.sub("", raw)

    text = unescape(util.HTML_PLACEHOLDER_RE.sub(_from_stash, text))
    text = ESCAPED_CHAR_PATTERN.sub(lambda m: chr(int(m.group(1))), text)
    return WHITESPACE_PATTERN.sub(" ", text).strip()


def collect_headings(
    root: Element, md: Markdown, registry: SlugRegistry
) -> list[tuple[Element, Heading]]:
    """Return every heading element below ``root`` with its outline entry.

    Elements are visited in document order and each claims its slug from
    ``registry``.
    """
    found: list[tuple[Element, Heading]] = []
    for element in root.iter():
        if element.tag not in HEADING_TAGS:
            continue
        title = heading_text(element, md)
        heading = Heading(
            title=title, slug=registry.claim(title), level=int(element.tag[1])
        )
        found.append((element, heading))
    return found


class HeadingOutlineTreeprocessor(Treeprocessor):
    """Record the outline of the parsed document without changing it."""

    def __init__(self, md: Markdown) -> None:
        super().__init__(md)
        self.registry = SlugRegistry()
        self.headings: list[Heading] = []

    def run(self, root: Element) -> None:
        self.registry.reset()
        self.headings = [
            heading for _, heading in collect_headings(root, self.md, self.registry)
        ]


class HeadingOutlineExtension(Extension):
    """Collect rendered headings into an outline."""

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register the outline treeprocessor after inline processing."""
        md.treeprocessors.register(
            HeadingOutlineTreeprocessor(md), OUTLINE_PROCESSOR, 5
        )


def extract_headings(
    body: str, levels: cabc.Container[int] = range(1, 7)
) -> tuple[Heading, ...]:
    """Return the ordered outline of ``body``.

    Parameters
    ----------
    body : str
        Markdown body, typically after code highlighting. Fenced regions that
        are still present are treated as code.
    levels : Container[int], optional
        Heading levels to include in the result. Every heading still claims a
        slug so collision suffixes match the rendered page. Defaults to all
        levels.

    Returns
    -------
    tuple[Heading, ...]
        Headings in document order with document-unique slugs.
    """
    md = build_markdown(HeadingOutlineExtension())
    md.convert(mask_code_regions(body))
    processor = typ.cast(
        "HeadingOutlineTreeprocessor", md.treeprocessors[OUTLINE_PROCESSOR]
    )
    return tuple(h for h in processor.headings if h.level in levels)


__all__ = [
    "Heading",
    "HeadingOutlineExtension",
    "build_markdown",
    "collect_headings",
    "extract_headings",
    "heading_text",
]
