"""Attach addressable anchors to rendered heading elements.

:class:`HeadingAnchorExtension` plugs into ``markdown.Markdown``. Its tree
processor visits every rendered ``h1``-``h6`` element in document order, derives
the heading's visible text from the element tree, and claims a slug from the
shared :class:`~pattern_pages.slugs.SlugRegistry`. The heading receives
``id="<slug>"`` and a leading self-link so readers can copy a link to any
section.

The tree walk is :func:`pattern_pages.headings.collect_headings`, the same one
the outline extractor runs, so the headings recorded here are the outline of
the rendered page.
"""

from __future__ import annotations

import typing as typ
import xml.etree.ElementTree as etree  # noqa: N813

from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor

from .headings import collect_headings
from .slugs import SlugRegistry

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from markdown import Markdown

    from .headings import Heading

ANCHOR_CLASS = "anchor"
ICON_CLASS = "icon icon-link"
ANCHOR_PROCESSOR = "pattern_heading_anchors"


def _prepend_anchor(heading: Element, slug: str) -> None:
    """Insert a self-link as the first child of ``heading``."""
    anchor = etree.Element(
        "a",
        {
            "class": ANCHOR_CLASS,
            "href": f"#{slug}",
            "aria-hidden": "true",
            "tabindex": "-1",
        },
    )
    etree.SubElement(anchor, "span", {"class": ICON_CLASS})
    anchor.tail = heading.text
    heading.text = None
    heading.insert(0, anchor)


def link_headings(root: Element, md: Markdown, registry: SlugRegistry) -> list[Heading]:
    """Assign ids and self-links to every heading below ``root``.

    Parameters
    ----------
    root : Element
        Root of the rendered element tree.
    md : Markdown
        Markdown instance owning the HTML stash referenced by placeholders.
    registry : SlugRegistry
        Registry handing out document-unique slugs.

    Returns
    -------
    list[Heading]
        The linked headings, in document order.
    """
    linked: list[Heading] = []
    for element, heading in collect_headings(root, md, registry):
        element.set("id", heading.slug)
        _prepend_anchor(element, heading.slug)
        linked.append(heading)
    return linked


class HeadingAnchorTreeprocessor(Treeprocessor):
    """Attach ids and self-links to rendered headings."""

    def __init__(self, md: Markdown) -> None:
        super().__init__(md)
        self.registry = SlugRegistry()
        self.headings: list[Heading] = []

    def run(self, root: Element) -> None:
        """Link every heading in the tree produced for one document."""
        self.registry.reset()
        self.headings = link_headings(root, self.md, self.registry)


class HeadingAnchorExtension(Extension):
    """Give every rendered heading a stable ``id`` and a self-link anchor."""

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register the anchor treeprocessor after inline processing."""
        md.treeprocessors.register(
            HeadingAnchorTreeprocessor(md), ANCHOR_PROCESSOR, 5
        )


__all__ = [
    "ANCHOR_PROCESSOR",
    "HeadingAnchorExtension",
    "HeadingAnchorTreeprocessor",
    "link_headings",
]
