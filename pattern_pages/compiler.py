r"""Compile a pattern document body into a pre-rendered artifact.

:class:`DocumentCompiler` runs the content pipeline in a fixed order:

1. ``highlight``: fenced code regions become highlighted ``<pre>`` blocks.
2. ``bind``: ``{{ expression }}`` placeholders in prose are evaluated against
   the metadata scope. Code spans, indented code blocks, raw HTML blocks and
   highlighted blocks are copied verbatim, and ``\{{`` produces a literal
   ``{{``.
3. ``outline``: headings are extracted from the highlighted, bound body.
4. ``render``: the same body is rendered to HTML; the anchor linker attaches
   ids to the rendered headings. The linked headings must equal the outline.
5. ``serialize``: the HTML, outline, and scope are frozen into a
   :class:`~pattern_pages.artifact.CompiledArtifact`.

A failure in any stage is raised as :class:`~pattern_pages.errors.CompilationError`
naming the document and the stage.

Example
-------
>>> from pattern_pages.compiler import DocumentCompiler
>>> artifact = DocumentCompiler().compile("## Hello World\ntext", {"title": "X"})
>>> [(h.title, h.slug, h.level) for h in artifact.headings]
[('Hello World', 'hello-world', 2)]
"""

from __future__ import annotations

import contextlib
import itertools
import logging
import operator
import re
import typing as typ

import msgspec.json as msgspec_json
from jinja2 import StrictUndefined
from jinja2.sandbox import SandboxedEnvironment
from markdown import util
from markupsafe import escape

from ._constants import DEFAULT_OUTLINE_LEVELS
from .anchors import ANCHOR_PROCESSOR, HeadingAnchorExtension
from .artifact import CompiledArtifact
from .errors import CompilationError
from .headings import build_markdown, extract_headings
from .highlighter import CodeHighlighter

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .anchors import HeadingAnchorTreeprocessor
    from .front_matter import MetadataValue
    from .headings import Heading

logger = logging.getLogger(__name__)

EXPRESSION_PATTERN = re.compile(
    r"\\(?P<literal>\{\{)|\{\{(?P<expression>.+?)\}\}", re.DOTALL
)
CODE_SPAN_PATTERN = re.compile(r"(`+).+?\1", re.DOTALL)
INDENTED_LINE_PATTERN = re.compile(r"^(?: {4}|[ ]{0,3}\t)")
LIST_ITEM_PATTERN = re.compile(r"^[ ]{0,3}(?:[*+-]|\d+\.)[ \t]+")
HTML_BLOCK_PATTERN = re.compile(
    r"^[ ]{0,3}<(?:(?P<comment>!--)|(?P<tag>[A-Za-z][A-Za-z0-9-]*)(?=[\s/>]|$))"
)
BLOCK_LEVEL_TAGS = frozenset(util.BLOCK_LEVEL_ELEMENTS)
SCOPE_JSON_KEY = "json"


def build_scope(
    metadata: typ.Mapping[str, MetadataValue],
) -> dict[str, MetadataValue]:
    """Return the names available to body expressions.

    Every metadata key is exposed directly, and ``json`` holds the whole
    metadata mapping encoded as JSON unless the metadata defines ``json``
    itself.
    """
    encoded = msgspec_json.encode(dict(metadata), order="deterministic").decode("utf-8")
    return {SCOPE_JSON_KEY: encoded, **metadata}


def _format_value(value: object) -> str:
    """Render an expression result as escaped body text."""
    if value is None:
        return ""
    if isinstance(value, list | tuple):
        text = ", ".join(str(item) for item in value)
    else:
        text = str(value)
    return str(escape(text))


def _html_block_opening(line: str) -> tuple[str, int] | None:
    """Return the closing marker and opening end when ``line`` starts raw HTML."""
    opening = HTML_BLOCK_PATTERN.match(line)
    if opening is None:
        return None
    if opening.group("comment"):
        return "-->", opening.end()
    tag = opening.group("tag").lower()
    if tag not in BLOCK_LEVEL_TAGS:
        return None
    return f"</{tag}>", opening.end()


def verbatim_lines(lines: cabc.Sequence[str]) -> list[bool]:
    """Flag the lines Markdown copies through unchanged.

    These are raw HTML blocks (highlighted code included) up to their closing
    tag, and indented code blocks. Indented lines continuing a list item are
    list content, not code.
    """
    flags = [False] * len(lines)
    closer: str | None = None
    previous_blank = True
    in_code = False
    in_list = False
    for idx, line in enumerate(lines):
        blank = not line.strip()
        indented = bool(INDENTED_LINE_PATTERN.match(line))
        if closer is not None:
            flags[idx] = True
            if closer in line.lower():
                closer = None
        elif in_code and (blank or indented):
            flags[idx] = True
        elif previous_blank and indented and not blank and not in_list:
            flags[idx] = True
            in_code = True
        elif not blank and not indented:
            in_code = False
            if LIST_ITEM_PATTERN.match(line):
                in_list = True
            elif previous_blank:
                in_list = False
            opening = _html_block_opening(line)
            if opening is not None:
                block_closer, start = opening
                flags[idx] = True
                in_list = False
                if block_closer not in line[start:].lower():
                    closer = block_closer
        previous_blank = blank
    return flags


class DocumentCompiler:
    """Turn a Markdown body plus metadata into a :class:`CompiledArtifact`."""

    def __init__(
        self,
        highlighter: CodeHighlighter | None = None,
        *,
        outline_levels: cabc.Collection[int] = DEFAULT_OUTLINE_LEVELS,
    ) -> None:
        """Initialize a compiler.

        Parameters
        ----------
        highlighter : CodeHighlighter, optional
            Highlighter used for fenced code regions; a default-styled one is
            created when ``None``.
        outline_levels : Collection[int], optional
            Heading levels reported in the outline. Defaults to ``(2, 3)``.
        """
        self.highlighter = highlighter or CodeHighlighter()
        self.outline_levels = tuple(outline_levels)
        self._env = SandboxedEnvironment(undefined=StrictUndefined)

    def compile(
        self,
        body: str,
        metadata: typ.Mapping[str, MetadataValue],
        identifier: str | None = None,
    ) -> CompiledArtifact:
        """Compile ``body`` into a pre-rendered artifact.

        Parameters
        ----------
        body : str
            Markdown body with front matter already removed.
        metadata : Mapping[str, MetadataValue]
            Front-matter values exposed to body expressions.
        identifier : str, optional
            Content identifier used in error messages and the artifact.

        Returns
        -------
        CompiledArtifact
            Rendered HTML, outline, scope, and checksum.

        Raises
        ------
        CompilationError
            If any pipeline stage fails.
        """
        scope = build_scope(metadata)
        with self._stage(identifier, "highlight"):
            highlighted = self.highlighter.highlight(body)
        with self._stage(identifier, "bind"):
            bound = self.bind(highlighted, scope)
        with self._stage(identifier, "outline"):
            headings = extract_headings(bound)
        with self._stage(identifier, "render"):
            html, linked = self._render(bound)
        with self._stage(identifier, "outline"):
            _check_outline(headings, linked)
        with self._stage(identifier, "serialize"):
            artifact = CompiledArtifact.build(
                identifier=identifier,
                compiled_source=html,
                headings=tuple(h for h in headings if h.level in self.outline_levels),
                scope=scope,
            )
        logger.debug(
            "compiled %s: %d headings, checksum %s",
            identifier or "<anonymous>",
            len(artifact.headings),
            artifact.checksum[:12],
        )
        return artifact

    def bind(self, text: str, scope: typ.Mapping[str, MetadataValue]) -> str:
        """Evaluate ``{{ expression }}`` placeholders in prose against ``scope``."""
        lines = text.split("\n")
        flagged = zip(verbatim_lines(lines), lines, strict=True)
        chunks: list[str] = []
        for verbatim, group in itertools.groupby(flagged, key=operator.itemgetter(0)):
            chunk = "\n".join(line for _, line in group)
            chunks.append(chunk if verbatim else self._bind_prose(chunk, scope))
        return "\n".join(chunks)

    def _bind_prose(self, text: str, scope: typ.Mapping[str, MetadataValue]) -> str:
        """Bind expressions in ``text`` while leaving code spans untouched."""
        pieces: list[str] = []
        cursor = 0
        for span in CODE_SPAN_PATTERN.finditer(text):
            pieces.append(self._bind_segment(text[cursor : span.start()], scope))
            pieces.append(span.group(0))
            cursor = span.end()
        pieces.append(self._bind_segment(text[cursor:], scope))
        return "".join(pieces)

    def _bind_segment(self, segment: str, scope: typ.Mapping[str, MetadataValue]) -> str:
        """Evaluate every expression found in a prose segment."""

        def _evaluate(match: re.Match[str]) -> str:
            if match.group("literal"):
                return match.group("literal")
            expression = self._env.compile_expression(
                match.group("expression").strip(), undefined_to_none=False
            )
            return _format_value(expression(**scope))

        return EXPRESSION_PATTERN.sub(_evaluate, segment)

    @staticmethod
    def _render(text: str) -> tuple[str, tuple[Heading, ...]]:
        """Render Markdown to HTML, returning the HTML and the linked headings."""
        md = build_markdown(HeadingAnchorExtension())
        html = md.convert(text)
        anchors = typ.cast(
            "HeadingAnchorTreeprocessor", md.treeprocessors[ANCHOR_PROCESSOR]
        )
        return html, tuple(anchors.headings)

    @staticmethod
    @contextlib.contextmanager
    def _stage(identifier: str | None, stage: str) -> cabc.Iterator[None]:
        """Wrap failures raised inside a pipeline stage in CompilationError."""
        logger.debug("%s: %s", identifier or "<anonymous>", stage)
        try:
            yield
        except CompilationError:
            raise
        except Exception as exc:
            raise CompilationError(identifier, stage, exc) from exc


def _check_outline(
    outline: cabc.Sequence[Heading], linked: cabc.Sequence[Heading]
) -> None:
    """Raise when the outline and the rendered anchors disagree."""
    if tuple(outline) != tuple(linked):
        expected = [heading.slug for heading in outline]
        actual = [heading.slug for heading in linked]
        msg = f"outline slugs {expected} differ from rendered anchors {actual}"
        raise ValueError(msg)


__all__ = ["DocumentCompiler", "build_scope", "verbatim_lines"]
