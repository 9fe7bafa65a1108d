"""Syntax highlighting for fenced code regions in pattern documents.

:class:`CodeHighlighter` rewrites every fenced code region of a Markdown body
into a self-contained ``<pre class="codehilite">`` block. Recognized languages
are tokenized by Pygments; anything else is emitted as escaped ``plain`` text.
Each source line becomes its own ``<span class="line">`` so the page can style
lines individually, and all text outside code regions is left untouched.

The module also provides the fence scanner (:func:`find_code_regions`),
:func:`mask_code_regions` for the heading extractor, and
:class:`HighlightedBlockExtension`, which shields highlighted blocks from
further Markdown processing at render time.
"""

from __future__ import annotations

import dataclasses as dc
import logging
import re
import typing as typ
from html import escape

from markdown.extensions import Extension
from markdown.preprocessors import Preprocessor
from pygments import highlight
from pygments.formatters.html import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from ._constants import DEFAULT_PYGMENTS_STYLE

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from markdown import Markdown

logger = logging.getLogger(__name__)

FENCE_OPEN_PATTERN = re.compile(
    r"^(?P<indent>[ ]{0,3})(?P<fence>`{3,}|~{3,})[ \t]*"
    r"(?P<language>[A-Za-z0-9_+#.-]+)?(?P<extras>[^\n]*)$"
)
FENCE_CLOSE_PATTERN = re.compile(r"^[ ]{0,3}(?P<fence>`{3,}|~{3,})[ \t]*$")
HIGHLIGHTED_BLOCK_PATTERN = re.compile(
    r'^[ ]{0,3}<pre class="codehilite"[^>]*>.*?</pre>[ \t]*$',
    re.MULTILINE | re.DOTALL,
)
PLAIN_LANGUAGE = "text"


@dc.dataclass(frozen=True, slots=True)
class CodeRegion:
    """Location of one fenced code region within a list of lines.

    Attributes
    ----------
    start : int
        Index of the opening fence line.
    end : int
        Index one past the last line of the region (the closing fence when
        present, otherwise the end of the document).
    indent : int
        Number of spaces preceding the opening fence.
    language : str or None
        Declared language tag, or ``None`` when the fence carries none.
    closed : bool
        ``False`` when the region runs to the end of the document.
    """

    start: int
    end: int
    indent: int
    language: str | None
    closed: bool

    def content(self, lines: cabc.Sequence[str]) -> list[str]:
        """Return the code lines between the fences with the fence indent removed."""
        stop = self.end - 1 if self.closed else self.end
        return [_dedent(line, self.indent) for line in lines[self.start + 1 : stop]]


def _dedent(line: str, width: int) -> str:
    """Strip up to ``width`` leading spaces from ``line``."""
    stripped = 0
    while stripped < width and stripped < len(line) and line[stripped] == " ":
        stripped += 1
    return line[stripped:]


def find_code_regions(lines: cabc.Sequence[str]) -> list[CodeRegion]:
    """Locate fenced code regions in ``lines``.

    A region opens on a line starting with three or more backticks or tildes and
    closes on the next line made of the same fence character repeated at least
    as often. A region that never closes extends to the end of the document.
    """
    regions: list[CodeRegion] = []
    idx = 0
    total = len(lines)
    while idx < total:
        opening = FENCE_OPEN_PATTERN.match(lines[idx])
        if not opening or (
            opening.group("fence")[0] == "`" and "`" in opening.group("extras")
        ):
            idx += 1
            continue
        fence = opening.group("fence")
        end = total
        closed = False
        for cursor in range(idx + 1, total):
            closing = FENCE_CLOSE_PATTERN.match(lines[cursor])
            if (
                closing
                and closing.group("fence")[0] == fence[0]
                and len(closing.group("fence")) >= len(fence)
            ):
                end = cursor + 1
                closed = True
                break
        regions.append(
            CodeRegion(
                start=idx,
                end=end,
                indent=len(opening.group("indent")),
                language=opening.group("language"),
                closed=closed,
            )
        )
        idx = end
    return regions


def normalize_newlines(text: str) -> str:
    """Convert ``\\r\\n`` and lone ``\\r`` line endings to ``\\n``."""
    return text.replace("\r\n", "\n").replace("\r", "\n")


def rewrite_code_regions(
    body: str, render: cabc.Callable[[CodeRegion, list[str]], str]
) -> str:
    """Replace each fenced region of ``body`` with ``render(region, lines)``.

    The replacement keeps the opening fence's indent so it stays inside the
    same Markdown container.
    """
    lines = normalize_newlines(body).split("\n")
    regions = find_code_regions(lines)
    if not regions:
        return "\n".join(lines)
    output: list[str] = []
    cursor = 0
    for region in regions:
        output.extend(lines[cursor : region.start])
        output.append(" " * region.indent + render(region, lines))
        cursor = region.end
    output.extend(lines[cursor:])
    return "\n".join(output)


def mask_code_regions(body: str) -> str:
    """Replace fenced regions with empty code blocks, skipping tokenization."""
    return rewrite_code_regions(
        body,
        lambda region, _lines: (
            f'<pre class="codehilite" data-language="{PLAIN_LANGUAGE}"></pre>'
        ),
    )


class CodeHighlighter:
    """Render fenced code regions into line-addressable highlighted HTML."""

    def __init__(self, pygments_style: str = DEFAULT_PYGMENTS_STYLE) -> None:
        """Initialize a highlighter.

        Parameters
        ----------
        pygments_style : str, optional
            Name of the Pygments style whose CSS :attr:`stylesheet` returns.
            Defaults to ``"github-dark"``.
        """
        self.pygments_style = pygments_style
        self._formatter = HtmlFormatter(style=pygments_style, nowrap=True)

    @property
    def stylesheet(self) -> str:
        """Return the CSS used for highlighted code blocks."""
        return self._formatter.get_style_defs(".codehilite")

    def highlight(self, body: str) -> str:
        """Return ``body`` with every fenced code region replaced by highlighted HTML.

        Line endings are normalized to ``\\n``; other text outside code regions
        is returned unchanged. Unterminated fences run to the end of the
        document and unknown languages fall back to plain text; this method
        never raises for malformed fences.
        """

        def _render(region: CodeRegion, lines: list[str]) -> str:
            if not region.closed:
                logger.debug(
                    "unterminated code fence at line %d runs to end of document",
                    region.start + 1,
                )
            return self.code_block("\n".join(region.content(lines)), region.language)

        return rewrite_code_regions(body, _render)

    def code_block(self, code: str, language: str | None = None) -> str:
        """Render ``code`` into a highlighted block with an optional language label.

        Parameters
        ----------
        code : str
            Source snippet to highlight; line breaks are preserved exactly.
        language : str, optional
            Pygments lexer alias. Missing or unknown languages produce an
            untokenized ``plain`` block.

        Returns
        -------
        str
            ``<pre class="codehilite">`` markup with one ``<span class="line">``
            per source line and a ``data-language`` attribute.
        """
        rendered_lines = self._tokenize(code, language)
        body = "\n".join(f'<span class="line">{line}</span>' for line in rendered_lines)
        tag = escape(language or PLAIN_LANGUAGE, quote=True)
        label = f'<span class="language-id">{escape(language)}</span>' if language else ""
        return f'<pre class="codehilite" data-language="{tag}">{label}<code>{body}</code></pre>'

    def _tokenize(self, code: str, language: str | None) -> list[str]:
        """Return one HTML fragment per source line of ``code``."""
        source_lines = code.split("\n")
        lexer = None
        if language:
            try:
                lexer = get_lexer_by_name(language, stripnl=False, ensurenl=True)
            except ClassNotFound:
                logger.debug("no lexer for language %r; rendering as plain", language)
        if lexer is None:
            return [
                f'<span class="plain">{escape(line, quote=False)}</span>' if line else ""
                for line in source_lines
            ]
        formatted = highlight(code, lexer, self._formatter)
        if formatted.endswith("\n"):
            formatted = formatted[:-1]
        rendered = formatted.split("\n")
        if len(rendered) != len(source_lines):  # pragma: no cover - lexer quirk guard
            rendered = (rendered + [""] * len(source_lines))[: len(source_lines)]
        return rendered


class HighlightedBlockPreprocessor(Preprocessor):
    """Move highlighted code blocks into the HTML stash before block parsing."""

    def run(self, lines: list[str]) -> list[str]:
        """Replace each highlighted ``<pre>`` block with a stash placeholder."""
        text = "\n".join(lines)

        def _stash(match: re.Match[str]) -> str:
            placeholder = self.md.htmlStash.store(match.group(0).strip())
            return f"\n{placeholder}\n"

        return HIGHLIGHTED_BLOCK_PATTERN.sub(_stash, text).split("\n")


class HighlightedBlockExtension(Extension):
    """Keep pre-highlighted code blocks verbatim when rendering Markdown."""

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register the highlighted-block preprocessor on the Markdown instance."""
        md.preprocessors.register(
            HighlightedBlockPreprocessor(md), "pattern_highlighted_blocks", 25
        )


__all__ = [
    "HIGHLIGHTED_BLOCK_PATTERN",
    "CodeHighlighter",
    "CodeRegion",
    "HighlightedBlockExtension",
    "HighlightedBlockPreprocessor",
    "find_code_regions",
    "mask_code_regions",
    "normalize_newlines",
    "rewrite_code_regions",
]
