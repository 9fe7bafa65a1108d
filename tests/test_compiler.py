"""Unit tests for the document compiler.

These tests drive :class:`DocumentCompiler` through the scenarios the site
depends on: the end-to-end front matter + heading example, slug collisions,
agreement between outline slugs and rendered anchor ids, unterminated fences,
metadata scope injection, stage-tagged error wrapping, and byte-stable output.
"""

from __future__ import annotations

import dataclasses as dc

import pytest
from bs4 import BeautifulSoup

from pattern_pages.artifact import PageMeta, PageProps, decode_artifact, encode_artifact
from pattern_pages.compiler import DocumentCompiler, verbatim_lines
from pattern_pages.errors import CompilationError
from pattern_pages.front_matter import split
from pattern_pages.headings import Heading


def _ids(html: str) -> list[str]:
    """Return rendered heading ids in document order."""
    soup = BeautifulSoup(html, "html.parser")
    return [tag["id"] for tag in soup.select("h1, h2, h3, h4, h5, h6")]


def test_end_to_end_document() -> None:
    """The canonical example yields metadata, one heading, and the body text."""
    metadata, body = split("---\ntitle: X\ntags: [a, b]\n---\n## Hello World\ntext")
    artifact = DocumentCompiler().compile(body, metadata, identifier="example")
    assert metadata == {"title": "X", "tags": ["a", "b"]}
    assert artifact.headings == (
        Heading(title="Hello World", slug="hello-world", level=2),
    )
    assert "text" in artifact.compiled_source, "expected body text in compiled output"
    assert artifact.identifier == "example"


def test_duplicate_titles_get_suffixed_slugs() -> None:
    """Two headings titled Setup become setup and setup-2 in order."""
    artifact = DocumentCompiler().compile("## Setup\none\n\n## Setup\ntwo", {})
    assert [h.slug for h in artifact.headings] == ["setup", "setup-2"]


def test_outline_slugs_match_rendered_ids() -> None:
    """Every outline slug must equal the id the anchor linker attached."""
    body = (
        "## Overview\n"
        "Intro.\n\n"
        "```python\n"
        "## not a heading\n"
        "x = 1\n"
        "```\n\n"
        "## Overview\n\n"
        "### Using `asyncio` **safely**\n\n"
        "## Cats &amp; Dogs\n"
    )
    compiler = DocumentCompiler(outline_levels=range(1, 7))
    artifact = compiler.compile(body, {})
    assert [h.slug for h in artifact.headings] == _ids(artifact.compiled_source)
    assert [h.slug for h in artifact.headings] == [
        "overview",
        "overview-2",
        "using-asyncio-safely",
        "cats-dogs",
    ]


def test_outline_levels_filter_but_ids_stay_consistent() -> None:
    """Headings outside the outline levels still shift collision counters."""
    artifact = DocumentCompiler().compile("# Top\n\n## Top\n\n#### Top", {})
    assert [h.slug for h in artifact.headings] == ["top-2"]
    assert _ids(artifact.compiled_source) == ["top", "top-2", "top-3"]


def test_heading_inside_code_is_not_extracted() -> None:
    """A heading marker inside a fenced block never reaches the outline."""
    artifact = DocumentCompiler().compile("```\n## not a heading\n```", {})
    assert artifact.headings == ()
    assert _ids(artifact.compiled_source) == []
    assert "## not a heading" in artifact.compiled_source


def test_unterminated_fence_still_compiles() -> None:
    """A document ending mid-code-block compiles with the tail treated as code."""
    body = "## Intro\n\n```python\nprint('hi')\n## still code"
    artifact = DocumentCompiler().compile(body, {})
    assert [h.slug for h in artifact.headings] == ["intro"]
    soup = BeautifulSoup(artifact.compiled_source, "html.parser")
    block = soup.select_one("pre.codehilite")
    assert block is not None, "expected the unterminated fence to render as code"
    assert "## still code" in block.get_text()


def test_code_block_lines_survive_rendering() -> None:
    """Highlighted blocks pass through Markdown with one span per line."""
    artifact = DocumentCompiler().compile("Intro\n```js\nlet a;\n\nlet b;\n```", {})
    soup = BeautifulSoup(artifact.compiled_source, "html.parser")
    lines = soup.select("pre.codehilite code > span.line")
    assert [line.get_text() for line in lines] == ["let a;", "", "let b;"]
    assert soup.select_one("pre.codehilite").parent.name != "p", (
        "expected the code block not to be wrapped in a paragraph"
    )


def test_metadata_scope_is_injected_into_body() -> None:
    """Expressions in prose are evaluated against the front matter."""
    metadata = {"title": "Throttling", "tags": ["a", "b"]}
    artifact = DocumentCompiler().compile(
        "Read **{{ title }}** ({{ tags }}), {{ tags | length }} tags.", metadata
    )
    assert "<strong>Throttling</strong>" in artifact.compiled_source
    assert "(a, b), 2 tags." in artifact.compiled_source
    assert artifact.scope["title"] == "Throttling"
    assert artifact.scope["json"] == '{"tags":["a","b"],"title":"Throttling"}'


def test_expressions_inside_code_are_left_alone() -> None:
    """Code spans and fenced blocks keep expression syntax verbatim."""
    body = "Use `{{ title }}` here.\n\n```\n{{ title }}\n```"
    artifact = DocumentCompiler().compile(body, {"title": "X"})
    assert artifact.compiled_source.count("{{ title }}") == 2, (
        "expected both code occurrences to stay unevaluated"
    )


def test_injected_values_are_escaped() -> None:
    """Metadata values cannot inject markup into the page."""
    artifact = DocumentCompiler().compile("{{ title }}", {"title": "<script>"})
    assert "<script>" not in artifact.compiled_source
    assert "&lt;script&gt;" in artifact.compiled_source


def test_undefined_expression_fails_bind_stage() -> None:
    """Unknown names abort compilation with the stage and identifier recorded."""
    with pytest.raises(CompilationError) as excinfo:
        DocumentCompiler().compile("{{ missing }}", {}, identifier="broken")
    assert excinfo.value.stage == "bind"
    assert excinfo.value.identifier == "broken"
    assert "broken" in str(excinfo.value)


def test_stage_failure_is_wrapped_with_cause(monkeypatch: pytest.MonkeyPatch) -> None:
    """Unexpected highlighter errors surface as CompilationError."""
    compiler = DocumentCompiler()

    def _explode(_body: str) -> str:
        msg = "lexer crashed"
        raise ValueError(msg)

    monkeypatch.setattr(compiler.highlighter, "highlight", _explode)
    with pytest.raises(CompilationError) as excinfo:
        compiler.compile("## Title", {}, identifier="doc")
    assert excinfo.value.stage == "highlight"
    assert isinstance(excinfo.value.__cause__, ValueError)


def test_artifact_is_immutable() -> None:
    """Compiled artifacts and their scope cannot be mutated."""
    artifact = DocumentCompiler().compile("text", {"title": "X"})
    with pytest.raises(dc.FrozenInstanceError):
        artifact.compiled_source = "changed"  # type: ignore[misc]
    with pytest.raises(TypeError):
        artifact.scope["title"] = "Y"  # type: ignore[index]


def test_compilation_is_byte_stable() -> None:
    """Compiling the same document twice yields identical bytes."""
    body = "## Setup\n\n```python\nprint('x')\n```\n\n## Setup"
    metadata = {"title": "X", "tags": ["b", "a"]}

    def _encode() -> bytes:
        artifact = DocumentCompiler().compile(body, metadata, identifier="stable")
        props = PageProps(
            identifier="stable",
            title="X",
            subtitle="",
            tags=("b", "a"),
            section=None,
            headings=artifact.headings,
            compiled_source=artifact.compiled_source,
            scope=artifact.scope,
            checksum=artifact.checksum,
            meta=PageMeta(title="Patterns", description="d"),
        )
        return encode_artifact(props)

    first, second = _encode(), _encode()
    assert first == second, "expected identical bytes for identical input"
    decoded = decode_artifact(first)
    assert [h.slug for h in decoded.headings] == ["setup", "setup-2"]
    assert decoded.tags == ("b", "a"), "expected tag order to be preserved"


def test_indented_code_and_html_blocks_are_not_bound() -> None:
    """Expressions inside indented code and raw HTML blocks stay verbatim."""
    body = "## Hi\n\n    {{ not_defined }}\n\n<div>\n{{ also_undefined }}\n</div>\n"
    artifact = DocumentCompiler().compile(body, {})
    soup = BeautifulSoup(artifact.compiled_source, "html.parser")
    code = soup.select_one("pre code")
    assert code is not None, "expected the indented block to render as code"
    assert code.get_text() == "{{ not_defined }}\n"
    assert "{{ also_undefined }}" in artifact.compiled_source


def test_list_continuation_paragraphs_are_still_bound() -> None:
    """Indented text belonging to a list item is prose, not code."""
    body = "- item\n\n    about {{ title }}"
    artifact = DocumentCompiler().compile(body, {"title": "X"})
    assert "about X" in artifact.compiled_source


def test_escaped_braces_render_literally() -> None:
    """A backslash before ``{{`` shows template syntax instead of evaluating it."""
    body = "Write \\{{1, 2}} or a template \\{{ name }}; this is {{ title }}."
    artifact = DocumentCompiler().compile(body, {"title": "X"})
    assert "Write {{1, 2}} or a template {{ name }}; this is X." in (
        artifact.compiled_source
    )


@pytest.mark.parametrize(
    ("lines", "expected"),
    [
        (
            ["text", "", "    code", "", "    more", "text"],
            [False, False, True, True, True, False],
        ),
        (["- item", "", "    continued"], [False, False, False]),
        (["<div>", "{{ x }}", "</div>", "after"], [True, True, True, False]),
        (["<!-- note", "-->", "after"], [True, True, False]),
        (["<span>inline</span>"], [False]),
    ],
)
def test_verbatim_lines(lines: list[str], expected: list[bool]) -> None:
    """Code and raw HTML blocks are flagged; prose and inline HTML are not."""
    assert verbatim_lines(lines) == expected


def test_crlf_body_compiles_like_lf() -> None:
    """Windows line endings close fences and keep the following headings."""
    crlf = DocumentCompiler().compile("```\r\nx = 1\r\n```\r\n\r\n## After\r\n", {})
    lf = DocumentCompiler().compile("```\nx = 1\n```\n\n## After\n", {})
    assert [h.slug for h in crlf.headings] == ["after"]
    assert crlf.compiled_source == lf.compiled_source
