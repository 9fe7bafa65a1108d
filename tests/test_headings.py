"""Unit tests for heading extraction and the shared slug algorithm."""

from __future__ import annotations

import pytest

from pattern_pages.headings import Heading, extract_headings
from pattern_pages.highlighter import CodeHighlighter
from pattern_pages.slugs import SlugRegistry, slugify


def test_extracts_heading_title_slug_and_level() -> None:
    """A single second-level heading yields one outline entry."""
    assert extract_headings("## Hello World\ntext") == (
        Heading(title="Hello World", slug="hello-world", level=2),
    )


def test_colliding_titles_get_numeric_suffixes() -> None:
    """Repeated titles are disambiguated in document order."""
    headings = extract_headings("## Setup\nfirst\n\n## Setup\nsecond")
    assert [h.slug for h in headings] == ["setup", "setup-2"]


def test_headings_inside_fences_are_ignored() -> None:
    """Heading-looking lines inside fenced code are not headings."""
    body = "## Real\n```\n## not a heading\n```\n## Also real"
    assert [h.title for h in extract_headings(body)] == ["Real", "Also real"]


def test_headings_inside_highlighted_blocks_are_ignored() -> None:
    """Highlighted bodies hide code lines from the extractor as well."""
    body = CodeHighlighter().highlight("```bash\n## not a heading\necho hi\n```")
    assert extract_headings(body) == ()


def test_unterminated_fence_hides_the_remaining_lines() -> None:
    """Everything after an unterminated fence is code."""
    body = "## Intro\n```\n## swallowed"
    assert [h.slug for h in extract_headings(body)] == ["intro"]


def test_inline_markup_is_stripped_from_titles() -> None:
    """Display titles drop emphasis, code ticks, and link targets."""
    (heading,) = extract_headings(
        "## Using **`asyncio`** with [queues](https://example.invalid/q)"
    )
    assert heading.title == "Using asyncio with queues"
    assert heading.slug == "using-asyncio-with-queues"


def test_level_filter_keeps_collision_counters() -> None:
    """Filtered-out levels still claim slugs so suffixes match the page."""
    headings = extract_headings("# Intro\n\n## Intro", levels=(2,))
    assert headings == (Heading(title="Intro", slug="intro-2", level=2),)


def test_setext_and_closed_atx_headings() -> None:
    """Underlined and closed-hash headings are recognized."""
    body = "Title\n=====\n\nSub\n---\n\n### Closed ###"
    assert [(h.title, h.level) for h in extract_headings(body)] == [
        ("Title", 1),
        ("Sub", 2),
        ("Closed", 3),
    ]


def test_setext_underline_needs_a_block_start() -> None:
    """A paragraph's second line followed by ``---`` is not a heading title."""
    body = "first line\nsecond line\n---"
    assert extract_headings(body) == ()


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("Hello World", "hello-world"),
        ("  Leading & trailing  ", "leading-trailing"),
        ("snake_case_name", "snake-case-name"),
        ("Über Café", "über-café"),
        ("!!!", "section"),
    ],
)
def test_slugify(text: str, expected: str) -> None:
    """Slugs are lower-case, separator-collapsed, and never empty."""
    assert slugify(text) == expected


def test_registry_suffixes_until_unique() -> None:
    """A suffixed slug that already exists gets the next counter."""
    registry = SlugRegistry()
    claimed = [registry.claim(text) for text in ("Setup", "Setup 2", "Setup", "Setup")]
    assert claimed == ["setup", "setup-2", "setup-3", "setup-4"]
    assert "setup-3" in registry
    registry.reset()
    assert registry.claim("Setup") == "setup"


def test_titles_decode_entities_and_escapes() -> None:
    """Entities and backslash escapes show up as the characters they stand for."""
    (heading,) = extract_headings("## A &amp; B \\*not emphasis\\*")
    assert heading.title == "A & B *not emphasis*"
    assert heading.slug == "a-b-not-emphasis"


@pytest.mark.parametrize(
    ("body", "expected"),
    [
        ("> ## Setup\n\n## Setup", ["setup", "setup-2"]),
        ("- item\n\n    ## Setup\n\n## Setup", ["setup", "setup-2"]),
        ("<div>\n## Setup\n</div>\n\n## Setup", ["setup"]),
        ("## [label][missing]", ["label-missing"]),
    ],
)
def test_outline_follows_markdown_block_structure(
    body: str, expected: list[str]
) -> None:
    """Nested headings count, and headings inside raw HTML do not."""
    assert [h.slug for h in extract_headings(body)] == expected


def test_crlf_bodies_close_their_fences() -> None:
    """Windows line endings do not turn the rest of a document into code."""
    body = "```\r\n## not a heading\r\n```\r\n## After\r\n"
    assert [h.slug for h in extract_headings(body)] == ["after"]
