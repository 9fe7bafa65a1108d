"""Shared fixtures for pattern_pages tests.

``pattern_site`` writes a minimal ``patterns.yaml`` plus content documents into
``tmp_path`` and returns a helper object exposing the paths, so pipeline, CLI,
and behaviour tests exercise the real loader and configuration code without
touching the repository's own content.
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ
from textwrap import dedent

import pytest

if typ.TYPE_CHECKING:
    from pathlib import Path

CONFIG_TEMPLATE = dedent(
    """
    defaults:
      content_dir: content
      output_dir: public
      outline_levels: [2, 3]
    meta:
      title: "Patterns: Async + Event-Driven"
      description: Fixture description
    sections:
      - title: Flow control
        articles:
          - slug: throttling
            title: Throttling
            subtitle: Limit how often work runs
            tags: [concurrency, flow-control]
          - slug: debouncing
            title: Debouncing
            subtitle: Collapse bursts
            tags: [events]
          - slug: "#TODO"
            title: Backpressure
            subtitle: Coming soon
    """
).lstrip()

THROTTLING_DOC = dedent(
    """
    ---
    title: Throttling
    tags: [concurrency, flow-control]
    ---
    ## Hello World
    text

    ```python
    ## not a heading
    def run():
        return 1
    ```

    ## Setup
    ### Setup
    """
).lstrip()

DEBOUNCING_DOC = dedent(
    """
    ---
    title: Debouncing
    ---
    ## When to use it
    Bursts of events.
    """
).lstrip()


@dc.dataclass(slots=True)
class PatternSite:
    """Paths of a temporary pattern site."""

    root: Path
    config_path: Path
    content_dir: Path
    output_dir: Path

    def write_document(self, identifier: str, text: str) -> Path:
        """Write ``text`` as the document backing ``identifier``."""
        path = self.content_dir / f"{identifier}.mdx"
        path.write_text(text, encoding="utf-8")
        return path


@pytest.fixture
def pattern_site(tmp_path: Path) -> PatternSite:
    """Create a temporary site with two documented patterns and a placeholder."""
    content_dir = tmp_path / "content"
    content_dir.mkdir()
    config_path = tmp_path / "patterns.yaml"
    config_path.write_text(CONFIG_TEMPLATE, encoding="utf-8")
    site = PatternSite(
        root=tmp_path,
        config_path=config_path,
        content_dir=content_dir,
        output_dir=tmp_path / "public",
    )
    site.write_document("throttling", THROTTLING_DOC)
    site.write_document("debouncing", DEBOUNCING_DOC)
    return site
