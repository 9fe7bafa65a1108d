"""Static content pipeline for the async and event-driven patterns pages.

This package turns authored pattern documents (front matter + Markdown body)
into pre-rendered JSON artifacts: highlighted code, a heading outline whose
slugs match the rendered anchors, and the metadata scope injected into the
body. The ``patterns`` console script drives batch builds.

Exports
-------
- ``app``: Cyclopts application entry for subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.
- ``DocumentCompiler``: Compile one body into a ``CompiledArtifact``.
- ``PatternPageBuilder``: Build every catalog entry to disk.

Examples
--------
>>> from pattern_pages import DocumentCompiler
>>> artifact = DocumentCompiler().compile("## Setup\\n## Setup", {})
>>> [heading.slug for heading in artifact.headings]
['setup', 'setup-2']
"""

from __future__ import annotations

from .cli import app, main
from .compiler import DocumentCompiler
from .pipeline import PatternPageBuilder

__all__ = ["DocumentCompiler", "PatternPageBuilder", "app", "main"]
