"""Cyclopts CLI entrypoint for building pattern page artifacts.

The ``patterns`` console script defined here compiles every pattern document
listed in ``config/patterns.yaml`` into a JSON artifact the site renders at
request time, lists the catalog, and prints a document's heading outline.
Typical usage involves running ``patterns build`` locally or in CI before the
site build.

Examples
--------
Build all pattern pages for the default configuration:

>>> from pattern_pages.cli import main
>>> main()  # doctest: +SKIP

Rebuild a single page into a custom directory:

>>> from pattern_pages.cli import app
>>> app(["build", "--page", "throttling", "--output-dir", "dist"])  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import sys
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from .config import load_site_config
from .errors import PatternPagesError, UnknownIdentifierError
from .pipeline import PatternPageBuilder

DEFAULT_CONFIG = Path("config/patterns.yaml")

app = App(name="patterns", config=cyclopts.config.Env("INPUT_", command=False))  # type: ignore[unknown-argument]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def _configure_logging(verbose: bool) -> None:
    """Send pipeline log records to stderr at the requested verbosity."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


@app.command(help="Compile pattern documents into JSON page artifacts.")
def build(
    *,
    page: typ.Annotated[
        str | None, Parameter(help="Pattern identifier", env_var="INPUT_PAGE")
    ] = None,
    config: typ.Annotated[
        Path, Parameter(help="Path to site config", env_var="INPUT_CONFIG")
    ] = DEFAULT_CONFIG,
    output_dir: typ.Annotated[
        Path | None,
        Parameter(help="Override the output folder", env_var="INPUT_OUTPUT_DIR"),
    ] = None,
    workers: typ.Annotated[
        int | None, Parameter(help="Number of documents built in parallel")
    ] = None,
    verbose: typ.Annotated[bool, Parameter(help="Log every pipeline stage")] = False,
) -> int:
    """Build page artifacts for the requested pattern(s).

    Parameters
    ----------
    page : str or None, optional
        Specific pattern identifier to build; when ``None`` (default) every
        buildable catalog entry is built.
    config : Path, optional
        Path to the ``patterns.yaml`` configuration file (overridable via
        ``INPUT_CONFIG``).
    output_dir : Path or None, optional
        Override for the artifact output directory.
    workers : int or None, optional
        Thread pool size used to build documents in parallel.
    verbose : bool, optional
        Enable debug logging for every pipeline stage.

    Returns
    -------
    int
        ``0`` when every document built, ``1`` otherwise.
    """
    _configure_logging(verbose)
    site_config = load_site_config(config)
    try:
        identifiers = site_config.select_identifiers(page)
    except UnknownIdentifierError as exc:
        print(f"failed {page}: {exc}", file=sys.stderr)
        return 1
    builder = PatternPageBuilder(site_config, output_dir=output_dir)
    report = builder.run(identifiers, workers=workers)
    for path in report.written:
        print(f"wrote {_format_path(path)}")
    for path in report.unchanged:
        print(f"unchanged {_format_path(path)}")
    for identifier, error in sorted(report.failures.items()):
        print(f"failed {identifier}: {error}", file=sys.stderr)
    return 0 if report.ok else 1


@app.command(name="list", help="List buildable pattern identifiers.")
def list_patterns(
    *,
    config: typ.Annotated[
        Path, Parameter(help="Path to site config", env_var="INPUT_CONFIG")
    ] = DEFAULT_CONFIG,
) -> None:
    """Print every buildable identifier with its section and title."""
    catalog = load_site_config(config).catalog
    for identifier in catalog.list_identifiers():
        entry = catalog.lookup_listing(identifier)
        print(f"{identifier}\t{entry.section or '-'}\t{entry.title}")


@app.command(help="Print the heading outline of one pattern document.")
def outline(
    identifier: str,
    *,
    config: typ.Annotated[
        Path, Parameter(help="Path to site config", env_var="INPUT_CONFIG")
    ] = DEFAULT_CONFIG,
) -> int:
    """Print ``level slug title`` for each outline heading of ``identifier``.

    Returns ``1`` after printing the error when the page cannot be built.
    """
    builder = PatternPageBuilder(load_site_config(config))
    try:
        props = builder.build_page(identifier)
    except PatternPagesError as exc:
        print(f"failed {identifier}: {exc}", file=sys.stderr)
        return 1
    for heading in props.headings:
        print(f"{heading.level} {heading.slug} {heading.title}")
    return 0


def main() -> None:
    """Invoke the Cyclopts application that powers the ``patterns`` command.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    result = app()
    if isinstance(result, int) and result:
        sys.exit(result)


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
