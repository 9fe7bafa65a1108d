"""High-level orchestration for building pattern page artifacts.

This module ties the catalog, loader, splitter, and compiler together. It
exposes :class:`PatternPageBuilder`, which builds one
:class:`~pattern_pages.artifact.PageProps` per catalog identifier and writes it
to ``<output_dir>/<identifier>.json`` for the rendering layer.

Every document is built independently: the builder fans identifiers out over a
thread pool, and a failure aborts only the document that raised it. A page is
written only after its whole pipeline succeeded, through a temporary file that
replaces the artifact in one step. When a document fails, the artifact from
its previous build is removed, so a broken document never leaves a partial or
stale artifact behind.

Example
-------
>>> from pathlib import Path
>>> from pattern_pages.config import load_site_config
>>> from pattern_pages.pipeline import PatternPageBuilder
>>> site = load_site_config(Path("config/patterns.yaml"))  # doctest: +SKIP
>>> report = PatternPageBuilder(site).run()  # doctest: +SKIP
>>> report.ok  # doctest: +SKIP
True
"""

from __future__ import annotations

import dataclasses as dc
import logging
import tempfile
import typing as typ
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path

from ._constants import ARTIFACT_TEMPLATE
from .artifact import PageProps, encode_artifact
from .compiler import DocumentCompiler
from .highlighter import CodeHighlighter
from .loader import ContentLoader, validate_identifier

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .config import SiteConfig

logger = logging.getLogger(__name__)


def _atomic_write(path: Path, payload: bytes) -> None:
    """Replace ``path`` with ``payload`` through a temporary sibling file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="wb", dir=path.parent, prefix=f".{path.name}.", delete=False
        ) as handle:
            tmp_path = Path(handle.name)
            handle.write(payload)
        tmp_path.replace(path)
    except BaseException:
        if tmp_path is not None:
            tmp_path.unlink(missing_ok=True)
        raise


@dc.dataclass(slots=True)
class BuildReport:
    """Outcome of a batch build.

    Attributes
    ----------
    written : list[Path]
        Artifact files created or rewritten, in catalog order.
    unchanged : list[Path]
        Artifact files whose bytes already matched the new build.
    failures : dict[str, Exception]
        Errors keyed by the identifier whose build they aborted.
    """

    written: list[Path] = dc.field(default_factory=list)
    unchanged: list[Path] = dc.field(default_factory=list)
    failures: dict[str, Exception] = dc.field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Return True when every document built successfully."""
        return not self.failures


class PatternPageBuilder:
    """Build serialized page props for every pattern in the catalog."""

    def __init__(
        self,
        site_config: SiteConfig,
        *,
        loader: ContentLoader | None = None,
        compiler: DocumentCompiler | None = None,
        output_dir: Path | None = None,
    ) -> None:
        """Initialize the builder.

        Parameters
        ----------
        site_config : SiteConfig
            Parsed configuration carrying the catalog, build defaults, and page
            meta.
        loader : ContentLoader, optional
            Loader for raw documents; defaults to one rooted at the configured
            content directory.
        compiler : DocumentCompiler, optional
            Compiler for document bodies; defaults to one using the configured
            Pygments style and outline levels.
        output_dir : Path, optional
            Override for the artifact output directory.
        """
        defaults = site_config.defaults
        self.site_config = site_config
        self.catalog = site_config.catalog
        self.loader = loader or ContentLoader(
            defaults.content_dir, suffix=defaults.suffix
        )
        self.compiler = compiler or DocumentCompiler(
            CodeHighlighter(defaults.pygments_style),
            outline_levels=defaults.outline_levels,
        )
        self.output_dir = output_dir or defaults.output_dir

    def build_page(self, identifier: str) -> PageProps:
        """Build the page props for one catalog identifier.

        Raises
        ------
        UnknownIdentifierError
            If the catalog does not list ``identifier``.
        ContentNotFoundError
            If no document backs ``identifier``.
        MalformedFrontMatterError
            If the document's front matter cannot be parsed.
        CompilationError
            If a compilation stage fails.
        """
        listing = self.catalog.lookup_listing(identifier)
        document = self.loader.read(identifier)
        artifact = self.compiler.compile(
            document.body, document.metadata, identifier=identifier
        )
        return PageProps(
            identifier=identifier,
            title=listing.title,
            subtitle=listing.subtitle,
            tags=listing.tags,
            section=listing.section,
            headings=artifact.headings,
            compiled_source=artifact.compiled_source,
            scope=artifact.scope,
            checksum=artifact.checksum,
            meta=self.site_config.meta,
        )

    def artifact_path(self, identifier: str) -> Path:
        """Return where the artifact for ``identifier`` is written."""
        name = ARTIFACT_TEMPLATE.format(identifier=validate_identifier(identifier))
        return self.output_dir / name

    def write_page(self, identifier: str) -> tuple[Path, bool]:
        """Build and persist one page, returning its path and whether it changed.

        When the build fails, an artifact left by an earlier build of a catalog
        entry is removed so the site never serves stale content.
        """
        path = self.artifact_path(identifier)
        try:
            payload = encode_artifact(self.build_page(identifier))
        except Exception:
            if identifier in self.catalog and path.exists():
                path.unlink()
                logger.info("removed stale %s", path)
            raise
        if path.exists() and path.read_bytes() == payload:
            logger.debug("unchanged %s", path)
            return path, False
        _atomic_write(path, payload)
        logger.info("wrote %s", path)
        return path, True

    def run(
        self,
        identifiers: cabc.Iterable[str] | None = None,
        *,
        workers: int | None = None,
    ) -> BuildReport:
        """Build every requested identifier, isolating failures per document.

        Parameters
        ----------
        identifiers : Iterable[str], optional
            Identifiers to build; defaults to every buildable catalog entry.
        workers : int, optional
            Thread pool size; ``None`` lets the executor choose.

        Returns
        -------
        BuildReport
            Written and unchanged paths plus failures keyed by identifier.
        """
        selected = tuple(
            self.catalog.list_identifiers() if identifiers is None else identifiers
        )
        self.output_dir.mkdir(parents=True, exist_ok=True)
        report = BuildReport()
        outcomes: dict[str, tuple[Path, bool]] = {}
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {
                executor.submit(self.write_page, identifier): identifier
                for identifier in selected
            }
            for future in as_completed(futures):
                identifier = futures[future]
                try:
                    outcomes[identifier] = future.result()
                except Exception as exc:  # noqa: BLE001 - recorded per document
                    logger.warning("failed to build %s: %s", identifier, exc)
                    report.failures[identifier] = exc
        for identifier in selected:
            if identifier not in outcomes:
                continue
            path, changed = outcomes[identifier]
            (report.written if changed else report.unchanged).append(path)
        return report


__all__ = ["BuildReport", "PatternPageBuilder"]
