"""Exception types raised by the pattern page content pipeline.

Caller input problems (a missing document, a bad identifier, malformed front
matter) surface as-is. Failures inside the pipeline stages are wrapped in
:class:`CompilationError`, which records the document identifier and the stage
that failed so a batch build can point at the broken page.
"""

from __future__ import annotations


class PatternPagesError(Exception):
    """Base class for every error raised by pattern_pages."""


class SiteConfigError(PatternPagesError, ValueError):
    """Raised when the site configuration is invalid or incomplete."""


class InvalidIdentifierError(PatternPagesError, ValueError):
    """Raised when a content identifier is empty or escapes the content root."""

    def __init__(self, identifier: str) -> None:
        self.identifier = identifier
        super().__init__(f"Invalid content identifier {identifier!r}.")


class ContentNotFoundError(PatternPagesError, FileNotFoundError):
    """Raised when no document backs the requested identifier."""

    def __init__(self, identifier: str, path: str) -> None:
        self.identifier = identifier
        self.path = path
        super().__init__(f"No content found for '{identifier}' (looked in {path}).")


class UnknownIdentifierError(PatternPagesError, KeyError):
    """Raised when the catalog has no listing for an identifier."""

    def __init__(self, identifier: str, known: tuple[str, ...]) -> None:
        self.identifier = identifier
        self.known = known
        available = ", ".join(known) or "<none>"
        super().__init__(f"Unknown pattern '{identifier}'. Known patterns: {available}")

    def __str__(self) -> str:
        return str(self.args[0])


class MalformedFrontMatterError(PatternPagesError, ValueError):
    """Raised when a front-matter block cannot be parsed into flat metadata.

    Attributes
    ----------
    reason : str
        Human readable description of the problem.
    line_number : int or None
        1-based line number within the raw document, when known.
    line : str or None
        Text of the offending line, when known.
    """

    def __init__(
        self, reason: str, *, line_number: int | None = None, line: str | None = None
    ) -> None:
        self.reason = reason
        self.line_number = line_number
        self.line = line
        location = ""
        if line_number is not None:
            location = f" (line {line_number}: {line!r})"
        super().__init__(f"Malformed front matter: {reason}{location}")


class CompilationError(PatternPagesError, RuntimeError):
    """Wrap the first failure raised by an internal compilation stage."""

    def __init__(self, identifier: str | None, stage: str, cause: BaseException) -> None:
        self.identifier = identifier
        self.stage = stage
        self.cause = cause
        subject = identifier or "<anonymous>"
        super().__init__(f"Failed to compile '{subject}' during {stage}: {cause}")


__all__ = [
    "CompilationError",
    "ContentNotFoundError",
    "InvalidIdentifierError",
    "MalformedFrontMatterError",
    "PatternPagesError",
    "SiteConfigError",
    "UnknownIdentifierError",
]
