"""Custom exceptions for templar."""


class TemplarError(Exception):
    """Base exception for templar operations."""


class ParseError(TemplarError):
    """Error while scanning the source document."""


class MalformedSourceError(ParseError):
    """Source document has unbalanced fences or unpaired section markers."""

    def __init__(self, message: str, *, line: int | None = None) -> None:
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)
        self.line = line


class VersionError(TemplarError, ValueError):
    """Error in the set of versions requested for materialization."""


class UnknownVersionError(VersionError):
    """A requested version does not appear anywhere in the document."""


class ReservedVersionError(VersionError):
    """A reserved version name was requested as a standalone variant."""


class RenderError(TemplarError):
    """Error while rendering a derived document."""
