"""
oictl error taxonomy.

Everything the batch loader is expected to recover from derives from
``OictlError``; the loader catches these per file or per source and keeps
going. Anything else escapes and stops the run.
"""

from __future__ import annotations

from typing import Optional


class OictlError(RuntimeError):
    """Base class for recoverable loader errors."""


class UnrecognizedKindError(OictlError):
    """Raised when a definition file declares neither ``Documents`` nor ``Model``."""

    def __init__(self, path: str, kind: Optional[str] = None) -> None:
        self.path = path
        self.kind = kind
        kind_hint = f" (kind={kind!r})" if kind else ""
        super().__init__(f"unknown kind in file {path}{kind_hint}")


class InvalidDefinitionError(UnrecognizedKindError):
    """Raised when a definition file cannot be decoded into a typed record."""

    def __init__(self, path: str, detail: str, kind: Optional[str] = None) -> None:
        super().__init__(path, kind)
        self.detail = detail
        self.args = (f"invalid definition in file {path}: {detail}",)


class SourceResolutionError(OictlError):
    """Raised when a repository or URL source cannot be turned into files."""

    def __init__(self, locator: str, detail: str) -> None:
        self.locator = locator
        self.detail = detail
        super().__init__(f"failed to resolve source {locator}: {detail}")


class TagLookupError(OictlError):
    """Raised when the document listing backing tag resolution is unavailable."""


class MissingTokenError(OictlError):
    """Raised when model registration is attempted without OI_TOKEN."""
