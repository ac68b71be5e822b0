"""
Data models for source resolution.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger("oictl.Sources")

REPOSITORY_PREFIX = "git@"
REPOSITORY_SUFFIX = ".git"
URL_PREFIXES = ("http://", "https://")


class SourceKind(str, Enum):
    REPOSITORY = "repository"
    URL = "url"
    LOCAL = "local"


def classify_locator(locator: str) -> SourceKind:
    """Pick the resolution strategy from the locator string alone (first match wins)."""
    if locator.startswith(REPOSITORY_PREFIX) or locator.endswith(REPOSITORY_SUFFIX):
        return SourceKind.REPOSITORY
    if locator.startswith(URL_PREFIXES):
        return SourceKind.URL
    return SourceKind.LOCAL


@dataclass(frozen=True)
class ResolvedFile:
    path: Path
    display_name: str


@dataclass
class ResolvedSource:
    """
    Files produced by one source descriptor.

    ``cleanup_path`` is a temporary checkout directory or fetched file owned by
    this object; use it as a context manager so the path is removed once every
    derived file has been handled, whatever the outcome.
    """
    kind: SourceKind
    locator: str
    files: List[ResolvedFile] = field(default_factory=list)
    cleanup_path: Optional[Path] = None

    def cleanup(self) -> bool:
        """Remove the temporary resource. Returns False if removal failed."""
        path = self.cleanup_path
        if path is None:
            return True
        self.cleanup_path = None
        removed = remove_path(path)
        if removed:
            logger.info("Temporary path removed: %s", path)
        else:
            logger.warning("Failed to remove temporary path: %s", path)
        return removed

    def __enter__(self) -> "ResolvedSource":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup()


def remove_path(path: Path) -> bool:
    if not path.exists():
        return True
    try:
        if path.is_dir():
            shutil.rmtree(path)
        else:
            path.unlink()
        return True
    except OSError as exc:
        logger.debug("Removal of %s failed: %s", path, exc)
        return False
