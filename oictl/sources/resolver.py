"""
Source resolution: turn one declared source into files ready for upload.

Three strategies, chosen from the locator string (see ``classify_locator``):

- repository: ``git clone`` into a fresh temporary directory, then collect the
  declared sub-directories (or the whole checkout) with extension filtering.
  A declared path missing from the checkout is a hard error.
- url: one GET; the body becomes a single temporary file. ``dir`` and
  ``extensions`` do not apply to fetched content.
- local: a path relative to the definition file. A missing path yields no
  files. Directories are walked with extension filtering; an explicitly named
  file is taken as-is.
"""

from __future__ import annotations

import logging
import os
import subprocess
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, List, Optional, Sequence, Union
from urllib.parse import urlparse

import requests

from oictl.core.errors import SourceResolutionError
from oictl.sources.models import ResolvedFile, ResolvedSource, SourceKind

if TYPE_CHECKING:
    from oictl.core.config import LoaderConfig
    from oictl.definitions.models import SourceDescriptor

logger = logging.getLogger("oictl.Sources")

CHECKOUT_PREFIX = "temp_git_"
FETCH_PREFIX = "temp_url_"
SKIPPED_WALK_DIRS = frozenset({".git"})
MAX_STDERR_PREVIEW = 500


def has_extension(path: str, extensions: Sequence[str]) -> bool:
    """Case-sensitive suffix test; an empty extension list accepts everything."""
    if not extensions:
        return True
    return any(path.endswith(ext) for ext in extensions)


def _raise_walk_error(exc: OSError) -> None:
    raise exc


def walk_files(
    root: Path,
    extensions: Sequence[str],
    *,
    skip_dirs: Iterable[str] = (),
) -> List[Path]:
    """Recursively list non-directory entries under ``root`` in a stable order."""
    skipped = set(skip_dirs)
    files: List[Path] = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise_walk_error):
        dirnames[:] = sorted(name for name in dirnames if name not in skipped)
        for name in sorted(filenames):
            candidate = os.path.join(dirpath, name)
            if has_extension(candidate, extensions):
                files.append(Path(candidate))
    return files


def _as_resolved(paths: Iterable[Path]) -> List[ResolvedFile]:
    return [ResolvedFile(path=path, display_name=path.name) for path in paths]


class SourceResolver:
    """Resolves ``SourceDescriptor`` entries; one instance serves a whole batch."""

    def __init__(
        self,
        *,
        work_dir: Optional[Union[str, Path]] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        git_executable: str = "git",
    ):
        self.work_dir = str(work_dir) if work_dir is not None else None
        self.timeout = timeout
        self.git_executable = git_executable
        self._owns_session = session is None
        self._session = session or requests.Session()

    @classmethod
    def from_config(
        cls,
        config: "LoaderConfig",
        session: Optional[requests.Session] = None,
    ) -> "SourceResolver":
        return cls(work_dir=config.work_dir, session=session, timeout=config.timeout)

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> "SourceResolver":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def resolve(self, descriptor: "SourceDescriptor", base_dir: Union[str, Path]) -> ResolvedSource:
        """
        Resolve one descriptor relative to ``base_dir`` (the definition file's directory).

        Raises SourceResolutionError for repository/URL failures and for local
        directories that cannot be walked. Temporary resources are already
        released when an error is raised.
        """
        kind = descriptor.kind
        if kind is SourceKind.REPOSITORY:
            return self._resolve_repository(descriptor)
        if kind is SourceKind.URL:
            return self._resolve_url(descriptor)
        if kind is SourceKind.LOCAL:
            return self._resolve_local(descriptor, Path(base_dir))
        raise ValueError(f"Unhandled source kind: {kind!r}")

    # ------------------------------------------------------------------
    # repository
    # ------------------------------------------------------------------

    def _resolve_repository(self, descriptor: "SourceDescriptor") -> ResolvedSource:
        locator = descriptor.locator
        checkout = Path(tempfile.mkdtemp(prefix=CHECKOUT_PREFIX, dir=self.work_dir))
        resolved = ResolvedSource(kind=SourceKind.REPOSITORY, locator=locator, cleanup_path=checkout)
        try:
            self._clone(locator, checkout)
            resolved.files = _as_resolved(self._collect_checkout(checkout, descriptor))
        except BaseException:
            resolved.cleanup()
            raise
        logger.info("Resolved %d file(s) from repository %s", len(resolved.files), locator)
        return resolved

    def _clone(self, locator: str, checkout: Path) -> None:
        cmd = [self.git_executable, "clone", locator, str(checkout)]
        try:
            result = subprocess.run(cmd, capture_output=True, timeout=self.timeout)
        except FileNotFoundError as exc:
            raise SourceResolutionError(
                locator, f"git executable not found: {self.git_executable}"
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise SourceResolutionError(
                locator, f"git clone timed out after {self.timeout:.0f}s"
            ) from exc

        if result.returncode != 0:
            stderr = (result.stderr or b"")[:MAX_STDERR_PREVIEW].decode("utf-8", errors="replace").strip()
            raise SourceResolutionError(
                locator, f"git clone exited with code {result.returncode}: {stderr}"
            )

    def _collect_checkout(self, checkout: Path, descriptor: "SourceDescriptor") -> List[Path]:
        files: List[Path] = []
        for subdir in descriptor.dir or [""]:
            full_path = checkout / subdir if subdir else checkout
            if not full_path.exists():
                raise SourceResolutionError(
                    descriptor.locator, f"path '{subdir}' does not exist in repository"
                )
            if full_path.is_dir():
                try:
                    files.extend(
                        walk_files(full_path, descriptor.extensions, skip_dirs=SKIPPED_WALK_DIRS)
                    )
                except OSError as exc:
                    raise SourceResolutionError(descriptor.locator, f"walk failed: {exc}") from exc
            elif full_path.is_file() and has_extension(str(full_path), descriptor.extensions):
                files.append(full_path)
        return files

    # ------------------------------------------------------------------
    # url
    # ------------------------------------------------------------------

    def _resolve_url(self, descriptor: "SourceDescriptor") -> ResolvedSource:
        locator = descriptor.locator
        if descriptor.dir or descriptor.extensions:
            logger.debug("Ignoring dir/extensions for URL source %s", locator)

        try:
            response = self._session.get(locator, timeout=self.timeout)
        except requests.RequestException as exc:
            raise SourceResolutionError(locator, f"failed to fetch URL: {exc}") from exc
        if not 200 <= response.status_code < 300:
            raise SourceResolutionError(
                locator, f"failed to fetch URL: status {response.status_code}"
            )

        suffix = Path(urlparse(locator).path).suffix
        fd, name = tempfile.mkstemp(prefix=FETCH_PREFIX, suffix=suffix, dir=self.work_dir)
        fetched = Path(name)
        resolved = ResolvedSource(kind=SourceKind.URL, locator=locator, cleanup_path=fetched)
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(response.content)
        except OSError as exc:
            resolved.cleanup()
            raise SourceResolutionError(locator, f"could not write fetched content: {exc}") from exc

        resolved.files = [ResolvedFile(path=fetched, display_name=locator)]
        return resolved

    # ------------------------------------------------------------------
    # local
    # ------------------------------------------------------------------

    def _resolve_local(self, descriptor: "SourceDescriptor", base_dir: Path) -> ResolvedSource:
        target = (base_dir / descriptor.locator).resolve()
        resolved = ResolvedSource(kind=SourceKind.LOCAL, locator=descriptor.locator)

        if not target.exists():
            logger.info("Local source %s not found at %s; skipping", descriptor.locator, target)
            return resolved

        if target.is_dir():
            try:
                resolved.files = _as_resolved(walk_files(target, descriptor.extensions))
            except OSError as exc:
                raise SourceResolutionError(descriptor.locator, f"walk failed: {exc}") from exc
        elif target.is_file():
            resolved.files = _as_resolved([target])
        return resolved
