"""
oictl SDK exceptions.
"""

from __future__ import annotations

from typing import Any, Optional

from oictl.core.errors import OictlError


class OictlConnectionError(OictlError):
    """Raised when the SDK cannot reach the document service."""


class OictlAPIError(OictlError):
    """Raised when the service returns a non-2xx response."""

    def __init__(
        self,
        detail: str,
        *,
        status_code: Optional[int] = None,
        path: Optional[str] = None,
        payload: Optional[Any] = None,
    ) -> None:
        self.status_code = status_code
        self.path = path
        self.payload = payload
        status_hint = f" (status={status_code})" if status_code is not None else ""
        path_hint = f" [{path}]" if path else ""
        super().__init__(f"{detail}{status_hint}{path_hint}")


class UploadError(OictlAPIError):
    """Raised when a single file cannot be read or its binary upload is rejected."""

    def __init__(
        self,
        file_path: str,
        *,
        body: str,
        status_code: Optional[int] = None,
        path: Optional[str] = None,
    ) -> None:
        self.file_path = file_path
        self.body = body
        super().__init__(
            f"failed to upload file {file_path}: {body}",
            status_code=status_code,
            path=path,
            payload=body,
        )


class ServiceContractError(ValueError):
    """
    Raised when a successful response lacks fields the service always sends.

    Not an ``OictlError``: the service is trusted, so this signals a broken
    deployment rather than a per-file condition and is left to stop the run.
    """
