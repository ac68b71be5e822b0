"""
oictl Configuration
-------------------
Process-wide settings for the loader: where the document service lives and
which bearer token to forward. Built once at startup (normally from the
environment) and passed explicitly to every component.
"""

import os
import logging
import tempfile
from typing import Dict, Optional
from pydantic import BaseModel, ConfigDict

from oictl.core.errors import MissingTokenError

logger = logging.getLogger("oictl.Config")

DEFAULT_BASE_URL = "http://localhost:8081"
DEFAULT_LOG_LEVEL = "WARNING"


def _parse_optional_float_env(name: str) -> Optional[float]:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        value = float(raw)
        if value <= 0:
            raise ValueError
        return value
    except ValueError:
        logger.warning(
            "Invalid %s value '%s'; expected positive float. Ignoring.",
            name,
            raw,
        )
        return None


class LoaderConfig(BaseModel):
    """Root configuration for a loader run."""
    model_config = ConfigDict(frozen=True)

    base_url: str = DEFAULT_BASE_URL
    token: Optional[str] = None
    # None blocks until the server answers, matching a plain HTTP client.
    timeout: Optional[float] = None
    # Parent directory for temporary checkouts and fetched files.
    work_dir: str = tempfile.gettempdir()
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls) -> "LoaderConfig":
        """
        Load configuration from environment variables.

        - OI_TOKEN: bearer token forwarded to the document service
        - OI_BASE_URL: service base URL (default http://localhost:8081)
        - OI_TIMEOUT: optional per-request timeout in seconds
        - OICTL_WORK_DIR: parent directory for temporary checkouts
        - OICTL_LOG_LEVEL: logging level name (default WARNING)
        """
        token = os.environ.get("OI_TOKEN", "").strip()
        base_url = os.environ.get("OI_BASE_URL", "").strip() or DEFAULT_BASE_URL
        return cls(
            base_url=base_url.rstrip("/"),
            token=token or None,
            timeout=_parse_optional_float_env("OI_TIMEOUT"),
            work_dir=os.environ.get("OICTL_WORK_DIR", "").strip() or tempfile.gettempdir(),
            log_level=os.environ.get("OICTL_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper()
            or DEFAULT_LOG_LEVEL,
        )

    def require_token(self) -> str:
        if not self.token:
            raise MissingTokenError("OI_TOKEN environment variable is not set")
        return self.token

    def auth_headers(self) -> Dict[str, str]:
        # Document calls go out even with an empty token; the server decides.
        return {"Authorization": f"Bearer {self.token or ''}"}
