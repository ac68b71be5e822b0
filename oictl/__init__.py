"""
oictl: declarative loader for knowledge documents and model configurations.
"""

from oictl.core.config import LoaderConfig
from oictl.core.errors import (
    InvalidDefinitionError,
    MissingTokenError,
    OictlError,
    SourceResolutionError,
    TagLookupError,
    UnrecognizedKindError,
)
from oictl.loader import DefinitionLoader, FileOutcome, FileStatus, LoadReport
from oictl.sdk import DocumentServiceClient, OictlAPIError, OictlConnectionError, UploadError
from oictl.version import __version__

__all__ = [
    "__version__",
    "LoaderConfig",
    "DefinitionLoader",
    "LoadReport",
    "FileOutcome",
    "FileStatus",
    "DocumentServiceClient",
    "OictlError",
    "OictlConnectionError",
    "OictlAPIError",
    "UploadError",
    "UnrecognizedKindError",
    "InvalidDefinitionError",
    "SourceResolutionError",
    "TagLookupError",
    "MissingTokenError",
]
