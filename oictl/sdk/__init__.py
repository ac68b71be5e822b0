"""
oictl SDK public exports.
"""

from oictl.sdk.client import DocumentServiceClient
from oictl.sdk.errors import (
    OictlAPIError,
    OictlConnectionError,
    ServiceContractError,
    UploadError,
)
from oictl.sdk.models import RemoteDocument, UploadResult

__all__ = [
    "DocumentServiceClient",
    "OictlConnectionError",
    "OictlAPIError",
    "UploadError",
    "ServiceContractError",
    "RemoteDocument",
    "UploadResult",
]
