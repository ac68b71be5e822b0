"""
Two-step document upload: binary upload, then metadata registration.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from oictl.sdk.client import DocumentServiceClient
from oictl.sdk.errors import OictlAPIError
from oictl.sources.models import ResolvedFile

logger = logging.getLogger("oictl.Upload")


@dataclass
class UploadOutcome:
    file: ResolvedFile
    collection_name: str
    filename: str
    metadata_registered: bool = True
    metadata_error: str = ""


class DocumentUploader:
    """
    Uploads resolved files under a tag.

    A rejected binary upload raises (``UploadError`` / ``OictlConnectionError``)
    and the caller moves on to the next file. A rejected metadata registration
    is only a warning: the uploaded file is kept and still counts.
    """

    def __init__(self, client: DocumentServiceClient):
        self.client = client

    def upload(self, resolved_file: ResolvedFile, tag: str) -> UploadOutcome:
        result = self.client.upload_file(resolved_file.path, resolved_file.display_name)
        outcome = UploadOutcome(
            file=resolved_file,
            collection_name=result.collection_name,
            filename=result.filename,
        )

        try:
            self.client.create_document(result, tag)
        except OictlAPIError as exc:
            logger.warning(
                "failed to create document entry for file %s: %s",
                resolved_file.path,
                exc,
            )
            outcome.metadata_registered = False
            outcome.metadata_error = str(exc)
        return outcome
