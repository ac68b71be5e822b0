"""
HTTP client for the document and model service.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

import requests
from pydantic import ValidationError

from oictl.core.config import LoaderConfig
from oictl.sdk.errors import (
    OictlAPIError,
    OictlConnectionError,
    ServiceContractError,
    UploadError,
)
from oictl.sdk.models import RemoteDocument, UploadResult

logger = logging.getLogger("oictl.SDK")

RAG_DOC_PATH = "/rag/api/v1/doc"
DOCUMENT_CREATE_PATH = "/api/v1/documents/create"
DOCUMENT_LIST_PATH = "/api/v1/documents/"
MODEL_ADD_PATH = "/api/v1/models/add"


def _normalize_base_url(base_url: str) -> str:
    value = base_url.rstrip("/")
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f"Invalid service base URL: {base_url!r}")
    return value


def _is_success(status_code: int) -> bool:
    return 200 <= status_code < 300


def _body_text(response: requests.Response) -> str:
    try:
        return response.text
    except Exception:
        return ""


def _json_or_text(response: requests.Response) -> Any:
    if not response.content:
        return {}
    try:
        return response.json()
    except ValueError:
        return response.text


def _status_line(response: requests.Response) -> str:
    reason = response.reason or ""
    return f"{response.status_code} {reason}".strip()


class DocumentServiceClient:
    """
    Synchronous client for the endpoints the loader talks to.

    Usage:
        config = LoaderConfig.from_env()
        with DocumentServiceClient(config) as client:
            documents = client.list_documents()
    """

    def __init__(
        self,
        config: LoaderConfig,
        session: Optional[requests.Session] = None,
    ):
        self.config = config
        self.base_url = _normalize_base_url(config.base_url)
        self.timeout = config.timeout
        self._owns_session = session is None
        self._session = session or requests.Session()
        self._session.headers.setdefault("Accept", "application/json")

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> "DocumentServiceClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _url(self, path: str) -> str:
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{self.base_url}{path}"

    def _send(
        self,
        method: str,
        path: str,
        *,
        headers: Dict[str, str],
        json_body: Optional[Any] = None,
        files: Optional[Dict[str, Any]] = None,
    ) -> requests.Response:
        url = self._url(path)
        try:
            return self._session.request(
                method=method,
                url=url,
                headers=headers,
                json=json_body,
                files=files,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise OictlConnectionError(
                f"Failed to connect to document service at {self.base_url}: {exc}"
            ) from exc

    def upload_file(self, file_path: Path, display_name: str) -> UploadResult:
        """Multipart-upload one file's raw bytes to the ingestion endpoint."""
        headers = {**self.config.auth_headers(), "Accept": "application/json"}
        try:
            handle = open(file_path, "rb")
        except OSError as exc:
            raise UploadError(str(file_path), body=f"cannot read file: {exc}") from exc
        with handle:
            response = self._send(
                "POST",
                RAG_DOC_PATH,
                headers=headers,
                files={"file": (display_name, handle)},
            )

        if not _is_success(response.status_code):
            raise UploadError(
                str(file_path),
                status_code=response.status_code,
                body=f"{_status_line(response)} - {_body_text(response)}",
                path=RAG_DOC_PATH,
            )

        try:
            return UploadResult.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise ServiceContractError(
                f"upload response for {file_path} lacks collection_name/filename: {exc}"
            ) from exc

    def create_document(self, upload: UploadResult, tag: str) -> Any:
        """Register metadata (name, title, tag) for an uploaded file."""
        content = json.dumps({"tags": [{"name": tag}]}, separators=(",", ":"))
        payload = {
            "collection_name": upload.collection_name,
            "filename": upload.filename,
            "name": upload.filename,
            "title": upload.filename,
            "content": content,
        }
        headers = {**self.config.auth_headers(), "Accept": "application/json"}
        response = self._send("POST", DOCUMENT_CREATE_PATH, headers=headers, json_body=payload)
        if not _is_success(response.status_code):
            raise OictlAPIError(
                f"failed to create document entry for file {upload.filename}: "
                f"{_status_line(response)} - {_body_text(response)}",
                status_code=response.status_code,
                path=DOCUMENT_CREATE_PATH,
                payload=_body_text(response),
            )
        return _json_or_text(response)

    def list_documents(self, token: Optional[str] = None) -> List[RemoteDocument]:
        """Fetch every document entry known to the service."""
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "Authorization": f"Bearer {token if token is not None else (self.config.token or '')}",
        }
        response = self._send("GET", DOCUMENT_LIST_PATH, headers=headers)
        if not _is_success(response.status_code):
            raise OictlAPIError(
                f"failed to fetch documents: {_status_line(response)} - {_body_text(response)}",
                status_code=response.status_code,
                path=DOCUMENT_LIST_PATH,
                payload=_body_text(response),
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise OictlAPIError(
                f"document listing is not valid JSON: {exc}",
                status_code=response.status_code,
                path=DOCUMENT_LIST_PATH,
            ) from exc
        if not isinstance(payload, list):
            raise OictlAPIError(
                "document listing is not a JSON array",
                status_code=response.status_code,
                path=DOCUMENT_LIST_PATH,
                payload=payload,
            )

        try:
            return [RemoteDocument.model_validate(item) for item in payload]
        except (ValueError, ValidationError) as exc:
            raise OictlAPIError(
                f"document listing has an unexpected shape: {exc}",
                status_code=response.status_code,
                path=DOCUMENT_LIST_PATH,
            ) from exc

    def add_model(self, payload: Dict[str, Any], token: str) -> Any:
        """Register a model configuration."""
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }
        response = self._send("POST", MODEL_ADD_PATH, headers=headers, json_body=payload)
        if not _is_success(response.status_code):
            raise OictlAPIError(
                f"Error processing model {payload.get('name')}: "
                f"{_status_line(response)} - {_body_text(response)}",
                status_code=response.status_code,
                path=MODEL_ADD_PATH,
                payload=_body_text(response),
            )
        logger.debug("Registered model %s", payload.get("id"))
        return _json_or_text(response)
