"""
Batch loader: drives definition files through parsing, source resolution,
upload and model registration.

Each file ends in one of three states (see ``FileStatus``). Recoverable
errors are caught here per file, per source or per uploaded file and the
batch keeps going; anything that is not an ``OictlError`` propagates.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from oictl.core.config import LoaderConfig
from oictl.core.errors import OictlError, SourceResolutionError, UnrecognizedKindError
from oictl.definitions.models import DocumentsDefinition, ModelDefinition
from oictl.definitions.parser import parse_definition_file
from oictl.knowledge import build_knowledge_entries, resolve_tags
from oictl.sdk.client import DocumentServiceClient
from oictl.sources.resolver import SourceResolver
from oictl.upload import DocumentUploader

logger = logging.getLogger("oictl.Loader")

DOCUMENTS_COUNTER = "documents"
MODELS_COUNTER = "models"

ProgressCallback = Callable[[str, int], None]
NoticeCallback = Callable[[str], None]


class FileStatus(str, Enum):
    SUCCESS = "success"
    SKIPPED_UNRECOGNIZED_KIND = "skipped_unrecognized_kind"
    FAILED_HARD = "failed_hard"


@dataclass
class FileOutcome:
    path: str
    status: FileStatus = FileStatus.SUCCESS
    kind: str = ""
    name: str = ""
    documents_uploaded: int = 0
    upload_failures: int = 0
    errors: List[str] = field(default_factory=list)


@dataclass
class LoadReport:
    documents_loaded: int = 0
    models_loaded: int = 0
    files: List[FileOutcome] = field(default_factory=list)

    def count(self, status: FileStatus) -> int:
        return sum(1 for outcome in self.files if outcome.status is status)


def build_model_payload(
    definition: ModelDefinition,
    knowledge: List[Dict[str, Any]],
) -> Dict[str, Any]:
    """Model registration body; id and name both come from ``metadata.name``."""
    spec = definition.spec
    meta = spec.meta
    return {
        "id": definition.name,
        "name": definition.name,
        "base_model_id": spec.base_model_id,
        "meta": {
            "profile_image_url": meta.profile_image_url,
            "description": meta.description,
            "capabilities": {
                "vision": meta.capabilities.vision,
            },
            "suggestion_prompts": list(meta.suggestion_prompts),
            "knowledge": knowledge,
        },
        "params": dict(spec.params),
    }


class DefinitionLoader:
    """Sequentially loads definition files against one document service."""

    def __init__(
        self,
        config: LoaderConfig,
        *,
        client: Optional[DocumentServiceClient] = None,
        resolver: Optional[SourceResolver] = None,
        progress: Optional[ProgressCallback] = None,
        on_notice: Optional[NoticeCallback] = None,
    ):
        self.config = config
        self._owns_client = client is None
        self._owns_resolver = resolver is None
        self.client = client or DocumentServiceClient(config)
        self.resolver = resolver or SourceResolver.from_config(config)
        self.uploader = DocumentUploader(self.client)
        self.progress = progress
        self.on_notice = on_notice

    def close(self) -> None:
        if self._owns_client:
            self.client.close()
        if self._owns_resolver:
            self.resolver.close()

    def __enter__(self) -> "DefinitionLoader":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _notify(self, counter: str, value: int) -> None:
        if self.progress is not None:
            self.progress(counter, value)

    def _announce(self, level: int, message: str) -> None:
        """Per-item messages go to ``on_notice`` when set, otherwise to the log."""
        if self.on_notice is not None:
            logger.debug(message)
            self.on_notice(message)
        else:
            logger.log(level, message)

    def load(self, paths: Iterable[Union[str, Path]]) -> LoadReport:
        report = LoadReport()
        for path in paths:
            report.files.append(self.load_file(Path(path), report))

        logger.info(
            "Batch finished: %d document(s), %d model(s), %d skipped, %d failed",
            report.documents_loaded,
            report.models_loaded,
            report.count(FileStatus.SKIPPED_UNRECOGNIZED_KIND),
            report.count(FileStatus.FAILED_HARD),
        )
        return report

    def load_file(self, path: Path, report: LoadReport) -> FileOutcome:
        outcome = FileOutcome(path=str(path))
        try:
            definition = parse_definition_file(path)
        except UnrecognizedKindError as exc:
            self._announce(logging.WARNING, f"Skipped due to unknown kind in file {path}")
            logger.debug("Parse failure for %s: %s", path, exc)
            outcome.status = FileStatus.SKIPPED_UNRECOGNIZED_KIND
            outcome.errors.append(str(exc))
            return outcome

        outcome.kind = definition.kind
        outcome.name = definition.name
        if isinstance(definition, DocumentsDefinition):
            self._load_documents(definition, path, outcome, report)
        elif isinstance(definition, ModelDefinition):
            self._load_model(definition, path, outcome, report)
        else:
            raise TypeError(f"Unhandled definition type: {type(definition).__name__}")
        return outcome

    def _load_documents(
        self,
        definition: DocumentsDefinition,
        path: Path,
        outcome: FileOutcome,
        report: LoadReport,
    ) -> None:
        tag = definition.name
        base_dir = path.parent
        for descriptor in definition.sources:
            try:
                resolved = self.resolver.resolve(descriptor, base_dir)
            except SourceResolutionError as exc:
                self._announce(logging.ERROR, f"Aborting {path}: {exc}")
                outcome.status = FileStatus.FAILED_HARD
                outcome.errors.append(str(exc))
                return

            with resolved:
                for resolved_file in resolved.files:
                    try:
                        self.uploader.upload(resolved_file, tag)
                    except OictlError as exc:
                        self._announce(
                            logging.ERROR, f"Error uploading document {resolved_file.path}: {exc}"
                        )
                        outcome.upload_failures += 1
                        outcome.errors.append(str(exc))
                        continue
                    outcome.documents_uploaded += 1
                    report.documents_loaded += 1
                    self._notify(DOCUMENTS_COUNTER, report.documents_loaded)

    def _load_model(
        self,
        definition: ModelDefinition,
        path: Path,
        outcome: FileOutcome,
        report: LoadReport,
    ) -> None:
        try:
            token = self.config.require_token()
            tags = definition.knowledge_tags
            collections = resolve_tags(self.client, tags, token=token)
            knowledge = build_knowledge_entries(tags, collections)
            self.client.add_model(build_model_payload(definition, knowledge), token)
        except OictlError as exc:
            self._announce(logging.ERROR, f"Error processing model {path}: {exc}")
            outcome.status = FileStatus.FAILED_HARD
            outcome.errors.append(str(exc))
            return

        report.models_loaded += 1
        self._notify(MODELS_COUNTER, report.models_loaded)
