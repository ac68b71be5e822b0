"""
Definition file parsing.

A definition file is a YAML document with a top-level ``kind`` selecting one
of the typed records in ``oictl.definitions.models``. Parsing is read-only:
the file is read once and each kind is tried against the same decoded data.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Union

import yaml
from pydantic import ValidationError

from oictl.core.errors import InvalidDefinitionError, UnrecognizedKindError
from oictl.definitions.models import (
    DOCUMENTS_KIND,
    MODEL_KIND,
    Definition,
    DocumentsDefinition,
    ModelDefinition,
)

logger = logging.getLogger("oictl.Definitions")

_KIND_MODELS = (
    (DOCUMENTS_KIND, DocumentsDefinition),
    (MODEL_KIND, ModelDefinition),
)


def parse_definition(data: Any, source: str = "<memory>") -> Definition:
    """Build a typed definition from already-decoded YAML data."""
    if not isinstance(data, dict):
        raise InvalidDefinitionError(source, "top level is not a mapping")

    kind = data.get("kind")
    for expected, model in _KIND_MODELS:
        if kind != expected:
            continue
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            raise InvalidDefinitionError(source, str(exc), kind=kind) from exc

    raise UnrecognizedKindError(source, kind if isinstance(kind, str) else None)


def parse_definition_file(path: Union[str, Path]) -> Definition:
    """Read and parse one definition file."""
    file_path = Path(path)
    try:
        content = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise InvalidDefinitionError(str(file_path), f"cannot read file: {exc}") from exc
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise InvalidDefinitionError(str(file_path), f"malformed YAML: {exc}") from exc

    definition = parse_definition(data, source=str(file_path))
    logger.debug("Parsed %s definition %s from %s", definition.kind, definition.name, file_path)
    return definition
