"""
Definition file models, parsing and discovery.
"""

from oictl.definitions.discovery import expand_definition_paths, list_definition_files
from oictl.definitions.models import (
    Definition,
    DocumentsDefinition,
    KnowledgeRef,
    ModelDefinition,
    SourceDescriptor,
)
from oictl.definitions.parser import parse_definition, parse_definition_file

__all__ = [
    "Definition",
    "DocumentsDefinition",
    "ModelDefinition",
    "SourceDescriptor",
    "KnowledgeRef",
    "parse_definition",
    "parse_definition_file",
    "list_definition_files",
    "expand_definition_paths",
]
