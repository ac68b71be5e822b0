"""
Typed records for the two definition kinds.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from oictl.sources.models import SourceKind, classify_locator

DOCUMENTS_KIND = "Documents"
MODEL_KIND = "Model"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", coerce_numbers_to_str=True)


class DefinitionMetadata(_Frozen):
    name: str


class SourceDescriptor(_Frozen):
    """One entry of ``spec.sources`` in a Documents definition."""
    source: str
    dir: List[str] = Field(default_factory=list)
    extensions: List[str] = Field(default_factory=list)

    @field_validator("dir", "extensions", mode="before")
    @classmethod
    def _none_is_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def locator(self) -> str:
        return self.source

    @property
    def kind(self) -> SourceKind:
        return classify_locator(self.source)


class DocumentsSpec(_Frozen):
    sources: List[SourceDescriptor] = Field(default_factory=list)

    @field_validator("sources", mode="before")
    @classmethod
    def _none_is_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class DocumentsDefinition(_Frozen):
    kind: Literal["Documents"]
    metadata: DefinitionMetadata
    spec: DocumentsSpec = Field(default_factory=DocumentsSpec)

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def sources(self) -> List[SourceDescriptor]:
        return self.spec.sources


class ModelCapabilities(_Frozen):
    vision: bool = False


class KnowledgeRef(_Frozen):
    """A knowledge entry; ``tags`` names the Documents bundle to attach."""
    tags: str


class ModelMeta(_Frozen):
    profile_image_url: str = ""
    description: str = ""
    capabilities: ModelCapabilities = Field(default_factory=ModelCapabilities)
    suggestion_prompts: List[str] = Field(default_factory=list)
    knowledge: List[KnowledgeRef] = Field(default_factory=list)

    @field_validator("suggestion_prompts", "knowledge", mode="before")
    @classmethod
    def _none_is_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class ModelSpec(_Frozen):
    id: Optional[str] = None
    name: Optional[str] = None
    base_model_id: str = ""
    meta: ModelMeta = Field(default_factory=ModelMeta)
    params: Dict[str, str] = Field(default_factory=dict)

    @field_validator("params", mode="before")
    @classmethod
    def _stringify_params(cls, value: Any) -> Any:
        if value is None:
            return {}
        if not isinstance(value, dict):
            return value
        normalized: Dict[str, Any] = {}
        for key, item in value.items():
            if isinstance(item, bool):
                normalized[str(key)] = "true" if item else "false"
            elif isinstance(item, (int, float)):
                normalized[str(key)] = str(item)
            else:
                normalized[str(key)] = item
        return normalized


class ModelDefinition(_Frozen):
    kind: Literal["Model"]
    metadata: DefinitionMetadata
    spec: ModelSpec = Field(default_factory=ModelSpec)

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def knowledge_tags(self) -> List[str]:
        return [ref.tags for ref in self.spec.meta.knowledge]


Definition = Union[DocumentsDefinition, ModelDefinition]
