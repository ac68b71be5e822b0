"""
Wire models for the document service responses the loader consumes.
"""

from __future__ import annotations

import json
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class UploadResult(BaseModel):
    """What the binary upload step hands to metadata registration."""
    model_config = ConfigDict(extra="ignore")

    collection_name: str
    filename: str


class DocumentTag(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str


class DocumentContent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    tags: List[DocumentTag] = Field(default_factory=list)


class RemoteDocument(BaseModel):
    """Read-only view of a document entry returned by the listing endpoint."""
    model_config = ConfigDict(extra="ignore")

    collection_name: Optional[str] = None
    content: DocumentContent = Field(default_factory=DocumentContent)

    @field_validator("content", mode="before")
    @classmethod
    def _decode_content(cls, value: Any) -> Any:
        # The loader registers content as a JSON string; some servers echo it back verbatim.
        if value is None:
            return {}
        if isinstance(value, str):
            if not value.strip():
                return {}
            return json.loads(value)
        return value

    @property
    def tag_names(self) -> List[str]:
        return [tag.name for tag in self.content.tags]
