"""
Tag to collection resolution for model knowledge.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from oictl.core.errors import TagLookupError
from oictl.sdk.client import DocumentServiceClient
from oictl.sdk.errors import OictlAPIError, OictlConnectionError
from oictl.sdk.models import RemoteDocument

logger = logging.getLogger("oictl.Knowledge")


def index_collections_by_tag(
    documents: Iterable[RemoteDocument],
    tags: Sequence[str],
) -> Dict[str, List[str]]:
    """Map each requested tag to the collections of documents carrying that exact tag name.

    Tags that match nothing are left out of the result, as are entries without
    a collection name.
    """
    documents = list(documents)
    collections: Dict[str, List[str]] = {}
    for tag in dict.fromkeys(tags):
        for document in documents:
            if not document.collection_name:
                continue
            for name in document.tag_names:
                if name == tag:
                    collections.setdefault(tag, []).append(document.collection_name)
    return collections


def resolve_tags(
    client: DocumentServiceClient,
    tags: Sequence[str],
    *,
    token: Optional[str] = None,
) -> Dict[str, List[str]]:
    """Fetch the document listing once and resolve every tag against it."""
    try:
        documents = client.list_documents(token=token)
    except (OictlAPIError, OictlConnectionError) as exc:
        raise TagLookupError(str(exc)) from exc

    collections = index_collections_by_tag(documents, tags)
    unmatched = [tag for tag in tags if tag not in collections]
    if unmatched:
        logger.info("No collections found for tag(s): %s", ", ".join(unmatched))
    return collections


def build_knowledge_entries(
    tags: Sequence[str],
    collections: Mapping[str, List[str]],
) -> List[Dict[str, Any]]:
    """Knowledge entries for the model payload; tags without collections are omitted."""
    entries: List[Dict[str, Any]] = []
    for tag in tags:
        names = collections.get(tag) or []
        if not names:
            continue
        entries.append(
            {
                "name": tag,
                "type": "collection",
                "collection_names": list(names),
            }
        )
    return entries
