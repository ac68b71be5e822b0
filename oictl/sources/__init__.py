"""
Source resolution package.
"""

from oictl.sources.models import ResolvedFile, ResolvedSource, SourceKind, classify_locator
from oictl.sources.resolver import SourceResolver, has_extension, walk_files

__all__ = [
    "SourceKind",
    "ResolvedFile",
    "ResolvedSource",
    "SourceResolver",
    "classify_locator",
    "has_extension",
    "walk_files",
]
