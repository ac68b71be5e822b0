"""
Expansion of a CLI path into the definition files to load.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Union

DEFINITION_SUFFIXES = (".yaml", ".yml")


def list_definition_files(directory: Union[str, Path]) -> List[Path]:
    """Return the immediate ``*.yaml``/``*.yml`` children of ``directory``, sorted by name.

    Listing errors propagate: an unreadable directory stops the whole run.
    """
    root = Path(directory)
    return [
        root / entry.name
        for entry in sorted(root.iterdir(), key=lambda item: item.name)
        if entry.name.endswith(DEFINITION_SUFFIXES)
    ]


def expand_definition_paths(path: Union[str, Path]) -> List[Path]:
    """A directory expands to its definition files; anything else is taken as one file."""
    resolved = Path(path).expanduser().resolve()
    if resolved.is_dir():
        return list_definition_files(resolved)
    return [resolved]
