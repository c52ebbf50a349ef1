"""Helpers for nested config trees."""

from __future__ import annotations

import copy
import re
from typing import Any, Dict, List, Mapping, Optional, Sequence

_SEPARATORS = re.compile(r"[/.]")


def split_path(path: str) -> List[str]:
    """Split ``module/rules`` or ``module.rules.0`` into key segments."""

    return [segment for segment in _SEPARATORS.split(path.strip()) if segment]


def get_by_path(tree: Any, path: str) -> Optional[Any]:
    """Return the value addressed by ``path`` or ``None`` when any step is missing."""

    segments = split_path(path)
    if not segments:
        return None
    current = tree
    for segment in segments:
        if isinstance(current, Mapping):
            if segment not in current:
                return None
            current = current[segment]
        elif isinstance(current, Sequence) and not isinstance(current, (str, bytes)):
            if not segment.lstrip("-").isdigit():
                return None
            index = int(segment)
            if not -len(current) <= index < len(current):
                return None
            current = current[index]
        else:
            return None
    return current


def deep_merge(*layers: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Merge mappings left to right into a new dict; later layers win.

    Nested mappings merge recursively, every other value (lists included)
    is replaced. Inputs are never modified.
    """

    merged: Dict[str, Any] = {}
    for layer in layers:
        if not layer:
            continue
        for key, value in layer.items():
            existing = merged.get(key)
            if isinstance(existing, Mapping) and isinstance(value, Mapping):
                merged[key] = deep_merge(existing, value)
            elif isinstance(value, Mapping):
                merged[key] = deep_merge(value)
            else:
                merged[key] = copy.deepcopy(value)
    return merged


__all__ = ["deep_merge", "get_by_path", "split_path"]
