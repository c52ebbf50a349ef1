"""Shared helpers used by archive tooling."""

from __future__ import annotations

import hashlib
import os
from pathlib import Path
from typing import List, Optional


def compute_sha256(path: Path) -> str:
    """Return the SHA-256 checksum for a file."""

    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(1024 * 1024), b""):
            digest.update(chunk)
    return digest.hexdigest()


def collect_entries(root: Path, *, exclude: Optional[Path] = None, follow_links: bool = False) -> List[Path]:
    """Every file and directory under ``root`` in stable relative order.

    ``exclude`` and everything below it is skipped. With ``follow_links``
    directory symlinks that resolve inside ``root`` are walked as if they were
    real directories; links back to one of their own ancestors are not.
    """

    root_real = os.path.realpath(root)
    entries: List[Path] = []
    for dirpath, dirnames, filenames in os.walk(root, followlinks=follow_links):
        current = Path(dirpath)
        current_real = os.path.realpath(current)
        descend: List[str] = []
        for name in dirnames:
            path = current / name
            if _excluded(path, exclude):
                continue
            entries.append(path)
            if follow_links and path.is_symlink():
                target = os.path.realpath(path)
                if not _is_within(target, root_real) or _is_within(current_real, target):
                    continue
            descend.append(name)
        dirnames[:] = descend
        entries.extend(current / name for name in filenames if not _excluded(current / name, exclude))
    return sorted(entries, key=lambda item: item.relative_to(root).as_posix())


def _excluded(path: Path, exclude: Optional[Path]) -> bool:
    return exclude is not None and (path == exclude or exclude in path.parents)


def _is_within(path: str, directory: str) -> bool:
    return path == directory or path.startswith(directory.rstrip(os.sep) + os.sep)
