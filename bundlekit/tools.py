"""Filesystem and process helpers behind ``clean``, ``open``, ``kill`` and ``init``."""

from __future__ import annotations

import logging
import os
import shutil
import signal
import subprocess
import sys
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

import yaml

from .defaults import DEFAULTS, CliDefaults

logger = logging.getLogger(__name__)

FRAMEWORK_SCAFFOLDS = {
    "vue": {"entry": {"app": "src/app.js"}, "type": ["client"]},
    "react": {"entry": {"app": "src/index.jsx"}, "type": ["client"]},
    "weex": {"entry": {"app": "src/app.js"}, "type": ["web", "weex"]},
}


def rm(path: Union[str, Path]) -> bool:
    """Remove a file or directory tree; returns False when nothing existed."""

    target = Path(path)
    if target.is_dir() and not target.is_symlink():
        shutil.rmtree(target)
    elif target.exists() or target.is_symlink():
        target.unlink()
    else:
        return False
    logger.info("Removed %s", target)
    return True


def compile_temp_dir(base_dir: Path, defaults: CliDefaults = DEFAULTS) -> Path:
    return base_dir / defaults.temp_dir


def clean(base_dir: Path, what: Optional[str] = None, *, defaults: CliDefaults = DEFAULTS) -> List[Path]:
    """Clean the compile cache; ``all`` also removes the manifest and build dir.

    Any other value is treated as a path to remove.
    """

    if what == "all":
        candidates = [
            compile_temp_dir(base_dir, defaults),
            base_dir / defaults.manifest_file,
            base_dir / defaults.build_dir,
        ]
    elif what:
        candidates = [Path(what) if Path(what).is_absolute() else base_dir / what]
    else:
        candidates = [compile_temp_dir(base_dir, defaults)]
    return [path for path in candidates if rm(path)]


def open_path(path: Union[str, Path]) -> None:
    """Open ``path`` in the platform file browser."""

    target = str(path)
    if sys.platform.startswith("win"):
        os.startfile(target)  # type: ignore[attr-defined]
        return
    opener = "open" if sys.platform == "darwin" else "xdg-open"
    subprocess.run([opener, target], check=False)


def parse_ports(value: Union[str, int, None], defaults: CliDefaults = DEFAULTS) -> List[int]:
    if value is None or value == "":
        return list(defaults.kill_ports)
    ports: List[int] = []
    for item in str(value).split(","):
        item = item.strip()
        if item.isdigit():
            ports.append(int(item))
        elif item:
            logger.warning("Ignoring invalid port '%s'", item)
    return ports


def kill_ports(ports: Sequence[int]) -> List[int]:
    """Kill processes listening on ``ports``; returns the killed pids."""

    lsof = shutil.which("lsof")
    if lsof is None:
        logger.warning("lsof not found; cannot look up processes by port.")
        return []
    killed: List[int] = []
    for port in ports:
        proc = subprocess.run(
            [lsof, "-t", f"-iTCP:{port}", "-sTCP:LISTEN"],
            check=False,
            capture_output=True,
            text=True,
        )
        for pid in _parse_pids(proc.stdout.splitlines()):
            try:
                os.kill(pid, signal.SIGKILL)
            except ProcessLookupError:
                continue
            logger.info("Killed process %s on port %s", pid, port)
            killed.append(pid)
    return killed


def scaffold_config(
    base_dir: Path,
    *,
    framework: Optional[str] = None,
    registry: Optional[str] = None,
    defaults: CliDefaults = DEFAULTS,
) -> List[Path]:
    """Write a starter config file (and ``.npmrc`` for a registry); keeps existing files."""

    written: List[Path] = []
    config_path = base_dir / defaults.config_filenames[0]
    if config_path.exists():
        logger.info("%s already exists; leaving it untouched.", config_path)
    else:
        payload = {"framework": framework} if framework else {}
        payload.update(FRAMEWORK_SCAFFOLDS.get(framework or "", {"entry": {"app": "src/index.js"}}))
        payload["env"] = {"dev": {"devtool": "eval-source-map"}, "prod": {}}
        config_path.write_text(yaml.safe_dump(payload, sort_keys=False), encoding="utf-8")
        written.append(config_path)

    if registry:
        npmrc = base_dir / ".npmrc"
        npmrc.write_text(f"registry={registry}\n", encoding="utf-8")
        written.append(npmrc)
    return written


def _parse_pids(lines: Iterable[str]) -> List[int]:
    return [int(line.strip()) for line in lines if line.strip().isdigit()]


__all__ = [
    "clean",
    "compile_temp_dir",
    "kill_ports",
    "open_path",
    "parse_ports",
    "rm",
    "scaffold_config",
]
