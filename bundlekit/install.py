"""Package manager invocation used by install checks and archive packaging."""

from __future__ import annotations

import json
import logging
import shutil
import subprocess
from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Sequence

from .errors import InstallFailure

logger = logging.getLogger(__name__)


class PackageInstaller:
    """Runs ``npm``-style package managers as subprocesses."""

    def install(
        self,
        package_manager: str,
        registry: Optional[str] = None,
        cwd: Optional[Path] = None,
        *,
        packages: Optional[Sequence[str]] = None,
        production: bool = False,
        dev: bool = False,
    ) -> None:
        """Install ``packages`` (or the whole manifest) in ``cwd``."""

        cmd = build_install_command(
            package_manager,
            registry=registry,
            packages=packages,
            production=production,
            dev=dev,
        )
        self._run(cmd, cwd=cwd)

    def upgrade(self, package_manager: str, cwd: Optional[Path] = None) -> None:
        """Update installed packages to the newest versions the manifest allows."""

        self._run([package_manager, "upgrade" if package_manager == "yarn" else "update"], cwd=cwd)

    def _run(self, cmd: List[str], *, cwd: Optional[Path]) -> None:
        executable = shutil.which(cmd[0])
        if executable is None:
            raise InstallFailure(f"Package manager '{cmd[0]}' not found on PATH.")
        logger.info("Running %s", " ".join(cmd))
        try:
            proc = subprocess.run(
                [executable, *cmd[1:]],
                cwd=str(cwd) if cwd else None,
                check=False,
                capture_output=True,
                text=True,
            )
        except OSError as exc:
            raise InstallFailure(f"Unable to run {cmd[0]}: {exc}") from exc
        if proc.stdout:
            logger.debug(proc.stdout.strip())
        if proc.returncode != 0:
            detail = (proc.stderr or proc.stdout or "").strip()
            raise InstallFailure(
                f"{' '.join(cmd)} failed (exit {proc.returncode})" + (f": {detail}" if detail else "")
            )


def build_install_command(
    package_manager: str,
    *,
    registry: Optional[str] = None,
    packages: Optional[Sequence[str]] = None,
    production: bool = False,
    dev: bool = False,
) -> List[str]:
    names = [name for name in packages or [] if name]
    if package_manager == "yarn":
        cmd = ["yarn", "add", *names] if names else ["yarn", "install"]
        if names and dev:
            cmd.append("--dev")
        if not names and production:
            cmd.append("--production")
    elif package_manager == "pnpm":
        cmd = ["pnpm", "add", *names] if names else ["pnpm", "install"]
        if names and dev:
            cmd.append("--save-dev")
        if not names and production:
            cmd.append("--prod")
    else:
        # npm and its mirrors (cnpm, tnpm) share one command shape.
        cmd = [package_manager, "install", *names]
        if names and dev:
            cmd.append("--save-dev")
        if production:
            cmd.append("--production")
    if registry:
        cmd.extend(["--registry", registry])
    return cmd


def read_package_json(base_dir: Path) -> Mapping[str, object]:
    path = base_dir / "package.json"
    if not path.is_file():
        return {}
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Ignoring unreadable %s: %s", path, exc)
        return {}
    return payload if isinstance(payload, dict) else {}


def find_missing_packages(base_dir: Path, required: Iterable[str]) -> List[str]:
    """Return the required packages that have no ``node_modules`` entry."""

    modules_dir = base_dir / "node_modules"
    missing: List[str] = []
    for name in required:
        if name and name not in missing and not (modules_dir / name).exists():
            missing.append(name)
    return missing


__all__ = [
    "PackageInstaller",
    "build_install_command",
    "find_missing_packages",
    "read_package_json",
]
