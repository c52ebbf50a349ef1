"""Bundler backends consuming assembled configs."""

from __future__ import annotations

import json
import logging
import os
import shlex
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..config.assembled import AssembledConfig, entry_target
from ..defaults import DEFAULTS, CliDefaults
from ..errors import BuildFailure

logger = logging.getLogger(__name__)


class Bundler(ABC):
    name: str

    @abstractmethod
    def compile(self, config: Dict[str, Any]) -> List[str]:
        """Compile one target config; raise :class:`BuildFailure` on error."""

    @abstractmethod
    def serve(self, assembled: AssembledConfig, port: int) -> None:
        """Run a watching dev server; blocks until the process is terminated."""


class CommandBundler(Bundler):
    """Runs an external bundler command against a JSON config file.

    ``{config}`` in the command templates is replaced with the config file
    path and ``{port}`` with the dev server port.
    """

    name = "command"

    def __init__(
        self,
        command: Optional[str] = None,
        serve_command: Optional[str] = None,
        *,
        cwd: Optional[Path] = None,
        defaults: CliDefaults = DEFAULTS,
        env: Optional[Dict[str, str]] = None,
    ) -> None:
        self.command = command or defaults.bundler_command
        self.serve_command = serve_command or defaults.serve_command
        self.cwd = cwd or Path.cwd()
        self.config_dir = self.cwd / defaults.temp_dir
        self.env = env or {}

    def compile(self, config: Dict[str, Any]) -> List[str]:
        target = entry_target(config)
        config_path = self._write_config(config, target)
        cmd = self._render(self.command, config_path)
        logs = [f"Executing bundler command: {cmd}"]
        logger.info("Building %s target", target)
        proc = subprocess.run(
            cmd,
            shell=True,
            check=False,
            capture_output=True,
            text=True,
            cwd=str(self.cwd),
            env={**os.environ, **self.env, "BUNDLEKIT_TARGET": target},
        )
        if proc.stdout:
            logs.append(proc.stdout.strip())
        if proc.stderr:
            logs.append(proc.stderr.strip())
        if proc.returncode != 0:
            raise BuildFailure(target, f"bundler exited with {proc.returncode}", returncode=proc.returncode)
        return logs

    def serve(self, assembled: AssembledConfig, port: int) -> None:
        config_path = self._write_config(assembled.as_payload(), "dev-server")
        cmd = self._render(self.serve_command, config_path, port=port)
        logger.info("Starting dev server on port %s", port)
        proc = subprocess.run(
            cmd,
            shell=True,
            check=False,
            cwd=str(self.cwd),
            env={**os.environ, **self.env},
        )
        if proc.returncode != 0:
            raise BuildFailure("server", f"dev server exited with {proc.returncode}", returncode=proc.returncode)

    def _write_config(self, payload: Union[Dict[str, Any], List[Dict[str, Any]]], label: str) -> Path:
        self.config_dir.mkdir(parents=True, exist_ok=True)
        # One file per label; each build overwrites the previous one.
        config_path = self.config_dir / f"{label}.json"
        config_path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
        return config_path

    def _render(self, template: str, config_path: Path, *, port: Optional[int] = None) -> str:
        command = template.replace("{config}", shlex.quote(str(config_path)))
        if port is not None:
            command = command.replace("{port}", str(port))
        return command


__all__ = ["Bundler", "CommandBundler"]
