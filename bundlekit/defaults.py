"""Process-wide defaults injected into the pipelines."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True, slots=True)
class CliDefaults:
    """Fixed values the command surface falls back to when flags are absent."""

    port: int = 7001
    kill_ports: Tuple[int, ...] = (7001, 9000, 9001)
    archive_dir: str = "archive"
    config_filenames: Tuple[str, ...] = (
        "bundlekit.yml",
        "bundlekit.yaml",
        "bundlekit.json",
    )
    temp_dir: str = "node_modules/.cache/bundlekit"
    manifest_file: str = "config/manifest.json"
    build_dir: str = "public"
    package_manager: str = "npm"
    bundler_command: str = "npx webpack --config {config}"
    serve_command: str = "npx webpack serve --config {config} --port {port}"
    env_var: str = "BUNDLEKIT_ENV"


DEFAULTS = CliDefaults()

__all__ = ["CliDefaults", "DEFAULTS"]
