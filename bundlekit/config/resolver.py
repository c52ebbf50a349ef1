"""Layering of defaults, project config, environment and caller extras."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from ..defaults import DEFAULTS, CliDefaults
from ..install import PackageInstaller, find_missing_packages, read_package_json
from ..options import InstallCheck, parse_install
from .loader import discover_and_load
from .paths import deep_merge

logger = logging.getLogger(__name__)

BASE_CONFIG: Dict[str, Any] = {
    "entry": {},
    "resolve": {"extensions": [".js", ".json"]},
    "module": {"rules": []},
    "plugins": [],
}

ENV_PRESETS: Dict[str, Dict[str, Any]] = {
    "dev": {"mode": "development"},
    "test": {"mode": "production", "hash": True},
    "prod": {"mode": "production", "hash": True, "compress": True},
}

# Keys consumed during resolution; they never reach the bundler.
_RESOLVER_KEYS = ("env",)


@dataclass(frozen=True, slots=True)
class ResolvedConfig:
    base_dir: Path
    env: Optional[str] = None
    framework: Optional[str] = None
    source_config: Dict[str, Any] = field(default_factory=dict)
    config_path: Optional[Path] = None
    install_check: Optional[InstallCheck] = None


def resolve(
    cli_state: Mapping[str, object],
    extra: Optional[Mapping[str, object]] = None,
    *,
    defaults: CliDefaults = DEFAULTS,
    installer: Optional[PackageInstaller] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ResolvedConfig:
    """Resolve the project configuration for one command invocation.

    Precedence, lowest first: built-in defaults and the preset for ``env``,
    the config file, the file section selected by ``env``, then ``extra``. When
    ``extra["install"]["check"]`` is set, missing dependencies are installed
    before returning.
    """

    extra = dict(extra or {})
    base_dir = Path(str(extra.get("base_dir") or Path.cwd())).resolve()
    filename = cli_state.get("filename")
    config_path, file_config = discover_and_load(
        base_dir,
        filename if isinstance(filename, str) else None,
        defaults=defaults,
    )

    env = _resolve_env(extra.get("env"), environ if environ is not None else os.environ, defaults)
    file_envs = file_config.get("env") or {}
    if env and env not in file_envs and env not in ENV_PRESETS:
        logger.debug("Environment '%s' has no overrides; using base config.", env)

    common = {key: value for key, value in file_config.items() if key not in _RESOLVER_KEYS}
    source_config = deep_merge(
        BASE_CONFIG,
        ENV_PRESETS.get(env) if env else None,
        common,
        file_envs.get(env) if env else None,
    )

    framework = extra.get("framework") or source_config.get("framework")
    if framework:
        source_config["framework"] = framework

    install_check = parse_install(extra.get("install"), defaults)
    if install_check is not None and install_check.check:
        registry = extra["install"].get("registry") if isinstance(extra.get("install"), Mapping) else None
        ensure_dependencies(
            base_dir,
            source_config,
            install_check.npm,
            installer=installer or PackageInstaller(),
            registry=registry,
        )

    return ResolvedConfig(
        base_dir=base_dir,
        env=env,
        framework=str(framework) if framework else None,
        source_config=source_config,
        config_path=config_path,
        install_check=install_check,
    )


def required_packages(base_dir: Path, source_config: Mapping[str, Any]) -> List[str]:
    """Packages the project expects to find in ``node_modules``."""

    names: List[str] = [str(name) for name in source_config.get("dependencies") or []]
    package = read_package_json(base_dir)
    for section in ("dependencies", "devDependencies"):
        entries = package.get(section)
        if isinstance(entries, Mapping):
            names.extend(str(name) for name in entries)
    return names


def ensure_dependencies(
    base_dir: Path,
    source_config: Mapping[str, Any],
    package_manager: str,
    *,
    installer: PackageInstaller,
    registry: Optional[str] = None,
) -> List[str]:
    """Install whatever required package is missing; returns the installed names."""

    missing = find_missing_packages(base_dir, required_packages(base_dir, source_config))
    if not missing:
        logger.info("All dependencies are installed.")
        return []
    logger.info("Installing missing dependencies with %s: %s", package_manager, ", ".join(missing))
    installer.install(package_manager, registry, base_dir, packages=missing, dev=True)
    return missing


def _resolve_env(value: object, environ: Mapping[str, str], defaults: CliDefaults) -> Optional[str]:
    if isinstance(value, str) and value:
        return value
    fallback = environ.get(defaults.env_var)
    return fallback or None


__all__ = [
    "BASE_CONFIG",
    "ENV_PRESETS",
    "ResolvedConfig",
    "ensure_dependencies",
    "required_packages",
    "resolve",
]
