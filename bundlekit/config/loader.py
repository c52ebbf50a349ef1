"""Project config file discovery and parsing."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml
from pydantic import ValidationError

from ..defaults import DEFAULTS, CliDefaults
from ..errors import ConfigInvalid, ConfigNotFound
from ..schemas.config import ProjectConfig

logger = logging.getLogger(__name__)


def locate_config(
    base_dir: Path,
    filename: Optional[str] = None,
    *,
    defaults: CliDefaults = DEFAULTS,
) -> Optional[Path]:
    """Return the config file to load, or ``None`` when none is present.

    An explicit ``filename`` must exist; implicit discovery never fails.
    """

    if filename:
        path = Path(filename)
        if not path.is_absolute():
            path = base_dir / path
        if not path.is_file():
            raise ConfigNotFound(path)
        return path.resolve()

    for candidate in defaults.config_filenames:
        path = base_dir / candidate
        if path.is_file():
            return path
    logger.debug("No config file found in %s; using defaults.", base_dir)
    return None


def load_config(path: Path) -> Dict[str, Any]:
    """Parse and validate a config file, returning a plain dict."""

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigNotFound(path) from exc

    try:
        if path.suffix == ".json":
            payload = json.loads(text) if text.strip() else {}
        else:
            payload = yaml.safe_load(text) or {}
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigInvalid(f"Unable to parse {path}: {exc}") from exc

    if not isinstance(payload, dict):
        raise ConfigInvalid(f"Config file {path} must contain a mapping, got {type(payload).__name__}.")

    try:
        ProjectConfig.model_validate(payload)
    except ValidationError as exc:
        raise ConfigInvalid(f"Invalid config file {path}: {exc}") from exc
    return payload


def discover_and_load(
    base_dir: Path,
    filename: Optional[str] = None,
    *,
    defaults: CliDefaults = DEFAULTS,
) -> Tuple[Optional[Path], Dict[str, Any]]:
    path = locate_config(base_dir, filename, defaults=defaults)
    if path is None:
        return None, {}
    logger.debug("Loading config from %s", path)
    return path, load_config(path)


__all__ = ["discover_and_load", "load_config", "locate_config"]
