"""Expansion of a resolved config into target-specific bundler configs."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError

from ..defaults import DEFAULTS, CliDefaults
from ..errors import ConfigInvalid, UnresolvedTarget
from ..options import BuildOption
from ..schemas.config import TARGET_ORDER, Target, TargetConfig
from .assembled import AssembledConfig, from_entries
from .paths import deep_merge
from .resolver import ResolvedConfig

logger = logging.getLogger(__name__)

DLL_FAMILY = frozenset({Target.DLL})
WEB_FAMILY = frozenset({Target.CLIENT, Target.WEB, Target.WEEX})
NODE_FAMILY = frozenset({Target.SERVER, Target.NODE})

# Project-level keys that steer assembly and are not bundler options.
_ASSEMBLY_KEYS = ("framework", "type", "targets", "dll", "dependencies", "hash", "compress", "watch")

_HASHED_FILENAME = "[name].[contenthash:8].js"
_HASHED_CHUNK_FILENAME = "[name].[contenthash:8].chunk.js"


def assemble(
    resolved: ResolvedConfig,
    option: BuildOption,
    *,
    defaults: CliDefaults = DEFAULTS,
    strict: bool = False,
) -> AssembledConfig:
    """Build one bundler config per selected target.

    Returns a :class:`SingleConfig` for one target and a
    :class:`MultipleConfig` (canonical target order) otherwise.
    """

    targets = select_targets(resolved, option)
    if not targets:
        if strict:
            raise UnresolvedTarget("No build target could be determined from flags or config.")
        logger.debug("No target selected; falling back to client.")
        targets = [Target.CLIENT]

    entries = [build_target_config(resolved, option, target, defaults=defaults) for target in targets]
    return from_entries(entries)


def select_targets(resolved: ResolvedConfig, option: BuildOption) -> List[Target]:
    """Decide which targets to assemble, in canonical order."""

    if option.build_type is not None:
        return [option.build_type]
    if resolved.framework == Target.DLL.value:
        return [Target.DLL]

    selected = declared_targets(resolved.source_config)
    if option.has_target_filter:
        # Filters combine as a union of their target families.
        requested = [
            (option.only_dll, DLL_FAMILY, Target.DLL),
            (option.only_web, WEB_FAMILY, Target.WEB),
            (option.only_node, NODE_FAMILY, Target.NODE),
        ]
        families = set()
        for enabled, family, _ in requested:
            if enabled:
                families |= family
        filtered = [target for target in selected if target in families]
        for enabled, family, canonical in requested:
            if enabled and not any(target in family for target in filtered):
                filtered.append(canonical)
        selected = filtered
    return sorted(set(selected), key=TARGET_ORDER.index)


def declared_targets(source_config: Mapping[str, Any]) -> List[Target]:
    declared = source_config.get("type")
    if declared is None:
        names = list((source_config.get("targets") or {}).keys())
    elif isinstance(declared, str):
        names = [declared]
    else:
        names = list(declared)

    known = {target.value for target in Target}
    for name in names:
        if name not in known:
            logger.warning("Ignoring unknown target '%s'.", name)
    targets = [Target(name) for name in names if name in known]
    if _dll_entries(source_config) and Target.DLL not in targets:
        targets.append(Target.DLL)
    return targets


def build_target_config(
    resolved: ResolvedConfig,
    option: BuildOption,
    target: Target,
    *,
    defaults: CliDefaults = DEFAULTS,
) -> Dict[str, Any]:
    source = resolved.source_config
    sections = source.get("targets") or {}
    common = {key: value for key, value in source.items() if key not in _ASSEMBLY_KEYS}
    if target is Target.DLL:
        # The dll bundles vendor modules only, never application entries.
        common.pop("entry", None)
    config = deep_merge(
        target_defaults(resolved.base_dir, target, source, defaults=defaults),
        common,
        sections.get(target.value),
    )
    config["target"] = target.value

    if option.watch or source.get("watch"):
        config["watch"] = True
    if (option.hash_assets or source.get("hash")) and target not in NODE_FAMILY:
        output = config.setdefault("output", {})
        output["filename"] = _HASHED_FILENAME
        output["chunkFilename"] = _HASHED_CHUNK_FILENAME
    if option.compress or source.get("compress"):
        config.setdefault("optimization", {})["minimize"] = True
    if option.devtool:
        config["devtool"] = option.devtool
    if option.size_analyzer and target is not Target.DLL:
        plugins = list(config.get("plugins") or [])
        plugins.append({"name": "size-analyzer", "mode": option.size_analyzer})
        config["plugins"] = plugins

    try:
        return TargetConfig.model_validate(config).to_payload()
    except ValidationError as exc:
        raise ConfigInvalid(f"Invalid {target.value} config: {exc}") from exc


def target_defaults(
    base_dir: Path,
    target: Target,
    source_config: Mapping[str, Any],
    *,
    defaults: CliDefaults = DEFAULTS,
) -> Dict[str, Any]:
    """Output locations and references a target gets before user config applies."""

    build_dir = base_dir / defaults.build_dir
    dll_manifest_dir = base_dir / defaults.temp_dir / "dll"
    dll_entries = _dll_entries(source_config)

    if target is Target.DLL:
        if not dll_entries:
            logger.warning("Building dll target without declared vendor modules.")
        return {
            "entry": dict(dll_entries),
            "output": {
                "path": str(build_dir / "dll"),
                "publicPath": "/public/dll/",
                "filename": "[name].dll.js",
                "library": "[name]_dll",
            },
            "dllManifest": str(dll_manifest_dir / "[name].manifest.json"),
        }

    if target in NODE_FAMILY:
        output_dir = base_dir / ("app/view" if target is Target.SERVER else "dist/node")
        return {
            "output": {
                "path": str(output_dir),
                "filename": "[name].js",
                "libraryTarget": "commonjs2",
            },
            "node": {"__dirname": False, "__filename": False},
        }

    layouts = {
        Target.CLIENT: (build_dir, "/public/"),
        Target.WEB: (base_dir / "dist", "/"),
        Target.WEEX: (base_dir / "dist" / "weex", "/"),
    }
    output_dir, public_path = layouts[target]
    payload: Dict[str, Any] = {
        "output": {
            "path": str(output_dir),
            "publicPath": public_path,
            "filename": "[name].js",
        },
    }
    if dll_entries:
        payload["dllReferences"] = [
            str(dll_manifest_dir / f"{name}.manifest.json") for name in dll_entries
        ]
    return payload


def _dll_entries(source_config: Mapping[str, Any]) -> Dict[str, List[str]]:
    declared: Optional[Any] = source_config.get("dll")
    if not declared:
        return {}
    if isinstance(declared, Mapping):
        return {str(name): list(modules) for name, modules in declared.items()}
    return {"vendor": list(declared)}


__all__ = [
    "DLL_FAMILY",
    "NODE_FAMILY",
    "WEB_FAMILY",
    "assemble",
    "build_target_config",
    "declared_targets",
    "select_targets",
    "target_defaults",
]
