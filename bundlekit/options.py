"""Normalization of raw command-line flags into a typed build option record."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from .defaults import DEFAULTS, CliDefaults
from .schemas.config import BUILD_TYPES, Target

SIZE_ANALYZERS = ("analyzer", "stats")

_SHORTHAND_FLAGS = {
    "w": "watch",
    "m": "hash_assets",
    "c": "compress",
}


@dataclass(frozen=True, slots=True)
class InstallCheck:
    check: bool
    npm: str = DEFAULTS.package_manager


@dataclass(frozen=True, slots=True)
class BuildOption:
    """Structured view of the flags that steer config assembly."""

    build_type: Optional[Target] = None
    watch: bool = False
    hash_assets: bool = False
    compress: bool = False
    port: Optional[int] = None
    devtool: Optional[str] = None
    only_dll: bool = False
    only_web: bool = False
    only_node: bool = False
    size_analyzer: Optional[str] = None
    install_check: Optional[InstallCheck] = None

    @property
    def has_target_filter(self) -> bool:
        return self.only_dll or self.only_web or self.only_node


def decode_shorthand(value: object) -> Tuple[bool, bool, bool]:
    """Decode a combined flag string such as ``wmc`` into (watch, hash, compress)."""

    if not isinstance(value, str):
        return False, False, False
    present = {_SHORTHAND_FLAGS[char] for char in value if char in _SHORTHAND_FLAGS}
    return "watch" in present, "hash_assets" in present, "compress" in present


def normalize(
    raw_flags: Mapping[str, object],
    extra: Optional[Mapping[str, object]] = None,
) -> BuildOption:
    """Build a :class:`BuildOption` from raw flag values.

    ``raw_flags`` uses the command-line destinations (``type``, ``md5``,
    ``build``, ``size``, ``dll``...). ``extra`` is supplied by the calling
    command and takes precedence, e.g. ``{"only_dll": True}`` for ``dll``.
    Missing or malformed values fall back to defaults; this never raises.
    """

    flags = dict(raw_flags)
    if extra:
        flags.update(extra)

    watch, hash_assets, compress = decode_shorthand(flags.get("build"))
    # Explicit flags win over the shorthand string; None means "not given".
    if flags.get("watch") is not None:
        watch = bool(flags["watch"])
    explicit_hash = flags.get("hash_assets", flags.get("md5"))
    if explicit_hash is not None:
        hash_assets = bool(explicit_hash)
    if flags.get("compress") is not None:
        compress = bool(flags["compress"])

    return BuildOption(
        build_type=_parse_build_type(flags.get("build_type", flags.get("type"))),
        watch=watch,
        hash_assets=hash_assets,
        compress=compress,
        port=_parse_port(flags.get("port")),
        devtool=_parse_devtool(flags.get("devtool")),
        only_dll=_flag(flags, "only_dll", "dll"),
        only_web=_flag(flags, "only_web", "web"),
        only_node=_flag(flags, "only_node", "node"),
        size_analyzer=_parse_size(flags.get("size_analyzer", flags.get("size"))),
        install_check=parse_install(flags.get("install")),
    )


def resolve_port(option: BuildOption, defaults: CliDefaults = DEFAULTS) -> int:
    return option.port if option.port is not None else defaults.port


def _flag(flags: Mapping[str, object], name: str, alias: str) -> bool:
    value = flags.get(name)
    if value is None:
        value = flags.get(alias)
    return bool(value)


def _parse_build_type(value: object) -> Optional[Target]:
    if isinstance(value, Target):
        return value if value in BUILD_TYPES else None
    if not isinstance(value, str):
        return None
    normalized = value.strip().lower()
    for target in BUILD_TYPES:
        if target.value == normalized:
            return target
    return None


def _parse_port(value: object) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        port = value
    elif isinstance(value, str) and value.strip().isdigit():
        port = int(value.strip())
    else:
        return None
    if 0 < port < 65536:
        return port
    return None


def _parse_devtool(value: object) -> Optional[str]:
    if isinstance(value, str) and value:
        return value
    return None


def _parse_size(value: object) -> Optional[str]:
    if value is None or value is False:
        return None
    if isinstance(value, str) and value.strip().lower() in SIZE_ANALYZERS:
        return value.strip().lower()
    return SIZE_ANALYZERS[0]


def parse_install(value: object, defaults: CliDefaults = DEFAULTS) -> Optional[InstallCheck]:
    if isinstance(value, InstallCheck):
        return value
    if not isinstance(value, Mapping):
        return None
    npm = value.get("npm")
    return InstallCheck(
        check=bool(value.get("check")),
        npm=npm if isinstance(npm, str) and npm else defaults.package_manager,
    )


__all__ = [
    "BuildOption",
    "InstallCheck",
    "SIZE_ANALYZERS",
    "decode_shorthand",
    "normalize",
    "parse_install",
    "resolve_port",
]
