"""Tagged result of config assembly: one bundler config or an ordered list."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple, Union

from ..schemas.config import Target


@dataclass(frozen=True, slots=True)
class SingleConfig:
    config: Dict[str, Any]

    @property
    def entries(self) -> Tuple[Dict[str, Any], ...]:
        return (self.config,)

    def as_payload(self) -> Dict[str, Any]:
        return self.config


@dataclass(frozen=True, slots=True)
class MultipleConfig:
    configs: Tuple[Dict[str, Any], ...]

    @property
    def entries(self) -> Tuple[Dict[str, Any], ...]:
        return self.configs

    def as_payload(self) -> List[Dict[str, Any]]:
        return list(self.configs)


AssembledConfig = Union[SingleConfig, MultipleConfig]


def from_entries(entries: Sequence[Dict[str, Any]]) -> AssembledConfig:
    if not entries:
        raise ValueError("At least one config entry is required.")
    if len(entries) == 1:
        return SingleConfig(entries[0])
    return MultipleConfig(tuple(entries))


def entry_target(entry: Dict[str, Any]) -> str:
    target = entry.get("target")
    return target.value if isinstance(target, Target) else str(target or "")


__all__ = ["AssembledConfig", "MultipleConfig", "SingleConfig", "entry_target", "from_entries"]
