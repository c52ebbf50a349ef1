"""Pydantic models describing project and bundler configuration."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Target(str, Enum):
    CLIENT = "client"
    SERVER = "server"
    WEB = "web"
    WEEX = "weex"
    NODE = "node"
    DLL = "dll"


# Values accepted by ``--type``.
BUILD_TYPES = (Target.CLIENT, Target.SERVER, Target.WEB, Target.WEEX)

# Canonical assembly order; dll first because other targets reference it.
TARGET_ORDER = (
    Target.DLL,
    Target.CLIENT,
    Target.WEB,
    Target.WEEX,
    Target.SERVER,
    Target.NODE,
)


class ProjectConfig(BaseModel):
    """Top-level project config file (``bundlekit.yml`` or ``bundlekit.json``)."""

    framework: Optional[str] = None
    type: Optional[Union[str, List[str]]] = Field(
        default=None, description="Target or list of targets built by default."
    )
    env: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    targets: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    dll: Optional[Union[List[str], Dict[str, List[str]]]] = Field(
        default=None, description="Vendor modules bundled into the shared dll."
    )
    dependencies: List[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="allow")

    @field_validator("type")
    @classmethod
    def _check_types(cls, value: Optional[Union[str, List[str]]]) -> Optional[Union[str, List[str]]]:
        known = {target.value for target in Target}
        names = [value] if isinstance(value, str) else list(value or [])
        unknown = [name for name in names if name not in known]
        if unknown:
            raise ValueError(f"Unknown build target(s): {', '.join(unknown)}")
        return value

    @field_validator("targets")
    @classmethod
    def _check_target_sections(cls, value: Dict[str, Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
        known = {target.value for target in Target}
        unknown = sorted(name for name in value if name not in known)
        if unknown:
            raise ValueError(f"Unknown target section(s): {', '.join(unknown)}")
        return value


class OutputConfig(BaseModel):
    path: str
    public_path: Optional[str] = Field(default=None, alias="publicPath")
    filename: str = "[name].js"
    chunk_filename: Optional[str] = Field(default=None, alias="chunkFilename")
    library_target: Optional[str] = Field(default=None, alias="libraryTarget")
    library: Optional[str] = None

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class TargetConfig(BaseModel):
    """One bundler-ready configuration object."""

    target: Target
    mode: str = "development"
    output: OutputConfig
    devtool: Optional[Union[str, bool]] = None
    watch: bool = False
    plugins: List[Any] = Field(default_factory=list)

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


__all__ = [
    "BUILD_TYPES",
    "OutputConfig",
    "ProjectConfig",
    "TARGET_ORDER",
    "Target",
    "TargetConfig",
]
