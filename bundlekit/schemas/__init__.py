"""Schema definitions for project and bundler configuration."""

from .config import BUILD_TYPES, TARGET_ORDER, OutputConfig, ProjectConfig, Target, TargetConfig

__all__ = [
    "BUILD_TYPES",
    "OutputConfig",
    "ProjectConfig",
    "TARGET_ORDER",
    "Target",
    "TargetConfig",
]
