"""Config resolution and assembly."""

from .assembled import AssembledConfig, MultipleConfig, SingleConfig
from .assembler import assemble, select_targets
from .paths import deep_merge, get_by_path
from .resolver import ResolvedConfig, resolve

__all__ = [
    "AssembledConfig",
    "MultipleConfig",
    "ResolvedConfig",
    "SingleConfig",
    "assemble",
    "deep_merge",
    "get_by_path",
    "resolve",
    "select_targets",
]
