"""Bundler config resolution, build orchestration and archive helpers."""

__version__ = "0.1.0"
from .archive import ArchiveBuilder, ArchiveFormat, ArchiveSpec, RuntimeFetcher, RuntimeKind
from .build import BuildReport, BuildResult, Bundler, CommandBundler, build, dll, print_config, server
from .config import (
    AssembledConfig,
    MultipleConfig,
    ResolvedConfig,
    SingleConfig,
    assemble,
    get_by_path,
    resolve,
)
from .defaults import DEFAULTS, CliDefaults
from .errors import (
    ArchiveError,
    BuildFailure,
    BundlekitError,
    ConfigInvalid,
    ConfigNotFound,
    InstallFailure,
    UnresolvedTarget,
)
from .options import BuildOption, InstallCheck, decode_shorthand, normalize

__all__ = [
    "__version__",
    "ArchiveBuilder",
    "ArchiveError",
    "ArchiveFormat",
    "ArchiveSpec",
    "AssembledConfig",
    "BuildFailure",
    "BuildOption",
    "BuildReport",
    "BuildResult",
    "Bundler",
    "BundlekitError",
    "CliDefaults",
    "CommandBundler",
    "ConfigInvalid",
    "ConfigNotFound",
    "DEFAULTS",
    "InstallCheck",
    "InstallFailure",
    "MultipleConfig",
    "ResolvedConfig",
    "RuntimeFetcher",
    "RuntimeKind",
    "SingleConfig",
    "UnresolvedTarget",
    "assemble",
    "build",
    "decode_shorthand",
    "dll",
    "get_by_path",
    "normalize",
    "print_config",
    "resolve",
    "server",
]
