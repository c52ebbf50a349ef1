"""Build orchestration."""

from .bundler import Bundler, CommandBundler
from .models import BuildReport, BuildResult
from .orchestrator import build, dll, print_config, server

__all__ = [
    "BuildReport",
    "BuildResult",
    "Bundler",
    "CommandBundler",
    "build",
    "dll",
    "print_config",
    "server",
]
