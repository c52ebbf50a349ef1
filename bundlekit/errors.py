"""Error taxonomy shared by the resolver, orchestrator and archive tooling."""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class BundlekitError(RuntimeError):
    """Base class for failures surfaced to the command line."""


class ConfigNotFound(BundlekitError):
    """Raised when an explicitly requested config file cannot be read."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Config file not found: {path}")
        self.path = path


class ConfigInvalid(BundlekitError):
    """Raised when a config file cannot be parsed or fails validation."""


class UnresolvedTarget(BundlekitError):
    """Raised in strict mode when no build target can be determined."""


class InstallFailure(BundlekitError):
    """Raised when dependency or runtime installation fails."""


class BuildFailure(BundlekitError):
    """Raised by a bundler when compiling one target fails."""

    def __init__(self, target: str, message: str, *, returncode: Optional[int] = None) -> None:
        super().__init__(f"Build failed for target '{target}': {message}")
        self.target = target
        self.returncode = returncode


class ArchiveError(BundlekitError):
    """Raised when an archive cannot be produced."""


__all__ = [
    "ArchiveError",
    "BuildFailure",
    "BundlekitError",
    "ConfigInvalid",
    "ConfigNotFound",
    "InstallFailure",
    "UnresolvedTarget",
]
