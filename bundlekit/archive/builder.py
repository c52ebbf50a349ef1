"""Archive assembly: optional install and runtime staging, then zip or tar."""

from __future__ import annotations

import logging
import os
import tarfile
import tempfile
import zipfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional

from ..defaults import DEFAULTS, CliDefaults
from ..errors import ArchiveError
from ..install import PackageInstaller, read_package_json
from .runtime import RuntimeFetcher, RuntimeKind
from .utils import collect_entries

logger = logging.getLogger(__name__)

_TAR_SUFFIXES = (".tar.gz", ".tgz", ".tar")
_GZIP_SUFFIXES = (".tar.gz", ".tgz")


class ArchiveFormat(str, Enum):
    ZIP = "zip"
    TAR = "tar"


@dataclass(slots=True)
class ArchiveSpec:
    """Configuration describing one archive run."""

    filename: Optional[str] = None
    source_path: Optional[Path] = None
    target_path: Optional[Path] = None
    install_dependencies: bool = False
    package_manager: str = DEFAULTS.package_manager
    registry: Optional[str] = None
    runtime: Optional[RuntimeKind] = None


class ArchiveBuilder:
    """Coordinates dependency install, runtime staging and archive creation."""

    def __init__(
        self,
        *,
        workspace_root: Optional[Path] = None,
        installer: Optional[PackageInstaller] = None,
        runtime_fetcher: Optional[RuntimeFetcher] = None,
        defaults: CliDefaults = DEFAULTS,
    ) -> None:
        self.workspace_root = workspace_root or Path.cwd()
        self.installer = installer or PackageInstaller()
        self.runtime_fetcher = runtime_fetcher
        self.defaults = defaults

    def zip(self, spec: ArchiveSpec) -> Path:
        return self.build(spec, ArchiveFormat.ZIP)

    def tar(self, spec: ArchiveSpec) -> Path:
        return self.build(spec, ArchiveFormat.TAR)

    def build(self, spec: ArchiveSpec, archive_format: ArchiveFormat) -> Path:
        """Build the archive and return its path.

        Installation failures propagate as ``InstallFailure`` before anything
        is written; the archive only appears once it is complete.
        """

        source = Path(spec.source_path or self.workspace_root).resolve()
        if not source.is_dir():
            raise ArchiveError(f"Archive source not found: {source}")

        target_dir = Path(spec.target_path or self.workspace_root / self.defaults.archive_dir).resolve()
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ArchiveError(f"Archive target is not writable: {target_dir} ({exc})") from exc
        if not target_dir.is_dir() or not os.access(target_dir, os.W_OK):
            raise ArchiveError(f"Archive target is not writable: {target_dir}")

        archive_path = target_dir / archive_filename(spec.filename, source, archive_format)

        if spec.install_dependencies:
            logger.info("Installing production dependencies with %s", spec.package_manager)
            self.installer.install(spec.package_manager, spec.registry, source, production=True)

        if spec.runtime is not None:
            fetcher = self.runtime_fetcher or RuntimeFetcher()
            fetcher.stage(spec.runtime, source)

        # zip stores linked directories as copies; tar keeps them as links.
        entries = collect_entries(source, exclude=target_dir, follow_links=archive_format is ArchiveFormat.ZIP)
        self._write(archive_format, archive_path, source, entries)
        logger.info("Archive written to %s", archive_path)
        return archive_path

    def _write(self, archive_format: ArchiveFormat, archive_path: Path, source: Path, entries: List[Path]) -> None:
        handle, tmp_name = tempfile.mkstemp(dir=archive_path.parent, prefix=f".{archive_path.name}-", suffix=".partial")
        os.close(handle)
        tmp_path = Path(tmp_name)
        try:
            if archive_format is ArchiveFormat.ZIP:
                _write_zip(tmp_path, source, entries)
            else:
                mode = "w:gz" if archive_path.name.endswith(_GZIP_SUFFIXES) else "w"
                _write_tar(tmp_path, source, entries, mode)
            os.replace(tmp_path, archive_path)
        except (OSError, ValueError, tarfile.TarError, zipfile.BadZipFile) as exc:
            raise ArchiveError(f"Unable to write archive {archive_path}: {exc}") from exc
        finally:
            tmp_path.unlink(missing_ok=True)


def archive_filename(filename: Optional[str], source: Path, archive_format: ArchiveFormat) -> str:
    name = filename or project_name(source)
    if archive_format is ArchiveFormat.ZIP:
        return name if name.endswith(".zip") else f"{name}.zip"
    return name if name.endswith(_TAR_SUFFIXES) else f"{name}.tar.gz"


def project_name(source: Path) -> str:
    name = read_package_json(source).get("name")
    if isinstance(name, str) and name.strip():
        return name.strip().lstrip("@").replace("/", "-")
    return source.name


def _write_zip(path: Path, source: Path, entries: List[Path]) -> None:
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED, strict_timestamps=False) as archive:
        for entry in entries:
            if not entry.exists():
                logger.warning("Skipping dangling link %s", entry)
                continue
            archive.write(entry, arcname=entry.relative_to(source).as_posix())


def _write_tar(path: Path, source: Path, entries: List[Path], mode: str) -> None:
    with tarfile.open(path, mode) as archive:
        for entry in entries:
            archive.add(entry, arcname=entry.relative_to(source).as_posix(), recursive=False)


__all__ = ["ArchiveBuilder", "ArchiveFormat", "ArchiveSpec", "archive_filename", "project_name"]
