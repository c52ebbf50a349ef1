"""Download and staging of a JavaScript runtime next to bundled dependencies."""

from __future__ import annotations

import logging
import platform
import posixpath
import shutil
import tarfile
import tempfile
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Dict, Mapping, Optional

import requests
from requests import Session
from requests.exceptions import RequestException

from ..errors import InstallFailure

logger = logging.getLogger(__name__)


class RuntimeKind(str, Enum):
    NODE = "node"
    ALINODE = "alinode"


RUNTIME_MIRRORS: Dict[RuntimeKind, str] = {
    RuntimeKind.NODE: "https://nodejs.org/dist/{version}/node-{version}-{platform}-{arch}.tar.gz",
    RuntimeKind.ALINODE: "https://npmmirror.com/mirrors/alinode/{version}/alinode-{version}-{platform}-{arch}.tar.gz",
}

RUNTIME_VERSIONS: Dict[RuntimeKind, str] = {
    RuntimeKind.NODE: "v20.11.1",
    RuntimeKind.ALINODE: "v7.6.0",
}

_ARCH_ALIASES = {
    "x86_64": "x64",
    "amd64": "x64",
    "aarch64": "arm64",
    "arm64": "arm64",
}

# Extraction filters are missing on older interpreter patch releases.
_EXTRACT_KWARGS = {"filter": "data"} if hasattr(tarfile, "data_filter") else {}


class RuntimeFetcher:
    """Fetches a runtime release tarball and unpacks it into the source tree."""

    def __init__(
        self,
        *,
        session: Optional[Session] = None,
        versions: Optional[Mapping[RuntimeKind, str]] = None,
        mirrors: Optional[Mapping[RuntimeKind, str]] = None,
        timeout: int = 60,
    ) -> None:
        self.session = session or requests.Session()
        self.versions = {**RUNTIME_VERSIONS, **(versions or {})}
        self.mirrors = {**RUNTIME_MIRRORS, **(mirrors or {})}
        self.timeout = timeout

    def url_for(self, kind: RuntimeKind, *, system: Optional[str] = None, machine: Optional[str] = None) -> str:
        system_name = (system or platform.system()).lower()
        if system_name not in {"linux", "darwin"}:
            raise InstallFailure(f"Bundling the {kind.value} runtime is not supported on {system_name}.")
        raw_arch = (machine or platform.machine()).lower()
        arch = _ARCH_ALIASES.get(raw_arch)
        if arch is None:
            raise InstallFailure(f"Unsupported architecture for {kind.value} runtime: {raw_arch}")
        return self.mirrors[kind].format(version=self.versions[kind], platform=system_name, arch=arch)

    def stage(self, kind: RuntimeKind, source_path: Path, *, url: Optional[str] = None) -> Path:
        """Install the runtime under ``node_modules/<kind>`` and return that directory."""

        download_url = url or self.url_for(kind)
        destination = source_path / "node_modules" / kind.value
        logger.info("Fetching %s runtime from %s", kind.value, download_url)

        with tempfile.TemporaryDirectory(prefix="bundlekit-runtime-") as tmp_dir:
            tarball = Path(tmp_dir) / "runtime.tar.gz"
            self._download(download_url, tarball)
            if destination.exists():
                shutil.rmtree(destination)
            destination.mkdir(parents=True)
            try:
                _extract_stripped(tarball, destination)
            except (tarfile.TarError, OSError) as exc:
                shutil.rmtree(destination, ignore_errors=True)
                raise InstallFailure(f"Unable to unpack {kind.value} runtime: {exc}") from exc
        return destination

    def _download(self, url: str, path: Path) -> None:
        try:
            response = self.session.get(url, stream=True, timeout=self.timeout)
            response.raise_for_status()
            with path.open("wb") as handle:
                for chunk in response.iter_content(chunk_size=1024 * 1024):
                    if chunk:
                        handle.write(chunk)
        except RequestException as exc:
            raise InstallFailure(f"Runtime download failed: {exc}") from exc


def _extract_stripped(tarball: Path, destination: Path) -> None:
    """Extract ``tarball`` dropping its leading ``<name>-<version>/`` directory.

    Links must stay inside ``destination`` and only regular files,
    directories and links are accepted.
    """

    with tarfile.open(tarball, "r:*") as bundle:
        for member in bundle.getmembers():
            stripped = _strip_leading(member.name)
            if stripped is None:
                continue
            if not (member.isfile() or member.isdir() or member.issym() or member.islnk()):
                raise tarfile.TarError(f"Refusing special file {member.name}")
            member.name = stripped
            if member.islnk():
                linkname = _strip_leading(member.linkname)
                if linkname is None:
                    raise tarfile.TarError(f"Refusing hard link outside the runtime: {member.linkname}")
                member.linkname = linkname
            elif member.issym() and not _link_stays_inside(stripped, member.linkname):
                raise tarfile.TarError(f"Refusing symlink {stripped} -> {member.linkname}")
            bundle.extract(member, destination, **_EXTRACT_KWARGS)


def _strip_leading(name: str) -> Optional[str]:
    parts = PurePosixPath(name).parts[1:]
    if not parts or ".." in parts:
        return None
    return "/".join(parts)


def _link_stays_inside(name: str, linkname: str) -> bool:
    if not linkname or linkname.startswith("/"):
        return False
    resolved = posixpath.normpath(posixpath.join(posixpath.dirname(name), linkname))
    return resolved != ".." and not resolved.startswith("../")


__all__ = ["RUNTIME_MIRRORS", "RUNTIME_VERSIONS", "RuntimeFetcher", "RuntimeKind"]
