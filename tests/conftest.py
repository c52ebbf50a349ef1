from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import pytest

from bundlekit.build.bundler import Bundler
from bundlekit.config.assembled import AssembledConfig, entry_target
from bundlekit.errors import BuildFailure, InstallFailure


class FakeBundler(Bundler):
    name = "fake"

    def __init__(self, fail_targets: Sequence[str] = ()) -> None:
        self.fail_targets = set(fail_targets)
        self.compiled: List[str] = []
        self.served: List[tuple[Any, int]] = []

    def compile(self, config: Dict[str, Any]) -> List[str]:
        target = entry_target(config)
        self.compiled.append(target)
        if target in self.fail_targets:
            raise BuildFailure(target, "compilation error")
        return [f"compiled {target}"]

    def serve(self, assembled: AssembledConfig, port: int) -> None:
        self.served.append((assembled, port))


class FakeInstaller:
    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.calls: List[Dict[str, Any]] = []

    def install(
        self,
        package_manager: str,
        registry: Optional[str] = None,
        cwd: Optional[Path] = None,
        *,
        packages: Optional[Sequence[str]] = None,
        production: bool = False,
        dev: bool = False,
    ) -> None:
        self.calls.append(
            {
                "package_manager": package_manager,
                "registry": registry,
                "cwd": cwd,
                "packages": list(packages or []),
                "production": production,
                "dev": dev,
            }
        )
        if self.fail:
            raise InstallFailure(f"{package_manager} install failed")

    def upgrade(self, package_manager: str, cwd: Optional[Path] = None) -> None:
        self.calls.append({"package_manager": package_manager, "cwd": cwd, "upgrade": True})


@pytest.fixture()
def fake_bundler() -> FakeBundler:
    return FakeBundler()


@pytest.fixture()
def fake_installer() -> FakeInstaller:
    return FakeInstaller()


@pytest.fixture()
def project(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    root.mkdir()
    return root
