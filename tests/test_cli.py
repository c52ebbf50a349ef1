from __future__ import annotations

import json
import zipfile
from contextlib import redirect_stdout
from io import StringIO
from pathlib import Path
from typing import Tuple

import pytest

import bundlekit
from bundlekit.archive.utils import compute_sha256
from bundlekit.cli import commands

from conftest import FakeBundler, FakeInstaller


def _run_cli(argv: list[str]) -> Tuple[int, str]:
    buffer = StringIO()
    with redirect_stdout(buffer):
        exit_code = commands.main(argv)
    return exit_code, buffer.getvalue()


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("BUNDLEKIT_ENV", raising=False)


def _use_bundler(monkeypatch: pytest.MonkeyPatch, bundler: FakeBundler) -> None:
    monkeypatch.setattr(commands, "_build_bundler", lambda base_dir, defaults: bundler)


def test_version_string_present() -> None:
    assert isinstance(bundlekit.__version__, str)
    assert bundlekit.__version__


def test_build_reports_each_target(project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (project / "bundlekit.yml").write_text("type: [client, server]\n", encoding="utf-8")
    bundler = FakeBundler()
    _use_bundler(monkeypatch, bundler)

    exit_code, out = _run_cli(["--base-dir", str(project), "build", "prod"])

    assert exit_code == 0
    payload = json.loads(out)
    assert payload["ok"] is True
    assert [result["target"] for result in payload["results"]] == ["client", "server"]
    assert bundler.compiled == ["client", "server"]


def test_build_exit_code_when_target_fails(project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (project / "bundlekit.yml").write_text("type: [client, server]\n", encoding="utf-8")
    _use_bundler(monkeypatch, FakeBundler(fail_targets=["server"]))

    exit_code, out = _run_cli(["--base-dir", str(project), "build"])

    assert exit_code == 1
    payload = json.loads(out)
    assert payload["failed_targets"] == ["server"]


def test_missing_explicit_config_exits_with_error(project: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code, out = _run_cli(["-f", "missing.yml", "--base-dir", str(project), "build"])

    assert exit_code == 2
    assert out == ""
    assert "missing.yml" in capsys.readouterr().err


def test_print_node_path(project: Path) -> None:
    (project / "bundlekit.yml").write_text("plugins:\n  - name: banner\n", encoding="utf-8")

    exit_code, out = _run_cli(["--base-dir", str(project), "print", "-n", "plugins"])

    assert exit_code == 0
    header, _, body = out.partition("\n")
    assert header == "bundlekit: client plugins info:"
    assert json.loads(body) == [{"name": "banner"}]


def test_print_whole_config(project: Path) -> None:
    exit_code, out = _run_cli(["--base-dir", str(project), "-t", "web", "print"])

    assert exit_code == 0
    header, _, body = out.partition("\n")
    assert header == "bundlekit: config info:"
    assert json.loads(body)["target"] == "web"


def test_zip_command_reports_checksum(project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (project / "index.js").write_text("module.exports = 1;\n", encoding="utf-8")
    installer = FakeInstaller()
    monkeypatch.setattr(commands, "_build_installer", lambda: installer)

    exit_code, out = _run_cli(
        ["--base-dir", str(project), "zip", "--filename", "site", "--target", "out", "--deps", "--mode", "yarn"]
    )

    assert exit_code == 0
    payload = json.loads(out)
    archive_path = Path(payload["archive_path"])
    assert archive_path == (project / "out" / "site.zip").resolve()
    assert payload["format"] == "zip"
    assert payload["checksum"]["sha256"] == compute_sha256(archive_path)
    with zipfile.ZipFile(archive_path) as archive:
        assert "index.js" in archive.namelist()
    assert installer.calls[0]["package_manager"] == "yarn"
    assert installer.calls[0]["production"] is True


def test_clean_removes_compile_cache(project: Path) -> None:
    cache = project / "node_modules" / ".cache" / "bundlekit"
    cache.mkdir(parents=True)
    (cache / "client.json").write_text("{}", encoding="utf-8")

    exit_code, out = _run_cli(["--base-dir", str(project), "clean"])

    assert exit_code == 0
    assert json.loads(out) == {"removed": [str(cache.resolve())]}
    assert not cache.exists()


def test_upgrade_uses_requested_package_manager(project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    installer = FakeInstaller()
    monkeypatch.setattr(commands, "_build_installer", lambda: installer)

    exit_code, out = _run_cli(["--base-dir", str(project), "upgrade", "--mode", "pnpm"])

    assert exit_code == 0
    assert json.loads(out)["package_manager"] == "pnpm"
    assert installer.calls == [{"package_manager": "pnpm", "cwd": project.resolve(), "upgrade": True}]


def test_server_exit_code_reflects_prebuild_failure(project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (project / "bundlekit.yml").write_text("type: [client, server]\n", encoding="utf-8")
    bundler = FakeBundler(fail_targets=["server"])
    _use_bundler(monkeypatch, bundler)

    exit_code, out = _run_cli(["--base-dir", str(project), "server"])

    assert exit_code == 1
    assert json.loads(out)["failed_targets"] == ["server"]
    assert bundler.compiled == ["server"]
    assert len(bundler.served) == 1
