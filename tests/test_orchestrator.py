from __future__ import annotations

from pathlib import Path

from bundlekit.build.orchestrator import build, dll, print_config, server
from bundlekit.config.assembled import MultipleConfig, SingleConfig, from_entries
from bundlekit.config.assembler import assemble
from bundlekit.config.paths import deep_merge
from bundlekit.config.resolver import BASE_CONFIG, ResolvedConfig
from bundlekit.defaults import CliDefaults
from bundlekit.options import BuildOption, normalize

from conftest import FakeBundler


def _entries(*targets: str) -> MultipleConfig:
    return MultipleConfig(tuple({"target": target, "output": {"path": f"/out/{target}"}} for target in targets))


def test_build_continues_after_failed_target() -> None:
    bundler = FakeBundler(fail_targets=["web"])
    report = build(_entries("client", "web", "server"), BuildOption(), bundler)

    assert bundler.compiled == ["client", "web", "server"]
    assert not report.ok
    assert report.failed_targets == ["web"]
    assert [result.status for result in report.results] == ["succeeded", "failed", "succeeded"]
    assert "compilation error" in (report.results[1].error or "")


def test_build_single_config(fake_bundler: FakeBundler) -> None:
    report = build(SingleConfig({"target": "client"}), BuildOption(), fake_bundler)
    assert report.ok
    assert report.to_dict()["results"][0]["logs"] == ["compiled client"]


def test_dll_builds_only_vendor_bundle(tmp_path: Path, fake_bundler: FakeBundler) -> None:
    resolved = ResolvedConfig(
        base_dir=tmp_path,
        source_config=deep_merge(BASE_CONFIG, {"type": ["client", "server"], "dll": ["vue"]}),
    )
    report = dll(resolved, normalize({"type": "client"}), fake_bundler)
    assert report.ok
    assert fake_bundler.compiled == ["dll"]


def test_server_prebuilds_node_targets_then_serves(fake_bundler: FakeBundler) -> None:
    report = server(_entries("dll", "client", "server"), BuildOption(), fake_bundler)

    assert fake_bundler.compiled == ["dll", "server"]
    assert report.ok
    served, port = fake_bundler.served[0]
    assert port == 7001
    assert isinstance(served, SingleConfig)
    assert served.as_payload()["target"] == "client"
    assert served.as_payload()["devServer"] == {"port": 7001}


def test_server_uses_requested_port_and_serves_when_only_node_targets() -> None:
    bundler = FakeBundler()
    server(from_entries([{"target": "server"}]), normalize({"port": "9100"}), bundler, defaults=CliDefaults())
    assert bundler.compiled == []
    served, port = bundler.served[0]
    assert port == 9100
    assert served.as_payload()["target"] == "server"


def test_server_still_serves_when_prebuild_fails() -> None:
    bundler = FakeBundler(fail_targets=["server"])
    report = server(_entries("client", "server"), BuildOption(), bundler)
    assert not report.ok
    assert len(bundler.served) == 1


def test_print_node_path_for_each_entry(tmp_path: Path) -> None:
    assembled = MultipleConfig(
        (
            {"target": "client", "plugins": [{"name": "a"}], "module": {"rules": [{"test": "js"}]}},
            {"target": "server"},
        )
    )
    assert print_config(assembled, "plugins") == [("client", [{"name": "a"}]), ("server", None)]
    assert print_config(assembled, "module/rules/0/test") == [("client", "js"), ("server", None)]
    assert print_config(assembled, "plugins", label="web") == [("web", [{"name": "a"}]), ("web", None)]


def test_print_without_node_returns_payload(tmp_path: Path) -> None:
    resolved = ResolvedConfig(base_dir=tmp_path, source_config=deep_merge(BASE_CONFIG))
    assembled = assemble(resolved, BuildOption())
    [(label, payload)] = print_config(assembled)
    assert label == "config"
    assert payload["target"] == "client"


class _InterruptedBundler(FakeBundler):
    def serve(self, assembled, port):  # type: ignore[no-untyped-def]
        super().serve(assembled, port)
        raise KeyboardInterrupt


def test_server_returns_prebuild_report_after_interrupt() -> None:
    bundler = _InterruptedBundler(fail_targets=["server"])
    report = server(_entries("client", "server"), BuildOption(), bundler)
    assert report.failed_targets == ["server"]
    assert len(bundler.served) == 1
