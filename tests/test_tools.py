from __future__ import annotations

from pathlib import Path

import yaml

from bundlekit.defaults import CliDefaults
from bundlekit.tools import clean, parse_ports, rm, scaffold_config


def _build_outputs(root: Path) -> dict[str, Path]:
    paths = {
        "cache": root / "node_modules" / ".cache" / "bundlekit",
        "manifest": root / "config" / "manifest.json",
        "build": root / "public",
    }
    paths["cache"].mkdir(parents=True)
    paths["manifest"].parent.mkdir(parents=True)
    paths["manifest"].write_text("{}", encoding="utf-8")
    paths["build"].mkdir()
    return paths


def test_clean_defaults_to_compile_cache(project: Path) -> None:
    paths = _build_outputs(project)

    removed = clean(project)

    assert removed == [paths["cache"]]
    assert paths["manifest"].exists()
    assert paths["build"].exists()


def test_clean_all_removes_manifest_and_build_dir(project: Path) -> None:
    paths = _build_outputs(project)

    removed = clean(project, "all")

    assert removed == [paths["cache"], paths["manifest"], paths["build"]]
    assert not any(path.exists() for path in paths.values())


def test_clean_custom_path_and_missing_path(project: Path) -> None:
    (project / "tmp" / "nested").mkdir(parents=True)
    assert clean(project, "tmp") == [project / "tmp"]
    assert clean(project, "tmp") == []
    assert rm(project / "never-created") is False


def test_parse_ports() -> None:
    assert parse_ports(None) == [7001, 9000, 9001]
    assert parse_ports("8080, 3000,abc") == [8080, 3000]
    assert parse_ports(7002) == [7002]
    assert parse_ports(None, CliDefaults(kill_ports=(5000,))) == [5000]


def test_scaffold_config_writes_yaml_and_npmrc(project: Path) -> None:
    written = scaffold_config(project, framework="vue", registry="https://registry.example.com")

    assert written == [project / "bundlekit.yml", project / ".npmrc"]
    payload = yaml.safe_load((project / "bundlekit.yml").read_text(encoding="utf-8"))
    assert payload["framework"] == "vue"
    assert payload["entry"] == {"app": "src/app.js"}
    assert payload["type"] == ["client"]
    assert (project / ".npmrc").read_text(encoding="utf-8") == "registry=https://registry.example.com\n"


def test_scaffold_config_keeps_existing_file(project: Path) -> None:
    config = project / "bundlekit.yml"
    config.write_text("framework: react\n", encoding="utf-8")

    assert scaffold_config(project) == []
    assert config.read_text(encoding="utf-8") == "framework: react\n"
