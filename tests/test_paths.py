from __future__ import annotations

from bundlekit.config.paths import deep_merge, get_by_path, split_path


def test_split_path_accepts_slashes_and_dots() -> None:
    assert split_path("module/rules") == ["module", "rules"]
    assert split_path("module.rules.0") == ["module", "rules", "0"]
    assert split_path("/plugins/") == ["plugins"]


def test_get_by_path_returns_none_for_missing_steps() -> None:
    tree = {"module": {"rules": [{"test": "js"}]}, "devtool": "eval"}
    assert get_by_path(tree, "module/rules") == [{"test": "js"}]
    assert get_by_path(tree, "module/rules/0/test") == "js"
    assert get_by_path(tree, "module/rules/3") is None
    assert get_by_path(tree, "module/rules/first") is None
    assert get_by_path(tree, "devtool/name") is None
    assert get_by_path(tree, "missing") is None
    assert get_by_path(tree, "") is None


def test_deep_merge_copies_and_replaces_lists() -> None:
    base = {"output": {"path": "dist", "filename": "[name].js"}, "plugins": ["a"]}
    override = {"output": {"path": "public"}, "plugins": ["b"]}

    merged = deep_merge(base, None, override)

    assert merged == {"output": {"path": "public", "filename": "[name].js"}, "plugins": ["b"]}
    merged["output"]["filename"] = "changed"
    merged["plugins"].append("c")
    assert base["output"]["filename"] == "[name].js"
    assert override["plugins"] == ["b"]
