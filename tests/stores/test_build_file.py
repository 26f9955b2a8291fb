"""Tests for the BUILD.yml store."""

from __future__ import annotations

from pathlib import Path

import pytest

from closuregen.models import BuildRule
from closuregen.stores import BuildFile, BuildFileError, load_build_file, write_build_file


def test_missing_build_file_returns_none(tmp_path: Path) -> None:
    assert load_build_file(tmp_path / "BUILD.yml") is None


def test_write_then_load_keeps_rule_and_attribute_order(tmp_path: Path) -> None:
    path = tmp_path / "pkg" / "BUILD.yml"
    build_file = BuildFile(
        path=path,
        directives={"js_prefix": "corp"},
        rules=[
            BuildRule(
                kind="closure_js_library",
                name="b",
                attrs={"srcs": ["b.js"], "visibility": ["//visibility:public"], "deps": [":a"]},
            ),
            BuildRule(kind="closure_js_library", name="a", attrs={"srcs": ["a.js"]}),
        ],
    )

    write_build_file(build_file)
    loaded = load_build_file(path)

    assert loaded is not None
    assert loaded.directives == {"js_prefix": "corp"}
    assert [rule.name for rule in loaded.rules] == ["b", "a"]
    assert list(loaded.rules[0].attrs) == ["srcs", "visibility", "deps"]
    text = path.read_text(encoding="utf-8")
    assert text.index("name: b") < text.index("name: a")


def test_empty_build_file_has_no_rules(tmp_path: Path) -> None:
    path = tmp_path / "BUILD.yml"
    path.write_text("", encoding="utf-8")

    loaded = load_build_file(path)

    assert loaded is not None
    assert loaded.rules == []
    assert loaded.directives == {}


@pytest.mark.parametrize(
    "content",
    [
        "rules: not-a-list\n",
        "rules:\n  - name: missing_kind\n",
        "rules:\n  - just-a-string\n",
        "directives: [js_prefix]\n",
        "[1, 2]\n",
        "rules: [unclosed\n",
    ],
)
def test_malformed_build_files_raise(tmp_path: Path, content: str) -> None:
    path = tmp_path / "BUILD.yml"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(BuildFileError):
        load_build_file(path)
