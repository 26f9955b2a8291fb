"""Tests for closuregen.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from closuregen.config import (
    ConfigError,
    JsConfig,
    ProjectConfig,
    configure_directory,
    load_config,
)
from closuregen.label import Label


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, ProjectConfig)
    assert config.root == tmp_path.resolve()
    assert config.js.prefix_set is False
    assert config.js.overrides == {}
    assert config.build_file_name == "BUILD.yml"
    assert config.exclude_paths == []
    assert config.external_library == {}


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    (tmp_path / ".closuregen.yml").write_text(
        """
js_prefix: corp/web/
build_file_name: BUILD.closure.yml
exclude_paths:
  - dist/
  - "*.min.js"
resolve:
  - import: corp.legacy
    label: //third_party/legacy:legacy
  - import: corp.other
    label: "@vendor//other"
    lang: js
external_library:
  goog.custom.Thing: "@io_bazel_rules_closure//closure/library/custom:thing"
""",
        encoding="utf-8",
    )

    config = load_config(tmp_path / ".closuregen.yml")

    assert config.js.prefix == "corp/web"
    assert config.js.prefix_set is True
    assert config.js.prefix_rel == ""
    assert config.js.find_override("js", "corp.legacy") == Label(
        pkg="third_party/legacy", name="legacy"
    )
    assert config.js.find_override("js", "corp.other") == Label(
        repo="vendor", pkg="other", name="other"
    )
    assert config.js.find_override("go", "corp.legacy") is None
    assert config.build_file_name == "BUILD.closure.yml"
    assert config.exclude_paths == ["dist/", "*.min.js"]
    assert config.external_library == {
        "goog.custom.Thing": "@io_bazel_rules_closure//closure/library/custom:thing"
    }


def test_explicit_empty_prefix_counts_as_set(tmp_path: Path) -> None:
    (tmp_path / ".closuregen.yml").write_text('js_prefix: ""\n', encoding="utf-8")

    config = load_config(tmp_path)

    assert config.js.prefix == ""
    assert config.js.prefix_set is True


@pytest.mark.parametrize(
    "content",
    [
        "- just\n- a list\n",
        "resolve: corp.a\n",
        "resolve:\n  - import: corp.a\n",
        "resolve:\n  - import: corp.a\n    label: not-a-label\n",
        "external_library: [goog.a]\n",
        "build_file_name: sub/BUILD.yml\n",
        "js_prefix: [unclosed\n",
    ],
)
def test_load_config_rejects_malformed_files(tmp_path: Path, content: str) -> None:
    (tmp_path / ".closuregen.yml").write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_configure_directory_inherits_and_overrides() -> None:
    root = JsConfig()
    root.set_prefix("corp", "")
    root.add_override("corp.a", Label.parse("//a"))

    child = configure_directory(
        root,
        "web",
        {
            "js_prefix": "corp/web",
            "resolve": [{"import": "corp.b", "label": "//b"}],
        },
    )

    assert child.prefix == "corp/web"
    assert child.prefix_rel == "web"
    assert child.find_override("js", "corp.a") == Label(pkg="a", name="a")
    assert child.find_override("js", "corp.b") == Label(pkg="b", name="b")
    assert root.prefix == "corp"
    assert root.find_override("js", "corp.b") is None


def test_configure_directory_reads_prefix_from_gazelle_rule() -> None:
    child = configure_directory(
        JsConfig(),
        "app",
        None,
        [{"kind": "gazelle", "name": "gazelle", "js_prefix": "corp/app"}],
    )

    assert child.prefix_set is True
    assert child.prefix == "corp/app"
    assert child.prefix_rel == "app"


def test_directive_prefix_wins_over_gazelle_rule() -> None:
    child = configure_directory(
        JsConfig(),
        "app",
        {"js_prefix": "from/directive"},
        [{"kind": "gazelle", "name": "gazelle", "js_prefix": "from/rule"}],
    )

    assert child.prefix == "from/directive"
