"""Configuration loading for closuregen (.closuregen.yml and directory directives)."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import yaml

from .label import Label

CONFIG_FILENAME = ".closuregen.yml"
DEFAULT_BUILD_FILE_NAME = "BUILD.yml"
JS_LANG = "js"


class ConfigError(RuntimeError):
    """Raised when the configuration cannot be parsed."""


@dataclass
class JsConfig:
    """Per-directory settings for JS rule generation.

    ``prefix`` is prepended to repository paths when synthetic ``es6:``
    identifiers are generated. ``prefix_rel`` is the directory where it was
    set ("" for the root). Synthetic identifiers are only produced when
    ``prefix_set`` is true.
    """

    prefix: str = ""
    prefix_rel: str = ""
    prefix_set: bool = False
    overrides: Dict[Tuple[str, str], Label] = field(default_factory=dict)

    def clone(self) -> "JsConfig":
        return replace(self, overrides=dict(self.overrides))

    def set_prefix(self, prefix: str, rel: str) -> None:
        self.prefix = prefix.strip("/")
        self.prefix_rel = rel
        self.prefix_set = True

    def add_override(self, identifier: str, label: Label, lang: str = JS_LANG) -> None:
        self.overrides[(lang, identifier)] = label

    def find_override(self, lang: str, identifier: str) -> Optional[Label]:
        return self.overrides.get((lang, identifier))


@dataclass
class ProjectConfig:
    """Represents the settings defined in .closuregen.yml."""

    root: Path
    js: JsConfig = field(default_factory=JsConfig)
    build_file_name: str = DEFAULT_BUILD_FILE_NAME
    exclude_paths: List[str] = field(default_factory=list)
    external_library: Dict[str, str] = field(default_factory=dict)


def load_config(config_path: Path) -> ProjectConfig:
    """Load configuration from disk, returning defaults when the file is missing."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return ProjectConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    js = JsConfig()
    prefix = _as_str(data.get("js_prefix"))
    if prefix is not None:
        js.set_prefix(prefix, "")
    for identifier, label, lang in _parse_resolve_entries(data.get("resolve")):
        js.add_override(identifier, label, lang)

    build_file_name = _as_str(data.get("build_file_name")) or DEFAULT_BUILD_FILE_NAME
    if "/" in build_file_name:
        raise ConfigError("build_file_name must be a plain file name")

    external_data = data.get("external_library")
    if external_data is not None and not isinstance(external_data, dict):
        raise ConfigError("external_library must be a mapping of identifier to label")
    external_library = {
        str(key): str(value) for key, value in _as_dict(external_data).items()
    }

    return ProjectConfig(
        root=root,
        js=js,
        build_file_name=build_file_name,
        exclude_paths=_as_str_list(data.get("exclude_paths")),
        external_library=external_library,
    )


def configure_directory(
    parent: JsConfig,
    rel: str,
    directives: Mapping[str, Any] | None,
    rules: Sequence[Mapping[str, Any]] = (),
) -> JsConfig:
    """Derive the config for directory ``rel`` from its parent and build file.

    ``directives`` is the ``directives`` mapping of the directory's build file.
    When no directive sets the prefix, a ``gazelle`` rule carrying a
    ``js_prefix`` attribute does.
    """
    config = parent.clone()
    directives = directives or {}

    prefix_set_here = False
    prefix = _as_str(directives.get("js_prefix"))
    if prefix is not None:
        config.set_prefix(prefix, rel)
        prefix_set_here = True

    for identifier, label, lang in _parse_resolve_entries(directives.get("resolve")):
        config.add_override(identifier, label, lang)

    if not prefix_set_here:
        for rule in rules:
            if rule.get("kind") != "gazelle":
                continue
            rule_prefix = _as_str(rule.get("js_prefix"))
            if rule_prefix:
                config.set_prefix(rule_prefix, rel)
                break

    return config


def _parse_resolve_entries(value: Any) -> List[Tuple[str, Label, str]]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigError("resolve must be a list of {import, label} entries")

    entries: List[Tuple[str, Label, str]] = []
    for raw in value:
        if not isinstance(raw, dict):
            raise ConfigError("resolve entries must be mappings")
        identifier = _as_str(raw.get("import"))
        label_text = _as_str(raw.get("label"))
        if not identifier or not label_text:
            raise ConfigError("resolve entries need both 'import' and 'label'")
        try:
            label = Label.parse(label_text)
        except ValueError as exc:
            raise ConfigError(f"Invalid resolve label for {identifier}: {exc}") from exc
        lang = _as_str(raw.get("lang")) or JS_LANG
        entries.append((identifier, label, lang))
    return entries


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "DEFAULT_BUILD_FILE_NAME",
    "JS_LANG",
    "JsConfig",
    "ProjectConfig",
    "configure_directory",
    "load_config",
]
