"""Per-directory build files (BUILD.yml) holding directives and rules."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from ..models import BuildRule


class BuildFileError(RuntimeError):
    """Raised when a build file cannot be parsed."""


@dataclass
class BuildFile:
    """Directives and rules declared in one directory's build file."""

    path: Path
    directives: Dict[str, Any] = field(default_factory=dict)
    rules: List[BuildRule] = field(default_factory=list)

    def raw_rules(self) -> List[Dict[str, Any]]:
        return [rule.to_dict() for rule in self.rules]


def load_build_file(path: Path) -> Optional[BuildFile]:
    """Return the parsed build file at ``path``, or None when it does not exist."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except OSError as exc:
        raise BuildFileError(f"Failed to read {path}: {exc}") from exc

    try:
        data = yaml.safe_load(text) if text.strip() else {}
    except yaml.YAMLError as exc:
        raise BuildFileError(f"Failed to parse {path}: {exc}") from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise BuildFileError(f"{path} must contain a mapping at the root")

    directives = data.get("directives") or {}
    if not isinstance(directives, dict):
        raise BuildFileError(f"{path}: directives must be a mapping")

    raw_rules = data.get("rules") or []
    if not isinstance(raw_rules, list):
        raise BuildFileError(f"{path}: rules must be a list")

    rules: List[BuildRule] = []
    for index, raw in enumerate(raw_rules):
        if not isinstance(raw, dict):
            raise BuildFileError(f"{path}: rule #{index} must be a mapping")
        kind = raw.get("kind")
        name = raw.get("name")
        if not isinstance(kind, str) or not isinstance(name, str):
            raise BuildFileError(f"{path}: rule #{index} needs a string kind and name")
        attrs = {key: value for key, value in raw.items() if key not in {"kind", "name"}}
        rules.append(BuildRule(kind=kind, name=name, attrs=attrs))

    return BuildFile(path=path, directives=dict(directives), rules=rules)


def write_build_file(build_file: BuildFile) -> None:
    """Write ``build_file`` to its path, keeping rule and attribute order."""
    payload: Dict[str, Any] = {}
    if build_file.directives:
        payload["directives"] = build_file.directives
    payload["rules"] = build_file.raw_rules()
    build_file.path.parent.mkdir(parents=True, exist_ok=True)
    build_file.path.write_text(render_yaml(payload), encoding="utf-8")


def render_yaml(payload: Any) -> str:
    return yaml.safe_dump(payload, sort_keys=False, default_flow_style=False)


__all__ = [
    "BuildFile",
    "BuildFileError",
    "load_build_file",
    "render_yaml",
    "write_build_file",
]
