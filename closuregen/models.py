"""Core data models shared across closuregen components."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class InvariantError(RuntimeError):
    """Raised when an internal invariant of the generator is violated."""


class FileKind(str, Enum):
    """How a file is treated, based on its name only."""

    JS = "js"
    JSX = "jsx"
    HTML = "html"
    UNKNOWN = "unknown"

    @property
    def is_script(self) -> bool:
        return self in (FileKind.JS, FileKind.JSX)


@dataclass(frozen=True)
class SourceFile:
    """A single file and the declarations read from it.

    ``path`` is the repository-relative POSIX path. Content-derived fields
    stay empty for ``FileKind.UNKNOWN`` files.
    """

    path: str
    name: str
    kind: FileKind
    is_test: bool = False
    is_test_only: bool = False
    is_module: bool = False
    provides: Tuple[str, ...] = ()
    requires: Tuple[str, ...] = ()

    @property
    def stem(self) -> str:
        return posixpath.splitext(self.name)[0]

    @property
    def test_stem(self) -> str:
        """Return ``foo`` for ``foo_test.js`` / ``foo_test.html``."""
        index = self.name.find("_test.")
        if index < 0:
            return self.stem
        return self.name[:index]


@dataclass(frozen=True)
class DeclaredInterface:
    """Identifiers a unit provides and requires, handed to resolution."""

    provides: Tuple[str, ...] = ()
    requires: Tuple[str, ...] = ()


@dataclass
class BuildRule:
    """A build rule skeleton: kind, name and an ordered attribute map."""

    kind: str
    name: str
    attrs: Dict[str, Any] = field(default_factory=dict)

    def attr(self, key: str, default: Any = None) -> Any:
        return self.attrs.get(key, default)

    def attr_strings(self, key: str) -> List[str]:
        value = self.attrs.get(key)
        if isinstance(value, str):
            return [value]
        if isinstance(value, (list, tuple)):
            return [str(item) for item in value]
        return []

    def set_attr(self, key: str, value: Any) -> None:
        self.attrs[key] = value

    def del_attr(self, key: str) -> None:
        self.attrs.pop(key, None)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"kind": self.kind, "name": self.name}
        data.update(self.attrs)
        return data


class UnitKind(str, Enum):
    LIBRARY = "library"
    TEST = "test"
    COMBINED_TEST = "combined_test"
    GROUP = "group"

    @property
    def is_importable(self) -> bool:
        return self in (UnitKind.LIBRARY, UnitKind.GROUP)


@dataclass
class BuildUnit:
    """A synthesized buildable target and the interface it declares."""

    kind: UnitKind
    rule: BuildRule
    srcs: List[str]
    interface: DeclaredInterface

    @property
    def name(self) -> str:
        return self.rule.name


@dataclass
class Diagnostic:
    """A non-fatal problem found while generating rules."""

    kind: str
    message: str
    target: Optional[str] = None
    path: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "message": self.message,
            "target": self.target,
            "path": self.path,
        }
