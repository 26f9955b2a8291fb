"""Directory walking with .gitignore and configured exclusions."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterator, List, Sequence

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "node_modules",
    "__pycache__",
    ".pytest_cache",
    ".idea",
}

_EXCLUDED_DIR_PREFIXES = ("bazel-",)


@dataclass
class IgnoreRule:
    """Represents an ignore rule parsed from .gitignore or .closuregen.yml."""

    pattern: str
    directory_only: bool
    anchored: bool
    negate: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if self.directory_only and not is_dir:
            return False

        target = rel_path
        if self.anchored or self.has_slash:
            if fnmatchcase(target, self.pattern):
                return True
            if self.directory_only and target.startswith(f"{self.pattern}/"):
                return True
            return False

        for part in target.split("/"):
            if fnmatchcase(part, self.pattern):
                return True
        return False


@dataclass
class DirectoryListing:
    """One directory of the walk: its relative path and regular files."""

    rel: str
    path: Path
    regular_files: List[str] = field(default_factory=list)
    subdirs: List[str] = field(default_factory=list)


def _build_ignore_rule(pattern: str, negate: bool = False) -> IgnoreRule | None:
    pattern = pattern.strip()
    if not pattern:
        return None

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern[:-1]

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern[1:]

    has_slash = "/" in pattern
    return IgnoreRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        negate=negate,
        has_slash=has_slash,
    )


def _parse_gitignore(path: Path) -> List[IgnoreRule]:
    if not path.exists():
        return []

    rules: List[IgnoreRule] = []
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        negate = line.startswith("!")
        if negate:
            line = line[1:]
        rule = _build_ignore_rule(line, negate=negate)
        if rule is not None:
            rules.append(rule)
    return rules


def _load_ignore_rules(root: Path, exclude_paths: Sequence[str]) -> List[IgnoreRule]:
    rules = _parse_gitignore(root / ".gitignore")
    for pattern in exclude_paths:
        rule = _build_ignore_rule(pattern)
        if rule is not None:
            rules.append(rule)
    return rules


def _should_ignore(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    ignored = False
    for rule in rules:
        if rule.matches(rel_path, is_dir):
            ignored = not rule.negate
    return ignored


def _excluded_dir(name: str) -> bool:
    return name in _EXCLUDED_DIRS or name.startswith(_EXCLUDED_DIR_PREFIXES)


class DirectoryScanner:
    """Walks a source tree top-down, one directory at a time."""

    def walk(self, root: Path, exclude_paths: Sequence[str] = ()) -> Iterator[DirectoryListing]:
        """Yield a listing per directory, parents before children, names sorted."""
        root_path = root.expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Repository path not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Repository path is not a directory: {root}")

        rules = _load_ignore_rules(root_path, exclude_paths)
        for dirpath, dirnames, filenames in os.walk(root_path):
            current_dir = Path(dirpath)
            rel_dir = current_dir.relative_to(root_path).as_posix() if current_dir != root_path else ""

            filtered_dirs = []
            for name in sorted(dirnames):
                if _excluded_dir(name):
                    continue
                rel_path = f"{rel_dir}/{name}" if rel_dir else name
                if _should_ignore(rel_path, True, rules):
                    continue
                filtered_dirs.append(name)
            dirnames[:] = filtered_dirs

            regular_files: List[str] = []
            for filename in sorted(filenames):
                rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
                if _should_ignore(rel_path, False, rules):
                    continue
                if not (current_dir / filename).is_file():
                    continue
                regular_files.append(filename)

            yield DirectoryListing(
                rel=rel_dir,
                path=current_dir,
                regular_files=regular_files,
                subdirs=list(filtered_dirs),
            )


__all__ = ["DirectoryListing", "DirectoryScanner", "IgnoreRule"]
