"""Build target labels (``@repo//pkg:name``)."""

from __future__ import annotations

import posixpath
import re
from dataclasses import dataclass

_REPO_RE = re.compile(r"^[A-Za-z0-9_.~+-]*$")
_NAME_RE = re.compile(r"^[A-Za-z0-9_./+@=,~#-]+$")


@dataclass(frozen=True, order=True)
class Label:
    """A reference to a build target."""

    repo: str = ""
    pkg: str = ""
    name: str = ""

    @classmethod
    def parse(cls, text: str) -> "Label":
        """Parse an absolute label such as ``@repo//pkg:name`` or ``//pkg``."""
        value = text.strip()
        repo = ""
        if value.startswith("@"):
            if "//" not in value:
                raise ValueError(f"Label has no package part: {text!r}")
            repo, value = value[1:].split("//", 1)
            if not _REPO_RE.match(repo):
                raise ValueError(f"Invalid repository name in label: {text!r}")
        elif value.startswith("//"):
            value = value[2:]
        else:
            raise ValueError(f"Label must be absolute: {text!r}")

        if ":" in value:
            pkg, name = value.split(":", 1)
        else:
            pkg = value
            name = posixpath.basename(value)
        pkg = pkg.rstrip("/")
        if not name or not _NAME_RE.match(name):
            raise ValueError(f"Invalid target name in label: {text!r}")
        return cls(repo=repo, pkg=pkg, name=name)

    def rel(self, repo: str, pkg: str) -> str:
        """Render the label relative to the package ``repo//pkg``."""
        if self.repo == repo and self.pkg == pkg:
            return f":{self.name}"
        return str(self)

    def __str__(self) -> str:
        prefix = f"@{self.repo}" if self.repo else ""
        return f"{prefix}//{self.pkg}:{self.name}"


__all__ = ["Label"]
