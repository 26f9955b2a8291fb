"""Lookup table for the Closure Library's targets."""

from __future__ import annotations

from importlib import resources
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml

from ..config import ConfigError
from ..label import Label
from ..models import InvariantError

CLOSURE_LIBRARY_PREFIX = "goog."
_DEFAULT_TABLE = "closure_library.yml"


class ExternalLibraryTable:
    """Maps identifiers under one reserved namespace to fixed targets."""

    def __init__(self, prefix: str, entries: Mapping[str, Label]) -> None:
        self.prefix = prefix
        self._entries: Dict[str, Label] = dict(entries)

    def matches(self, identifier: str) -> bool:
        return identifier.startswith(self.prefix)

    def lookup(self, identifier: str) -> Optional[Label]:
        """Return the target for ``identifier``, or None when the table lacks it.

        Callers must check :meth:`matches` first.
        """
        if not identifier.startswith(self.prefix):
            raise InvariantError(f"expected a {self.prefix}* identifier: {identifier!r}")
        return self._entries.get(identifier)

    def extended(self, extra: Mapping[str, str]) -> "ExternalLibraryTable":
        """Return a copy of the table with ``extra`` entries layered on top."""
        entries = dict(self._entries)
        entries.update(_parse_entries(self.prefix, extra))
        return ExternalLibraryTable(self.prefix, entries)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._entries

    def __len__(self) -> int:
        return len(self._entries)


def load_external_table(path: Path | None = None) -> ExternalLibraryTable:
    """Load a table file, defaulting to the packaged Closure Library table."""
    if path is None:
        text = resources.files("closuregen.data").joinpath(_DEFAULT_TABLE).read_text(
            encoding="utf-8"
        )
        source = _DEFAULT_TABLE
    else:
        text = path.read_text(encoding="utf-8")
        source = path.name

    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {source}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{source} must contain a mapping at the root")

    prefix = str(data.get("prefix") or CLOSURE_LIBRARY_PREFIX)
    targets = data.get("targets") or {}
    if not isinstance(targets, dict):
        raise ConfigError(f"{source}: targets must be a mapping")
    return ExternalLibraryTable(prefix, _parse_entries(prefix, targets))


def _parse_entries(prefix: str, raw: Mapping[str, str]) -> Dict[str, Label]:
    entries: Dict[str, Label] = {}
    for identifier, label_text in raw.items():
        identifier = str(identifier)
        if not identifier.startswith(prefix):
            raise ConfigError(f"{identifier!r} is outside the {prefix}* namespace")
        try:
            entries[identifier] = Label.parse(str(label_text))
        except ValueError as exc:
            raise ConfigError(f"Invalid label for {identifier}: {exc}") from exc
    return entries


__all__ = [
    "CLOSURE_LIBRARY_PREFIX",
    "ExternalLibraryTable",
    "load_external_table",
]
