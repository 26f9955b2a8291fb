"""Project-wide index from provided identifier to the targets providing it."""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Tuple

from ..label import Label
from ..models import DeclaredInterface


class ResolutionIndex:
    """Read-only view of every importable target's provided identifiers.

    Built by :class:`IndexBuilder`; nothing can be added once resolution
    starts. Several providers for one identifier are kept so that callers
    can report the ambiguity instead of picking one.
    """

    def __init__(self, entries: Mapping[str, Tuple[Label, ...]]) -> None:
        self._entries = MappingProxyType(dict(entries))

    def find(self, identifier: str) -> Tuple[Label, ...]:
        return self._entries.get(identifier, ())

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


class IndexBuilder:
    """Collects declared interfaces while directories are being generated."""

    def __init__(self) -> None:
        self._entries: Dict[str, Dict[Label, None]] = {}
        self._built = False

    def add(self, label: Label, interface: DeclaredInterface) -> None:
        if self._built:
            raise RuntimeError("Cannot add to an index that has already been built")
        for identifier in interface.provides:
            self._entries.setdefault(identifier, {})[label] = None

    def build(self) -> ResolutionIndex:
        self._built = True
        frozen: Dict[str, Tuple[Label, ...]] = {
            identifier: tuple(labels) for identifier, labels in self._entries.items()
        }
        return ResolutionIndex(frozen)


__all__ = ["IndexBuilder", "ResolutionIndex"]
