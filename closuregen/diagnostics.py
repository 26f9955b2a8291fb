"""Collection of non-fatal problems reported during a generation pass."""

from __future__ import annotations

from typing import Iterator, List, Optional

from .logging import get_logger
from .models import Diagnostic

READ_FAILURE = "read-failure"
GROUPING_ANOMALY = "grouping-anomaly"
DUPLICATE_TARGET = "duplicate-target"
AMBIGUOUS_IMPORT = "ambiguous-import"
EXTERNAL_NOT_FOUND = "external-not-found"
MISSING_PREFIX = "missing-prefix"
BUILD_FILE = "build-file"


class Diagnostics:
    """Accumulates diagnostics and mirrors each one to the log."""

    def __init__(self) -> None:
        self._items: List[Diagnostic] = []
        self._logger = get_logger("diagnostics")

    def report(
        self,
        kind: str,
        message: str,
        *,
        target: Optional[str] = None,
        path: Optional[str] = None,
    ) -> Diagnostic:
        diagnostic = Diagnostic(kind=kind, message=message, target=target, path=path)
        self._items.append(diagnostic)
        self._logger.warning("%s: %s", kind, message)
        return diagnostic

    def of_kind(self, kind: str) -> List[Diagnostic]:
        return [item for item in self._items if item.kind == kind]

    @property
    def items(self) -> List[Diagnostic]:
        return list(self._items)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)


__all__ = [
    "AMBIGUOUS_IMPORT",
    "BUILD_FILE",
    "DUPLICATE_TARGET",
    "Diagnostics",
    "EXTERNAL_NOT_FOUND",
    "GROUPING_ANOMALY",
    "MISSING_PREFIX",
    "READ_FAILURE",
]
