"""Matcher for the declaration statements closuregen understands.

Recognized statements, each anchored at the start of a line:

* ``goog.provide('id')`` / ``goog.module('id')`` / ``goog.require('id')``,
  optionally assigned: ``const x = goog.require('id')`` or destructured
  ``const {a, b} = goog.require('id')`` (the pattern may span lines).
* ``goog.setTestOnly(...)``.
* ES module imports of sibling files: ``import {x} from './x.js'`` and
  ``import '../side_effect.js'``.

String literals and comments are consumed before declarations are matched,
so commented-out statements never produce declarations and a string such as
``'src/*.js'`` never opens a comment.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from .models import InvariantError


class DeclarationKind(str, Enum):
    PROVIDE = "provide"
    MODULE = "module"
    REQUIRE = "require"
    TEST_ONLY = "test_only"
    IMPORT = "import"


@dataclass(frozen=True)
class Declaration:
    """One matched declaration and the span of text it came from."""

    kind: DeclarationKind
    identifier: str
    start: int
    end: int


_VERBS = {
    "provide": DeclarationKind.PROVIDE,
    "module": DeclarationKind.MODULE,
    "require": DeclarationKind.REQUIRE,
    "setTestOnly": DeclarationKind.TEST_ONLY,
}

_TOKEN_RE = re.compile(
    r"""
    (?P<string>'(?:\\.|[^'\\\n])*'|"(?:\\.|[^"\\\n])*"|`(?:\\.|[^`\\])*`)
    |
    (?P<comment>/\*.*?\*/|//[^\n]*)
    |
    ^[ \t]*
    (?:
        (?:const|let|var)\s+(?:[\w$]+|\{[^}]*\})\s*=\s*
      | \}\s*=\s*
    )?
    goog\.(?P<verb>provide|module|require|setTestOnly)\(\s*
    (?:(?P<quote>['"])(?P<identifier>[^'"\n]*)(?P=quote))?
    |
    ^[ \t]*import\s+
    (?:[\w$*{}\s,]+?\s+from\s+)?
    (?P<import_quote>['"])(?P<source>\.{1,2}/[^'"\n]+)(?P=import_quote)
    """,
    re.MULTILINE | re.DOTALL | re.VERBOSE,
)


def tokenize(text: str) -> Iterator[Declaration]:
    """Yield the declarations found in ``text`` in source order."""
    for match in _TOKEN_RE.finditer(text):
        if match.group("string") is not None or match.group("comment") is not None:
            continue

        source = match.group("source")
        if source is not None:
            yield Declaration(DeclarationKind.IMPORT, source, match.start(), match.end())
            continue

        kind = _declaration_kind(match.group("verb"))
        identifier = match.group("identifier")
        if kind is DeclarationKind.TEST_ONLY:
            yield Declaration(kind, identifier or "", match.start(), match.end())
        elif identifier:
            yield Declaration(kind, identifier, match.start(), match.end())


def _declaration_kind(verb: str) -> DeclarationKind:
    try:
        return _VERBS[verb]
    except KeyError:
        raise InvariantError(f"unhandled declaration form: goog.{verb}") from None


__all__ = ["Declaration", "DeclarationKind", "tokenize"]
