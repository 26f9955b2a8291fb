"""File classification and declaration extraction."""

from __future__ import annotations

import posixpath
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from .config import JsConfig
from .declarations import DeclarationKind, tokenize
from .diagnostics import MISSING_PREFIX, READ_FAILURE, Diagnostics
from .logging import get_logger
from .models import FileKind, SourceFile

ES6_PREFIX = "es6:"

_KIND_BY_SUFFIX = {
    ".js": FileKind.JS,
    ".jsx": FileKind.JSX,
    ".html": FileKind.HTML,
}

_LOGGER = get_logger("fileinfo")


def classify(path: str) -> SourceFile:
    """Return what can be inferred from a file name without reading it."""
    name = posixpath.basename(path)
    stem, suffix = posixpath.splitext(name)

    kind = _KIND_BY_SUFFIX.get(suffix, FileKind.UNKNOWN)
    if name.startswith((".", "_")):
        kind = FileKind.UNKNOWN

    parts = stem.split("_")
    is_test = len(parts) >= 2 and parts[-1] == "test"

    return SourceFile(path=path, name=name, kind=kind, is_test=is_test)


def extract_declarations(
    source: SourceFile,
    data: bytes,
    config: Optional[JsConfig] = None,
    diagnostics: Optional[Diagnostics] = None,
) -> SourceFile:
    """Return ``source`` augmented with the declarations found in ``data``."""
    if source.kind is FileKind.UNKNOWN:
        return source

    text = data.decode("utf-8", errors="replace")
    provides: List[str] = []
    requires: List[str] = []
    imports: List[str] = []
    is_module = False
    is_test_only = False

    for declaration in tokenize(text):
        kind = declaration.kind
        if kind is DeclarationKind.PROVIDE:
            provides.append(declaration.identifier)
        elif kind is DeclarationKind.MODULE:
            is_module = True
            provides.append(declaration.identifier)
        elif kind is DeclarationKind.REQUIRE:
            requires.append(declaration.identifier)
        elif kind is DeclarationKind.TEST_ONLY:
            is_test_only = True
        elif kind is DeclarationKind.IMPORT:
            imports.append(declaration.identifier)

    if source.kind.is_script:
        synthetic_requires, synthetic_provides = _synthetic_identifiers(
            source, imports, has_provides=bool(provides), config=config, diagnostics=diagnostics
        )
        requires.extend(synthetic_requires)
        provides.extend(synthetic_provides)

    return replace(
        source,
        provides=tuple(provides),
        requires=tuple(requires),
        is_module=is_module,
        is_test_only=is_test_only,
    )


def read_source_file(
    root: Path,
    path: str,
    config: Optional[JsConfig] = None,
    diagnostics: Optional[Diagnostics] = None,
) -> SourceFile:
    """Classify and read ``root/path``.

    An unreadable file is reported and the classification-only record is
    returned so the rest of the directory can still be generated.
    """
    source = classify(path)
    if source.kind is FileKind.UNKNOWN:
        return source
    try:
        data = (root / path).read_bytes()
    except OSError as exc:
        message = f"{path}: error reading js file: {exc}"
        if diagnostics is not None:
            diagnostics.report(READ_FAILURE, message, path=path)
        else:
            _LOGGER.warning(message)
        return source
    return extract_declarations(source, data, config, diagnostics)


def synthetic_identifier(config: JsConfig, path: str) -> str:
    """Return the ``es6:`` identifier for the repository path ``path``."""
    if config.prefix_rel:
        path = posixpath.relpath(path, config.prefix_rel)
    joined = posixpath.normpath(posixpath.join(config.prefix, path))
    return ES6_PREFIX + "/" + joined.lstrip("/")


def _synthetic_identifiers(
    source: SourceFile,
    imports: List[str],
    *,
    has_provides: bool,
    config: Optional[JsConfig],
    diagnostics: Optional[Diagnostics],
) -> tuple[List[str], List[str]]:
    if config is None or not config.prefix_set:
        if imports:
            message = (
                f"{source.path}: relative imports found but js_prefix is not set; "
                "ES module imports will not be resolved"
            )
            if diagnostics is not None:
                diagnostics.report(MISSING_PREFIX, message, path=source.path)
            else:
                _LOGGER.warning(message)
        return [], []

    requires: List[str] = []
    directory = posixpath.dirname(source.path)
    for specifier in imports:
        target = posixpath.normpath(posixpath.join(directory, specifier))
        if target == ".." or target.startswith("../"):
            _LOGGER.debug("%s: ignoring import outside the repository: %s", source.path, specifier)
            continue
        requires.append(synthetic_identifier(config, target))

    provides: List[str] = []
    if not has_provides:
        provides.append(synthetic_identifier(config, source.path))
        provides.append(synthetic_identifier(config, posixpath.splitext(source.path)[0]))

    return requires, provides


__all__ = [
    "ES6_PREFIX",
    "classify",
    "extract_declarations",
    "read_source_file",
    "synthetic_identifier",
]
