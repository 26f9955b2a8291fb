"""Partition the files of one directory into buildable units."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set

from .diagnostics import DUPLICATE_TARGET, GROUPING_ANOMALY, Diagnostics
from .logging import get_logger
from .models import BuildRule, BuildUnit, DeclaredInterface, FileKind, SourceFile, UnitKind

LIBRARY_KINDS = frozenset({"closure_js_library", "closure_jsx_library"})
PUBLIC_VISIBILITY = ["//visibility:public"]
COMPILATION_LEVEL = "ADVANCED"

_LOGGER = get_logger("grouping")


def multi_file_groups(prior_rules: Sequence[BuildRule]) -> Dict[str, BuildRule]:
    """Index prior multi-file library rules by the source files they list.

    A library rule counts as a group when it lists several sources or a
    source from a subdirectory; single-file rules are regenerated per file.
    """
    groups: Dict[str, BuildRule] = {}
    for rule in prior_rules:
        if rule.kind not in LIBRARY_KINDS:
            continue
        srcs = rule.attr_strings("srcs")
        if len(srcs) < 2 and not any("/" in src for src in srcs):
            continue
        for src in srcs:
            groups.setdefault(posixpath.normpath(src), rule)
    return groups


@dataclass
class _GroupAccumulator:
    rule: BuildRule
    srcs: List[str] = field(default_factory=list)
    provides: List[str] = field(default_factory=list)
    requires: List[str] = field(default_factory=list)
    test_only: bool = False

    def add(self, source: SourceFile, src: str) -> None:
        if src in self.srcs:
            return
        self.srcs.append(src)
        self.provides.extend(source.provides)
        self.requires.extend(source.requires)
        self.test_only = self.test_only or source.is_test_only

    def unit(self) -> BuildUnit:
        rule = BuildRule(kind=self.rule.kind, name=self.rule.name)
        for key, value in self.rule.attrs.items():
            if key in {"srcs", "deps", "testonly"}:
                continue
            rule.set_attr(key, value)
        rule.set_attr("srcs", list(self.srcs))
        if "visibility" not in rule.attrs:
            rule.set_attr("visibility", list(PUBLIC_VISIBILITY))
        if self.test_only:
            rule.set_attr("testonly", True)
        interface = DeclaredInterface(
            provides=tuple(dict.fromkeys(self.provides)),
            requires=tuple(dict.fromkeys(self.requires)),
        )
        return BuildUnit(kind=UnitKind.GROUP, rule=rule, srcs=list(self.srcs), interface=interface)


def group_directory(
    rel_dir: str,
    files: Sequence[SourceFile],
    prior_rules: Sequence[BuildRule] = (),
    diagnostics: Optional[Diagnostics] = None,
) -> List[BuildUnit]:
    """Group the extracted ``files`` of directory ``rel_dir`` into units.

    Output order: per-file libraries, then tests, then multi-file groups.
    """
    if diagnostics is None:
        diagnostics = Diagnostics()

    group_index = multi_file_groups(prior_rules)
    accumulators: Dict[str, _GroupAccumulator] = {}
    for rule in group_index.values():
        accumulators.setdefault(rule.name, _GroupAccumulator(rule=rule))

    names: Set[str] = set(accumulators)
    libraries: List[BuildUnit] = []
    test_buckets: Dict[str, List[SourceFile]] = {}

    # Sorting puts foo_test.html ahead of foo_test.js.
    ordered = sorted(files, key=lambda source: _src_name(rel_dir, source))
    for source in ordered:
        if source.kind is FileKind.UNKNOWN:
            continue
        src = _src_name(rel_dir, source)

        group_rule = group_index.get(src)
        if group_rule is not None:
            accumulators[group_rule.name].add(source, src)
            continue

        if source.is_test:
            test_buckets.setdefault(source.test_stem, []).append(source)
            continue

        if not source.kind.is_script:
            _LOGGER.debug("%s: fixture without a test; no rule generated", source.path)
            continue

        _claim(libraries, _library_unit(source, src), names, rel_dir, diagnostics)

    tests: List[BuildUnit] = []
    for stem, bucket in test_buckets.items():
        unit = _test_unit(rel_dir, stem, bucket, diagnostics)
        if unit is not None:
            _claim(tests, unit, names, rel_dir, diagnostics)

    groups = [accumulator.unit() for accumulator in accumulators.values() if accumulator.srcs]

    return libraries + tests + groups


def _claim(
    units: List[BuildUnit],
    unit: BuildUnit,
    names: Set[str],
    rel_dir: str,
    diagnostics: Diagnostics,
) -> None:
    if unit.name in names:
        diagnostics.report(
            DUPLICATE_TARGET,
            f"{rel_dir or '.'}: target name {unit.name!r} is already used; skipping "
            f"{', '.join(unit.srcs)}",
            target=f"//{rel_dir}:{unit.name}",
        )
        return
    names.add(unit.name)
    units.append(unit)


def _src_name(rel_dir: str, source: SourceFile) -> str:
    if not rel_dir:
        return source.path
    return posixpath.relpath(source.path, rel_dir)


def _library_unit(source: SourceFile, src: str) -> BuildUnit:
    rule = BuildRule(kind=f"closure_{source.kind.value}_library", name=source.stem)
    rule.set_attr("srcs", [src])
    rule.set_attr("visibility", list(PUBLIC_VISIBILITY))
    if source.is_test_only:
        rule.set_attr("testonly", True)
    interface = DeclaredInterface(provides=source.provides, requires=source.requires)
    return BuildUnit(kind=UnitKind.LIBRARY, rule=rule, srcs=[src], interface=interface)


def _test_unit(
    rel_dir: str,
    stem: str,
    bucket: Sequence[SourceFile],
    diagnostics: Diagnostics,
) -> Optional[BuildUnit]:
    scripts = [source for source in bucket if source.kind.is_script]
    fixtures = [source for source in bucket if source.kind is FileKind.HTML]

    if len(scripts) == 1 and len(bucket) == 1:
        return _generate_test(rel_dir, scripts[0])
    if len(scripts) == 1 and len(fixtures) == 1 and len(bucket) == 2:
        unit = _generate_test(rel_dir, scripts[0])
        fixture = _src_name(rel_dir, fixtures[0])
        unit.rule.set_attr("html", fixture)
        unit.kind = UnitKind.COMBINED_TEST
        unit.srcs.append(fixture)
        return unit

    names = ", ".join(source.name for source in bucket)
    diagnostics.report(
        GROUPING_ANOMALY,
        f"{rel_dir or '.'}: unexpected number of test sources for {stem!r}: {names}",
        path=posixpath.join(rel_dir, stem) if rel_dir else stem,
    )
    return None


def _generate_test(rel_dir: str, source: SourceFile) -> BuildUnit:
    src = _src_name(rel_dir, source)
    rule = BuildRule(kind=f"closure_{source.kind.value}_test", name=source.stem)
    rule.set_attr("srcs", [src])
    rule.set_attr("compilation_level", COMPILATION_LEVEL)
    if source.provides:
        rule.set_attr("entry_points", list(source.provides))
    rule.set_attr("visibility", list(PUBLIC_VISIBILITY))
    interface = DeclaredInterface(provides=source.provides, requires=source.requires)
    return BuildUnit(kind=UnitKind.TEST, rule=rule, srcs=[src], interface=interface)


__all__ = [
    "COMPILATION_LEVEL",
    "LIBRARY_KINDS",
    "PUBLIC_VISIBILITY",
    "group_directory",
    "multi_file_groups",
]
