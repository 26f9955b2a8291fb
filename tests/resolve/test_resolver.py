"""Tests for closuregen.resolve.resolver."""

from __future__ import annotations

import pytest

from closuregen.config import JsConfig
from closuregen.diagnostics import AMBIGUOUS_IMPORT, EXTERNAL_NOT_FOUND, Diagnostics
from closuregen.label import Label
from closuregen.models import BuildRule, DeclaredInterface, InvariantError
from closuregen.resolve import ExternalLibraryTable, IndexBuilder, Resolver

CLOSURE = ExternalLibraryTable(
    "goog.",
    {"goog.array": Label.parse("@io_bazel_rules_closure//closure/library/array:array")},
)


def _resolver(
    providers: dict[Label, tuple[str, ...]], diagnostics: Diagnostics | None = None
) -> Resolver:
    builder = IndexBuilder()
    for label, provides in providers.items():
        builder.add(label, DeclaredInterface(provides=provides))
    return Resolver(builder.build(), CLOSURE, diagnostics)


def _resolve(resolver: Resolver, requires: tuple[str, ...], from_label: Label, config=None) -> BuildRule:
    rule = BuildRule(kind="closure_js_library", name=from_label.name)
    resolver.resolve(
        rule, DeclaredInterface(requires=requires), from_label, config or JsConfig()
    )
    return rule


def test_index_matches_become_package_relative_deps() -> None:
    a = Label(pkg="lib", name="a")
    other = Label(pkg="other", name="o")
    b = Label(pkg="lib", name="b")
    resolver = _resolver({a: ("corp.a",), other: ("corp.o",), b: ("corp.b",)})

    rule = _resolve(resolver, ("corp.a", "corp.o"), b)

    assert rule.attr("deps") == [":a", "//other:o"]


def test_deps_are_deduplicated_in_first_seen_order() -> None:
    a = Label(pkg="", name="a")
    c = Label(pkg="", name="c")
    resolver = _resolver({a: ("corp.a", "corp.a2"), c: ("corp.c",)})

    rule = _resolve(resolver, ("corp.c", "corp.a", "corp.a2", "corp.c"), Label(pkg="", name="b"))

    assert rule.attr("deps") == [":c", ":a"]


def test_self_import_is_elided() -> None:
    a = Label(pkg="", name="a")
    resolver = _resolver({a: ("corp.a",)})

    rule = _resolve(resolver, ("corp.a",), a)

    assert "deps" not in rule.attrs


def test_unknown_identifiers_are_silently_dropped() -> None:
    diagnostics = Diagnostics()
    resolver = _resolver({}, diagnostics)

    rule = _resolve(resolver, ("corp.nowhere",), Label(name="b"))

    assert "deps" not in rule.attrs
    assert len(diagnostics) == 0


def test_ambiguous_identifier_is_reported_and_others_still_resolve() -> None:
    diagnostics = Diagnostics()
    x1 = Label(pkg="one", name="x")
    x2 = Label(pkg="two", name="x")
    y = Label(pkg="", name="y")
    resolver = _resolver({x1: ("corp.x",), x2: ("corp.x",), y: ("corp.y",)}, diagnostics)

    rule = _resolve(resolver, ("corp.x", "corp.y"), Label(pkg="", name="z"))

    assert rule.attr("deps") == [":y"]
    (problem,) = diagnostics.of_kind(AMBIGUOUS_IMPORT)
    assert "//:z" in problem.message
    assert "'corp.x'" in problem.message
    assert "//one:x" in problem.message and "//two:x" in problem.message


def test_external_library_identifiers_use_the_table() -> None:
    diagnostics = Diagnostics()
    resolver = _resolver({}, diagnostics)

    rule = _resolve(resolver, ("goog.array", "goog.strings"), Label(pkg="app", name="main"))

    assert rule.attr("deps") == ["@io_bazel_rules_closure//closure/library/array:array"]
    assert len(diagnostics.of_kind(EXTERNAL_NOT_FOUND)) == 1


def test_external_table_takes_precedence_over_index() -> None:
    shadow = Label(pkg="", name="shadow")
    resolver = _resolver({shadow: ("goog.array",)})

    rule = _resolve(resolver, ("goog.array",), Label(pkg="", name="main"))

    assert rule.attr("deps") == ["@io_bazel_rules_closure//closure/library/array:array"]


def test_override_beats_ambiguous_index() -> None:
    diagnostics = Diagnostics()
    x1 = Label(pkg="one", name="x")
    x2 = Label(pkg="two", name="x")
    resolver = _resolver({x1: ("corp.x",), x2: ("corp.x",)}, diagnostics)
    config = JsConfig()
    config.add_override("corp.x", Label.parse("//third_party/x"))

    rule = _resolve(resolver, ("corp.x",), Label(pkg="app", name="main"), config)

    assert rule.attr("deps") == ["//third_party/x:x"]
    assert len(diagnostics) == 0


def test_resolution_replaces_existing_deps_and_is_idempotent() -> None:
    a = Label(pkg="", name="a")
    resolver = _resolver({a: ("corp.a",)})
    rule = BuildRule(kind="closure_js_library", name="b", attrs={"deps": [":stale"]})
    interface = DeclaredInterface(requires=("corp.a",))

    resolver.resolve(rule, interface, Label(pkg="", name="b"), JsConfig())
    first = list(rule.attr("deps"))
    resolver.resolve(rule, interface, Label(pkg="", name="b"), JsConfig())

    assert first == [":a"]
    assert rule.attr("deps") == first


def test_empty_result_clears_deps() -> None:
    resolver = _resolver({})
    rule = BuildRule(kind="closure_js_library", name="b", attrs={"deps": [":stale"]})

    resolver.resolve(rule, DeclaredInterface(requires=("corp.gone",)), Label(name="b"), JsConfig())

    assert "deps" not in rule.attrs


def test_rules_without_interface_are_untouched() -> None:
    resolver = _resolver({})
    rule = BuildRule(kind="filegroup", name="f", attrs={"deps": [":keep"]})

    resolver.resolve(rule, None, Label(name="f"), JsConfig())

    assert rule.attr("deps") == [":keep"]


def test_table_violating_its_own_prefix_is_fatal() -> None:
    class BrokenTable(ExternalLibraryTable):
        def matches(self, identifier: str) -> bool:
            return True

    resolver = Resolver(IndexBuilder().build(), BrokenTable("goog.", {}))

    with pytest.raises(InvariantError):
        resolver.resolve_import("corp.a", Label(name="x"), JsConfig())
