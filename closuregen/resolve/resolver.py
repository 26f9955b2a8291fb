"""Dependency resolution for generated rules."""

from __future__ import annotations

from typing import Dict, Optional

from ..config import JS_LANG, JsConfig
from ..diagnostics import AMBIGUOUS_IMPORT, EXTERNAL_NOT_FOUND, Diagnostics
from ..label import Label
from ..logging import get_logger
from ..models import BuildRule, DeclaredInterface
from .external import ExternalLibraryTable
from .index import ResolutionIndex


class ImportNotFound(LookupError):
    """No target in the index provides the identifier."""


class SelfImport(LookupError):
    """The only provider of the identifier is the requesting rule."""


class AmbiguousImport(LookupError):
    """More than one target provides the identifier."""


class Resolver:
    """Rewrites a rule's ``deps`` from the identifiers its sources require.

    Each identifier is tried against, in order: the external library table,
    the directory's override table, and the project index.
    """

    def __init__(
        self,
        index: ResolutionIndex,
        external: ExternalLibraryTable,
        diagnostics: Optional[Diagnostics] = None,
    ) -> None:
        self.index = index
        self.external = external
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self.logger = get_logger("resolve")

    def resolve(
        self,
        rule: BuildRule,
        interface: Optional[DeclaredInterface],
        from_label: Label,
        config: JsConfig,
    ) -> None:
        if interface is None:
            return

        rule.del_attr("deps")
        deps: Dict[str, None] = {}
        for identifier in interface.requires:
            label = self.resolve_import(identifier, from_label, config)
            if label is None:
                continue
            deps[label.rel(from_label.repo, from_label.pkg)] = None

        if deps:
            rule.set_attr("deps", list(deps))

    def resolve_import(
        self, identifier: str, from_label: Label, config: JsConfig
    ) -> Optional[Label]:
        """Return the target for one required identifier, or None."""
        if self.external.matches(identifier):
            label = self.external.lookup(identifier)
            if label is None:
                self.diagnostics.report(
                    EXTERNAL_NOT_FOUND,
                    f"rule {from_label} imports {identifier!r}, which is not a known "
                    f"{self.external.prefix}* library target",
                    target=str(from_label),
                )
                return None
            self.logger.debug("%s: %s -> %s (external)", from_label, identifier, label)
            return label

        override = config.find_override(JS_LANG, identifier)
        if override is not None:
            self.logger.debug("%s: %s -> %s (override)", from_label, identifier, override)
            return override

        try:
            label = self._resolve_with_index(identifier, from_label)
        except (ImportNotFound, SelfImport) as exc:
            self.logger.debug("%s: %s not resolved (%s)", from_label, identifier, exc)
            return None
        except AmbiguousImport as exc:
            self.diagnostics.report(AMBIGUOUS_IMPORT, str(exc), target=str(from_label))
            return None

        self.logger.debug("%s: %s -> %s (index)", from_label, identifier, label)
        return label

    def _resolve_with_index(self, identifier: str, from_label: Label) -> Label:
        matches = self.index.find(identifier)
        if not matches:
            raise ImportNotFound("rule not found")
        if len(matches) > 1:
            listed = ", ".join(str(match) for match in matches)
            raise AmbiguousImport(
                f"rule {from_label} imports {identifier!r} which matches multiple rules: "
                f"{listed}. Add a resolve entry to .closuregen.yml to disambiguate"
            )
        match = matches[0]
        if match == from_label:
            raise SelfImport("self import")
        return match


__all__ = ["AmbiguousImport", "ImportNotFound", "Resolver", "SelfImport"]
