"""Two-pass rule generation over a source tree."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

from .config import JsConfig, ProjectConfig, configure_directory, load_config
from .diagnostics import BUILD_FILE, Diagnostics
from .fileinfo import read_source_file
from .grouping import group_directory, multi_file_groups
from .label import Label
from .logging import get_logger
from .models import BuildRule, BuildUnit, Diagnostic, SourceFile
from .repo_scanner import DirectoryListing, DirectoryScanner
from .resolve import ExternalLibraryTable, IndexBuilder, Resolver, load_external_table
from .stores.build_file import BuildFile, BuildFileError, load_build_file, write_build_file

_MANAGED_KIND_PREFIX = "closure_"


@dataclass
class DirectoryResult:
    """Rules generated for one directory."""

    rel: str
    build_file: BuildFile
    config: JsConfig
    units: List[BuildUnit] = field(default_factory=list)
    preserved: List[BuildRule] = field(default_factory=list)
    existed: bool = False

    def label(self, unit: BuildUnit) -> Label:
        return Label(pkg=self.rel, name=unit.name)

    @property
    def rules(self) -> List[BuildRule]:
        return [unit.rule for unit in self.units] + list(self.preserved)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "directory": self.rel or ".",
            "rules": [rule.to_dict() for rule in self.rules],
        }


@dataclass
class GenerationResult:
    """Outcome of a generation run."""

    root: Path
    directories: List[DirectoryResult]
    diagnostics: List[Diagnostic]
    index_size: int = 0
    dry_run: bool = False
    written: List[Path] = field(default_factory=list)

    @property
    def rule_count(self) -> int:
        return sum(len(result.units) for result in self.directories)

    def directory(self, rel: str) -> Optional[DirectoryResult]:
        for result in self.directories:
            if result.rel == rel:
                return result
        return None

    def to_payload(self) -> Dict[str, Any]:
        return {
            "root": str(self.root),
            "dry_run": self.dry_run,
            "directories": [result.to_payload() for result in self.directories],
            "diagnostics": [diagnostic.to_dict() for diagnostic in self.diagnostics],
        }


class Generator:
    """Extracts, groups and resolves every directory of a source tree.

    The first pass extracts declarations and groups files directory by
    directory while the project index is assembled. The index is frozen
    before the second pass resolves each unit's dependencies.
    """

    def __init__(
        self,
        scanner: DirectoryScanner | None = None,
        external_table: ExternalLibraryTable | None = None,
    ) -> None:
        self.scanner = scanner or DirectoryScanner()
        self._external_table = external_table
        self.logger = get_logger("generator")

    def run(
        self,
        path: str | Path,
        *,
        js_prefix: str | None = None,
        dry_run: bool = False,
    ) -> GenerationResult:
        root = Path(path).expanduser().resolve()
        if not root.exists():
            raise FileNotFoundError(f"Repository path not found: {path}")

        project = load_config(root)
        if js_prefix is not None:
            project.js.set_prefix(js_prefix, "")

        external = self._external_table or load_external_table()
        if project.external_library:
            external = external.extended(project.external_library)

        self.logger.info("Generating Closure rules for %s", root)
        diagnostics = Diagnostics()
        builder = IndexBuilder()
        configs: Dict[str, JsConfig] = {}
        claimed: Set[str] = set()
        directories: List[DirectoryResult] = []

        for listing in self.scanner.walk(root, project.exclude_paths):
            result = self._generate_directory(
                root, listing, project, configs, claimed, diagnostics
            )
            if result is None:
                continue
            directories.append(result)
            for unit in result.units:
                if unit.kind.is_importable:
                    builder.add(result.label(unit), unit.interface)

        index = builder.build()
        self.logger.debug("Indexed %d identifiers", len(index))

        resolver = Resolver(index, external, diagnostics)
        for result in directories:
            for unit in result.units:
                resolver.resolve(unit.rule, unit.interface, result.label(unit), result.config)

        written: List[Path] = []
        if dry_run:
            self.logger.info("Dry-run completed; build files not written")
        else:
            for result in directories:
                result.build_file.rules = result.rules
                write_build_file(result.build_file)
                written.append(result.build_file.path)
            self.logger.info("Wrote %d build files", len(written))

        return GenerationResult(
            root=root,
            directories=directories,
            diagnostics=diagnostics.items,
            index_size=len(index),
            dry_run=dry_run,
            written=written,
        )

    def _generate_directory(
        self,
        root: Path,
        listing: DirectoryListing,
        project: ProjectConfig,
        configs: Dict[str, JsConfig],
        claimed: Set[str],
        diagnostics: Diagnostics,
    ) -> Optional[DirectoryResult]:
        rel = listing.rel
        parent_config = configs.get(posixpath.dirname(rel), project.js) if rel else project.js
        build_path = listing.path / project.build_file_name

        try:
            build_file = load_build_file(build_path)
        except BuildFileError as exc:
            diagnostics.report(BUILD_FILE, str(exc), path=_join(rel, project.build_file_name))
            configs[rel] = parent_config.clone()
            return None

        existed = build_file is not None
        if build_file is None:
            build_file = BuildFile(path=build_path)

        config = configure_directory(parent_config, rel, build_file.directives, build_file.raw_rules())
        configs[rel] = config

        paths = [
            _join(rel, name)
            for name in listing.regular_files
            if name != project.build_file_name
        ]
        for src in multi_file_groups(build_file.rules):
            if "/" not in src or src.startswith("../"):
                continue
            member = _join(rel, src)
            if member not in paths and (root / member).is_file():
                paths.append(member)
                claimed.add(member)

        files: List[SourceFile] = []
        for path in paths:
            if path in claimed and posixpath.dirname(path) == rel:
                self.logger.debug("%s: already part of a parent directory's rule", path)
                continue
            files.append(read_source_file(root, path, config, diagnostics))

        units = group_directory(rel, files, build_file.rules, diagnostics)
        preserved = [
            rule for rule in build_file.rules if not rule.kind.startswith(_MANAGED_KIND_PREFIX)
        ]
        if not units and not existed:
            return None

        self.logger.debug("%s: %d rules generated", rel or ".", len(units))
        return DirectoryResult(
            rel=rel,
            build_file=build_file,
            config=config,
            units=units,
            preserved=preserved,
            existed=existed,
        )


def _join(rel: str, name: str) -> str:
    return posixpath.join(rel, name) if rel else name


__all__ = ["DirectoryResult", "GenerationResult", "Generator"]
