"""Dependency resolution: project index, external library table and resolver."""

from .external import CLOSURE_LIBRARY_PREFIX, ExternalLibraryTable, load_external_table
from .index import IndexBuilder, ResolutionIndex
from .resolver import Resolver

__all__ = [
    "CLOSURE_LIBRARY_PREFIX",
    "ExternalLibraryTable",
    "IndexBuilder",
    "ResolutionIndex",
    "Resolver",
    "load_external_table",
]
