"""Persistence for per-directory build metadata."""

from .build_file import BuildFile, BuildFileError, load_build_file, write_build_file

__all__ = ["BuildFile", "BuildFileError", "load_build_file", "write_build_file"]
