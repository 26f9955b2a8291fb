"""Shared fixtures for the closuregen test suite."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest

from tests._fixtures.repo_builder import RepoBuilder


@pytest.fixture
def repo_builder(tmp_path: Path) -> RepoBuilder:
    """Provide a source tree builder that runs the generator over tmp_path."""
    return RepoBuilder(tmp_path)


@pytest.fixture(autouse=True)
def _reset_closuregen_logger() -> Iterator[None]:
    """Drop handlers installed by CLI tests so they never outlive capsys."""
    yield
    logger = logging.getLogger("closuregen")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
