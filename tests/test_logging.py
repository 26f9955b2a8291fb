"""Tests for the closuregen logging helpers."""

from __future__ import annotations

import io

from closuregen.logging import configure_logging, get_logger


def test_records_carry_their_stage() -> None:
    stream = io.StringIO()
    configure_logging(stream=stream)

    get_logger("resolve").info("resolved %d rules", 3)
    get_logger().warning("done")

    assert stream.getvalue().splitlines() == [
        "[closuregen] INFO resolve: resolved 3 rules",
        "[closuregen] WARNING done",
    ]


def test_debug_only_when_verbose() -> None:
    quiet = io.StringIO()
    configure_logging(stream=quiet)
    get_logger("grouping").debug("hidden")
    assert quiet.getvalue() == ""

    loud = io.StringIO()
    configure_logging(verbose=True, stream=loud)
    get_logger("grouping").debug("shown")
    assert loud.getvalue() == "[closuregen] DEBUG grouping: shown\n"


def test_reconfiguring_does_not_duplicate_handlers() -> None:
    configure_logging()
    logger = configure_logging()
    assert len(logger.handlers) == 1
