"""Logging setup shared by the CLI, the service and the generation stages."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

_LOGGER_NAME = "closuregen"
_FORMAT = "[closuregen] %(levelname)s %(stage)s%(message)s"


class _StageFilter(logging.Filter):
    """Expose the stage (``closuregen.<stage>``) of a record to the formatter."""

    def filter(self, record: logging.LogRecord) -> bool:
        stage = record.name[len(_LOGGER_NAME) + 1 :] if record.name != _LOGGER_NAME else ""
        record.stage = f"{stage}: " if stage else ""
        return True


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the logger for one stage, e.g. ``get_logger("resolve")``."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(*, verbose: bool = False, stream: TextIO | None = None) -> logging.Logger:
    """Send closuregen records to ``stream`` (stderr by default).

    Rule listings of ``update --dry-run`` go to stdout, so log output stays on
    a separate stream.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Calling twice (tests, service reloads) must not duplicate output.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(level)
    handler.addFilter(_StageFilter())
    handler.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(handler)
    return logger


__all__ = ["configure_logging", "get_logger"]
