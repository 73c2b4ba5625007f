"""Logging setup shared by the docprep CLI and service."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TextIO

_ROOT = "docprep"
_CLI_FORMAT = "[docprep] %(levelname)s %(message)s"
# Service lines name the stage logger and worker thread.
_SERVICE_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(threadName)s] %(message)s"


def get_logger(stage: str | None = None) -> logging.Logger:
    """Return the logger for one preparation stage, e.g. ``docprep.extractor``."""
    return logging.getLogger(f"{_ROOT}.{stage}" if stage else _ROOT)


def configure_logging(
    *,
    verbose: bool = False,
    log_file: Path | None = None,
    service: bool = False,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Attach docprep's handlers, replacing any installed by an earlier call.

    CLI runs get terse console lines; ``service=True`` switches to timestamped
    lines that name the stage and worker thread. ``log_file`` adds a second
    sink using the service format.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_ROOT)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(stream)
    console.setFormatter(logging.Formatter(_SERVICE_FORMAT if service else _CLI_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        sink = logging.FileHandler(log_file, encoding="utf-8")
        sink.setFormatter(logging.Formatter(_SERVICE_FORMAT))
        logger.addHandler(sink)

    return logger


__all__ = ["configure_logging", "get_logger"]
