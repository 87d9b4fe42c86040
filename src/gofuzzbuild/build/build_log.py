"""Run log: attach a file handler to the gofuzzbuild loggers for one build."""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from gofuzzbuild.core.exceptions import ConfigError

LOGGER_NAME = "gofuzzbuild"
CONSOLE_HANDLER_NAME = "gofuzzbuild-console"


def get_logger() -> logging.Logger:
    """Return the package root logger."""
    return logging.getLogger(LOGGER_NAME)


@contextmanager
def build_log_context(
    log_file: Path | None,
    verbose: bool = False,
) -> Generator[logging.Logger, None, None]:
    """
    Attach a file handler to the package logger for the duration of the context.
    Log file is UTF-8; format: timestamp [LEVEL] name: message.
    Without a log file the logger is yielded unchanged.
    """
    logger = get_logger()
    if log_file is None:
        yield logger
        return

    level = logging.DEBUG if verbose else logging.INFO
    try:
        handler = logging.FileHandler(log_file, encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"cannot open log file {log_file}: {e}") from e
    handler.setLevel(level)
    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
    )
    handler.setFormatter(formatter)
    previous_level = logger.level
    logger.setLevel(min(level, logger.getEffectiveLevel()))
    logger.addHandler(handler)

    try:
        yield logger
    finally:
        logger.removeHandler(handler)
        handler.close()
        logger.setLevel(previous_level)


def configure_console(level: str = "WARNING") -> logging.Handler:
    """Send package log records at ``level`` and above to stderr (idempotent)."""
    logger = get_logger()
    logger.setLevel(level)
    for handler in logger.handlers:
        if handler.get_name() == CONSOLE_HANDLER_NAME and isinstance(handler, logging.StreamHandler):
            handler.setStream(sys.stderr)
            handler.setLevel(level)
            return handler
    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(CONSOLE_HANDLER_NAME)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logger.addHandler(handler)
    return handler
