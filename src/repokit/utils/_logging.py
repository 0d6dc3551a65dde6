"""Logging utilities for repokit.

This module provides standalone structlog logger factories that write
JSON-formatted or text-formatted logs either to a log file or to stderr.
Each logger is self-contained and does not modify global structlog
configuration, so embedding applications keep control of their own setup.
"""

import logging
import sys
from functools import cache
from os import getenv
from pathlib import Path
from typing import TYPE_CHECKING, Literal, cast

import structlog

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

LogFormatType = Literal["json", "text"]


def _get_log_level(default: str = "warning") -> int:
    """Get the log level from environment variables.

    Checks REPOKIT_DEBUG first (sets DEBUG if present), then REPOKIT_LOG_LEVEL.

    Args:
        default: Level name used when neither variable is set.

    Returns:
        The logging level as an integer.
    """
    if getenv("REPOKIT_DEBUG", None):
        return logging.DEBUG

    log_levels = logging.getLevelNamesMapping()
    return log_levels.get(getenv("REPOKIT_LOG_LEVEL", default).upper(), logging.WARNING)


def _log_level_from_string(level: str, *, respect_env: bool = False) -> int:
    """Convert a log level string to a logging level integer.

    Args:
        level: Log level string (debug, info, warning, error).
        respect_env: If True, REPOKIT_DEBUG and REPOKIT_LOG_LEVEL override
            the given level.

    Returns:
        The logging level as an integer.
    """
    if respect_env:
        if getenv("REPOKIT_DEBUG", None):
            return logging.DEBUG
        env_level = getenv("REPOKIT_LOG_LEVEL", None)
        if env_level:
            level = env_level

    log_levels = logging.getLevelNamesMapping()
    return log_levels.get(level.upper(), logging.WARNING)


def _build_processors(log_format: LogFormatType) -> list[structlog.typing.Processor]:
    processors: list[structlog.typing.Processor] = [
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if log_format == "json":
        processors.append(structlog.processors.dict_tracebacks)
        processors.append(structlog.processors.JSONRenderer())
    else:
        # "timestamp [level] event key=value ..."
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    return processors


def _create_logger(
    log_file_path: str | None,
    *,
    log_level: int | None = None,
    log_format: LogFormatType = "json",
) -> "FilteringBoundLogger":  # noqa: UP037
    """Create a standalone structlog logger.

    Args:
        log_file_path: Path to the log file (opened in append mode). When None,
            entries are written to stderr.
        log_level: Override log level (uses env vars if not specified).
        log_format: Output format, either "json" or "text".

    Returns:
        A configured FilteringBoundLogger instance.
    """
    effective_level = log_level if log_level is not None else _get_log_level()

    if log_file_path is None:
        raw_logger = structlog.PrintLoggerFactory(file=sys.stderr)()
    else:
        log_path = Path(log_file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        raw_logger = structlog.WriteLoggerFactory(file=log_path.open("a"))()

    wrapper_class = structlog.make_filtering_bound_logger(effective_level)

    return cast(
        "FilteringBoundLogger",
        structlog.wrap_logger(
            raw_logger,
            processors=_build_processors(log_format),
            wrapper_class=wrapper_class,
            context_class=dict,
        ),
    )


@cache
def _create_file_logger(
    log_file_path: str,
    log_level: int,
    log_format: LogFormatType,
) -> "FilteringBoundLogger":  # noqa: UP037
    # One open handle per log file for the life of the process.
    return _create_logger(log_file_path, log_level=log_level, log_format=log_format)


def create_repository_logger(
    *,
    level: str = "warning",
    log_format: LogFormatType = "json",
    log_file: str = "",
) -> "FilteringBoundLogger":  # noqa: UP037
    """Create a logger for repository operations.

    The log level is determined by (in order of precedence):
    1. REPOKIT_DEBUG environment variable (if set, enables DEBUG level)
    2. REPOKIT_LOG_LEVEL environment variable
    3. The `level` parameter

    Args:
        level: Log level threshold (debug, info, warning, error).
        log_format: Output format, either "json" or "text".
        log_file: Path to log file. Logs go to stderr if empty.

    Returns:
        A FilteringBoundLogger instance configured for repository logging.
    """
    effective_level = _log_level_from_string(level, respect_env=True)

    if not log_file:
        return _create_logger(None, log_level=effective_level, log_format=log_format)

    return _create_file_logger(log_file, effective_level, log_format)
