"""Logging configuration model."""

import os
from enum import StrEnum
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, field_validator


class LogLevel(StrEnum):
    """Log level threshold values.

    Values are ordered from most verbose (debug) to least verbose (error).
    """

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LogFormat(StrEnum):
    """Log output format values."""

    JSON = "json"
    TEXT = "text"


class LoggingConfig(BaseModel):
    """Logging configuration section.

    Attributes:
        level: Log level threshold.
        format: Log output format.
        file: Path to log file (empty writes to stderr). A leading ``~`` is
            expanded to the user's home directory.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    level: LogLevel = LogLevel.WARNING
    format: LogFormat = LogFormat.JSON
    file: str = ""

    @field_validator("file")
    @classmethod
    def _expand_user(cls, value: str) -> str:
        return os.path.expanduser(value) if value else value  # noqa: PTH111
