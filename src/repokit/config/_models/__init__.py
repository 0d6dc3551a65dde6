"""Configuration models.

This module provides Pydantic models for repokit configuration sections
and the main Config container class.
"""

from repokit.config._models._clone import CloneConfig
from repokit.config._models._common import ConfigSource, ConfigSourceName
from repokit.config._models._config import Config
from repokit.config._models._logging import LogFormat, LoggingConfig, LogLevel
from repokit.config._models._signature import SignatureConfig
from repokit.config._models._status import StatusConfig

__all__ = [
    "CloneConfig",
    "Config",
    "ConfigSource",
    "ConfigSourceName",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "SignatureConfig",
    "StatusConfig",
]
