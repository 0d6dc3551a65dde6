"""Repokit configuration.

This module provides the public API for repokit configuration management,
including loading, validation, and typed access to configuration values.

Example:
    >>> from repokit.config import Config
    >>> config = Config.load()
    >>> config.status.rename_threshold
    60
"""

from repokit.exceptions import (
    ConfigError,
    ConfigLoadError,
    ConfigValidationError,
)

from ._defaults import DEFAULT_CONFIG
from ._discovery import discover_sources, get_user_config_path
from ._load import safe_load_config
from ._loader import deep_merge, parse_env_vars, parse_string_value, read_toml_file, set_nested_key
from ._models import (
    CloneConfig,
    Config,
    ConfigSource,
    ConfigSourceName,
    LogFormat,
    LoggingConfig,
    LogLevel,
    SignatureConfig,
    StatusConfig,
)
from ._validation import ValidationIssue, raise_if_validation_errors, validate_config

__all__ = [
    "DEFAULT_CONFIG",
    "CloneConfig",
    "Config",
    "ConfigError",
    "ConfigLoadError",
    "ConfigSource",
    "ConfigSourceName",
    "ConfigValidationError",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "SignatureConfig",
    "StatusConfig",
    "ValidationIssue",
    "deep_merge",
    "discover_sources",
    "get_user_config_path",
    "parse_env_vars",
    "parse_string_value",
    "raise_if_validation_errors",
    "read_toml_file",
    "safe_load_config",
    "set_nested_key",
    "validate_config",
]
