# pyright: reportExplicitAny=false, reportAny=false, reportUnknownVariableType=false, reportUnknownArgumentType=false
"""Configuration container with typed access.

This module provides the main Config class that serves as the primary
interface for accessing repokit configuration values.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar, TypeVar

from pydantic import BaseModel, ConfigDict, PrivateAttr, ValidationError

from repokit.config._defaults import DEFAULT_CONFIG
from repokit.config._loader import copy_value, deep_merge, parse_env_vars, read_toml_file
from repokit.config._models._clone import CloneConfig
from repokit.config._models._common import ConfigSource, ConfigSourceName
from repokit.config._models._logging import LoggingConfig
from repokit.config._models._signature import SignatureConfig
from repokit.config._models._status import StatusConfig

if TYPE_CHECKING:
    from pathlib import Path
    from typing import Self

M = TypeVar("M", bound=BaseModel)


def _parse_section(model: type[M], data: Any) -> M:
    """Parse a section dictionary, falling back to defaults when invalid.

    Args:
        model: The section model class.
        data: Raw section value from the merged configuration.

    Returns:
        Parsed section model.
    """
    if not isinstance(data, dict):
        return model()
    try:
        return model.model_validate(data)
    except ValidationError:
        return model()


class Config(BaseModel):
    """Configuration container with typed access.

    This class provides immutable, type-safe access to repokit configuration.
    Use factory methods to create instances rather than the constructor.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    _data: dict[str, Any] = PrivateAttr(default_factory=dict)
    _sources: tuple[ConfigSource, ...] = PrivateAttr(default=())
    _clone: CloneConfig = PrivateAttr(default_factory=CloneConfig)
    _logging: LoggingConfig = PrivateAttr(default_factory=LoggingConfig)
    _signature: SignatureConfig = PrivateAttr(default_factory=SignatureConfig)
    _status: StatusConfig = PrivateAttr(default_factory=StatusConfig)

    def __init__(
        self,
        *,
        _data: dict[str, Any] | None = None,
        _sources: tuple[ConfigSource, ...] = (),
    ) -> None:
        """Initialize configuration container.

        This constructor is intended for internal use. Use factory methods
        like from_dict(), from_file(), or load() to create Config instances.

        Args:
            _data: The complete merged configuration dictionary.
            _sources: Sources that contributed to this configuration.
        """
        super().__init__()
        self._data = _data if _data is not None else copy_value(DEFAULT_CONFIG)
        self._sources = _sources
        self._clone = _parse_section(CloneConfig, self._data.get("clone"))
        self._logging = _parse_section(LoggingConfig, self._data.get("logging"))
        self._signature = _parse_section(SignatureConfig, self._data.get("signature"))
        self._status = _parse_section(StatusConfig, self._data.get("status"))

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        *,
        validate: bool = True,
    ) -> Self:
        """Create configuration from a dictionary.

        Args:
            data: Dictionary of configuration values.
            validate: Whether to validate the configuration.

        Returns:
            Configuration object from the dictionary.

        Raises:
            ConfigValidationError: If validation fails (when validate=True).
        """
        from repokit.config._validation import (  # noqa: PLC0415
            raise_if_validation_errors,
            validate_config,
        )

        merged = deep_merge(DEFAULT_CONFIG, data)

        if validate:
            raise_if_validation_errors(validate_config(merged))

        return cls(_data=merged)

    @classmethod
    def from_file(
        cls,
        path: Path,
        *,
        validate: bool = True,
    ) -> Self:
        """Load configuration from a specific file.

        Args:
            path: Path to the TOML config file.
            validate: Whether to validate the loaded config.

        Returns:
            Configuration object from the specified file only.

        Raises:
            FileNotFoundError: If the file does not exist.
            ConfigLoadError: If the file cannot be parsed.
            ConfigValidationError: If validation fails.
        """
        from repokit.config._validation import (  # noqa: PLC0415
            raise_if_validation_errors,
            validate_config,
        )

        data = read_toml_file(path)
        source = ConfigSource(ConfigSourceName.FILE, path=path, values=data)

        merged = deep_merge(DEFAULT_CONFIG, data)

        if validate:
            raise_if_validation_errors(validate_config(merged), source=str(path))

        return cls(_data=merged, _sources=(source,))

    @classmethod
    def load(
        cls,
        *,
        config_path: Path | None = None,
        include_env: bool = True,
        overrides: dict[str, Any] | None = None,
        strict: bool = False,
    ) -> Self:
        """Load merged configuration from all sources.

        Sources are merged lowest to highest:
        defaults -> user file -> config_path -> env -> overrides.

        Args:
            config_path: Extra TOML file layered above the user file.
            include_env: Include REPOKIT_<SECTION>__<KEY> environment variables.
            overrides: Explicit values with the highest precedence.
            strict: Reject unknown keys.

        Returns:
            Merged configuration object.

        Raises:
            ConfigLoadError: If config files cannot be loaded.
            ConfigValidationError: If merged config fails validation.
        """
        from repokit.config._discovery import discover_sources  # noqa: PLC0415
        from repokit.config._validation import (  # noqa: PLC0415
            raise_if_validation_errors,
            validate_config,
        )

        sources = discover_sources(
            config_path=config_path,
            include_env=include_env,
            overrides=overrides,
        )

        # Sources are discovered highest-to-lowest, so reverse for merging
        merged: dict[str, Any] = {}
        loaded_sources: list[ConfigSource] = []

        for source in reversed(sources):
            values: dict[str, Any] = {}

            if source.name in (ConfigSourceName.DEFAULT, ConfigSourceName.OVERRIDE):
                values = source.values
            elif source.name == ConfigSourceName.ENV:
                values = parse_env_vars()
            elif source.path and source.exists:
                values = read_toml_file(source.path)

            loaded_sources.append(ConfigSource(source.name, path=source.path, values=values))

            if values:
                merged = deep_merge(merged, values)

        raise_if_validation_errors(validate_config(merged, strict=strict))

        return cls(_data=merged, _sources=tuple(reversed(loaded_sources)))

    @property
    def sources(self) -> list[ConfigSource]:
        """Return the sources that contributed to this configuration.

        Returns:
            List of ConfigSource objects in precedence order.
        """
        return list(self._sources)

    @property
    def clone(self) -> CloneConfig:
        """Return the clone configuration section."""
        return self._clone

    @property
    def logging(self) -> LoggingConfig:
        """Return the logging configuration section."""
        return self._logging

    @property
    def signature(self) -> SignatureConfig:
        """Return the signature configuration section."""
        return self._signature

    @property
    def status(self) -> StatusConfig:
        """Return the status configuration section."""
        return self._status
