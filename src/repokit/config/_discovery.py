"""Config source discovery utilities.

This module determines the platform-specific user configuration path and
assembles the list of configuration sources in precedence order.
"""

from pathlib import Path
from typing import Any

import platformdirs

from ._defaults import DEFAULT_CONFIG
from ._models._common import ConfigSource, ConfigSourceName

APP_NAME = "repokit"


def get_user_config_path() -> Path:
    r"""Get platform-specific user config file path.

    - Linux: ``~/.config/repokit/config.toml``
    - macOS: ``~/Library/Application Support/repokit/config.toml``
    - Windows: ``%APPDATA%\repokit\config.toml``

    The path is returned regardless of whether the file exists.

    Returns:
        Path to the user config file for the current platform.
    """
    return platformdirs.user_config_path(APP_NAME) / "config.toml"


def discover_sources(
    *,
    config_path: Path | None = None,
    include_env: bool = True,
    overrides: dict[str, Any] | None = None,  # pyright: ignore[reportExplicitAny]
) -> list[ConfigSource]:
    """Discover all configuration sources.

    Args:
        config_path: Extra configuration file layered above the user file.
        include_env: Include environment variables as a source.
        overrides: Explicit values with the highest precedence.

    Returns:
        List of ConfigSource objects in precedence order (highest first).
        File sources are listed whether or not their file exists.

    Examples:
        >>> sources = discover_sources(overrides={"logging": {"level": "debug"}})
        >>> [s.name.value for s in sources]
        ['override', 'env', 'user', 'default']
    """
    sources: list[ConfigSource] = []

    if overrides is not None:
        sources.append(ConfigSource(ConfigSourceName.OVERRIDE, values=overrides))

    if include_env:
        # Values are parsed during loading
        sources.append(ConfigSource(ConfigSourceName.ENV))

    if config_path is not None:
        sources.append(ConfigSource(ConfigSourceName.FILE, path=config_path))

    sources.append(ConfigSource(ConfigSourceName.USER, path=get_user_config_path()))
    sources.append(ConfigSource(ConfigSourceName.DEFAULT, values=DEFAULT_CONFIG))

    return sources
