from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING, Any

from repokit.exceptions import ConfigError

from ._models import Config

if TYPE_CHECKING:
    from pathlib import Path


def _strict_mode() -> bool:
    return os.environ.get("REPOKIT_STRICT_CONFIG", "0") == "1"


def safe_load_config(
    *,
    config_path: Path | None = None,
    overrides: dict[str, Any] | None = None,  # pyright: ignore[reportExplicitAny]
) -> tuple[Config, str | None]:
    """Load configuration with error handling.

    Behaviour depends on the REPOKIT_STRICT_CONFIG environment variable:
    - If unset or "0": warn to stderr and return the default config
    - If "1": re-raise the error and reject unknown keys

    Args:
        config_path: Extra configuration file layered above the user file.
        overrides: Explicit values with the highest precedence.

    Returns:
        Tuple of (Config, error_message). On success, error_message is None.
        On failure (non-strict mode), returns default Config with error message.

    Raises:
        ConfigError: In strict mode, if configuration cannot be loaded.
        OSError: In strict mode, if a configuration file cannot be read.
    """
    strict = _strict_mode()

    try:
        config = Config.load(config_path=config_path, overrides=overrides, strict=strict)
    except (ConfigError, OSError) as e:
        if strict:
            raise
        error_msg = str(e)
        print(f"Warning: Failed to load repokit config: {error_msg}", file=sys.stderr)  # noqa: T201
        return Config.from_dict({}, validate=False), error_msg
    else:
        return config, None
