# pyright: reportAny=false, reportUnknownVariableType=false, reportUnknownArgumentType=false
"""TOML configuration file loading and merging."""

from __future__ import annotations

import json
import os
import re
import tomllib
from typing import TYPE_CHECKING, Any, Final

from repokit.exceptions import ConfigLoadError

if TYPE_CHECKING:
    from pathlib import Path

ENV_PREFIX = "REPOKIT_"
_SECTION_SEPARATOR = "__"

# tomllib only exposes lineno/colno from Python 3.14; older releases put the
# position in the message instead.
_POSITION_IN_MESSAGE: Final = re.compile(r"\(at line (\d+), column (\d+)\)")


def error_position(error: ValueError) -> tuple[int | None, int | None]:
    """Return the ``(line, column)`` a TOML parse error points at.

    Args:
        error: The decode error raised by tomllib.

    Returns:
        One-based line and column, or ``(None, None)`` when the error names
        no position (e.g. it happened at the end of the document).

    Examples:
        >>> error_position(ValueError("Invalid value (at line 3, column 9)"))
        (3, 9)
    """
    line: int | None = getattr(error, "lineno", None)
    column: int | None = getattr(error, "colno", None)
    if line is not None:
        return line, column

    match = _POSITION_IN_MESSAGE.search(str(error))
    if match is None:
        return None, None
    return int(match.group(1)), int(match.group(2))


def read_toml_file(path: Path) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    """Read and parse a TOML file.

    Args:
        path: Path to the TOML file.

    Returns:
        Parsed TOML content as dictionary.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigLoadError: If the file cannot be parsed.
    """
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        line, column = error_position(e)
        msg = f"Failed to parse TOML file {path}: {e}"
        raise ConfigLoadError(msg, path=path, line=line, column=column) from e


def deep_merge(
    base: dict[str, Any],  # pyright: ignore[reportExplicitAny]
    override: dict[str, Any],  # pyright: ignore[reportExplicitAny]
) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    """Deep merge two configuration dictionaries.

    Merges `override` into `base`, returning a new dictionary. Neither input
    is modified.

    Args:
        base: Base configuration (lower precedence).
        override: Override configuration (higher precedence).

    Returns:
        Merged configuration dictionary.

    Merge rules:
        - Dictionaries are recursively merged
        - Arrays are replaced entirely (no element-wise merge)
        - Scalars are replaced with override value
        - Missing keys in override preserve base values
    """
    result: dict[str, Any] = {}  # pyright: ignore[reportExplicitAny]

    for key in base.keys() | override.keys():
        if key not in override:
            result[key] = copy_value(base[key])
        elif key not in base:
            result[key] = copy_value(override[key])
        else:
            base_val = base[key]
            override_val = override[key]

            if isinstance(base_val, dict) and isinstance(override_val, dict):
                result[key] = deep_merge(base_val, override_val)
            else:
                result[key] = copy_value(override_val)

    return result


def copy_value(value: Any) -> Any:  # pyright: ignore[reportExplicitAny]
    """Create a deep copy of a configuration value.

    Args:
        value: The value to copy.

    Returns:
        A copy of the value, fully independent of the original for
        dicts and lists.
    """
    if isinstance(value, dict):
        return {k: copy_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [copy_value(item) for item in value]
    return value


def parse_env_vars(
    prefix: str = ENV_PREFIX,
) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    """Parse environment variables into config dictionary.

    Only variables naming a section and a key are considered, so flags such
    as REPOKIT_DEBUG or REPOKIT_STRICT_CONFIG never leak into the
    configuration.

    Args:
        prefix: Environment variable prefix (default: "REPOKIT_").

    Returns:
        Dictionary of parsed config values with nested structure.

    Environment variable naming:
        - Add prefix (REPOKIT_)
        - Convert to uppercase
        - Replace dots with double underscores
        - Example: status.rename_threshold -> REPOKIT_STATUS__RENAME_THRESHOLD
    """
    result: dict[str, Any] = {}  # pyright: ignore[reportExplicitAny]

    for key, value in os.environ.items():
        if not key.startswith(prefix):
            continue

        config_key = key[len(prefix) :]
        if _SECTION_SEPARATOR not in config_key:
            continue

        config_path = config_key.replace(_SECTION_SEPARATOR, ".").lower()
        set_nested_key(result, config_path, parse_string_value(value))

    return result


def parse_string_value(value: str) -> Any:  # pyright: ignore[reportExplicitAny]
    """Parse a string value with automatic type inference.

    Precedence:
    1. Boolean: true/false (case-insensitive)
    2. Integer: parseable as int (no decimal)
    3. Float: parseable as float (with decimal)
    4. JSON array/object: starts with [ or {
    5. String: fallback

    Args:
        value: Raw string value to parse.

    Returns:
        Parsed value with inferred type.

    Examples:
        >>> parse_string_value("true")
        True
        >>> parse_string_value("42")
        42
        >>> parse_string_value("3.14")
        3.14
        >>> parse_string_value("[1, 2, 3]")
        [1, 2, 3]
    """
    lower_value = value.lower()
    if lower_value in ("true", "false"):
        return lower_value == "true"

    try:
        return int(value)
    except ValueError:
        pass

    if "." in value:
        try:
            return float(value)
        except ValueError:
            pass

    if (value.startswith("[") and value.endswith("]")) or (
        value.startswith("{") and value.endswith("}")
    ):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            pass

    return value


def set_nested_key(
    d: dict[str, Any],  # pyright: ignore[reportExplicitAny]
    key_path: str,
    value: Any,  # pyright: ignore[reportExplicitAny]
) -> None:
    """Set a value at a dotted key path in a nested dictionary.

    Creates intermediate dictionaries as needed.

    Args:
        d: The dictionary to modify.
        key_path: Dotted key path (e.g., "logging.level").
        value: The value to set.

    Example:
        >>> d = {}
        >>> set_nested_key(d, "logging.level", "debug")
        >>> d
        {'logging': {'level': 'debug'}}
    """
    parts = key_path.split(".")
    current = d

    for part in parts[:-1]:
        if not isinstance(current.get(part), dict):
            current[part] = {}
        current = current[part]

    current[parts[-1]] = value
