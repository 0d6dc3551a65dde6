"""Writing git configuration variables."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from repokit.exceptions import RepositoryArgumentError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from dulwich.repo import Repo

type ConfigValue = str | bool | int
type ConfigEntry = tuple[tuple[bytes, ...], bytes, bytes]

_MIN_KEY_PARTS: Final = 2


def parse_config_key(key: str) -> tuple[tuple[bytes, ...], bytes]:
    """Split ``section[.subsection].name`` into a dulwich section and name.

    The subsection is everything between the first and the last dot, so it
    may itself contain dots.

    Examples:
        >>> parse_config_key("remote.origin.url")
        ((b'remote', b'origin'), b'url')
        >>> parse_config_key("branch.release.1.0.merge")
        ((b'branch', b'release.1.0'), b'merge')
    """
    if not isinstance(key, str):
        msg = f"config key must be a string, not {type(key).__name__}"
        raise RepositoryArgumentError(msg)

    section, _, rest = key.partition(".")
    subsection, _, name = rest.rpartition(".")
    if key.count(".") + 1 < _MIN_KEY_PARTS or not section or not name:
        msg = f"invalid config key: {key!r}"
        raise RepositoryArgumentError(msg)

    if subsection:
        return (section.encode(), subsection.encode()), name.encode()
    return (section.encode(),), name.encode()


def encode_config_value(key: str, value: object) -> bytes:
    if isinstance(value, bool):
        return b"true" if value else b"false"
    if isinstance(value, int):
        return str(value).encode()
    if isinstance(value, str):
        return value.encode()
    msg = f"config value for {key!r} must be str, bool or int, not {type(value).__name__}"
    raise RepositoryArgumentError(msg)


def prepare_config(variables: Mapping[str, ConfigValue]) -> list[ConfigEntry]:
    """Validate every variable before anything is written."""
    entries: list[ConfigEntry] = []
    for key, value in variables.items():
        section, name = parse_config_key(key)
        entries.append((section, name, encode_config_value(key, value)))
    return entries


def write_config(repo: Repo, entries: list[ConfigEntry]) -> None:
    """Set the prepared variables in the repository config in one write."""
    config = repo.get_config()
    for section, name, value in entries:
        config.set(section, name, value)
    config.write_to_path()
