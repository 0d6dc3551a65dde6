"""Common git utility functions.

This module provides shared helpers for byte/string conversion and
reference name handling.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from dulwich.repo import Repo

LOCAL_BRANCH_PREFIX: Final = "refs/heads/"
REMOTE_BRANCH_PREFIX: Final = "refs/remotes/"
TAG_PREFIX: Final = "refs/tags/"
_REFS_PREFIX: Final = "refs/"

_SHORTHAND_PREFIXES: Final = (
    LOCAL_BRANCH_PREFIX,
    TAG_PREFIX,
    REMOTE_BRANCH_PREFIX,
    _REFS_PREFIX,
)


def decode_bytes(value: bytes | str) -> str:
    """Decode bytes to str if needed.

    Args:
        value: A bytes or str value.

    Returns:
        The value as a string.
    """
    if isinstance(value, bytes):
        return value.decode()
    return value


def decode_path(value: bytes | str) -> str:
    """Decode a tree or index path, keeping undecodable bytes round-trippable.

    Args:
        value: A path as stored in git (bytes) or already decoded.

    Returns:
        The path as a string.
    """
    if isinstance(value, bytes):
        return value.decode("utf-8", "surrogateescape")
    return value


def encode_path(value: str) -> bytes:
    """Inverse of :func:`decode_path`."""
    return value.encode("utf-8", "surrogateescape")


def shorten_ref_name(name: bytes | str) -> str:
    """Return the human-readable short form of a reference name.

    Args:
        name: Full reference name (e.g., ``refs/heads/main``).

    Returns:
        The short name (e.g., ``main``, ``origin/main``, ``v1.0``).

    Examples:
        >>> shorten_ref_name("refs/remotes/origin/main")
        'origin/main'
        >>> shorten_ref_name("HEAD")
        'HEAD'
    """
    name_str = decode_bytes(name)
    for prefix in _SHORTHAND_PREFIXES:
        if name_str.startswith(prefix):
            return name_str[len(prefix) :]
    return name_str


def get_worktree_dir(repo: Repo) -> Path | None:
    """Get the worktree directory for a repository.

    Args:
        repo: The repository instance.

    Returns:
        Path to the worktree directory, or None for a bare repository.
    """
    if repo.bare:
        return None
    return Path(os.fsdecode(repo.path))
