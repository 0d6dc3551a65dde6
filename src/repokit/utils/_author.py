"""Author information resolution utilities."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from dulwich.config import Config as GitConfig


@dataclass(slots=True, frozen=True)
class AuthorInfo:
    """Resolved author information.

    Attributes:
        name: Author name, or None if not found.
        email: Author email, or None if not found.
    """

    name: str | None
    email: str | None


def get_author_info(git_config: GitConfig | None = None) -> AuthorInfo:
    """Resolve author info from environment variables or git config.

    Resolution order:
    1. Environment variables (REPOKIT_AUTHOR_NAME, REPOKIT_AUTHOR_EMAIL)
    2. Git config (user.name, user.email)

    Args:
        git_config: A git config stack to read ``user.*`` from.

    Returns:
        AuthorInfo with resolved name and email (either may be None).
    """
    name = os.environ.get("REPOKIT_AUTHOR_NAME") or _git_config(git_config, b"name")
    email = os.environ.get("REPOKIT_AUTHOR_EMAIL") or _git_config(git_config, b"email")

    return AuthorInfo(name=name, email=email)


def _git_config(git_config: GitConfig | None, key: bytes) -> str | None:
    """Read a ``user.<key>`` value from git config.

    Args:
        git_config: Config to read from.
        key: Key within the ``user`` section.

    Returns:
        The config value, or None if not set.
    """
    if git_config is None:
        return None

    try:
        value = git_config.get((b"user",), key)
    except KeyError:
        return None

    return value.decode("utf-8", "replace").strip() or None
