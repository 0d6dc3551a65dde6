"""Repository handle lifecycle.

Every public operation opens the repository, does one task and closes it
again. This module owns that discipline and the translation of object
store failures into repokit exceptions.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Final

from dulwich import porcelain
from dulwich.errors import (
    ChecksumMismatch,
    GitProtocolError,
    HangupException,
    NoIndexPresent,
    NotGitRepository,
    ObjectFormatException,
    RefFormatError,
    WrongObjectException,
)
from dulwich.file import FileLocked
from dulwich.repo import Repo

from repokit.exceptions import (
    BareRepositoryError,
    ObjectNotFoundError,
    ObjectStoreError,
    RepokitError,
    RepositoryLockedError,
    RepositoryNotFoundError,
)

if TYPE_CHECKING:
    from collections.abc import Iterator

_STORE_ERRORS: Final = (
    ChecksumMismatch,
    GitProtocolError,
    HangupException,
    NotGitRepository,
    ObjectFormatException,
    RefFormatError,
    WrongObjectException,
    porcelain.Error,
    OSError,
)


def _key_error_oid(error: KeyError) -> str | None:
    if not error.args:
        return None
    key = error.args[0]
    if isinstance(key, bytes):
        return key.decode("ascii", "replace")
    return str(key)


@contextmanager
def store_errors(path: Path | None = None) -> Iterator[None]:
    """Translate object store exceptions raised inside the block.

    Repokit exceptions pass through unchanged.

    Args:
        path: Repository path recorded on translated exceptions.

    Raises:
        RepositoryLockedError: A git lock file is held by someone else.
        BareRepositoryError: The operation needs an index the repository lacks.
        ObjectNotFoundError: An object or reference lookup failed.
        ObjectStoreError: Any other store failure.
    """
    try:
        yield
    except RepokitError:
        raise
    except FileLocked as e:
        msg = f"repository is locked: {e}"
        raise RepositoryLockedError(msg, kind=type(e).__name__, cause=e, path=path) from e
    except NoIndexPresent as e:
        msg = "operation requires a working tree"
        raise BareRepositoryError(msg, path=path) from e
    except KeyError as e:
        oid = _key_error_oid(e)
        msg = f"object not found: {oid}"
        raise ObjectNotFoundError(msg, oid=oid, cause=e, path=path) from e
    except _STORE_ERRORS as e:
        msg = f"object store error: {e}"
        raise ObjectStoreError(msg, kind=type(e).__name__, cause=e, path=path) from e


@contextmanager
def open_repository(path: Path) -> Iterator[Repo]:
    """Open a repository for the duration of the block.

    The dulwich handle is closed exactly once on every exit path.

    Args:
        path: Worktree root or git directory of the repository.

    Yields:
        The open dulwich repository.

    Raises:
        RepositoryNotFoundError: If ``path`` holds no repository.
    """
    try:
        repo = Repo(str(path))
    except (NotGitRepository, FileNotFoundError, NotADirectoryError) as e:
        msg = f"Invalid repository: {path}"
        raise RepositoryNotFoundError(msg, path=path) from e

    try:
        with store_errors(path):
            yield repo
    finally:
        repo.close()


def is_repository_path(path: Path) -> bool:
    """Return True if ``path`` can be opened as a repository."""
    try:
        with open_repository(path):
            return True
    except RepositoryNotFoundError:
        return False
