"""Staging worktree files into the index."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, Final

from repokit.exceptions import BareRepositoryError, RepositoryPathError

if TYPE_CHECKING:
    from dulwich.repo import Repo

_GIT_DIR: Final = ".git"


def _resolve_in_worktree(root: Path, file_path: str | os.PathLike[str]) -> Path:
    candidate = Path(file_path)
    if not candidate.is_absolute():
        candidate = root / candidate

    # Resolve only the parent of a symlink so the link itself is staged.
    if candidate.is_symlink():
        return candidate.parent.resolve() / candidate.name
    return candidate.resolve()


def stage_path(repo: Repo, file_path: str | os.PathLike[str]) -> str:
    """Stage one worktree file, ignored or not.

    Args:
        repo: The open repository.
        file_path: Path relative to the worktree root, or absolute inside it.

    Returns:
        The staged path relative to the worktree, with ``/`` separators.

    Raises:
        BareRepositoryError: If the repository has no worktree.
        RepositoryPathError: If the path is outside the worktree, inside the
            git directory, or not an existing file.
    """
    if repo.bare:
        msg = "cannot stage files in a bare repository"
        raise BareRepositoryError(msg)

    root = Path(os.fsdecode(repo.path)).resolve()
    resolved = _resolve_in_worktree(root, file_path)

    try:
        relpath = resolved.relative_to(root).as_posix()
    except ValueError as e:
        msg = f"path is outside the working tree: {os.fspath(file_path)}"
        raise RepositoryPathError(msg, file_path=os.fspath(file_path)) from e

    if relpath == "." or relpath.split("/", 1)[0] == _GIT_DIR:
        msg = f"not a worktree file: {os.fspath(file_path)}"
        raise RepositoryPathError(msg, file_path=os.fspath(file_path))

    if not resolved.is_symlink() and not resolved.is_file():
        msg = f"no such file: {os.fspath(file_path)}"
        raise RepositoryPathError(msg, file_path=os.fspath(file_path))

    repo.get_worktree().stage([relpath])
    return relpath
