"""Commit creation.

A commit is published by compare-and-swap on its target reference: the
reference only moves if it still points where it pointed when the parents
were resolved. Objects written before a failed swap stay behind as
unreachable objects. The reflog entry goes to the resolved reference and,
when HEAD points at it, to HEAD as well.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, Final

from dulwich.index import commit_tree
from dulwich.objects import Commit as GitCommit
from dulwich.reflog import format_reflog_line

from repokit.exceptions import (
    BareRepositoryError,
    NothingToCommitError,
    ParentNotFoundError,
    RepositoryConflictError,
)
from repokit.repository._objects import (
    commit_from_object,
    format_identity,
    summarize,
    timezone_seconds,
)
from repokit.repository._status import index_blobs, staged_changes
from repokit.utils._git import decode_bytes

if TYPE_CHECKING:
    from collections.abc import Sequence

    from dulwich.repo import Repo

    from repokit.repository._models import Commit, Signature

_INITIAL_REFLOG: Final = "commit (initial): {summary}"
_REFLOG: Final = "commit: {summary}"
_HEAD_REF: Final = b"HEAD"


def _append_reflog(repo: Repo, ref: bytes, line: bytes) -> None:
    # HEAD is per worktree; every other reference logs in the common dir.
    base = repo.controldir() if ref == _HEAD_REF else repo.commondir()
    path = Path(base, "logs", os.fsdecode(ref))
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("ab") as f:
        _ = f.write(line + b"\n")


def _resolve_parents(
    repo: Repo,
    parents: Sequence[str] | None,
    tip: bytes | None,
) -> list[bytes]:
    """Resolve the parent list of the new commit.

    Args:
        repo: The open repository.
        parents: Explicit parent hex ids, or None for the current tip.
        tip: Current target of the reference, None when unborn.

    Returns:
        Parent ids, first parent first.

    Raises:
        ParentNotFoundError: If a parent is missing or is not a commit.
        RepositoryConflictError: If explicit parents do not start with the
            current tip.
    """
    if parents is None:
        return [] if tip is None else [tip]

    resolved: list[bytes] = []
    for hex_id in parents:
        object_id = hex_id.encode("ascii")
        try:
            obj = repo[object_id]
        except KeyError as e:
            msg = f"parent commit not found: {hex_id}"
            raise ParentNotFoundError(msg, oid=hex_id, cause=e) from e
        if not isinstance(obj, GitCommit):
            msg = f"parent is not a commit: {hex_id}"
            raise ParentNotFoundError(msg, oid=hex_id)
        resolved.append(obj.id)

    if tip is not None and (not resolved or resolved[0] != tip):
        msg = "reference tip is not the first parent"
        raise RepositoryConflictError(msg, details=f"tip: {decode_bytes(tip)}")

    return resolved


def create_commit(  # noqa: PLR0913
    repo: Repo,
    message: str,
    *,
    author: Signature,
    committer: Signature,
    parents: Sequence[str] | None,
    ref: str,
    rename_threshold: int,
) -> Commit:
    """Commit the index and move ``ref`` to the new commit.

    Signatures must already be validated.

    Args:
        repo: The open repository.
        message: Commit message, stored as given.
        author: Author signature.
        committer: Committer signature.
        parents: Explicit parent hex ids, or None for the current tip of ``ref``.
        ref: Reference to update; symbolic references are followed.
        rename_threshold: Similarity percentage for staged rename detection.

    Returns:
        The new commit.

    Raises:
        BareRepositoryError: If the repository has no index.
        NothingToCommitError: If nothing is staged.
        ParentNotFoundError: If a parent does not exist.
        RepositoryConflictError: If ``ref`` moved or the parents disagree with it.
    """
    if repo.bare:
        msg = "cannot commit in a bare repository"
        raise BareRepositoryError(msg)

    index = repo.open_index()
    if len(index) == 0 or not staged_changes(repo, index, rename_threshold=rename_threshold):
        msg = "nothing staged to commit"
        raise NothingToCommitError(msg)

    ref_name = ref.encode()
    names, tip = repo.refs.follow(ref_name)
    target = names[-1]
    parent_ids = _resolve_parents(repo, parents, tip)

    commit = GitCommit()
    commit.tree = commit_tree(repo.object_store, index_blobs(index))
    commit.parents = parent_ids
    commit.author = format_identity(author)
    commit.author_time = int(author.time)
    commit.author_timezone = timezone_seconds(author)
    commit.committer = format_identity(committer)
    commit.commit_time = int(committer.time)
    commit.commit_timezone = timezone_seconds(committer)
    commit.message = message.encode()
    repo.object_store.add_object(commit)

    template = _REFLOG if parent_ids else _INITIAL_REFLOG
    reflog_line = format_reflog_line(
        tip,
        commit.id,
        commit.committer,
        commit.commit_time,
        commit.commit_timezone,
        template.format(summary=summarize(message)).encode(),
    )

    # No reflog arguments: dulwich would log under the name passed in only.
    if tip is None:
        published = repo.refs.add_if_new(target, commit.id)
    else:
        published = repo.refs.set_if_equals(target, tip, commit.id)

    if not published:
        msg = f"reference {ref} changed during commit"
        raise RepositoryConflictError(msg, details=f"orphaned commit: {decode_bytes(commit.id)}")

    _append_reflog(repo, target, reflog_line)
    if target != _HEAD_REF and repo.refs.follow(_HEAD_REF)[0][-1] == target:
        _append_reflog(repo, _HEAD_REF, reflog_line)

    return commit_from_object(commit)
