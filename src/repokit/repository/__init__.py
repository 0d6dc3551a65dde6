"""Repokit repository access.

This package provides a small, stateless facade over a git repository on
disk. Every operation opens the repository, does its work and closes it.

Classes:
    Repository: Operations on a repository addressed by path.

Functions:
    init: Create (or reopen) a repository.
    clone: Clone a repository, optionally reporting transfer progress.
    is_repository: Check whether a path holds a repository.

Models:
    Signature: Identity plus time and UTC offset.
    Commit: A commit snapshot.
    Reference, Branch, Tag, Remote: Named pointers and their metadata.
    RepoStatus, StatusEntry, ChangeCategory: Status results.
    TransferProgress: Clone progress counters.

Example:
    >>> from repokit.repository import init, Signature
    >>> repo = init("/tmp/example")  # doctest: +SKIP
    >>> repo.add("README.md")  # doctest: +SKIP
    >>> repo.commit("Initial commit", author=Signature.now("Ada", "ada@example.com"))  # doctest: +SKIP
"""

from repokit.repository._models import (
    Branch,
    BranchScope,
    ChangeCategory,
    Commit,
    Reference,
    ReferenceKind,
    Remote,
    RepoStatus,
    Signature,
    StatusEntry,
    Tag,
    TransferProgress,
)
from repokit.repository._progress import ConsoleProgressReporter, ProgressCallback
from repokit.repository._repository import Repository, clone, init, is_repository

__all__ = [
    "Branch",
    "BranchScope",
    "ChangeCategory",
    "Commit",
    "ConsoleProgressReporter",
    "ProgressCallback",
    "Reference",
    "ReferenceKind",
    "Remote",
    "RepoStatus",
    "Repository",
    "Signature",
    "StatusEntry",
    "Tag",
    "TransferProgress",
    "clone",
    "init",
    "is_repository",
]
