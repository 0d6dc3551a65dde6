"""Repokit: a stateless facade over git repositories."""

from repokit.exceptions import RepokitError, RepositoryError
from repokit.repository import (
    Branch,
    BranchScope,
    ChangeCategory,
    Commit,
    Reference,
    ReferenceKind,
    Remote,
    RepoStatus,
    Repository,
    Signature,
    StatusEntry,
    Tag,
    TransferProgress,
    clone,
    init,
    is_repository,
)

__all__ = [
    "Branch",
    "BranchScope",
    "ChangeCategory",
    "Commit",
    "Reference",
    "ReferenceKind",
    "Remote",
    "RepoStatus",
    "RepokitError",
    "Repository",
    "RepositoryError",
    "Signature",
    "StatusEntry",
    "Tag",
    "TransferProgress",
    "clone",
    "init",
    "is_repository",
]
