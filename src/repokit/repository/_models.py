"""Repokit repository models.

This module defines the value records returned by repository operations.
All records are immutable snapshots; none of them holds a handle into the
underlying repository.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Self

import pendulum

if TYPE_CHECKING:
    from collections.abc import Iterator


@dataclass(frozen=True, slots=True)
class Signature:
    """An identity plus a point in time.

    Attributes:
        name: Display name.
        email: Email address.
        time: Seconds since the Unix epoch.
        offset: Timezone offset in minutes east of UTC.
    """

    name: str
    email: str
    time: float
    offset: float

    @classmethod
    def now(cls, name: str, email: str) -> Self:
        """Build a signature stamped with the current local time.

        Args:
            name: Display name.
            email: Email address.

        Returns:
            A signature carrying the current time and local UTC offset.
        """
        current = pendulum.now()
        return cls(
            name=name,
            email=email,
            time=float(current.int_timestamp),
            offset=float(current.offset // 60),
        )

    @property
    def when(self) -> pendulum.DateTime:
        """The signature time as a timezone-aware datetime."""
        tz = pendulum.FixedTimezone(int(self.offset * 60))
        return pendulum.from_timestamp(self.time, tz=tz)


@dataclass(frozen=True, slots=True)
class Commit:
    """A commit read from (or written to) the object store.

    Attributes:
        id: 40 character hex object id.
        tree: 40 character hex id of the commit's tree.
        parents: Hex ids of the parent commits, first parent first.
        author: Who wrote the change.
        committer: Who recorded the change.
        summary: First non-blank line of the message, stripped.
        message: Complete commit message.
    """

    id: str
    tree: str
    parents: tuple[str, ...]
    author: Signature
    committer: Signature
    summary: str
    message: str


class ReferenceKind(StrEnum):
    """How a reference stores its target."""

    OID = "oid"
    SYMBOLIC = "symbolic"


@dataclass(frozen=True, slots=True)
class Reference:
    """A named pointer in the refs namespace.

    Attributes:
        name: Full name (``refs/heads/main``, ``HEAD``).
        shorthand: Human-readable short name (``main``).
        kind: Whether the target is an object id or another reference.
        target: 40 hex object id, or the full name of the referenced ref.
            Symbolic targets are never dereferenced.
    """

    name: str
    shorthand: str
    kind: ReferenceKind
    target: str


class BranchScope(StrEnum):
    """Which branches to enumerate."""

    LOCAL = "local"
    REMOTE = "remote"
    ALL = "all"


@dataclass(frozen=True, slots=True)
class Branch:
    """A local or remote-tracking branch.

    Attributes:
        name: Full reference name.
        shorthand: Short name (``main`` or ``origin/main``).
        kind: Reference kind of the branch ref.
        target: Object id or symbolic target.
        is_head: Whether HEAD points at this branch.
        remote_name: Remote of a remote-tracking branch, else None.
        remote_url: URL of that remote, when configured.
    """

    name: str
    shorthand: str
    kind: ReferenceKind
    target: str
    is_head: bool = False
    remote_name: str | None = None
    remote_url: str | None = None

    @property
    def is_remote(self) -> bool:
        return self.remote_name is not None


@dataclass(frozen=True, slots=True)
class Tag:
    """An annotated tag.

    Attributes:
        name: Tag name as recorded in the tag object.
        message: Tag message.
        tagger: Who created the tag; older tags may lack one.
        target: Hex id of the tagged object.
    """

    name: str
    message: str
    tagger: Signature | None
    target: str


@dataclass(frozen=True, slots=True)
class Remote:
    """A remote repository.

    Attributes:
        name: Remote name.
        url: Fetch URL, or None when the remote is not configured.
        persisted: False for a remote synthesized from a ref name alone.
    """

    name: str
    url: str | None
    persisted: bool = True


class ChangeCategory(StrEnum):
    """Classification of a single path in a status result."""

    NEW = "new"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"
    TYPECHANGE = "typechange"
    UNTRACKED = "untracked"
    IGNORED = "ignored"


@dataclass(frozen=True, slots=True)
class StatusEntry:
    """One classified path.

    Attributes:
        category: What happened to the path.
        path: Worktree-relative path using ``/`` separators. For renames this
            is the new path; directories collapsed into one entry end in ``/``.
        old_path: Previous path, set for renames only.
    """

    category: ChangeCategory
    path: str
    old_path: str | None = None

    @property
    def paths(self) -> tuple[str, ...]:
        """``(path,)``, or ``(old_path, path)`` for renames."""
        if self.old_path is None:
            return (self.path,)
        return (self.old_path, self.path)


@dataclass(frozen=True, slots=True)
class RepoStatus:
    """Status snapshot partitioned by comparison kind.

    Categories that were not requested are None.

    Attributes:
        staged: HEAD to index changes.
        unstaged: Index to worktree changes.
        untracked: Worktree files unknown to the index.
        ignored: Worktree files matched by ignore rules.
    """

    staged: tuple[StatusEntry, ...] | None = None
    unstaged: tuple[StatusEntry, ...] | None = None
    untracked: tuple[StatusEntry, ...] | None = None
    ignored: tuple[StatusEntry, ...] | None = None

    def _selected(self) -> Iterator[tuple[str, tuple[StatusEntry, ...]]]:
        for key in ("staged", "unstaged", "untracked", "ignored"):
            entries: tuple[StatusEntry, ...] | None = getattr(self, key)
            if entries is not None:
                yield key, entries

    def as_dict(self) -> dict[str, list[StatusEntry]]:
        """Return the requested categories, in a fixed order."""
        return {key: list(entries) for key, entries in self._selected()}

    @property
    def is_clean(self) -> bool:
        """True when every requested category is empty."""
        return not any(entries for _, entries in self._selected())


@dataclass(frozen=True, slots=True)
class TransferProgress:
    """Progress of a clone transfer.

    Attributes:
        received_objects: Objects processed so far.
        total_objects: Objects expected in total.
        received_bytes: Bytes received so far, when reported.
    """

    received_objects: int
    total_objects: int
    received_bytes: int = 0

    @property
    def percent(self) -> int:
        if self.total_objects <= 0:
            return 100
        return (100 * self.received_objects) // self.total_objects
