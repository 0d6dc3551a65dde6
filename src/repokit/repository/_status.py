"""Status classification.

Compares HEAD, the index and the working tree and classifies every differing
path. The comparison never writes to the repository: the tree for the index
is built in an in-memory store layered over the repository's object store.
"""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from dulwich.diff_tree import (
    CHANGE_ADD,
    CHANGE_COPY,
    CHANGE_DELETE,
    CHANGE_MODIFY,
    CHANGE_RENAME,
    RenameDetector,
    tree_changes,
)
from dulwich.ignore import IgnoreFilterManager
from dulwich.index import IndexEntry, blob_from_path_and_stat, cleanup_mode, commit_tree
from dulwich.object_store import MemoryObjectStore, OverlayObjectStore
from dulwich.objects import S_ISGITLINK

from repokit.repository._models import ChangeCategory, RepoStatus, StatusEntry
from repokit.utils._git import decode_path, encode_path

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from dulwich.diff_tree import TreeChange
    from dulwich.index import Index
    from dulwich.object_store import BaseObjectStore
    from dulwich.objects import TreeEntry
    from dulwich.repo import Repo

_GIT_DIR: Final = ".git"
_HEAD: Final = b"HEAD"


@dataclass(frozen=True, slots=True)
class StatusSelection:
    """Which status categories to compute."""

    staged: bool = True
    unstaged: bool = True
    untracked: bool = True
    ignored: bool = False

    @property
    def walks_worktree(self) -> bool:
        return self.untracked or self.ignored


@dataclass(slots=True)
class _PathRecord:
    """Everything known about one path after the comparison pass."""

    staged: StatusEntry | None = None
    unstaged: StatusEntry | None = None
    worktree: StatusEntry | None = None


# =============================================================================
# HEAD <-> index
# =============================================================================


def _head_tree_id(repo: Repo) -> bytes | None:
    _, head_id = repo.refs.follow(_HEAD)
    if head_id is None:
        return None
    return repo[head_id].tree


def index_blobs(index: Index) -> Iterator[tuple[bytes, bytes, int]]:
    """Yield ``(path, sha, mode)`` for each stage-0 index entry."""
    for path, entry in index.items():
        if isinstance(entry, IndexEntry):
            yield path, entry.sha, entry.mode


def _entry_path(entry: TreeEntry | None) -> bytes | None:
    if entry is None:
        return None
    return entry.path


def _same_kind(old_mode: int, new_mode: int) -> bool:
    return stat.S_IFMT(old_mode) == stat.S_IFMT(new_mode)


def _classify_tree_changes(changes: Iterable[TreeChange]) -> list[StatusEntry]:
    """Turn dulwich tree changes into status entries.

    A change of mode family at one path comes out of the rename detector as
    a delete plus an add; those pairs are folded into a single typechange.
    """
    entries: list[StatusEntry] = []
    added: set[str] = set()
    deleted: set[str] = set()

    for change in changes:
        old_path = _entry_path(change.old)
        new_path = _entry_path(change.new)

        if change.type == CHANGE_RENAME and old_path is not None and new_path is not None:
            entries.append(
                StatusEntry(
                    ChangeCategory.RENAMED,
                    decode_path(new_path),
                    old_path=decode_path(old_path),
                )
            )
        elif change.type == CHANGE_MODIFY and new_path is not None:
            same = _same_kind(change.old.mode, change.new.mode)
            category = ChangeCategory.MODIFIED if same else ChangeCategory.TYPECHANGE
            entries.append(StatusEntry(category, decode_path(new_path)))
        elif change.type in (CHANGE_ADD, CHANGE_COPY) and new_path is not None:
            added.add(decode_path(new_path))
        elif change.type == CHANGE_DELETE and old_path is not None:
            deleted.add(decode_path(old_path))

    for path in added & deleted:
        entries.append(StatusEntry(ChangeCategory.TYPECHANGE, path))
    entries.extend(StatusEntry(ChangeCategory.NEW, path) for path in added - deleted)
    entries.extend(StatusEntry(ChangeCategory.DELETED, path) for path in deleted - added)

    return entries


def staged_changes(
    repo: Repo,
    index: Index | None,
    *,
    rename_threshold: int,
) -> list[StatusEntry]:
    """Compare HEAD's tree with the index.

    Args:
        repo: The open repository.
        index: The repository index, or None for a bare repository.
        rename_threshold: Similarity percentage for rename detection.

    Returns:
        Unordered staged entries.
    """
    if index is None:
        # No index: nothing can differ from HEAD.
        return []

    head_tree = _head_tree_id(repo)
    scratch = MemoryObjectStore()
    store: BaseObjectStore = OverlayObjectStore([repo.object_store, scratch], add_store=scratch)

    index_tree = commit_tree(store, index_blobs(index))
    if index_tree == head_tree:
        return []

    detector = RenameDetector(store, rename_threshold=rename_threshold)
    return _classify_tree_changes(
        tree_changes(store, head_tree, index_tree, rename_detector=detector)
    )


# =============================================================================
# index <-> worktree
# =============================================================================


def _fs_path(root: bytes, tree_path: bytes) -> bytes:
    if os.sep != "/":
        tree_path = tree_path.replace(b"/", os.sep.encode())
    return os.path.join(root, tree_path)


def _time_ns(value: int | float | tuple[int, int]) -> int:
    if isinstance(value, tuple):
        return value[0] * 1_000_000_000 + value[1]
    return int(value * 1_000_000_000)


def _index_mtime_ns(index: Index) -> int | None:
    try:
        return os.stat(index.path).st_mtime_ns
    except OSError:
        return None


def _stat_unchanged(st: os.stat_result, entry: IndexEntry, index_mtime_ns: int | None) -> bool:
    """Whether the file still has the stat data recorded when it was staged.

    A file modified in the same instant the index was written can change
    without its stat data changing, so such racily clean entries are never
    trusted and always get hashed.
    """
    if index_mtime_ns is None:
        return False
    mtime_ns = _time_ns(entry.mtime)
    return (
        st.st_size == entry.size
        and st.st_mtime_ns == mtime_ns
        and st.st_ctime_ns == _time_ns(entry.ctime)
        and mtime_ns < index_mtime_ns
    )


def _classify_entry(
    fs_path: bytes, entry: IndexEntry, index_mtime_ns: int | None = None
) -> ChangeCategory | None:
    try:
        st = os.lstat(fs_path)
    except (FileNotFoundError, NotADirectoryError):
        return ChangeCategory.DELETED

    if stat.S_ISDIR(st.st_mode):
        return ChangeCategory.DELETED

    worktree_mode = cleanup_mode(st.st_mode)
    if not _same_kind(worktree_mode, entry.mode):
        return ChangeCategory.TYPECHANGE

    if worktree_mode != entry.mode:
        return ChangeCategory.MODIFIED

    if _stat_unchanged(st, entry, index_mtime_ns):
        return None

    blob = blob_from_path_and_stat(fs_path, st)
    if blob.id != entry.sha:
        return ChangeCategory.MODIFIED

    return None


def unstaged_changes(root: bytes, index: Index) -> Iterator[StatusEntry]:
    """Compare each index entry with the file on disk.

    Files whose size, times and mode match the index are taken as unchanged
    without reading them. Submodules and conflicted entries are not compared.

    Args:
        root: Worktree root as bytes.
        index: The repository index.

    Yields:
        Unordered unstaged entries.
    """
    index_mtime_ns = _index_mtime_ns(index)
    for tree_path, entry in index.items():
        if not isinstance(entry, IndexEntry) or S_ISGITLINK(entry.mode):
            continue

        category = _classify_entry(_fs_path(root, tree_path), entry, index_mtime_ns)
        if category is not None:
            yield StatusEntry(category, decode_path(tree_path))


# =============================================================================
# worktree only
# =============================================================================


def _tracked_paths(index: Index) -> tuple[frozenset[str], frozenset[str]]:
    """Return tracked paths and every directory that holds one."""
    files: set[str] = set()
    directories: set[str] = set()

    for tree_path in index:
        path = decode_path(tree_path)
        files.add(path)
        parent, _, _ = path.rpartition("/")
        while parent and parent not in directories:
            directories.add(parent)
            parent, _, _ = parent.rpartition("/")

    return frozenset(files), frozenset(directories)


def _relative(parent: str, name: str) -> str:
    return f"{parent}/{name}" if parent else name


def _worktree_only(
    repo: Repo,
    root: str,
    index: Index,
    selection: StatusSelection,
) -> Iterator[StatusEntry]:
    """Walk the worktree and report paths the index does not know.

    Untracked files are listed one by one. An untracked nested repository and
    an ignored directory without tracked content are each reported once as
    ``dir/``; the walk does not descend into them.
    """
    ignore_manager = IgnoreFilterManager.from_repo(repo)
    tracked, tracked_dirs = _tracked_paths(index)
    ignored_dirs: set[str] = set()

    def report(path: str, *, ignored: bool) -> StatusEntry | None:
        if ignored and selection.ignored:
            return StatusEntry(ChangeCategory.IGNORED, path)
        if not ignored and selection.untracked:
            return StatusEntry(ChangeCategory.UNTRACKED, path)
        return None

    for dirpath, dirnames, filenames in os.walk(root):
        rel_dir = os.path.relpath(dirpath, root).replace(os.sep, "/")
        if rel_dir == ".":
            rel_dir = ""
        parent_ignored = rel_dir in ignored_dirs

        candidates = list(filenames)
        keep: list[str] = []

        for name in dirnames:
            if name == _GIT_DIR:
                continue

            rel = _relative(rel_dir, name)
            full = os.path.join(dirpath, name)

            if os.path.islink(full):
                candidates.append(name)
                continue

            if rel in tracked:
                # Gitlink entry; the submodule reports its own state.
                continue

            is_ignored = parent_ignored or ignore_manager.is_ignored(rel + "/") is True

            if rel not in tracked_dirs:
                if is_ignored:
                    entry = report(rel + "/", ignored=True)
                    if entry is not None:
                        yield entry
                    continue
                if os.path.exists(os.path.join(full, _GIT_DIR)):
                    entry = report(rel + "/", ignored=False)
                    if entry is not None:
                        yield entry
                    continue
            elif is_ignored:
                ignored_dirs.add(rel)

            keep.append(name)

        dirnames[:] = keep

        for name in candidates:
            rel = _relative(rel_dir, name)
            if rel in tracked:
                continue
            is_ignored = parent_ignored or ignore_manager.is_ignored(rel) is True
            entry = report(rel, ignored=is_ignored)
            if entry is not None:
                yield entry


# =============================================================================
# Entry point
# =============================================================================


def _partition(
    records: dict[str, _PathRecord],
    selection: StatusSelection,
) -> RepoStatus:
    ordered = [records[path] for path in sorted(records, key=encode_path)]

    def pick(
        attr: str,
        *,
        selected: bool,
        categories: frozenset[ChangeCategory] | None = None,
    ) -> tuple[StatusEntry, ...] | None:
        if not selected:
            return None
        picked: list[StatusEntry] = []
        for record in ordered:
            entry: StatusEntry | None = getattr(record, attr)
            if entry is not None and (categories is None or entry.category in categories):
                picked.append(entry)
        return tuple(picked)

    return RepoStatus(
        staged=pick("staged", selected=selection.staged),
        unstaged=pick("unstaged", selected=selection.unstaged),
        untracked=pick(
            "worktree",
            selected=selection.untracked,
            categories=frozenset({ChangeCategory.UNTRACKED}),
        ),
        ignored=pick(
            "worktree",
            selected=selection.ignored,
            categories=frozenset({ChangeCategory.IGNORED}),
        ),
    )


def collect_status(
    repo: Repo,
    selection: StatusSelection,
    *,
    rename_threshold: int,
) -> RepoStatus:
    """Classify every differing path of an open repository.

    Categories not requested in ``selection`` are neither computed nor
    returned. Bare repositories report empty worktree categories.

    Args:
        repo: The open repository.
        selection: Categories to compute.
        rename_threshold: Similarity percentage for staged rename detection.

    Returns:
        The partitioned status, each category ordered by path bytes.
    """
    records: dict[str, _PathRecord] = {}
    index = None if repo.bare else repo.open_index()

    def record(path: str) -> _PathRecord:
        return records.setdefault(path, _PathRecord())

    if selection.staged:
        for entry in staged_changes(repo, index, rename_threshold=rename_threshold):
            record(entry.path).staged = entry

    if index is not None:
        root = os.fsdecode(repo.path)

        if selection.unstaged:
            for entry in unstaged_changes(os.fsencode(root), index):
                record(entry.path).unstaged = entry

        if selection.walks_worktree:
            for entry in _worktree_only(repo, root, index, selection):
                record(entry.path).worktree = entry

    return _partition(records, selection)
