"""Integration tests for status classification against real repositories."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

import pytest
from dulwich.repo import Repo

import repokit.repository._status as status_module
from repokit.exceptions import RepositoryArgumentError
from repokit.repository import ChangeCategory, Repository, Signature, StatusEntry

if TYPE_CHECKING:
    from pytest_mock import MockerFixture

    from repokit.config import Config
    from tests.conftest import CommitFilesFunc, WriteFileFunc
    from tests.integration.repository.conftest import UnstageFunc

NEW = ChangeCategory.NEW
MODIFIED = ChangeCategory.MODIFIED
DELETED = ChangeCategory.DELETED
RENAMED = ChangeCategory.RENAMED
TYPECHANGE = ChangeCategory.TYPECHANGE
UNTRACKED = ChangeCategory.UNTRACKED
IGNORED = ChangeCategory.IGNORED


def _object_files(repo_path: Path) -> list[Path]:
    return sorted((repo_path / ".git" / "objects").rglob("*"))


class TestFreshRepository:
    def test_empty_repository_is_clean(self, repository: Repository) -> None:
        status = repository.status()

        assert status.staged == ()
        assert status.unstaged == ()
        assert status.untracked == ()
        assert status.ignored is None
        assert status.is_clean

    def test_untracked_files_are_listed_one_by_one(
        self, repository: Repository, write_file: WriteFileFunc
    ) -> None:
        _ = write_file("a.txt")
        _ = write_file("dir/b.txt")
        _ = write_file("dir/sub/c.txt")

        status = repository.status()

        assert status.untracked == (
            StatusEntry(UNTRACKED, "a.txt"),
            StatusEntry(UNTRACKED, "dir/b.txt"),
            StatusEntry(UNTRACKED, "dir/sub/c.txt"),
        )
        assert status.staged == ()

    def test_added_file_is_staged_new(
        self, repository: Repository, write_file: WriteFileFunc
    ) -> None:
        _ = write_file("a.txt")
        repository.add("a.txt")

        status = repository.status()

        assert status.staged == (StatusEntry(NEW, "a.txt"),)
        assert status.unstaged == ()
        assert status.untracked == ()

    def test_non_ascii_paths(self, repository: Repository, write_file: WriteFileFunc) -> None:
        _ = write_file("café.txt")

        assert repository.status().untracked == (StatusEntry(UNTRACKED, "café.txt"),)


class TestCommittedRepository:
    def test_clean_after_commit(
        self, repository: Repository, commit_files: CommitFilesFunc
    ) -> None:
        _ = commit_files({"a.txt": "one\n", "dir/b.txt": "two\n"})

        assert repository.status().is_clean

    def test_modified_and_deleted_in_worktree(
        self,
        repository: Repository,
        repo_path: Path,
        commit_files: CommitFilesFunc,
        write_file: WriteFileFunc,
    ) -> None:
        _ = commit_files({"a.txt": "one\n", "b.txt": "two\n"})
        _ = write_file("a.txt", "changed\n")
        (repo_path / "b.txt").unlink()

        status = repository.status()

        assert status.unstaged == (
            StatusEntry(MODIFIED, "a.txt"),
            StatusEntry(DELETED, "b.txt"),
        )
        assert status.staged == ()

    def test_path_can_be_staged_and_unstaged(
        self,
        repository: Repository,
        commit_files: CommitFilesFunc,
        write_file: WriteFileFunc,
    ) -> None:
        _ = commit_files({"a.txt": "one\n"})
        _ = write_file("a.txt", "two\n")
        repository.add("a.txt")
        _ = write_file("a.txt", "three\n")

        status = repository.status()

        assert status.staged == (StatusEntry(MODIFIED, "a.txt"),)
        assert status.unstaged == (StatusEntry(MODIFIED, "a.txt"),)

    def test_staged_rename(
        self,
        repository: Repository,
        repo_path: Path,
        commit_files: CommitFilesFunc,
        unstage: UnstageFunc,
    ) -> None:
        content = "".join(f"line {n}\n" for n in range(50))
        _ = commit_files({"old.txt": content})
        (repo_path / "old.txt").rename(repo_path / "new.txt")
        unstage("old.txt")
        repository.add("new.txt")

        status = repository.status()

        assert status.staged == (StatusEntry(RENAMED, "new.txt", old_path="old.txt"),)
        assert status.unstaged == ()
        assert status.untracked == ()

    def test_staged_delete(
        self,
        repository: Repository,
        repo_path: Path,
        commit_files: CommitFilesFunc,
        unstage: UnstageFunc,
    ) -> None:
        _ = commit_files({"a.txt": "one\n", "b.txt": "two\n"})
        (repo_path / "b.txt").unlink()
        unstage("b.txt")

        status = repository.status()

        assert status.staged == (StatusEntry(DELETED, "b.txt"),)
        assert status.unstaged == ()

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
    def test_file_replaced_by_symlink_is_typechange(
        self,
        repository: Repository,
        repo_path: Path,
        commit_files: CommitFilesFunc,
    ) -> None:
        _ = commit_files({"target.txt": "target\n", "link": "plain file\n"})
        (repo_path / "link").unlink()
        (repo_path / "link").symlink_to("target.txt")

        status = repository.status()
        assert status.unstaged == (StatusEntry(TYPECHANGE, "link"),)

        repository.add("link")
        assert repository.status().staged == (StatusEntry(TYPECHANGE, "link"),)

    @pytest.mark.skipif(os.name == "nt", reason="no executable bit")
    def test_executable_bit_is_a_modification(
        self,
        repository: Repository,
        repo_path: Path,
        commit_files: CommitFilesFunc,
    ) -> None:
        _ = commit_files({"run.sh": "echo hi\n"})
        (repo_path / "run.sh").chmod(0o755)

        assert repository.status().unstaged == (StatusEntry(MODIFIED, "run.sh"),)


class TestIgnoredAndNested:
    def test_ignored_directory_collapses(
        self, repository: Repository, write_file: WriteFileFunc
    ) -> None:
        _ = write_file(".gitignore", "build/\n*.log\n")
        _ = write_file("build/out.o")
        _ = write_file("build/deep/more.o")
        _ = write_file("debug.log")
        _ = write_file("src/keep.py")

        status = repository.status(ignored=True)

        assert status.ignored == (
            StatusEntry(IGNORED, "build/"),
            StatusEntry(IGNORED, "debug.log"),
        )
        assert status.untracked == (
            StatusEntry(UNTRACKED, ".gitignore"),
            StatusEntry(UNTRACKED, "src/keep.py"),
        )

    def test_ignored_files_hidden_unless_requested(
        self, repository: Repository, write_file: WriteFileFunc
    ) -> None:
        _ = write_file(".gitignore", "*.log\n")
        _ = write_file("debug.log")

        status = repository.status()

        assert status.ignored is None
        assert status.untracked == (StatusEntry(UNTRACKED, ".gitignore"),)

    def test_tracked_files_are_never_ignored(
        self,
        repository: Repository,
        commit_files: CommitFilesFunc,
        write_file: WriteFileFunc,
    ) -> None:
        _ = commit_files({"keep.log": "tracked\n"})
        _ = write_file(".gitignore", "*.log\n")
        _ = write_file("other.log")

        status = repository.status(ignored=True)

        assert status.ignored == (StatusEntry(IGNORED, "other.log"),)

    def test_ignored_directory_with_tracked_content_lists_files(
        self,
        repository: Repository,
        commit_files: CommitFilesFunc,
        write_file: WriteFileFunc,
    ) -> None:
        _ = commit_files({"build/tracked.txt": "tracked\n"})
        _ = write_file(".gitignore", "build/\n")
        _ = write_file("build/new.o")

        status = repository.status(ignored=True)

        assert status.ignored == (StatusEntry(IGNORED, "build/new.o"),)
        assert status.untracked == (StatusEntry(UNTRACKED, ".gitignore"),)

    def test_nested_repository_reported_once(
        self, repository: Repository, repo_path: Path, write_file: WriteFileFunc
    ) -> None:
        nested = repo_path / "vendor" / "lib"
        nested.mkdir(parents=True)
        Repo.init(str(nested)).close()
        _ = write_file("vendor/lib/inner.txt")

        status = repository.status()

        assert status.untracked == (StatusEntry(UNTRACKED, "vendor/lib/"),)


class TestSelection:
    def test_unrequested_categories_are_none(
        self, repository: Repository, write_file: WriteFileFunc
    ) -> None:
        _ = write_file("a.txt")

        status = repository.status(staged=False, untracked=False)

        assert status.staged is None
        assert status.untracked is None
        assert status.ignored is None
        assert status.unstaged == ()
        assert status.as_dict() == {"unstaged": []}

    @pytest.mark.parametrize("selector", ["staged", "unstaged", "untracked", "ignored"])
    def test_selectors_must_be_bool(self, repository: Repository, selector: str) -> None:
        with pytest.raises(RepositoryArgumentError):
            repository.status(**{selector: 1})  # pyright: ignore[reportArgumentType]

    def test_bare_repository_has_empty_worktree_categories(
        self, bare_repo_path: Path, settings: Config
    ) -> None:
        status = Repository(bare_repo_path, config=settings).status(ignored=True)

        assert status.staged == ()
        assert status.unstaged == ()
        assert status.untracked == ()
        assert status.ignored == ()


class TestReadOnly:
    def test_status_writes_no_objects(
        self,
        repository: Repository,
        repo_path: Path,
        commit_files: CommitFilesFunc,
        write_file: WriteFileFunc,
    ) -> None:
        _ = commit_files({"a.txt": "one\n"})
        _ = write_file("b.txt", "two\n")
        repository.add("b.txt")
        before = _object_files(repo_path)

        status = repository.status()

        assert status.staged == (StatusEntry(NEW, "b.txt"),)
        assert _object_files(repo_path) == before

    def test_status_is_idempotent(
        self,
        repository: Repository,
        commit_files: CommitFilesFunc,
        write_file: WriteFileFunc,
    ) -> None:
        _ = commit_files({"a.txt": "one\n"})
        _ = write_file("a.txt", "changed\n")
        _ = write_file("new.txt")

        assert repository.status(ignored=True) == repository.status(ignored=True)


class TestStatCache:
    @pytest.fixture
    def staged_in_past(
        self, repository: Repository, write_file: WriteFileFunc, signature: Signature
    ) -> Path:
        """A committed file whose mtime predates the index."""
        path = write_file("a.txt", "aaa\n")
        past = path.stat().st_mtime_ns - 10_000_000_000
        os.utime(path, ns=(past, past))
        repository.add("a.txt")
        _ = repository.commit("base", author=signature)
        return path

    def test_unchanged_file_is_not_read(
        self, repository: Repository, staged_in_past: Path, mocker: MockerFixture
    ) -> None:
        hashed = mocker.spy(status_module, "blob_from_path_and_stat")

        assert repository.status().is_clean
        assert hashed.call_count == 0

    def test_same_size_edit_is_detected(
        self, repository: Repository, staged_in_past: Path
    ) -> None:
        recorded = staged_in_past.stat()
        _ = staged_in_past.write_text("bbb\n")
        os.utime(staged_in_past, ns=(recorded.st_atime_ns, recorded.st_mtime_ns))

        assert repository.status().unstaged == (StatusEntry(MODIFIED, "a.txt"),)

    def test_racily_clean_file_is_read(
        self,
        repository: Repository,
        write_file: WriteFileFunc,
        signature: Signature,
        mocker: MockerFixture,
    ) -> None:
        path = write_file("a.txt", "aaa\n")
        future = path.stat().st_mtime_ns + 100_000_000_000
        os.utime(path, ns=(future, future))
        repository.add("a.txt")
        _ = repository.commit("base", author=signature)
        hashed = mocker.spy(status_module, "blob_from_path_and_stat")

        assert repository.status().is_clean
        assert hashed.call_count == 1
