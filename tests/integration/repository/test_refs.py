"""Integration tests for branches, references, tags and remotes."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import pytest
from dulwich.repo import Repo

from repokit.exceptions import (
    ObjectNotFoundError,
    RemoteNotFoundError,
    RepositoryArgumentError,
    RepositoryConflictError,
    UnexpectedReferenceTypeError,
)
from repokit.repository import BranchScope, ReferenceKind, Repository, Signature, Tag

if TYPE_CHECKING:
    from tests.conftest import CommitFilesFunc

ORIGIN_URL = "https://example.com/project.git"


def _set_ref(repo_path: Path, name: str, target: str) -> None:
    repo = Repo(str(repo_path))
    try:
        repo.refs[name.encode()] = target.encode()
    finally:
        repo.close()


@pytest.fixture
def first_commit(commit_files: CommitFilesFunc) -> str:
    return commit_files({"a.txt": "one\n"})


@pytest.fixture
def origin(repository: Repository) -> None:
    repository.config(
        {
            "remote.origin.url": ORIGIN_URL,
            "remote.origin.fetch": "+refs/heads/*:refs/remotes/origin/*",
        }
    )


class TestBranches:
    def test_empty_repository_has_no_branches(self, repository: Repository) -> None:
        assert repository.branches() == []

    def test_local_branches_sorted_with_head_marked(
        self,
        repository: Repository,
        repo_path: Path,
        first_commit: str,
        head_branch: str,
    ) -> None:
        _set_ref(repo_path, "refs/heads/aaa", first_commit)
        _set_ref(repo_path, "refs/heads/zzz", first_commit)

        branches = repository.branches(BranchScope.LOCAL)

        expected = sorted(["refs/heads/aaa", "refs/heads/zzz", head_branch])
        assert [b.name for b in branches] == expected
        assert [b.name for b in branches if b.is_head] == [head_branch]
        assert all(b.kind == ReferenceKind.OID and b.target == first_commit for b in branches)
        assert not any(b.is_remote for b in branches)

    @pytest.mark.usefixtures("origin")
    def test_remote_branch_resolves_configured_remote(
        self, repository: Repository, repo_path: Path, first_commit: str
    ) -> None:
        _set_ref(repo_path, "refs/remotes/origin/main", first_commit)

        [branch] = repository.branches("remote")

        assert branch.name == "refs/remotes/origin/main"
        assert branch.shorthand == "origin/main"
        assert branch.remote_name == "origin"
        assert branch.remote_url == ORIGIN_URL
        assert not branch.is_head

    def test_unconfigured_remote_is_not_persisted(
        self, repository: Repository, repo_path: Path, first_commit: str
    ) -> None:
        _set_ref(repo_path, "refs/remotes/upstream/main", first_commit)
        config_before = (repo_path / ".git" / "config").read_bytes()

        [branch] = repository.branches(BranchScope.REMOTE)

        assert branch.remote_name == "upstream"
        assert branch.remote_url is None
        assert repository.remotes() == []
        assert (repo_path / ".git" / "config").read_bytes() == config_before

    def test_all_lists_local_before_remote(
        self, repository: Repository, repo_path: Path, first_commit: str
    ) -> None:
        _set_ref(repo_path, "refs/remotes/origin/aaa", first_commit)

        branches = repository.branches()

        assert [b.is_remote for b in branches] == [False, True]

    @pytest.mark.parametrize("scope", ["bogus", "", 3])
    def test_unknown_scope(self, repository: Repository, scope: object) -> None:
        with pytest.raises(RepositoryArgumentError):
            repository.branches(scope)  # pyright: ignore[reportArgumentType]


class TestReferences:
    def test_unborn_head_is_listed(self, repository: Repository, head_branch: str) -> None:
        refs = repository.references()

        assert list(refs) == ["HEAD"]
        assert refs["HEAD"].kind == ReferenceKind.SYMBOLIC
        assert refs["HEAD"].target == head_branch

    def test_references_sorted_by_name(
        self,
        repository: Repository,
        repo_path: Path,
        first_commit: str,
        head_branch: str,
    ) -> None:
        _set_ref(repo_path, "refs/remotes/origin/main", first_commit)
        _set_ref(repo_path, "refs/tags/light", first_commit)

        refs = repository.references()

        assert list(refs) == sorted(
            ["HEAD", head_branch, "refs/remotes/origin/main", "refs/tags/light"]
        )
        assert refs["refs/tags/light"].shorthand == "light"
        assert refs["refs/remotes/origin/main"].shorthand == "origin/main"

    def test_symbolic_reference_is_not_dereferenced(
        self, repository: Repository, repo_path: Path, first_commit: str, head_branch: str
    ) -> None:
        repo = Repo(str(repo_path))
        try:
            repo.refs.set_symbolic_ref(b"refs/heads/alias", head_branch.encode())
        finally:
            repo.close()

        alias = repository.references()["refs/heads/alias"]

        assert alias.kind == ReferenceKind.SYMBOLIC
        assert alias.target == head_branch
        assert alias.target != first_commit

    def test_garbage_reference(
        self, repository: Repository, repo_path: Path, first_commit: str
    ) -> None:
        _ = (repo_path / ".git" / "refs" / "heads" / "broken").write_text("not an object id\n")

        with pytest.raises(UnexpectedReferenceTypeError) as exc_info:
            _ = repository.references()

        assert exc_info.value.name == "refs/heads/broken"


class TestTags:
    def test_create_and_list(
        self, repository: Repository, signature: Signature, first_commit: str
    ) -> None:
        created = repository.tag("v1.0", "Release 1.0\n", signature)

        assert created == Tag(
            name="v1.0", message="Release 1.0\n", tagger=signature, target=first_commit
        )
        assert repository.tags() == [created]
        assert repository.references()["refs/tags/v1.0"].kind == ReferenceKind.OID

    def test_explicit_target(
        self,
        repository: Repository,
        commit_files: CommitFilesFunc,
        signature: Signature,
        first_commit: str,
    ) -> None:
        _ = commit_files({"a.txt": "two\n"})

        tag = repository.tag("old", "points back", signature, target=first_commit.upper())

        assert tag.target == first_commit

    def test_lightweight_tags_are_skipped(
        self,
        repository: Repository,
        repo_path: Path,
        signature: Signature,
        first_commit: str,
    ) -> None:
        _set_ref(repo_path, "refs/tags/light", first_commit)
        _ = repository.tag("b-annotated", "msg", signature)
        _ = repository.tag("a-annotated", "msg", signature)

        assert [t.name for t in repository.tags()] == ["a-annotated", "b-annotated"]

    def test_existing_tag_conflicts(
        self, repository: Repository, signature: Signature, first_commit: str
    ) -> None:
        original = repository.tag("v1", "first", signature)

        with pytest.raises(RepositoryConflictError):
            _ = repository.tag("v1", "second", signature)

        assert repository.tags() == [original]

    def test_invalid_name(
        self, repository: Repository, signature: Signature, first_commit: str
    ) -> None:
        with pytest.raises(RepositoryArgumentError):
            _ = repository.tag("bad..name", "msg", signature)

        assert repository.tags() == []

    def test_missing_target(
        self, repository: Repository, signature: Signature, first_commit: str
    ) -> None:
        with pytest.raises(ObjectNotFoundError):
            _ = repository.tag("v1", "msg", signature, target="2" * 40)

    def test_unborn_head(self, repository: Repository, signature: Signature) -> None:
        with pytest.raises(ObjectNotFoundError):
            _ = repository.tag("v1", "msg", signature)


class TestRemotes:
    @pytest.mark.usefixtures("origin")
    def test_remotes_in_configuration_order(self, repository: Repository) -> None:
        repository.config({"remote.backup.url": "/srv/backup.git"})

        assert repository.remotes() == ["origin", "backup"]
        assert repository.remote_url(["backup", "origin"]) == ["/srv/backup.git", ORIGIN_URL]

    @pytest.mark.usefixtures("origin")
    def test_unknown_remote(self, repository: Repository) -> None:
        with pytest.raises(RemoteNotFoundError) as exc_info:
            _ = repository.remote_url(["origin", "missing"])

        assert exc_info.value.name == "missing"
        assert isinstance(exc_info.value, KeyError)

    def test_remote_without_url(self, repository: Repository) -> None:
        repository.config({"remote.mirror.fetch": "+refs/heads/*:refs/remotes/mirror/*"})

        assert repository.remotes() == ["mirror"]
        with pytest.raises(RemoteNotFoundError):
            _ = repository.remote_url(["mirror"])

    @pytest.mark.parametrize("names", ["origin", None, ["origin", 1]])
    def test_names_must_be_a_sequence_of_strings(
        self, repository: Repository, names: object
    ) -> None:
        with pytest.raises(RepositoryArgumentError):
            _ = repository.remote_url(names)  # pyright: ignore[reportArgumentType]
