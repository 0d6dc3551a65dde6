"""Shared test fixtures for repokit tests."""

import os
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from dulwich.repo import Repo

from repokit.config import Config
from repokit.repository import Repository, Signature
from repokit.utils._logging import _create_file_logger

WriteFileFunc = Callable[..., Path]


@pytest.fixture(autouse=True)
def isolated_environment(
    tmp_path_factory: pytest.TempPathFactory,
    monkeypatch: pytest.MonkeyPatch,
) -> Iterator[None]:
    """Keep user config, git config and REPOKIT_* variables out of tests."""
    home = tmp_path_factory.mktemp("home")

    for key in list(os.environ):
        if key.startswith("REPOKIT_") or key.startswith("GIT_"):
            monkeypatch.delenv(key)

    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")

    _create_file_logger.cache_clear()
    yield
    _create_file_logger.cache_clear()


@pytest.fixture
def settings() -> Config:
    """Default repokit configuration, independent of the environment."""
    return Config.from_dict({})


@pytest.fixture
def signature() -> Signature:
    return Signature(
        name="Test User",
        email="test@example.com",
        time=1_700_000_000.0,
        offset=60.0,
    )


@pytest.fixture
def repo_path(tmp_path: Path) -> Path:
    """An empty, non-bare repository created with dulwich."""
    path = tmp_path / "repo"
    path.mkdir()
    Repo.init(str(path)).close()
    return path


@pytest.fixture
def bare_repo_path(tmp_path: Path) -> Path:
    path = tmp_path / "bare.git"
    path.mkdir()
    Repo.init_bare(str(path)).close()
    return path


@pytest.fixture
def repository(repo_path: Path, settings: Config) -> Repository:
    return Repository(repo_path, config=settings)


@pytest.fixture
def write_file(repo_path: Path) -> WriteFileFunc:
    """Return a function that writes a worktree file, creating directories."""

    def _write(relative: str, content: str = "content\n") -> Path:
        path = repo_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        _ = path.write_text(content)
        return path

    return _write


CommitFilesFunc = Callable[..., str]


@pytest.fixture
def commit_files(
    repository: Repository,
    write_file: WriteFileFunc,
    signature: Signature,
) -> CommitFilesFunc:
    """Return a function that writes, stages and commits files.

    The function returns the new commit id.
    """

    def _commit(files: dict[str, str], message: str = "Update files\n") -> str:
        for relative, content in files.items():
            _ = write_file(relative, content)
            repository.add(relative)
        return repository.commit(message, author=signature).id

    return _commit
