from collections.abc import Callable
from pathlib import Path

import pytest
from dulwich.repo import Repo

UnstageFunc = Callable[[str], None]


@pytest.fixture
def unstage(repo_path: Path) -> UnstageFunc:
    """Return a function that drops a path from the index with dulwich."""

    def _unstage(relative: str) -> None:
        repo = Repo(str(repo_path))
        try:
            index = repo.open_index()
            del index[relative.encode()]
            index.write()
        finally:
            repo.close()

    return _unstage


@pytest.fixture
def head_branch(repo_path: Path) -> str:
    """Full name of the branch HEAD points at in a fresh repository."""
    repo = Repo(str(repo_path))
    try:
        names, _ = repo.refs.follow(b"HEAD")
    finally:
        repo.close()
    return names[-1].decode()
