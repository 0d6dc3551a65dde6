"""Revision walking."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from dulwich.walk import ORDER_TOPO

from repokit.repository._objects import commit_from_object

if TYPE_CHECKING:
    from dulwich.repo import Repo

    from repokit.repository._models import Commit

_HEAD: Final = b"HEAD"


def walk_revisions(repo: Repo) -> list[Commit]:
    """List every commit reachable from HEAD.

    Commits come newest first with children always before their parents;
    each commit appears once.

    Args:
        repo: The open repository.

    Returns:
        The commits, or an empty list when HEAD is unborn.
    """
    _, head_id = repo.refs.follow(_HEAD)
    if head_id is None:
        return []

    walker = repo.get_walker(include=[head_id], order=ORDER_TOPO)
    return [commit_from_object(entry.commit) for entry in walker]
