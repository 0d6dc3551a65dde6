"""Repository facade.

This module provides the Repository class and the init, clone and
is_repository functions. A Repository holds its resolved path, settings and
logger but no open repository: every method opens the repository, performs
one task and closes it again, so a Repository can be kept around
indefinitely without pinning file handles.
"""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any, Final, final

from dulwich import porcelain
from dulwich.objects import valid_hexsha
from dulwich.refs import check_ref_format

from repokit.config import Config, safe_load_config
from repokit.exceptions import (
    RepositoryArgumentError,
    RepositoryError,
    RepositoryInitError,
    SignatureNotConfiguredError,
)
from repokit.repository._commit import create_commit
from repokit.repository._gitconfig import prepare_config, write_config
from repokit.repository._index import stage_path
from repokit.repository._lifecycle import is_repository_path, open_repository, store_errors
from repokit.repository._models import (
    Branch,
    BranchScope,
    Commit,
    Reference,
    RepoStatus,
    Signature,
    Tag,
)
from repokit.repository._objects import commit_from_object, validate_signature
from repokit.repository._progress import ConsoleProgressReporter, ProgressStream
from repokit.repository._refs import (
    create_tag,
    iter_tags,
    list_branches,
    list_references,
    list_remotes,
    remote_urls,
)
from repokit.repository._revisions import walk_revisions
from repokit.repository._status import StatusSelection, collect_status
from repokit.utils._author import get_author_info
from repokit.utils._git import get_worktree_dir
from repokit.utils._logging import create_repository_logger

if TYPE_CHECKING:
    from collections.abc import Iterator

    from dulwich.repo import Repo
    from structlog.typing import FilteringBoundLogger

    from repokit.repository._gitconfig import ConfigValue
    from repokit.repository._progress import ProgressCallback

_HEAD: Final = "HEAD"


# =============================================================================
# Argument checks
# =============================================================================


def _coerce_path(value: object, name: str) -> Path:
    if not isinstance(value, str | os.PathLike):
        msg = f"{name} must be a path, not {type(value).__name__}"
        raise RepositoryArgumentError(msg)
    raw = os.fspath(value)
    if not raw:
        msg = f"{name} must not be empty"
        raise RepositoryArgumentError(msg)
    return Path(os.fsdecode(raw)).expanduser().absolute()


def _require_bool(value: object, name: str) -> bool:
    if not isinstance(value, bool):
        msg = f"{name} must be a bool, not {type(value).__name__}"
        raise RepositoryArgumentError(msg)
    return value


def _require_str(value: object, name: str) -> str:
    if not isinstance(value, str):
        msg = f"{name} must be a string, not {type(value).__name__}"
        raise RepositoryArgumentError(msg)
    return value


def _require_hexsha(value: object, name: str) -> str:
    if not isinstance(value, str) or not valid_hexsha(value):
        msg = f"{name} must be a 40 character hex object id: {value!r}"
        raise RepositoryArgumentError(msg)
    return value.lower()


def _require_ref_name(value: object) -> str:
    ref = _require_str(value, "ref")
    if ref != _HEAD and not check_ref_format(ref.encode()):
        msg = f"invalid reference name: {ref!r}"
        raise RepositoryArgumentError(msg)
    return ref


def _logger_for(config: Config, path: Path) -> FilteringBoundLogger:
    settings = config.logging
    logger = create_repository_logger(
        level=settings.level.value,
        log_format=settings.format.value,
        log_file=settings.file,
    )
    return logger.bind(path=str(path))


def _log_failure(logger: FilteringBoundLogger, error: RepositoryError) -> None:
    kind: str = getattr(error, "kind", type(error).__name__)
    logger.warning("operation failed", error=str(error), kind=kind)


# =============================================================================
# Repository
# =============================================================================


@final
class Repository:
    """A git repository addressed by path.

    Attributes:
        path: The resolved worktree root or git directory.
        settings: The repokit configuration used by this instance.

    Example:
        >>> repo = Repository("/path/to/project")  # doctest: +SKIP
        >>> repo.status().is_clean  # doctest: +SKIP
        True
    """

    __slots__: Final = ("_logger", "_path", "_settings")
    _logger: FilteringBoundLogger
    _path: Path
    _settings: Config

    def __init__(self, path: str | os.PathLike[str], *, config: Config | None = None) -> None:
        """Resolve ``path`` and check that it holds a repository.

        Args:
            path: Worktree root or git directory of the repository.
            config: repokit configuration. Loaded from the usual sources when
                None.

        Raises:
            RepositoryArgumentError: If ``path`` is not a path.
            RepositoryNotFoundError: If ``path`` holds no repository.
        """
        self._path = _coerce_path(path, "path")
        self._settings = config if config is not None else safe_load_config()[0]

        with open_repository(self._path):
            pass

        # Built once; each operation binds its own name and context.
        self._logger = _logger_for(self._settings, self._path)

    def __repr__(self) -> str:
        return f"Repository({str(self._path)!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Repository):
            return NotImplemented
        return self._path == other._path

    def __hash__(self) -> int:
        return hash(self._path)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def settings(self) -> Config:
        return self._settings

    @contextmanager
    def _operation(self, name: str, **context: Any) -> Iterator[tuple[Repo, FilteringBoundLogger]]:  # pyright: ignore[reportExplicitAny]
        """Open the repository for one logged operation."""
        logger = self._logger.bind(operation=name, **context)
        logger.debug("operation started")
        try:
            with open_repository(self._path) as repo:
                yield repo, logger
        except RepositoryError as e:
            _log_failure(logger, e)
            raise
        logger.debug("operation completed")

    # =========================================================================
    # Worktree and index
    # =========================================================================

    def add(self, path: str | os.PathLike[str]) -> None:
        """Stage one worktree file.

        Ignored files are staged too.

        Args:
            path: Path relative to the worktree root, or absolute inside it.

        Raises:
            RepositoryPathError: If the file is missing or outside the worktree.
            BareRepositoryError: If the repository has no worktree.
        """
        if not isinstance(path, str | os.PathLike):
            msg = f"path must be a path, not {type(path).__name__}"
            raise RepositoryArgumentError(msg)

        with self._operation("add", file=os.fspath(path)) as (repo, _):
            stage_path(repo, path)

    def commit(  # noqa: PLR0913
        self,
        message: str,
        *,
        author: Signature,
        committer: Signature | None = None,
        parents: Sequence[str] | None = None,
        ref: str = _HEAD,
    ) -> Commit:
        """Commit the staged changes.

        Args:
            message: Commit message, stored exactly as given.
            author: Author signature.
            committer: Committer signature; defaults to ``author``.
            parents: Parent commit ids, first parent first. None uses the
                current tip of ``ref`` (no parents for an unborn ref).
            ref: Reference to move; symbolic references are followed.

        Returns:
            The new commit.

        Raises:
            InvalidSignatureError: If a signature is malformed.
            NothingToCommitError: If nothing is staged.
            ParentNotFoundError: If a parent does not exist.
            RepositoryConflictError: If ``ref`` moved concurrently or its tip
                is not the first of the explicit parents.
            RepositoryLockedError: If the reference is locked.
        """
        _require_str(message, "message")
        author = validate_signature(author, "author", path=self._path)
        committer = (
            author
            if committer is None
            else validate_signature(committer, "committer", path=self._path)
        )
        ref = _require_ref_name(ref)

        parent_ids: list[str] | None = None
        if parents is not None:
            if isinstance(parents, str) or not isinstance(parents, Sequence):
                msg = "parents must be a sequence of object ids"
                raise RepositoryArgumentError(msg, path=self._path)
            parent_ids = [_require_hexsha(parent, "parent") for parent in parents]

        with self._operation("commit", ref=ref) as (repo, logger):
            commit = create_commit(
                repo,
                message,
                author=author,
                committer=committer,
                parents=parent_ids,
                ref=ref,
                rename_threshold=self._settings.status.rename_threshold,
            )
            logger.info("created commit", commit=commit.id, summary=commit.summary)
        return commit

    def config(self, variables: Mapping[str, ConfigValue]) -> None:
        """Set git configuration variables in the repository config.

        Args:
            variables: Mapping of ``section[.subsection].name`` to a string,
                bool or int value.

        Raises:
            RepositoryArgumentError: If a key or value is malformed. Nothing
                is written in that case.
        """
        if not isinstance(variables, Mapping):
            msg = "variables must be a mapping"
            raise RepositoryArgumentError(msg, path=self._path)
        entries = prepare_config(variables)

        with self._operation("config", keys=sorted(variables)) as (repo, _):
            write_config(repo, entries)

    def status(
        self,
        *,
        staged: bool = True,
        unstaged: bool = True,
        untracked: bool = True,
        ignored: bool = False,
    ) -> RepoStatus:
        """Classify every path that differs between HEAD, index and worktree.

        Args:
            staged: Include HEAD to index changes.
            unstaged: Include index to worktree changes.
            untracked: Include files unknown to the index.
            ignored: Include files matched by ignore rules.

        Returns:
            The status; unrequested categories are None.
        """
        selection = StatusSelection(
            staged=_require_bool(staged, "staged"),
            unstaged=_require_bool(unstaged, "unstaged"),
            untracked=_require_bool(untracked, "untracked"),
            ignored=_require_bool(ignored, "ignored"),
        )

        with self._operation("status") as (repo, _):
            return collect_status(
                repo,
                selection,
                rename_threshold=self._settings.status.rename_threshold,
            )

    # =========================================================================
    # References
    # =========================================================================

    def branches(self, scope: BranchScope | str = BranchScope.ALL) -> list[Branch]:
        """List branches, local ones first, each group sorted by name.

        Args:
            scope: ``local``, ``remote`` or ``all``.

        Raises:
            RepositoryArgumentError: If ``scope`` is unknown.
            RemoteResolutionError: If a remote-tracking branch has no remote.
        """
        try:
            selected = BranchScope(scope)
        except ValueError as e:
            msg = f"unknown branch scope: {scope!r}"
            raise RepositoryArgumentError(msg, path=self._path) from e

        with self._operation("branches", scope=selected.value) as (repo, _):
            return list_branches(repo, selected)

    def references(self) -> dict[str, Reference]:
        """Return every reference, HEAD included, keyed by full name."""
        with self._operation("references") as (repo, _):
            return list_references(repo)

    def tags(self) -> list[Tag]:
        """Return the annotated tags in name order."""
        with self._operation("tags") as (repo, logger):
            return list(iter_tags(repo, logger))

    def tag(
        self,
        name: str,
        message: str,
        tagger: Signature,
        target: str | None = None,
    ) -> Tag:
        """Create an annotated tag.

        Args:
            name: Tag name without ``refs/tags/``.
            message: Tag message.
            tagger: Tagger signature.
            target: Object id to tag; HEAD's commit when None.

        Returns:
            The new tag.

        Raises:
            RepositoryConflictError: If the tag already exists.
            ObjectNotFoundError: If the target does not exist.
        """
        _require_str(name, "name")
        _require_str(message, "message")
        tagger = validate_signature(tagger, "tagger", path=self._path)
        if target is not None:
            target = _require_hexsha(target, "target")

        with self._operation("tag", tag=name) as (repo, _):
            return create_tag(repo, name, message, tagger, target)

    def revisions(self) -> list[Commit]:
        """Return every commit reachable from HEAD, children before parents."""
        with self._operation("revisions") as (repo, _):
            return walk_revisions(repo)

    def head(self) -> Commit | None:
        """Return the commit HEAD resolves to, or None when HEAD is unborn."""
        with self._operation("head") as (repo, _):
            _, head_id = repo.refs.follow(_HEAD.encode())
            if head_id is None:
                return None
            return commit_from_object(repo[head_id])

    # =========================================================================
    # Remotes
    # =========================================================================

    def remotes(self) -> list[str]:
        """Return configured remote names in configuration order."""
        with self._operation("remotes") as (repo, _):
            return list_remotes(repo.get_config())

    def remote_url(self, names: Sequence[str]) -> list[str]:
        """Look up the URL of each named remote.

        Args:
            names: Remote names.

        Returns:
            URLs in the order of ``names``.

        Raises:
            RemoteNotFoundError: If a remote is unknown or has no URL.
        """
        if isinstance(names, str) or not isinstance(names, Sequence):
            msg = "names must be a sequence of remote names"
            raise RepositoryArgumentError(msg, path=self._path)
        for name in names:
            _require_str(name, "remote name")

        with self._operation("remote_url") as (repo, _):
            return remote_urls(repo.get_config(), names)

    # =========================================================================
    # Shape
    # =========================================================================

    def is_bare(self) -> bool:
        with self._operation("is_bare") as (repo, _):
            return bool(repo.bare)

    def is_empty(self) -> bool:
        """True when HEAD is unborn and no reference besides HEAD exists."""
        with self._operation("is_empty") as (repo, _):
            _, head_id = repo.refs.follow(_HEAD.encode())
            if head_id is not None:
                return False
            return not any(name != _HEAD.encode() for name in repo.refs.allkeys())

    def workdir(self) -> Path | None:
        """Return the worktree root, or None for a bare repository."""
        with self._operation("workdir") as (repo, _):
            return get_worktree_dir(repo)

    def default_signature(self) -> Signature:
        """Build a signature for the configured identity, stamped now.

        The identity comes from ``REPOKIT_AUTHOR_NAME`` and
        ``REPOKIT_AUTHOR_EMAIL``, then the git config stack, then the
        ``[signature]`` section of the repokit configuration.

        Raises:
            SignatureNotConfiguredError: If no name or no email is found.
        """
        with self._operation("default_signature") as (repo, _):
            info = get_author_info(repo.get_config_stack())

        fallback = self._settings.signature
        name = info.name or fallback.name
        email = info.email or fallback.email
        if not name or not email:
            msg = "no user.name and user.email configured"
            raise SignatureNotConfiguredError(msg, path=self._path)

        return Signature.now(name, email)


# =============================================================================
# Module functions
# =============================================================================


def is_repository(path: str | os.PathLike[str]) -> bool:
    """Return True if ``path`` holds a git repository."""
    return is_repository_path(_coerce_path(path, "path"))


def init(
    path: str | os.PathLike[str],
    *,
    bare: bool = False,
    config: Config | None = None,
) -> Repository:
    """Create a repository, or open the one already at ``path``.

    Missing parent directories are created.

    Args:
        path: Directory for the new repository.
        bare: Create a repository without a worktree.
        config: repokit configuration for the returned Repository.

    Returns:
        The repository.

    Raises:
        RepositoryInitError: If ``path`` exists and is not a directory, or
            cannot be created.
    """
    target = _coerce_path(path, "path")
    _require_bool(bare, "bare")
    settings = config if config is not None else safe_load_config()[0]
    logger = _logger_for(settings, target).bind(operation="init", bare=bare)
    logger.debug("operation started")

    if target.exists() and not target.is_dir():
        msg = f"not a directory: {target}"
        error = RepositoryInitError(msg, path=target)
        _log_failure(logger, error)
        raise error

    if is_repository_path(target):
        logger.debug("repository already exists")
        return Repository(target, config=settings)

    try:
        target.mkdir(parents=True, exist_ok=True)
        created = porcelain.init(str(target), bare=bare)
    except OSError as e:
        msg = f"cannot create repository at {target}: {e}"
        error = RepositoryInitError(msg, path=target)
        _log_failure(logger, error)
        raise error from e
    created.close()

    logger.debug("operation completed")
    return Repository(target, config=settings)


def clone(  # noqa: PLR0913
    url: str,
    local_path: str | os.PathLike[str],
    *,
    show_progress: bool = False,
    progress: ProgressCallback | None = None,
    bare: bool = False,
    depth: int | None = None,
    config: Config | None = None,
) -> Repository:
    """Clone a repository.

    Args:
        url: URL or local path of the source repository.
        local_path: Target directory.
        show_progress: Print transfer progress to stderr when no ``progress``
            callback is given.
        progress: Called with TransferProgress as objects arrive.
        bare: Clone without a worktree.
        depth: Shallow clone depth, or None for full history.
        config: repokit configuration for the returned Repository.

    Returns:
        The cloned repository.

    Raises:
        ObjectStoreError: If the transfer fails.
    """
    url = _require_str(url, "url")
    if not url:
        msg = "url must not be empty"
        raise RepositoryArgumentError(msg)
    target = _coerce_path(local_path, "local_path")
    _require_bool(show_progress, "show_progress")
    _require_bool(bare, "bare")
    if progress is not None and not callable(progress):
        msg = "progress must be callable"
        raise RepositoryArgumentError(msg)
    if depth is not None and (isinstance(depth, bool) or not isinstance(depth, int) or depth < 1):
        msg = f"depth must be a positive integer: {depth!r}"
        raise RepositoryArgumentError(msg)

    settings = config if config is not None else safe_load_config()[0]
    logger = _logger_for(settings, target).bind(
        operation="clone", url=url, bare=bare, depth=depth
    )
    logger.debug("operation started")

    callback = progress
    if callback is None and show_progress:
        reporter = ConsoleProgressReporter()
        reporter.start(str(target))
        callback = reporter
    stream = ProgressStream(callback)

    try:
        with store_errors(target):
            cloned = porcelain.clone(
                url,
                str(target),
                bare=bare,
                checkout=not bare and settings.clone.checkout,
                errstream=stream,
                depth=depth,
            )
            cloned.close()
            stream.flush()
    except RepositoryError as e:
        _log_failure(logger, e)
        raise

    logger.debug("operation completed")
    return Repository(target, config=settings)
