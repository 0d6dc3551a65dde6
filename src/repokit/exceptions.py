"""Repokit exceptions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pathlib import Path


class RepokitError(Exception):
    """Base exception for repokit errors."""


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigError(RepokitError):
    """Base exception for configuration errors."""


class ConfigLoadError(ConfigError):
    """Raised when configuration cannot be loaded or parsed."""

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        """Initialize with error message and optional location context."""
        super().__init__(message)
        self.path: Path | None = path
        self.line: int | None = line
        self.column: int | None = column


class ConfigValidationError(ConfigError):
    """Raised when configuration fails validation."""

    def __init__(
        self,
        message: str,
        *,
        key: str,
        value: Any,  # pyright: ignore[reportAny,reportExplicitAny]
        expected: str,
        source: str | None = None,
    ) -> None:
        """Initialize with error message and validation context."""
        super().__init__(message)
        self.key: str = key
        self.value: Any = value  # pyright: ignore[reportExplicitAny]
        self.expected: str = expected
        self.source: str | None = source


# =============================================================================
# Repository Exceptions
# =============================================================================


class RepositoryError(RepokitError):
    """Base exception for repository operations.

    Attributes:
        path: The repository path the operation was addressed to, if known.
    """

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        """Initialize with error message and path context.

        Args:
            message: Human-readable error message.
            path: The repository path the operation was addressed to.
        """
        super().__init__(message)
        self.path: Path | None = path


class RepositoryArgumentError(RepositoryError, ValueError):
    """Raised when an argument is malformed.

    Argument errors are always raised before the repository is opened.
    """


class InvalidSignatureError(RepositoryArgumentError):
    """Raised when an author, committer or tagger signature is malformed.

    Attributes:
        field: Name of the offending argument (``author``, ``committer``...).
    """

    def __init__(
        self,
        message: str,
        *,
        field: str,
        path: Path | None = None,
    ) -> None:
        """Initialize with error message and the offending field.

        Args:
            message: Human-readable error message.
            field: Name of the offending argument.
            path: The repository path.
        """
        super().__init__(message, path=path)
        self.field: str = field


class RepositoryPathError(RepositoryArgumentError):
    """Raised when a worktree path is missing or lies outside the worktree.

    Attributes:
        file_path: The offending path as given by the caller.
    """

    def __init__(
        self,
        message: str,
        *,
        file_path: str | None = None,
        path: Path | None = None,
    ) -> None:
        """Initialize with error message and path context.

        Args:
            message: Human-readable error message.
            file_path: The offending path as given by the caller.
            path: The repository path.
        """
        super().__init__(message, path=path)
        self.file_path: str | None = file_path


class RepositoryNotFoundError(RepositoryError):
    """Raised when the path does not hold a git repository."""


class RepositoryInitError(RepositoryError):
    """Raised when a repository cannot be created at the given path."""


class BareRepositoryError(RepositoryError):
    """Raised when a worktree operation is attempted on a bare repository."""


class ObjectStoreError(RepositoryError):
    """Raised when the object store reports a failure.

    Attributes:
        kind: Class name of the underlying store exception.
        cause: The underlying store exception.
    """

    def __init__(
        self,
        message: str,
        *,
        kind: str,
        cause: BaseException | None = None,
        path: Path | None = None,
    ) -> None:
        """Initialize with error message and store failure context.

        Args:
            message: Human-readable error message.
            kind: Class name of the underlying store exception.
            cause: The underlying store exception.
            path: The repository path.
        """
        super().__init__(message, path=path)
        self.kind: str = kind
        self.cause: BaseException | None = cause


class RepositoryLockedError(ObjectStoreError):
    """Raised when a git lock file is held by another process."""


class ObjectNotFoundError(ObjectStoreError, KeyError):
    """Raised when an object or reference cannot be found in the store.

    Attributes:
        oid: The object id or reference name that was looked up.
    """

    def __init__(
        self,
        message: str,
        *,
        oid: str | None = None,
        kind: str = "KeyError",
        cause: BaseException | None = None,
        path: Path | None = None,
    ) -> None:
        """Initialize with error message and lookup context.

        Args:
            message: Human-readable error message.
            oid: The object id or reference name that was looked up.
            kind: Class name of the underlying store exception.
            cause: The underlying store exception.
            path: The repository path.
        """
        super().__init__(message, kind=kind, cause=cause, path=path)
        self.oid: str | None = oid

    def __str__(self) -> str:
        # KeyError.__str__ would quote the message.
        return str(self.args[0]) if self.args else ""


class ParentNotFoundError(ObjectNotFoundError):
    """Raised when a requested commit parent does not exist."""


class PreconditionError(RepositoryError):
    """Base exception for operations refused because of repository state."""


class NothingToCommitError(PreconditionError):
    """Raised when a commit is requested with nothing staged."""


class UnexpectedReferenceTypeError(PreconditionError):
    """Raised when a reference is neither symbolic nor a direct object id.

    Attributes:
        name: Full name of the offending reference.
    """

    def __init__(
        self,
        message: str,
        *,
        name: str | None = None,
        path: Path | None = None,
    ) -> None:
        """Initialize with error message and reference context."""
        super().__init__(message, path=path)
        self.name: str | None = name


class UnexpectedHeadStateError(PreconditionError):
    """Raised when HEAD is neither symbolic nor a valid object id."""


class RemoteNotFoundError(RepositoryError, KeyError):
    """Raised when a remote is not configured or has no URL.

    Attributes:
        name: The remote name that was looked up.
    """

    def __init__(
        self,
        message: str,
        *,
        name: str | None = None,
        path: Path | None = None,
    ) -> None:
        """Initialize with error message and remote context.

        Args:
            message: Human-readable error message.
            name: The remote name that was looked up.
            path: The repository path.
        """
        super().__init__(message, path=path)
        self.name: str | None = name

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class RemoteResolutionError(RepositoryError):
    """Raised when the remote of a remote-tracking branch cannot be resolved."""


class SignatureNotConfiguredError(RepositoryError):
    """Raised when no default signature can be assembled."""


class RepositoryConflictError(RepositoryError):
    """Raised when a reference changed or exists when it must not.

    Attributes:
        details: Additional details about the conflict.
    """

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        details: str | None = None,
    ) -> None:
        """Initialize with error message and conflict context.

        Args:
            message: Human-readable error message.
            path: The repository path.
            details: Additional details about the conflict.
        """
        super().__init__(message, path=path)
        self.details: str | None = details
