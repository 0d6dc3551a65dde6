"""Branch, reference, tag and remote enumeration."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from dulwich.objects import Tag as GitTag
from dulwich.objects import valid_hexsha
from dulwich.refs import check_ref_format

from repokit.exceptions import (
    ObjectNotFoundError,
    RemoteNotFoundError,
    RemoteResolutionError,
    RepositoryArgumentError,
    RepositoryConflictError,
    UnexpectedHeadStateError,
    UnexpectedReferenceTypeError,
)
from repokit.repository._models import (
    Branch,
    BranchScope,
    Reference,
    ReferenceKind,
    Remote,
    Signature,
    Tag,
)
from repokit.repository._objects import (
    format_identity,
    tag_from_object,
    timezone_seconds,
)
from repokit.utils._git import (
    LOCAL_BRANCH_PREFIX,
    REMOTE_BRANCH_PREFIX,
    TAG_PREFIX,
    decode_bytes,
    shorten_ref_name,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Sequence

    from dulwich.config import Config as GitConfig
    from dulwich.repo import Repo
    from structlog.typing import FilteringBoundLogger

_HEAD: Final = b"HEAD"
_SYMREF: Final = b"ref: "
_REMOTE_SECTION: Final = b"remote"


# =============================================================================
# References
# =============================================================================


def read_reference(repo: Repo, name: bytes) -> Reference:
    """Read one reference without following symbolic targets.

    Args:
        repo: The open repository.
        name: Full reference name.

    Returns:
        The reference.

    Raises:
        ObjectNotFoundError: If the reference vanished.
        UnexpectedReferenceTypeError: If the reference holds neither a
            symbolic target nor an object id.
    """
    raw = repo.refs.read_ref(name)
    if raw is None:
        msg = f"reference not found: {decode_bytes(name)}"
        raise ObjectNotFoundError(msg, oid=decode_bytes(name))

    raw = raw.strip()
    if raw.startswith(_SYMREF):
        kind = ReferenceKind.SYMBOLIC
        target = raw[len(_SYMREF) :].strip()
    elif valid_hexsha(raw):
        kind = ReferenceKind.OID
        target = raw
    else:
        msg = "unexpected reference type"
        raise UnexpectedReferenceTypeError(msg, name=decode_bytes(name))

    name_str = decode_bytes(name)
    return Reference(
        name=name_str,
        shorthand=shorten_ref_name(name_str),
        kind=kind,
        target=decode_bytes(target),
    )


def list_references(repo: Repo) -> dict[str, Reference]:
    """Return every reference, HEAD included, ordered by name."""
    names = set(repo.refs.allkeys())
    if repo.refs.read_ref(_HEAD) is not None:
        names.add(_HEAD)

    return {ref.name: ref for ref in (read_reference(repo, name) for name in sorted(names))}


def _names_with_prefix(repo: Repo, prefix: str) -> list[bytes]:
    raw_prefix = prefix.encode()
    return sorted(name for name in repo.refs.allkeys() if name.startswith(raw_prefix))


def head_target(repo: Repo) -> str | None:
    """Return the reference HEAD symbolically points at.

    Returns:
        The full reference name, or None when HEAD is detached or missing.

    Raises:
        UnexpectedHeadStateError: If HEAD is neither symbolic nor an object id.
    """
    raw = repo.refs.read_ref(_HEAD)
    if raw is None:
        return None

    raw = raw.strip()
    if raw.startswith(_SYMREF):
        return decode_bytes(raw[len(_SYMREF) :].strip())
    if valid_hexsha(raw):
        return None

    msg = "unexpected HEAD state"
    raise UnexpectedHeadStateError(msg)


# =============================================================================
# Remotes
# =============================================================================


def list_remotes(config: GitConfig) -> list[str]:
    """Return configured remote names in configuration order."""
    names: list[str] = []
    for section in config.sections():
        if len(section) == 2 and section[0] == _REMOTE_SECTION:  # noqa: PLR2004
            name = decode_bytes(section[1])
            if name not in names:
                names.append(name)
    return names


def remote_url(config: GitConfig, name: str) -> str | None:
    try:
        return decode_bytes(config.get((_REMOTE_SECTION, name.encode()), b"url"))
    except KeyError:
        return None


def remote_urls(config: GitConfig, names: Sequence[str]) -> list[str]:
    """Look up the URL of each named remote.

    Raises:
        RemoteNotFoundError: If a remote is unknown or has no URL.
    """
    urls: list[str] = []
    for name in names:
        url = remote_url(config, name)
        if url is None:
            msg = f"remote not found: {name}"
            raise RemoteNotFoundError(msg, name=name)
        urls.append(url)
    return urls


def _fetch_refspecs(config: GitConfig, name: str) -> list[bytes]:
    try:
        return list(config.get_multivar((_REMOTE_SECTION, name.encode()), b"fetch"))
    except KeyError:
        return []


def _refspec_matches(refspec: bytes, ref_name: bytes) -> bool:
    _, _, destination = refspec.lstrip(b"+").partition(b":")
    if not destination:
        return False
    if b"*" not in destination:
        return destination == ref_name
    prefix, _, suffix = destination.partition(b"*")
    return (
        len(ref_name) >= len(prefix) + len(suffix)
        and ref_name.startswith(prefix)
        and ref_name.endswith(suffix)
    )


def resolve_remote(config: GitConfig, ref_name: str) -> Remote:
    """Find the remote a remote-tracking branch belongs to.

    The configured remote whose fetch refspec maps onto ``ref_name`` wins.
    Otherwise the first path component after ``refs/remotes/`` names an
    ephemeral remote with no URL, which is never written back.

    Raises:
        RemoteResolutionError: If ``ref_name`` is not a remote-tracking ref.
    """
    if not ref_name.startswith(REMOTE_BRANCH_PREFIX):
        msg = f"not a remote-tracking reference: {ref_name}"
        raise RemoteResolutionError(msg)

    raw_name = ref_name.encode()
    for name in list_remotes(config):
        if any(_refspec_matches(spec, raw_name) for spec in _fetch_refspecs(config, name)):
            return Remote(name=name, url=remote_url(config, name))

    remote_name, _, rest = ref_name[len(REMOTE_BRANCH_PREFIX) :].partition("/")
    if not remote_name or not rest:
        msg = f"cannot determine remote of {ref_name}"
        raise RemoteResolutionError(msg)

    persisted = config.has_section((_REMOTE_SECTION, remote_name.encode()))
    return Remote(name=remote_name, url=remote_url(config, remote_name), persisted=persisted)


# =============================================================================
# Branches
# =============================================================================


def _scope_prefixes(scope: BranchScope) -> Iterable[str]:
    if scope in (BranchScope.LOCAL, BranchScope.ALL):
        yield LOCAL_BRANCH_PREFIX
    if scope in (BranchScope.REMOTE, BranchScope.ALL):
        yield REMOTE_BRANCH_PREFIX


def list_branches(repo: Repo, scope: BranchScope) -> list[Branch]:
    """Enumerate branches, local before remote, each group sorted by name."""
    current = head_target(repo)
    config = repo.get_config()
    branches: list[Branch] = []

    for prefix in _scope_prefixes(scope):
        for name in _names_with_prefix(repo, prefix):
            ref = read_reference(repo, name)
            remote: Remote | None = None
            if prefix == REMOTE_BRANCH_PREFIX:
                remote = resolve_remote(config, ref.name)

            branches.append(
                Branch(
                    name=ref.name,
                    shorthand=ref.shorthand,
                    kind=ref.kind,
                    target=ref.target,
                    is_head=current == ref.name,
                    remote_name=remote.name if remote else None,
                    remote_url=remote.url if remote else None,
                )
            )

    return branches


# =============================================================================
# Tags
# =============================================================================


def iter_tags(repo: Repo, logger: FilteringBoundLogger) -> Iterator[Tag]:
    """Yield annotated tags in name order; lightweight tags are skipped."""
    for name in _names_with_prefix(repo, TAG_PREFIX):
        _, object_id = repo.refs.follow(name)
        if object_id is None:
            logger.debug("skipping dangling tag", ref=decode_bytes(name))
            continue

        obj = repo[object_id]
        if not isinstance(obj, GitTag):
            logger.debug("skipping lightweight tag", ref=decode_bytes(name))
            continue

        yield tag_from_object(obj)


def _resolve_tag_target(repo: Repo, target: str | None) -> tuple[type, bytes]:
    if target is None:
        _, object_id = repo.refs.follow(_HEAD)
        if object_id is None:
            msg = "cannot tag an unborn HEAD"
            raise ObjectNotFoundError(msg, oid="HEAD")
    else:
        object_id = target.encode("ascii")

    obj = repo[object_id]
    return type(obj), obj.id


def create_tag(
    repo: Repo,
    name: str,
    message: str,
    tagger: Signature,
    target: str | None = None,
) -> Tag:
    """Create an annotated tag and its reference.

    Args:
        repo: The open repository.
        name: Tag name without the ``refs/tags/`` prefix.
        message: Tag message.
        tagger: Validated tagger signature.
        target: Hex id of the object to tag; HEAD's commit when None.

    Returns:
        The new tag.

    Raises:
        RepositoryArgumentError: If ``name`` is not a valid reference name.
        ObjectNotFoundError: If the target does not exist.
        RepositoryConflictError: If the tag already exists.
    """
    ref_name = f"{TAG_PREFIX}{name}".encode()
    if not check_ref_format(ref_name):
        msg = f"invalid tag name: {name!r}"
        raise RepositoryArgumentError(msg)

    object_type, object_id = _resolve_tag_target(repo, target)

    tag = GitTag()
    tag.name = name.encode()
    tag.message = message.encode()
    tag.object = (object_type, object_id)
    tag.tagger = format_identity(tagger)
    tag.tag_time = int(tagger.time)
    tag.tag_timezone = timezone_seconds(tagger)
    repo.object_store.add_object(tag)

    if not repo.refs.add_if_new(ref_name, tag.id):
        msg = f"tag already exists: {name}"
        raise RepositoryConflictError(msg, details=decode_bytes(ref_name))

    return tag_from_object(tag)
