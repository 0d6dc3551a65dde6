"""Conversion between dulwich objects and repokit models."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Final

from dulwich.objects import Commit as GitCommit
from dulwich.objects import Tag as GitTag

from repokit.exceptions import InvalidSignatureError
from repokit.repository._models import Commit, Signature, Tag
from repokit.utils._git import decode_bytes

if TYPE_CHECKING:
    from pathlib import Path

_DEFAULT_ENCODING: Final = "utf-8"
_FORBIDDEN_IDENTITY_CHARS: Final = frozenset("<>\n")


def _decode_text(value: bytes | None, encoding: bytes | None = None) -> str:
    if value is None:
        return ""
    codec = encoding.decode("ascii", "replace") if encoding else _DEFAULT_ENCODING
    try:
        return value.decode(codec, "replace")
    except LookupError:
        return value.decode(_DEFAULT_ENCODING, "replace")


def summarize(message: str) -> str:
    """Return the first non-blank line of a message, stripped.

    Examples:
        >>> summarize("\\n  Fix parser\\n\\nDetails")
        'Fix parser'
    """
    for line in message.splitlines():
        if line.strip():
            return line.strip()
    return ""


def parse_identity(identity: bytes) -> tuple[str, str]:
    """Split ``Name <email>`` into its parts.

    Args:
        identity: Raw identity bytes from a commit or tag header.

    Returns:
        Tuple of (name, email). Email is empty if the brackets are missing.
    """
    text = _decode_text(identity)
    if "<" in text and text.endswith(">"):
        name, _, email = text.rpartition("<")
        return name.strip(), email[:-1].strip()
    return text.strip(), ""


def format_identity(signature: Signature) -> bytes:
    return f"{signature.name} <{signature.email}>".encode()


def signature_from_parts(identity: bytes, time: int, timezone: int) -> Signature:
    """Build a signature from commit or tag header fields.

    Args:
        identity: ``Name <email>`` bytes.
        time: Seconds since the epoch.
        timezone: Offset in seconds east of UTC.

    Returns:
        The decoded signature.
    """
    name, email = parse_identity(identity)
    return Signature(name=name, email=email, time=float(time), offset=float(timezone // 60))


def timezone_seconds(signature: Signature) -> int:
    return int(signature.offset) * 60


def commit_from_object(commit: GitCommit) -> Commit:
    """Convert a dulwich commit object into a Commit record."""
    message = _decode_text(commit.message, commit.encoding)
    return Commit(
        id=decode_bytes(commit.id),
        tree=decode_bytes(commit.tree),
        parents=tuple(decode_bytes(parent) for parent in commit.parents),
        author=signature_from_parts(commit.author, commit.author_time, commit.author_timezone),
        committer=signature_from_parts(
            commit.committer, commit.commit_time, commit.commit_timezone
        ),
        summary=summarize(message),
        message=message,
    )


def tag_from_object(tag: GitTag) -> Tag:
    """Convert a dulwich tag object into a Tag record."""
    tagger = None
    if tag.tagger is not None:
        tagger = signature_from_parts(tag.tagger, tag.tag_time, tag.tag_timezone)

    _, target = tag.object
    return Tag(
        name=_decode_text(tag.name),
        message=_decode_text(tag.message),
        tagger=tagger,
        target=decode_bytes(target),
    )


def _is_number(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return False
    return math.isfinite(value)


def validate_signature(
    signature: object,
    field: str,
    *,
    path: Path | None = None,
) -> Signature:
    """Check that a signature can be written to a commit or tag header.

    Args:
        signature: The candidate signature.
        field: Argument name reported on failure.
        path: Repository path for error context.

    Returns:
        The validated signature.

    Raises:
        InvalidSignatureError: If the signature is malformed.
    """
    if not isinstance(signature, Signature):
        msg = f"{field} must be a Signature"
        raise InvalidSignatureError(msg, field=field, path=path)

    for attr in ("name", "email"):
        value = getattr(signature, attr)
        if (
            not isinstance(value, str)
            or not value.strip()
            or _FORBIDDEN_IDENTITY_CHARS.intersection(value)
        ):
            msg = f"{field} {attr} must be a non-empty string without '<', '>' or newlines"
            raise InvalidSignatureError(msg, field=field, path=path)

    if not _is_number(signature.time):
        msg = f"{field} time must be a finite number"
        raise InvalidSignatureError(msg, field=field, path=path)

    if not _is_number(signature.offset) or not float(signature.offset).is_integer():
        msg = f"{field} offset must be a whole number of minutes"
        raise InvalidSignatureError(msg, field=field, path=path)

    return signature
