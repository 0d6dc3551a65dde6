"""Git utilities for repokit."""

from repokit.utils._git._common import (
    LOCAL_BRANCH_PREFIX,
    REMOTE_BRANCH_PREFIX,
    TAG_PREFIX,
    decode_bytes,
    decode_path,
    encode_path,
    get_worktree_dir,
    shorten_ref_name,
)

__all__ = [
    "LOCAL_BRANCH_PREFIX",
    "REMOTE_BRANCH_PREFIX",
    "TAG_PREFIX",
    "decode_bytes",
    "decode_path",
    "encode_path",
    "get_worktree_dir",
    "shorten_ref_name",
]
