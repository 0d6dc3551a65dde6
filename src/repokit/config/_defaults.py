"""Default configuration values.

This module defines the built-in default configuration values that are used
when no other configuration sources provide values.

Note: DEFAULT_CONFIG is a plain dict for type compatibility with functions
like deep_merge. The merge functions create copies, so the original is never
mutated.
"""

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {  # pyright: ignore[reportExplicitAny]
    "logging": {
        "level": "warning",
        "format": "json",
        "file": "",
    },
    "signature": {
        "name": "",
        "email": "",
    },
    "status": {
        "rename_threshold": 60,
    },
    "clone": {
        "checkout": True,
    },
}
