"""Configuration source metadata."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pathlib import Path


class ConfigSourceName(StrEnum):
    """Configuration source names in precedence order.

    Values are ordered from highest precedence (OVERRIDE) to lowest (DEFAULT).
    Higher-precedence sources override lower-precedence sources when merging.
    """

    OVERRIDE = "override"
    ENV = "env"
    FILE = "file"
    USER = "user"
    DEFAULT = "default"


@dataclass(frozen=True, slots=True)
class ConfigSource:
    """A layer of configuration and the values it contributed.

    Attributes:
        name: The source type identifier.
        path: Path to the config file, or None for non-file sources.
        values: Configuration values from this source. File and environment
            sources are discovered empty and filled in while loading.
    """

    name: ConfigSourceName
    path: Path | None = None
    values: dict[str, Any] = field(default_factory=dict)  # pyright: ignore[reportExplicitAny]

    @property
    def exists(self) -> bool:
        """Whether the source can contribute values.

        File sources exist when their file does; an override source exists
        only when it carries values. The environment and the defaults always
        exist.
        """
        if self.path is not None:
            try:
                return self.path.is_file()
            except OSError:
                return False
        if self.name is ConfigSourceName.OVERRIDE:
            return bool(self.values)
        return True
