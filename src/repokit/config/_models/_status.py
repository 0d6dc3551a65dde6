"""Status configuration model."""

from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field


class StatusConfig(BaseModel):
    """Status classification settings.

    Attributes:
        rename_threshold: Minimum similarity percentage for a deleted and an
            added path in the index to be reported as a rename.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    rename_threshold: int = Field(default=60, ge=0, le=100)
