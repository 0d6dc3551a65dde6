"""Clone configuration model."""

from typing import ClassVar

from pydantic import BaseModel, ConfigDict


class CloneConfig(BaseModel):
    """Clone settings.

    Attributes:
        checkout: Whether a non-bare clone populates the working tree.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    checkout: bool = True
