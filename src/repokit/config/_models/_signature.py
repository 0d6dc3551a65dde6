"""Signature configuration model."""

from typing import ClassVar

from pydantic import BaseModel, ConfigDict


class SignatureConfig(BaseModel):
    """Fallback identity used when git config provides none.

    Attributes:
        name: Author name.
        email: Author email.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    name: str = ""
    email: str = ""
