"""Base model with common configuration for API payloads."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel as PydanticBaseModel
from pydantic import ConfigDict


class BaseModel(PydanticBaseModel):
    """Base model for sketch API request and response bodies.

    Fields are snake_case in Python and camelCase on the wire via aliases.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        str_strip_whitespace=True,
    )

    def to_dict(self) -> dict[str, Any]:
        """Convert model to dictionary."""
        return self.model_dump(exclude_none=True)

    def to_wire(self) -> dict[str, Any]:
        """Convert model to a camelCase JSON body."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
