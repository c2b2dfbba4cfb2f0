"""Base model for pyhammer documents.

Every persisted or echoed model inherits from :class:`HammerBaseModel`,
which maps snake_case fields to the camelCase keys of the wire format
(``updated_at`` ↔ ``updatedAt``) and freezes instances so a loaded
document can only change by building a new one.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class HammerBaseModel(BaseModel):
    """Base for state document models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    def to_wire(self) -> dict[str, Any]:
        """JSON-compatible dict using the camelCase wire keys."""
        return self.model_dump(mode="json", by_alias=True)
