"""Item — the single record type managed by itemctl.

``Item`` is the persisted shape and carries no validation beyond types;
incoming request bodies are validated by :class:`ItemPayload` at the
adapter boundary before they reach the service layer.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field

DEFAULT_STATUS = "NEW"
PROCESSED = "PROCESSED"


class Item(BaseModel):
    """A stored record. ``id`` is None until the store assigns one."""

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    name: str
    description: str = ""
    status: str = DEFAULT_STATUS
    email: str

    def with_status(self, status: str) -> Item:
        """Return a copy of this item carrying *status*."""
        return self.model_copy(update={"status": status})

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class ItemPayload(BaseModel):
    """Validated create/update body (wire format minus ``id``)."""

    model_config = ConfigDict(frozen=True, extra="ignore", str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=255)
    description: str = ""
    status: str = Field(default=DEFAULT_STATUS, min_length=1, max_length=64)
    email: EmailStr

    def to_item(self, item_id: int | None = None) -> Item:
        """Build an :class:`Item` from this payload, optionally pinned to *item_id*."""
        return Item(id=item_id, **self.model_dump())
