"""Structural contract between the service layer and item persistence.

``ItemRepository`` satisfies :class:`ItemStore`; tests substitute in-memory
fakes. Implementations must be safe to call from several threads at once.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from itemctl.domain.items import Item


@runtime_checkable
class ItemStore(Protocol):
    def list_ids(self) -> list[int]:
        """Snapshot of the currently known identifiers."""
        ...

    def list_all(self) -> list[Item]: ...

    def find(self, item_id: int) -> Item | None:
        """Return the item, or None if *item_id* is unknown at call time."""
        ...

    def save(self, item: Item) -> Item:
        """Persist *item* (insert or update) and return the persisted form."""
        ...

    def delete(self, item_id: int) -> None: ...
