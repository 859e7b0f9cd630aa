"""SQL-backed item store.

Every method opens its own connection, so one repository instance can be
shared by all processor workers without extra locking.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import delete, insert, select, update
from sqlalchemy.engine import Engine

from itemctl.domain.items import Item
from itemctl.infrastructure.database.schema import items


def _row_to_item(row: Any) -> Item:
    return Item(
        id=row["id"],
        name=row["name"],
        description=row["description"],
        status=row["status"],
        email=row["email"],
    )


class ItemRepository:
    """Encapsulates SQL for item CRUD and the processor's id snapshot."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def list_ids(self) -> list[int]:
        """Snapshot of every stored item id, in ascending order."""
        stmt = select(items.c.id).order_by(items.c.id)
        with self._engine.connect() as conn:
            return [int(row.id) for row in conn.execute(stmt)]

    def list_all(self) -> list[Item]:
        stmt = select(items).order_by(items.c.id)
        with self._engine.connect() as conn:
            rows = conn.execute(stmt).mappings().all()
        return [_row_to_item(row) for row in rows]

    def find(self, item_id: int) -> Item | None:
        """Fetch one item by id, or None when no such row exists."""
        stmt = select(items).where(items.c.id == item_id)
        with self._engine.connect() as conn:
            row = conn.execute(stmt).mappings().first()
        return _row_to_item(row) if row is not None else None

    def save(self, item: Item) -> Item:
        """Insert or update *item* and return the persisted form.

        Items without an id are inserted and receive a store-assigned id.
        Items with an id update that row, or are inserted under that id
        when the row does not exist.
        """
        values = item.model_dump(exclude={"id"})
        with self._engine.begin() as conn:
            if item.id is None:
                result = conn.execute(insert(items).values(**values))
                new_id = result.inserted_primary_key[0]
                return item.model_copy(update={"id": int(new_id)})

            result = conn.execute(update(items).where(items.c.id == item.id).values(**values))
            if result.rowcount == 0:
                conn.execute(insert(items).values(id=item.id, **values))
        return item

    def delete(self, item_id: int) -> None:
        """Delete by id. Unknown ids are ignored."""
        with self._engine.begin() as conn:
            conn.execute(delete(items).where(items.c.id == item_id))
