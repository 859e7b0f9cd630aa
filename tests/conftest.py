"""Shared pytest fixtures and test helpers for itemctl tests."""

from __future__ import annotations

import threading
from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest
from click.testing import CliRunner
from sqlalchemy.engine import Engine

from itemctl.domain.items import Item
from itemctl.infrastructure.database.engine import init_database
from itemctl.infrastructure.repositories.items import ItemRepository


class MemoryStore:
    """Thread-safe in-memory ItemStore that records every call."""

    def __init__(self, items: list[Item] | None = None) -> None:
        self._lock = threading.Lock()
        self._rows: dict[int, Item] = {}
        self._next_id = 1
        self.calls: list[tuple[str, int | None]] = []
        for item in items or []:
            self.save(item)
        self.calls.clear()

    def list_ids(self) -> list[int]:
        with self._lock:
            self.calls.append(("list_ids", None))
            return sorted(self._rows)

    def list_all(self) -> list[Item]:
        with self._lock:
            return [self._rows[k] for k in sorted(self._rows)]

    def find(self, item_id: int) -> Item | None:
        with self._lock:
            self.calls.append(("find", item_id))
            return self._rows.get(item_id)

    def save(self, item: Item) -> Item:
        with self._lock:
            if item.id is None:
                item = item.model_copy(update={"id": self._next_id})
            self._next_id = max(self._next_id, item.id + 1)
            self._rows[item.id] = item
            self.calls.append(("save", item.id))
            return item

    def delete(self, item_id: int) -> None:
        with self._lock:
            self._rows.pop(item_id, None)

    def count(self, name: str) -> int:
        return sum(1 for call, _ in self.calls if call == name)


def make_item(item_id: int | None = None, *, name: str = "a", status: str = "NEW") -> Item:
    return Item(id=item_id, name=name, description="", status=status, email="a@b.com")


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def db_engine(tmp_path: Path) -> Iterator[Engine]:
    """Initialized SQLite engine with all tables created."""
    engine = init_database(tmp_path / "items.db")
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def repository(db_engine: Engine) -> ItemRepository:
    return ItemRepository(db_engine)


@pytest.fixture
def executor() -> Iterator[ThreadPoolExecutor]:
    pool = ThreadPoolExecutor(max_workers=4)
    try:
        yield pool
    finally:
        pool.shutdown(wait=True)


@pytest.fixture
def _isolated_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run the CLI against a fresh database under a temp CWD, without delays.

    Use via ``@pytest.mark.usefixtures("_isolated_root")``.
    """
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("ITEMCTL_CONFIG", raising=False)
    monkeypatch.setenv("ITEMCTL_PROCESSOR__DELAY_MS", "0")
