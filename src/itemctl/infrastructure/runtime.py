"""Runtime — owns the engine, worker pool, and the service wired on top.

Built once per process by the entry point (CLI context or HTTP server) and
closed on exit. Every collaborator is passed by constructor; nothing below
this module reaches for globals.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

from itemctl.infrastructure.database.engine import init_database
from itemctl.infrastructure.repositories.items import ItemRepository
from itemctl.services.items import ItemService
from itemctl.services.processor import ItemProcessor

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

    from itemctl.config.settings import ItemSettings

logger = logging.getLogger(__name__)


class Runtime:
    """Process-lifetime container for the item service and its resources."""

    def __init__(self, settings: ItemSettings) -> None:
        self.settings = settings
        self.engine: Engine = init_database(
            settings.db_path, busy_timeout=settings.database.busy_timeout
        )
        self.executor = ThreadPoolExecutor(
            max_workers=settings.processor.max_workers,
            thread_name_prefix="itemctl-worker",
        )
        self.store = ItemRepository(self.engine)
        self.processor = ItemProcessor(
            self.store, self.executor, delay=settings.processor.delay
        )
        self.service = ItemService(self.store, self.processor)
        logger.debug(
            "Runtime ready: db=%s max_workers=%s delay=%ss",
            settings.db_path,
            settings.processor.max_workers,
            settings.processor.delay,
        )

    def close(self) -> None:
        """Wait for in-flight tasks, then release the pool and engine."""
        self.executor.shutdown(wait=True)
        self.engine.dispose()

    def __enter__(self) -> Runtime:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
