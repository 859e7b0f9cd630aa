"""ItemProcessor — fan a status transition out across an executor.

One call to :meth:`ItemProcessor.run` snapshots the store's ids, submits one
task per id, and returns a :class:`BatchRun` handle immediately. Each task
waits for the configured delay, fetches its item, writes ``PROCESSED`` and
contributes the persisted item. Missing items are skipped, not failures.

Aggregation is callback-driven: the last task to finish settles the handle,
so no pool thread ever blocks on its siblings.

INVARIANT: ``run()`` never raises. Any task failure settles the handle with
an empty list, ``failed=True`` and a single ``batch.failed`` log entry.
Transitions already written are not rolled back.
"""

from __future__ import annotations

import asyncio
import threading
from concurrent.futures import Executor, Future
from enum import Enum
from typing import TYPE_CHECKING, Any

import structlog

from itemctl.domain.errors import ProcessingCancelled
from itemctl.domain.items import PROCESSED

if TYPE_CHECKING:
    from collections.abc import Generator

    from itemctl.domain.items import Item
    from itemctl.services.contracts import ItemStore

log = structlog.get_logger(__name__)

DEFAULT_DELAY = 0.1


class RunState(str, Enum):
    """Lifecycle of one batch run. Transitions only move forward."""

    PENDING = "pending"
    RUNNING = "running"
    AGGREGATING = "aggregating"
    SETTLED = "settled"


class BatchRun:
    """One-shot handle over the outcome of a single :meth:`ItemProcessor.run`.

    ``result()`` blocks until every task is terminal and returns the processed
    items (empty on failure). ``failed`` and ``error`` tell an empty snapshot
    apart from a failed run. The handle is awaitable from asyncio code.
    """

    def __init__(self, snapshot: list[int]) -> None:
        self.snapshot = list(snapshot)
        self.future: Future[list[Item]] = Future()
        self._cancel = threading.Event()
        self._lock = threading.Lock()
        self._state = RunState.PENDING
        self._remaining = len(self.snapshot)
        self._processed: list[Item] = []
        self._error: BaseException | None = None

    def __await__(self) -> Generator[Any, None, list[Item]]:
        return asyncio.wrap_future(self.future).__await__()

    # ------------------------------------------------------------------
    # Caller API
    # ------------------------------------------------------------------

    @property
    def state(self) -> RunState:
        with self._lock:
            return self._state

    @property
    def error(self) -> BaseException | None:
        """First task failure, once settled; None on success."""
        if not self.future.done():
            return None
        return self._error

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def done(self) -> bool:
        return self.future.done()

    def result(self, timeout: float | None = None) -> list[Item]:
        """Wait for the run to settle and return the processed items.

        Raises ``TimeoutError`` if *timeout* elapses first; the run keeps going.
        """
        return self.future.result(timeout=timeout)

    def cancel(self) -> None:
        """Ask in-flight tasks to stop at their next checkpoint."""
        self._cancel.set()

    # ------------------------------------------------------------------
    # Task-side helpers
    # ------------------------------------------------------------------

    def checkpoint(self) -> None:
        """Raise :class:`ProcessingCancelled` if the run was cancelled."""
        if self._cancel.is_set():
            raise ProcessingCancelled("batch run cancelled")

    def sleep(self, seconds: float) -> None:
        """Wait *seconds*, waking early (and failing) on cancellation."""
        if seconds > 0 and self._cancel.wait(seconds):
            raise ProcessingCancelled("batch run cancelled during delay")
        self.checkpoint()

    def task_done(self, task: Future[Item | None]) -> None:
        """Record one terminal task; the last one settles the run."""
        if task.cancelled():
            error: BaseException | None = ProcessingCancelled("task cancelled before start")
        else:
            error = task.exception()

        with self._lock:
            if self._state is RunState.PENDING:
                self._state = RunState.RUNNING
            if error is not None:
                if self._error is None:
                    self._error = error
            else:
                item = task.result()
                if item is not None:
                    self._processed.append(item)
            self._remaining -= 1
            last = self._remaining == 0
            if last:
                self._state = RunState.AGGREGATING

        if last:
            self._settle()

    def abandon(self, count: int, error: BaseException) -> None:
        """Count *count* tasks that could not be scheduled as failed."""
        with self._lock:
            if self._error is None:
                self._error = error
            self._remaining -= count
            last = self._remaining == 0
            if last:
                self._state = RunState.AGGREGATING

        if last:
            self._settle()

    def settle_failed(self, error: BaseException) -> None:
        """Settle a run that never scheduled any task."""
        with self._lock:
            self._error = error
            self._remaining = 0
            self._state = RunState.AGGREGATING
        self._settle()

    def settle_empty(self) -> None:
        """Settle a run whose snapshot was empty."""
        with self._lock:
            self._state = RunState.AGGREGATING
        self._settle()

    def _ordered(self) -> list[Item]:
        # Caller holds self._lock. Stable: duplicate ids keep completion order.
        position = {item_id: i for i, item_id in reversed(list(enumerate(self.snapshot)))}
        last = len(self.snapshot)
        return sorted(self._processed, key=lambda item: position.get(item.id, last))

    def _settle(self) -> None:
        with self._lock:
            error = self._error
            items = [] if error is not None else self._ordered()
            self._state = RunState.SETTLED

        if error is not None:
            log.error(
                "batch.failed",
                snapshot_size=len(self.snapshot),
                error_type=type(error).__name__,
                error=str(error),
            )
        else:
            log.info(
                "batch.completed",
                snapshot_size=len(self.snapshot),
                processed=len(items),
                skipped=len(self.snapshot) - len(items),
            )
        self.future.set_result(items)


class ItemProcessor:
    """Transitions every stored item to ``PROCESSED`` in parallel.

    Parameters:
        store: Thread-safe :class:`ItemStore`.
        executor: Worker pool owned by the caller; never shut down here.
        delay: Seconds each task waits before fetching its item.
    """

    def __init__(
        self,
        store: ItemStore,
        executor: Executor,
        *,
        delay: float = DEFAULT_DELAY,
    ) -> None:
        if delay < 0:
            msg = f"delay must be >= 0, got {delay}"
            raise ValueError(msg)
        self._store = store
        self._executor = executor
        self._delay = delay

    @property
    def delay(self) -> float:
        return self._delay

    def run(self) -> BatchRun:
        """Start a batch over the current id snapshot and return its handle."""
        try:
            snapshot = self._store.list_ids()
        except Exception as exc:
            run = BatchRun([])
            run.settle_failed(exc)
            return run

        run = BatchRun(snapshot)
        log.debug("batch.started", snapshot_size=len(snapshot), delay=self._delay)

        if not snapshot:
            run.settle_empty()
            return run

        for index, item_id in enumerate(snapshot):
            try:
                task = self._executor.submit(self._process_one, run, item_id)
            except RuntimeError as exc:
                run.abandon(len(snapshot) - index, exc)
                break
            task.add_done_callback(run.task_done)
        return run

    def _process_one(self, run: BatchRun, item_id: int) -> Item | None:
        run.checkpoint()
        run.sleep(self._delay)

        # A ProcessingCancelled raised by the store fails this task only.
        item = self._store.find(item_id)
        if item is None:
            log.debug("item.missing", item_id=item_id)
            return None

        run.checkpoint()
        saved = self._store.save(item.with_status(PROCESSED))
        log.debug("item.processed", item_id=item_id)
        return saved
