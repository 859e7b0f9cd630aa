"""Tests for ItemProcessor and BatchRun — the asynchronous batch processor."""

from __future__ import annotations

import asyncio
import time
from concurrent.futures import Future, ThreadPoolExecutor
from unittest.mock import MagicMock

import pytest
from structlog.testing import capture_logs

from itemctl.domain.errors import ProcessingCancelled
from itemctl.domain.items import PROCESSED, Item
from itemctl.infrastructure.repositories.items import ItemRepository
from itemctl.services.contracts import ItemStore
from itemctl.services.processor import DEFAULT_DELAY, BatchRun, ItemProcessor, RunState
from tests.conftest import MemoryStore, make_item

WAIT = 5


def _mock_store(ids: list[int]) -> MagicMock:
    store = MagicMock(spec=ItemStore)
    store.list_ids.return_value = ids
    store.save.side_effect = lambda item: item
    return store


def _failed_events(logs: list[dict]) -> list[dict]:
    return [entry for entry in logs if entry["event"] == "batch.failed"]


# ---------------------------------------------------------------------------
# End-to-end scenarios
# ---------------------------------------------------------------------------


class TestScenarios:
    def test_empty_store_succeeds_with_empty_result(self, executor: ThreadPoolExecutor) -> None:
        store = _mock_store([])
        run = ItemProcessor(store, executor, delay=0).run()

        assert run.result(timeout=WAIT) == []
        assert run.failed is False
        assert run.error is None
        store.find.assert_not_called()
        store.save.assert_not_called()

    def test_all_items_processed(self, executor: ThreadPoolExecutor) -> None:
        store = MemoryStore(
            [
                Item(id=1, name="a", description="", status="NEW", email="a@b.com"),
                Item(id=2, name="b", description="", status="NEW", email="a@b.com"),
            ]
        )
        run = ItemProcessor(store, executor, delay=0).run()
        result = run.result(timeout=WAIT)

        assert sorted(item.id for item in result) == [1, 2]
        assert all(item.status == PROCESSED for item in result)
        assert all(item.status == PROCESSED for item in store.list_all())
        assert run.failed is False

    def test_missing_item_is_skipped_not_failed(self, executor: ThreadPoolExecutor) -> None:
        store = _mock_store([1])
        store.find.return_value = None

        run = ItemProcessor(store, executor, delay=0).run()

        assert run.result(timeout=WAIT) == []
        assert run.failed is False
        store.save.assert_not_called()

    def test_find_failure_takes_failure_path(self, executor: ThreadPoolExecutor) -> None:
        store = _mock_store([1])
        store.find.side_effect = RuntimeError("DB failure")

        with capture_logs() as logs:
            run = ItemProcessor(store, executor, delay=0).run()
            result = run.result(timeout=WAIT)

        assert result == []
        assert run.failed is True
        assert isinstance(run.error, RuntimeError)
        store.save.assert_not_called()
        failed = _failed_events(logs)
        assert len(failed) == 1
        assert failed[0]["log_level"] == "error"
        assert "DB failure" in failed[0]["error"]

    def test_cancellation_signal_from_store_fails_run(self, executor: ThreadPoolExecutor) -> None:
        store = _mock_store([1])
        store.find.side_effect = ProcessingCancelled("Simulated interruption")

        run = ItemProcessor(store, executor, delay=0).run()

        assert run.result(timeout=WAIT) == []
        assert run.failed is True
        assert isinstance(run.error, ProcessingCancelled)
        assert run.cancelled is False
        store.save.assert_not_called()

    def test_cancellation_signal_from_store_spares_siblings(self) -> None:
        class InterruptedStore(MemoryStore):
            def find(self, item_id: int) -> Item | None:
                if item_id == 1:
                    raise ProcessingCancelled("Simulated interruption")
                return super().find(item_id)

        store = InterruptedStore([make_item(1), make_item(2), make_item(3)])
        with ThreadPoolExecutor(max_workers=1) as single:
            run = ItemProcessor(store, single, delay=0).run()
            result = run.result(timeout=WAIT)

        assert result == []
        assert run.failed is True
        assert isinstance(run.error, ProcessingCancelled)
        assert run.cancelled is False
        assert store.count("save") == 2
        statuses = {item.id: item.status for item in store.list_all()}
        assert statuses == {1: "NEW", 2: PROCESSED, 3: PROCESSED}

    def test_rerun_on_processed_items_is_idempotent(self, executor: ThreadPoolExecutor) -> None:
        store = MemoryStore([make_item(1, status=PROCESSED)])
        processor = ItemProcessor(store, executor, delay=0)

        first = processor.run().result(timeout=WAIT)
        second = processor.run().result(timeout=WAIT)

        assert len(first) == 1
        assert first == second
        assert first[0].status == PROCESSED
        assert store.find(1).status == PROCESSED


# ---------------------------------------------------------------------------
# Result-set properties
# ---------------------------------------------------------------------------


class TestResultProperties:
    def test_result_size_counts_processed_tasks_not_snapshot(
        self, executor: ThreadPoolExecutor
    ) -> None:
        store = _mock_store([1, 2, 3])
        store.find.side_effect = lambda item_id: None if item_id == 2 else make_item(item_id)

        result = ItemProcessor(store, executor, delay=0).run().result(timeout=WAIT)

        assert sorted(item.id for item in result) == [1, 3]

    def test_result_carries_persisted_form(self, executor: ThreadPoolExecutor) -> None:
        store = _mock_store([1])
        store.find.return_value = make_item(1)
        persisted = make_item(1, name="persisted", status=PROCESSED)
        store.save.side_effect = None
        store.save.return_value = persisted

        result = ItemProcessor(store, executor, delay=0).run().result(timeout=WAIT)

        assert result == [persisted]
        saved = store.save.call_args.args[0]
        assert saved.status == PROCESSED

    def test_result_follows_snapshot_order(self, executor: ThreadPoolExecutor) -> None:
        store = _mock_store([3, 1, 2])

        def find(item_id: int) -> Item:
            # Finish in reverse snapshot order.
            time.sleep({3: 0.2, 1: 0.1, 2: 0.0}[item_id])
            return make_item(item_id)

        store.find.side_effect = find

        result = ItemProcessor(store, executor, delay=0).run().result(timeout=WAIT)

        assert [item.id for item in result] == [3, 1, 2]

    def test_duplicate_ids_are_processed_each_time(self, executor: ThreadPoolExecutor) -> None:
        store = _mock_store([1, 1])
        store.find.side_effect = lambda item_id: make_item(item_id)

        result = ItemProcessor(store, executor, delay=0).run().result(timeout=WAIT)

        assert len(result) == 2
        assert store.save.call_count == 2

    def test_failure_does_not_short_circuit_siblings(self, executor: ThreadPoolExecutor) -> None:
        store = _mock_store([1, 2, 3])

        def find(item_id: int) -> Item:
            if item_id == 1:
                msg = "boom"
                raise RuntimeError(msg)
            return make_item(item_id)

        store.find.side_effect = find

        run = ItemProcessor(store, executor, delay=0).run()

        assert run.result(timeout=WAIT) == []
        assert run.failed is True
        # Every task ran to a terminal state; siblings still persisted.
        assert store.find.call_count == 3
        assert store.save.call_count == 2

    def test_save_failure_fails_run(self, executor: ThreadPoolExecutor) -> None:
        store = _mock_store([1])
        store.find.return_value = make_item(1)
        store.save.side_effect = OSError("disk full")

        run = ItemProcessor(store, executor, delay=0).run()

        assert run.result(timeout=WAIT) == []
        assert isinstance(run.error, OSError)

    def test_two_runs_produce_equal_multisets(self, executor: ThreadPoolExecutor) -> None:
        store = MemoryStore([make_item(i) for i in range(1, 6)])
        processor = ItemProcessor(store, executor, delay=0)

        first = processor.run().result(timeout=WAIT)
        second = processor.run().result(timeout=WAIT)

        assert sorted(first, key=lambda i: i.id) == sorted(second, key=lambda i: i.id)

    def test_concurrent_runs_both_settle(self, executor: ThreadPoolExecutor) -> None:
        store = MemoryStore([make_item(i) for i in range(1, 11)])
        processor = ItemProcessor(store, executor, delay=0.01)

        runs = [processor.run(), processor.run()]

        for run in runs:
            assert len(run.result(timeout=WAIT)) == 10
        assert all(item.status == PROCESSED for item in store.list_all())


# ---------------------------------------------------------------------------
# Snapshot and scheduling failures
# ---------------------------------------------------------------------------


class TestSchedulingFailures:
    def test_list_ids_failure_settles_immediately(self, executor: ThreadPoolExecutor) -> None:
        store = MagicMock(spec=ItemStore)
        store.list_ids.side_effect = RuntimeError("snapshot failed")

        with capture_logs() as logs:
            run = ItemProcessor(store, executor, delay=0).run()

        assert run.done()
        assert run.state is RunState.SETTLED
        assert run.result() == []
        assert run.failed is True
        assert len(_failed_events(logs)) == 1

    def test_shut_down_executor_fails_run(self) -> None:
        pool = ThreadPoolExecutor(max_workers=1)
        pool.shutdown()
        store = _mock_store([1, 2])

        run = ItemProcessor(store, pool, delay=0).run()

        assert run.result(timeout=WAIT) == []
        assert run.failed is True
        assert isinstance(run.error, RuntimeError)

    def test_single_worker_pool_does_not_deadlock(self) -> None:
        store = MemoryStore([make_item(i) for i in range(1, 21)])
        with ThreadPoolExecutor(max_workers=1) as pool:
            result = ItemProcessor(store, pool, delay=0).run().result(timeout=WAIT)
        assert len(result) == 20


# ---------------------------------------------------------------------------
# Delay and cooperative cancellation
# ---------------------------------------------------------------------------


class TestDelayAndCancellation:
    def test_default_delay(self, executor: ThreadPoolExecutor) -> None:
        processor = ItemProcessor(MemoryStore(), executor)
        assert processor.delay == DEFAULT_DELAY == 0.1

    def test_negative_delay_rejected(self, executor: ThreadPoolExecutor) -> None:
        with pytest.raises(ValueError, match="delay"):
            ItemProcessor(MemoryStore(), executor, delay=-1)

    def test_delay_precedes_fetch(self, executor: ThreadPoolExecutor) -> None:
        store = MemoryStore([make_item(1)])
        start = time.monotonic()
        ItemProcessor(store, executor, delay=0.05).run().result(timeout=WAIT)
        assert time.monotonic() - start >= 0.05

    def test_cancel_during_delay_fails_without_writes(
        self, executor: ThreadPoolExecutor
    ) -> None:
        store = MemoryStore([make_item(1), make_item(2)])
        run = ItemProcessor(store, executor, delay=30).run()

        run.cancel()

        assert run.result(timeout=WAIT) == []
        assert run.cancelled is True
        assert isinstance(run.error, ProcessingCancelled)
        assert store.count("find") == 0
        assert store.count("save") == 0
        assert all(item.status == "NEW" for item in store.list_all())

    def test_caller_timeout_leaves_run_going(self, executor: ThreadPoolExecutor) -> None:
        store = MemoryStore([make_item(1)])
        run = ItemProcessor(store, executor, delay=0.3).run()

        with pytest.raises(TimeoutError):
            run.result(timeout=0.01)

        assert run.result(timeout=WAIT)[0].status == PROCESSED


# ---------------------------------------------------------------------------
# BatchRun lifecycle
# ---------------------------------------------------------------------------


def _finished(value: Item | None = None, error: BaseException | None = None) -> Future:
    future: Future = Future()
    if error is not None:
        future.set_exception(error)
    else:
        future.set_result(value)
    return future


class TestBatchRun:
    def test_starts_pending(self) -> None:
        run = BatchRun([1, 2])
        assert run.state is RunState.PENDING
        assert run.done() is False
        assert run.failed is False

    def test_state_moves_forward(self) -> None:
        run = BatchRun([1, 2])

        run.task_done(_finished(make_item(1)))
        assert run.state is RunState.RUNNING
        assert run.done() is False

        run.task_done(_finished(None))
        assert run.state is RunState.SETTLED
        assert run.result() == [make_item(1)]

    def test_first_error_is_kept(self) -> None:
        run = BatchRun([1, 2])
        first = RuntimeError("first")

        run.task_done(_finished(error=first))
        run.task_done(_finished(error=RuntimeError("second")))

        assert run.error is first
        assert run.result() == []

    def test_cancelled_task_counts_as_failure(self) -> None:
        run = BatchRun([1])
        task: Future = Future()
        task.cancel()

        run.task_done(task)

        assert isinstance(run.error, ProcessingCancelled)

    def test_checkpoint_raises_after_cancel(self) -> None:
        run = BatchRun([1])
        run.checkpoint()
        run.cancel()
        with pytest.raises(ProcessingCancelled):
            run.checkpoint()

    def test_awaitable(self, executor: ThreadPoolExecutor) -> None:
        store = MemoryStore([make_item(1)])
        processor = ItemProcessor(store, executor, delay=0)

        async def main() -> list[Item]:
            return await processor.run()

        result = asyncio.run(main())
        assert [item.status for item in result] == [PROCESSED]


# ---------------------------------------------------------------------------
# Against the SQLite store
# ---------------------------------------------------------------------------


class TestWithRepository:
    def test_store_rows_match_result(
        self, repository: ItemRepository, executor: ThreadPoolExecutor
    ) -> None:
        for n in range(8):
            repository.save(make_item(name=f"item-{n}"))

        result = ItemProcessor(repository, executor, delay=0).run().result(timeout=WAIT)

        assert len(result) == 8
        for item in result:
            assert item.status == PROCESSED
            stored = repository.find(item.id)
            assert stored is not None
            assert stored.status == PROCESSED

    def test_empty_database(self, repository: ItemRepository, executor: ThreadPoolExecutor) -> None:
        run = ItemProcessor(repository, executor, delay=0).run()
        assert run.result(timeout=WAIT) == []
        assert run.failed is False
