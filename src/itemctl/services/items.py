"""ItemService — CRUD facade over an ItemStore plus the batch process entry.

The raw pass-throughs (``find_all``, ``find_by_id``, ``save``,
``delete_by_id``) serve the HTTP adapter; the ``*_item`` methods wrap the
same calls in :class:`ServiceResult` for the CLI.
"""

from __future__ import annotations

from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import TYPE_CHECKING

from itemctl.services.base import BaseService
from itemctl.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from itemctl.domain.items import Item, ItemPayload
    from itemctl.services.contracts import ItemStore
    from itemctl.services.processor import BatchRun, ItemProcessor


def _not_found(op: str, item_id: int) -> ServiceResult:
    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(
            code="NOT_FOUND",
            message=f"No item found with ID: {item_id}",
            detail={"id": item_id},
        ),
    )


class ItemService(BaseService):
    """Delegates CRUD to the store and exposes the processor's batch run."""

    def __init__(self, store: ItemStore, processor: ItemProcessor) -> None:
        super().__init__(store)
        self._processor = processor

    # ------------------------------------------------------------------
    # Pass-throughs
    # ------------------------------------------------------------------

    def find_all(self) -> list[Item]:
        return self._store.list_all()

    def find_by_id(self, item_id: int) -> Item | None:
        return self._store.find(item_id)

    def save(self, item: Item) -> Item:
        return self._store.save(item)

    def delete_by_id(self, item_id: int) -> None:
        self._store.delete(item_id)

    def process_async(self) -> BatchRun:
        """Start a batch run; the caller awaits or polls the handle."""
        return self._processor.run()

    # ------------------------------------------------------------------
    # ServiceResult API
    # ------------------------------------------------------------------

    def list_items(self) -> ServiceResult:
        found = self.find_all()
        return ServiceResult(
            ok=True,
            op="list_items",
            data={"count": len(found), "items": [item.to_dict() for item in found]},
        )

    def get_item(self, item_id: int) -> ServiceResult:
        item = self.find_by_id(item_id)
        if item is None:
            return _not_found("get_item", item_id)
        return ServiceResult(ok=True, op="get_item", data=item.to_dict())

    def create_item(self, payload: ItemPayload) -> ServiceResult:
        saved = self.save(payload.to_item())
        self._logger.debug("Created item %s", saved.id)
        return ServiceResult(ok=True, op="create_item", data=saved.to_dict())

    def update_item(self, item_id: int, payload: ItemPayload) -> ServiceResult:
        if self.find_by_id(item_id) is None:
            return _not_found("update_item", item_id)
        saved = self.save(payload.to_item(item_id))
        return ServiceResult(ok=True, op="update_item", data=saved.to_dict())

    def delete_item(self, item_id: int) -> ServiceResult:
        self.delete_by_id(item_id)
        return ServiceResult(ok=True, op="delete_item", data={"id": item_id})

    def process(self, *, timeout: float | None = None) -> ServiceResult:
        """Run a batch and wait for it, mapping failure to ``PROCESSING_FAILED``."""
        op = "process_items"
        run = self.process_async()
        try:
            processed = run.result(timeout=timeout)
        except FutureTimeoutError:
            run.cancel()
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(
                    code="TIMEOUT",
                    message=f"Batch did not settle within {timeout}s",
                    detail={"snapshot_size": len(run.snapshot)},
                ),
            )

        if run.failed:
            error = run.error
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(
                    code="PROCESSING_FAILED",
                    message=f"Error processing items: {error}",
                    detail={
                        "error_type": type(error).__name__,
                        "snapshot_size": len(run.snapshot),
                    },
                ),
            )

        return ServiceResult(
            ok=True,
            op=op,
            data={"count": len(processed), "items": [item.to_dict() for item in processed]},
            meta={"snapshot_size": len(run.snapshot), "state": run.state.value},
        )
