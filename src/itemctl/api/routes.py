"""REST routes for items and the batch process trigger."""

from __future__ import annotations

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from itemctl.domain.items import Item, ItemPayload
from itemctl.services.items import ItemService

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/api")


def get_service(request: Request) -> ItemService:
    service = request.app.state.service
    assert isinstance(service, ItemService)
    return service


ServiceDep = Annotated[ItemService, Depends(get_service)]


@router.get("/items", response_model=list[Item])
def list_items(service: ServiceDep) -> list[Item]:
    return service.find_all()


@router.post("/items", response_model=Item, status_code=status.HTTP_201_CREATED)
def create_item(payload: ItemPayload, service: ServiceDep) -> Item:
    return service.save(payload.to_item())


@router.get("/items/{item_id}", response_model=Item)
def get_item(item_id: int, service: ServiceDep) -> Item:
    item = service.find_by_id(item_id)
    if item is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return item


@router.put("/items/{item_id}", response_model=Item)
def update_item(item_id: int, payload: ItemPayload, service: ServiceDep) -> Item:
    """Replace an existing item; the path id wins over any id in the body."""
    if service.find_by_id(item_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return service.save(payload.to_item(item_id))


@router.delete("/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_item(item_id: int, service: ServiceDep) -> Response:
    service.delete_by_id(item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/process", response_model=list[Item])
async def process_items(service: ServiceDep) -> list[Item] | Response:
    """Run a batch and answer once every task is terminal.

    The run settles with an empty list on failure; ``failed`` is what turns
    that into a 500.
    """
    run = service.process_async()
    processed = await run
    if run.failed:
        log.debug("process.request_failed", snapshot_size=len(run.snapshot))
        return Response(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
    return processed
