"""Command group: item CRUD (list, get, create, update, delete)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import click
from pydantic import ValidationError

from itemctl.commands._base import ItemGroup
from itemctl.domain.items import DEFAULT_STATUS, ItemPayload
from itemctl.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from itemctl.commands._context import AppContext


def _validation_failure(op: str, exc: ValidationError) -> ServiceResult:
    messages = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()]
    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(
            code="VALIDATION_FAILED",
            message="; ".join(messages),
            detail={"fields": [str(err["loc"][0]) for err in exc.errors() if err["loc"]]},
        ),
    )


def _payload(app: AppContext, op: str, **fields: Any) -> ItemPayload:
    try:
        return ItemPayload(**fields)
    except ValidationError as exc:
        app.emit(_validation_failure(op, exc))
        raise  # emit() exits on failure; unreachable


def _item_options(func: Any) -> Any:
    func = click.option("--status", default=DEFAULT_STATUS, show_default=True)(func)
    func = click.option("--description", default="", help="Free-text description.")(func)
    func = click.option("--email", required=True, help="Contact email address.")(func)
    func = click.option("--name", required=True, help="Item name.")(func)
    return func


@click.group(
    cls=ItemGroup,
    examples="""\
  itemctl item create --name widget --email owner@example.com
  itemctl item list
  itemctl --json item get 1
  itemctl item update 1 --name widget --email owner@example.com --status DONE
  itemctl item delete 1""",
)
def item() -> None:
    """Create, read, update and delete items."""


@item.command("list", examples="  itemctl item list\n  itemctl -q item list")
@click.pass_obj
def list_cmd(app: AppContext) -> None:
    """List every stored item."""
    app.emit(app.service.list_items())


@item.command(examples="  itemctl item get 1")
@click.argument("item_id", type=int)
@click.pass_obj
def get(app: AppContext, item_id: int) -> None:
    """Show one item by ID."""
    app.emit(app.service.get_item(item_id))


@item.command(examples="  itemctl item create --name widget --email owner@example.com")
@_item_options
@click.pass_obj
def create(app: AppContext, name: str, email: str, description: str, status: str) -> None:
    """Create a new item."""
    payload = _payload(
        app, "create_item", name=name, email=email, description=description, status=status
    )
    app.emit(app.service.create_item(payload))


@item.command(examples="  itemctl item update 1 --name widget --email owner@example.com")
@click.argument("item_id", type=int)
@_item_options
@click.pass_obj
def update(
    app: AppContext,
    item_id: int,
    name: str,
    email: str,
    description: str,
    status: str,
) -> None:
    """Replace an existing item's fields."""
    payload = _payload(
        app, "update_item", name=name, email=email, description=description, status=status
    )
    app.emit(app.service.update_item(item_id, payload))


@item.command(examples="  itemctl item delete 1")
@click.argument("item_id", type=int)
@click.pass_obj
def delete(app: AppContext, item_id: int) -> None:
    """Delete an item by ID (no error if it does not exist)."""
    app.emit(app.service.delete_item(item_id))
