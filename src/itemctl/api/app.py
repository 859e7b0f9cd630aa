"""FastAPI application factory.

The app holds no globals: the service is attached to ``app.state`` by
:func:`create_app` and resolved per request through a dependency.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from itemctl import __version__
from itemctl.api.routes import router

if TYPE_CHECKING:
    from itemctl.services.items import ItemService


async def _validation_error(request: Request, exc: Exception) -> JSONResponse:
    """Answer malformed or invalid bodies with 400 instead of FastAPI's 422."""
    assert isinstance(exc, RequestValidationError)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


def create_app(service: ItemService) -> FastAPI:
    """Build the HTTP surface around *service*."""
    app = FastAPI(
        title="itemctl",
        description="Item records with an asynchronous batch processor",
        version=__version__,
    )
    app.state.service = service
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.include_router(router)
    return app
