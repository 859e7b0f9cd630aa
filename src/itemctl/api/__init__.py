"""HTTP adapter — FastAPI application over ItemService."""

from itemctl.api.app import create_app

__all__ = ["create_app"]
