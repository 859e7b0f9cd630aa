"""Repositories encapsulating SQL for the service layer."""

from itemctl.infrastructure.repositories.items import ItemRepository

__all__ = ["ItemRepository"]
