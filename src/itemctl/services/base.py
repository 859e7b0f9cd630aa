"""BaseService — shared foundation for itemctl services.

Every service receives its :class:`ItemStore` at construction time; nothing
is looked up from globals. The process entry point owns store lifetimes.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from itemctl.services.contracts import ItemStore


class BaseService:
    """Abstract base for service-layer classes.

    Usage::

        class ItemService(BaseService):
            def get_item(self, item_id: int) -> ServiceResult:
                item = self._store.find(item_id)
                ...
    """

    def __init__(self, store: ItemStore) -> None:
        self._store = store
        self._logger = logging.getLogger(type(self).__module__)

    @property
    def store(self) -> ItemStore:
        return self._store
