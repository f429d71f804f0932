"""
Cestas Tables - Tables Manager.

Registry of one StorageManager per card for the lifetime of a session
(the FastAPI app, or a test). Two callers asking for the same card share
one replica and one cache.
"""

import asyncio
import logging
from collections.abc import Callable

from cestas.modules.tables.remote import RemoteStore, SupabaseRemoteStore
from cestas.modules.tables.storage import StorageManager

logger = logging.getLogger(__name__)


class TablesManager:
    """Card id -> StorageManager."""

    def __init__(
        self,
        store: RemoteStore | None = None,
        storage_factory: Callable[[str], StorageManager] | None = None,
    ):
        if store is None and storage_factory is None:
            store = SupabaseRemoteStore()
        self.store = store
        self._factory = storage_factory or (lambda card_id: StorageManager(card_id, self.store))
        self.tables: dict[str, StorageManager] = {}
        self._pending: set[asyncio.Task] = set()

    def create_table(self, card_id: str) -> StorageManager:
        """Create the card's manager and schedule its init without waiting for it."""
        card_id = str(card_id)
        if card_id in self.tables:
            return self.tables[card_id]

        storage = self._factory(card_id)
        self.tables[card_id] = storage
        self._schedule_init(storage)
        return storage

    def get_table(self, card_id: str) -> StorageManager:
        card_id = str(card_id)
        if card_id not in self.tables:
            return self.create_table(card_id)
        return self.tables[card_id]

    def delete_table(self, card_id: str) -> bool:
        """Drop the card's manager (and with it its cache). True if one existed."""
        removed = self.tables.pop(str(card_id), None)
        if removed is not None:
            logger.info(f"Table of card {card_id} released")
        return removed is not None

    def has_table(self, card_id: str) -> bool:
        return str(card_id) in self.tables

    def list_tables(self) -> list[str]:
        return list(self.tables)

    def _schedule_init(self, storage: StorageManager) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # no loop yet; the first awaited init() will load it
            return
        task = loop.create_task(storage.init())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
