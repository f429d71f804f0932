"""
Cestas Tables Module

Per-card product table:
- CacheManager: short-lived cache with one shared freshness stamp
- StorageManager: replica of one card's products and shipping
- TablesManager: one StorageManager per card
- TableApp: filters, totals and user actions over a StorageManager
"""

from cestas.modules.tables.cache import CacheManager
from cestas.modules.tables.registry import TablesManager
from cestas.modules.tables.remote import RemoteStore, SupabaseRemoteStore
from cestas.modules.tables.service import TableApp
from cestas.modules.tables.storage import StorageManager

__all__ = [
    "CacheManager",
    "RemoteStore",
    "StorageManager",
    "SupabaseRemoteStore",
    "TableApp",
    "TablesManager",
]
