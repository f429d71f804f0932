"""
Cestas Core - Base Repository.

Abstract base class for all repositories following the repository pattern.

The Supabase query builder is synchronous; every ``execute()`` is pushed to a
worker thread and bounded by the configured remote timeout so no call can
hang the event loop or its caller indefinitely.
"""

import asyncio
import time
from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

from supabase import Client

from cestas.config import get_settings
from cestas.core.supabase_client import get_supabase_client
from cestas.exceptions import (
    CestasException,
    ExternalServiceException,
    NotFoundException,
    RemoteTimeoutException,
)
from cestas.observability import get_metrics_store

T = TypeVar("T")


class BaseRepository(ABC, Generic[T]):
    """
    Abstract base repository for database operations.

    All module repositories should inherit from this class.
    """

    def __init__(self, client: Client | None = None, timeout_seconds: float | None = None):
        """Initialize repository with optional Supabase client (resolved lazily)."""
        self._client = client
        self._timeout = timeout_seconds or get_settings().remote.timeout_seconds

    @property
    @abstractmethod
    def table_name(self) -> str:
        """Return the table name for this repository."""
        ...

    @property
    def client(self) -> Client:
        if self._client is None:
            self._client = get_supabase_client()
        return self._client

    @property
    def table(self):
        """Get the Supabase table reference."""
        return self.client.table(self.table_name)

    async def _execute(self, query, operation: str):
        """
        Run a built query off the event loop.

        Raises:
            RemoteTimeoutException: If the call exceeds the remote timeout
            ExternalServiceException: For any transport or PostgREST error
        """
        metrics = get_metrics_store()
        name = f"{self.table_name}.{operation}"
        started = time.perf_counter()
        try:
            return await asyncio.wait_for(asyncio.to_thread(query.execute), timeout=self._timeout)
        except asyncio.TimeoutError as exc:
            metrics.record_remote_error(name, "REMOTE_TIMEOUT")
            raise RemoteTimeoutException(name, self._timeout) from exc
        except CestasException:
            raise
        except Exception as e:
            metrics.record_remote_error(name, "EXTERNAL_SERVICE_ERROR")
            raise ExternalServiceException("supabase", str(e)) from e
        finally:
            metrics.record_remote_latency(name, (time.perf_counter() - started) * 1000)

    async def get_by_id(self, id: Any) -> T | None:
        """
        Get a single record by ID.

        Returns:
            The record if found, None otherwise
        """
        query = self.table.select("*").eq("id", str(id)).limit(1)
        response = await self._execute(query, "get")
        rows = response.data or []
        return rows[0] if rows else None

    async def get_by_id_or_raise(self, id: Any) -> T:
        """
        Get a single record by ID, raise if not found.

        Raises:
            NotFoundException: If record not found
        """
        result = await self.get_by_id(id)
        if not result:
            raise NotFoundException(self.table_name, id)
        return result

    async def create(self, data: dict[str, Any]) -> T:
        """
        Create a new record.

        Returns:
            The created record, with server-assigned fields
        """
        response = await self._execute(self.table.insert(data), "insert")
        if not response.data:
            raise ExternalServiceException("supabase", f"insert into {self.table_name} returned no row")
        return response.data[0]

    async def update(self, id: Any, data: dict[str, Any]) -> T:
        """
        Update an existing record.

        Raises:
            NotFoundException: If no row matched
        """
        response = await self._execute(self.table.update(data).eq("id", str(id)), "update")
        if not response.data:
            raise NotFoundException(self.table_name, id)
        return response.data[0]

    async def delete(self, id: Any) -> bool:
        """
        Delete a record by ID.

        Raises:
            NotFoundException: If no row matched
        """
        response = await self._execute(self.table.delete().eq("id", str(id)), "delete")
        if not response.data:
            raise NotFoundException(self.table_name, id)
        return True
