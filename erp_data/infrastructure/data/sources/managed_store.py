"""
Managed store tier: Supabase tables queried through the supabase client.

Used when the primary records service is administratively disabled. Every
client error is re-raised as ManagedStoreError so repositories can fall back.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable

from supabase import Client, create_client

from erp_data.infrastructure.data.errors import ManagedStoreError
from erp_data.utils.config import supabase_key, supabase_url
from erp_data.utils.logger import get_logger

logger = get_logger()

TIER_NAME = "managed_store"


def create_supabase_client(url: str | None = None, key: str | None = None) -> Client | None:
    """Return a Supabase client, or None when credentials are not configured."""
    url = url or supabase_url()
    key = key or supabase_key()
    if not (url and key):
        return None
    return create_client(url, key)


def _rows(response: Any) -> list[dict[str, Any]]:
    data = getattr(response, "data", None)
    if isinstance(data, list):
        return [dict(r) for r in data if isinstance(r, dict)]
    if isinstance(data, dict):
        return [dict(data)]
    return []


class SupabaseManagedStore:
    """
    select/insert/update/delete against named tables.

    The supabase client is synchronous; calls run in a worker thread.
    """

    def __init__(self, client: Any) -> None:
        self._client = client

    async def _run(self, table: str, action: str, call: Callable[[], Any]) -> Any:
        logger.debug("Managed store %s on %s", action, table)
        try:
            return await asyncio.to_thread(call)
        except Exception as e:
            raise ManagedStoreError(
                f"Managed store {action} on {table} failed: {e}",
                tier=TIER_NAME,
                original=e,
            ) from e

    async def select(self, table: str) -> list[dict[str, Any]]:
        response = await self._run(
            table, "select", lambda: self._client.table(table).select("*").execute()
        )
        return _rows(response)

    async def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any] | None:
        response = await self._run(
            table, "insert", lambda: self._client.table(table).insert(row).execute()
        )
        rows = _rows(response)
        return rows[0] if rows else None

    async def update(self, table: str, record_id: str, changes: dict[str, Any]) -> dict[str, Any] | None:
        """Return the updated row, or None when no row has that id."""
        response = await self._run(
            table,
            "update",
            lambda: self._client.table(table).update(changes).eq("id", record_id).execute(),
        )
        rows = _rows(response)
        return rows[0] if rows else None

    async def delete(self, table: str, record_id: str) -> None:
        await self._run(
            table, "delete", lambda: self._client.table(table).delete().eq("id", record_id).execute()
        )
