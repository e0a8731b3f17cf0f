"""Supabase-backed RelationalStore.

Talks to the hosted PostgreSQL tables through the PostgREST query builder
of the ``supabase`` client.

Prerequisites:
    - SUPABASE_URL and SUPABASE_SERVICE_KEY in .env (or config/settings.yaml)

Usage:
    from src.bitacora.database.supabase_store import SupabaseStore

    store = SupabaseStore()
    rows = store.select("bitacoras", [Filter.eq("year", 2025)])
"""

from __future__ import annotations

import logging
import os
from typing import Optional, Sequence

from .store import Filter, Order, RelationalStore, StoreError, to_store_value

logger = logging.getLogger(__name__)

# PostgREST returns at most this many rows per request by default
PAGE_SIZE = 1000

# Filter operator -> PostgREST builder method
_BUILDER_METHODS = {
    "eq": "eq",
    "gt": "gt",
    "gte": "gte",
    "lt": "lt",
    "lte": "lte",
    "in": "in_",
}


class SupabaseStore(RelationalStore):
    """RelationalStore over Supabase tables.

    A list insert is sent as a single request, which PostgreSQL applies
    atomically.
    """

    def __init__(
        self,
        supabase_url: Optional[str] = None,
        supabase_key: Optional[str] = None,
        client=None,
        page_size: int = PAGE_SIZE,
    ):
        self._url = supabase_url or os.getenv("SUPABASE_URL", "")
        self._key = supabase_key or os.getenv("SUPABASE_SERVICE_KEY", "")
        self._client = client
        self.page_size = page_size

    def _get_client(self):
        """Lazy-initialize Supabase client."""
        if self._client is not None:
            return self._client
        if not self._url or not self._key:
            raise ValueError(
                "SUPABASE_URL / SUPABASE_SERVICE_KEY must be set in .env "
                "to use the supabase store backend."
            )
        from supabase import create_client

        self._client = create_client(self._url, self._key)
        return self._client

    def select(
        self,
        table: str,
        filters: Sequence[Filter] = (),
        order_by: Sequence[Order] = (),
    ) -> list[dict]:
        # a stable order keeps pages from overlapping
        order_by = list(order_by) or [Order("id")]
        rows: list[dict] = []
        offset = 0
        while True:
            try:
                query = self._get_client().table(table).select("*")
                query = self._apply_filters(query, filters)
                for order in order_by:
                    query = query.order(order.column, desc=not order.ascending)
                response = query.range(offset, offset + self.page_size - 1).execute()
            except ValueError:
                raise
            except Exception as e:
                logger.error("Supabase select from %s failed: %s", table, e)
                raise StoreError(f"select from {table} failed: {e}") from e

            page = list(response.data or [])
            rows.extend(page)
            if len(page) < self.page_size:
                break
            offset += self.page_size
        if offset:
            logger.debug("Read %d rows from %s in %d pages", len(rows), table, offset // self.page_size + 1)
        return rows

    def insert(self, table: str, rows: Sequence[dict]) -> list[dict]:
        if not rows:
            return []
        payload = [{k: to_store_value(v) for k, v in row.items()} for row in rows]
        try:
            response = self._get_client().table(table).insert(payload).execute()
        except ValueError:
            raise
        except Exception as e:
            logger.error("Supabase insert into %s failed: %s", table, e)
            raise StoreError(f"insert into {table} failed: {e}") from e
        return list(response.data or [])

    def update(self, table: str, patch: dict, filters: Sequence[Filter]) -> int:
        if not patch:
            return 0
        payload = {k: to_store_value(v) for k, v in patch.items()}
        try:
            query = self._get_client().table(table).update(payload)
            query = self._apply_filters(query, filters)
            response = query.execute()
        except ValueError:
            raise
        except Exception as e:
            logger.error("Supabase update of %s failed: %s", table, e)
            raise StoreError(f"update of {table} failed: {e}") from e
        return len(response.data or [])

    @staticmethod
    def _apply_filters(query, filters: Sequence[Filter]):
        for f in filters:
            method = getattr(query, _BUILDER_METHODS[f.op])
            query = method(f.column, to_store_value(f.value))
        return query
