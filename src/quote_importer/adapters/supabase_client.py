"""Supabase client helpers and the quotation store built on them."""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence

import httpx
from postgrest.exceptions import APIError
from supabase import Client, create_client

from quote_importer.errors import StoreError
from quote_importer.logging_config import get_logger

logger = get_logger(__name__)

Row = Dict[str, Any]


@lru_cache(maxsize=1)
def get_supabase_client(url: str, key: str) -> Client:
    """Return a cached Supabase client for the given credentials."""
    return create_client(url, key)


class QuotationStore(Protocol):
    """Table-level operations the import commit relies on."""

    def insert(self, table: str, rows: Sequence[Row]) -> List[Row]: ...

    def upsert(self, table: str, rows: Sequence[Row], on_conflict: str) -> List[Row]: ...

    def select(
        self,
        table: str,
        filters: Optional[Mapping[str, Any]] = None,
        *,
        columns: str = "*",
        ilike: Optional[Mapping[str, str]] = None,
        limit: Optional[int] = None,
    ) -> List[Row]: ...

    def delete(self, table: str, filters: Mapping[str, Any]) -> List[Row]: ...


class SupabaseQuotationStore:
    """QuotationStore over a Supabase client; API failures become StoreError."""

    def __init__(self, supabase: Client):
        self._supabase = supabase

    def _execute(self, table: str, query) -> List[Row]:
        try:
            response = query.execute()
        except APIError as e:
            message = getattr(e, "message", None) or str(e)
            logger.error("Store error on %s: %s", table, message)
            raise StoreError(message, table=table) from e
        except httpx.HTTPError as e:
            logger.error("Store unreachable for %s: %s", table, e)
            raise StoreError(str(e), table=table) from e
        return getattr(response, "data", None) or []

    def insert(self, table: str, rows: Sequence[Row]) -> List[Row]:
        if not rows:
            return []
        return self._execute(table, self._supabase.table(table).insert(list(rows)))

    def upsert(self, table: str, rows: Sequence[Row], on_conflict: str) -> List[Row]:
        if not rows:
            return []
        return self._execute(
            table, self._supabase.table(table).upsert(list(rows), on_conflict=on_conflict)
        )

    def select(
        self,
        table: str,
        filters: Optional[Mapping[str, Any]] = None,
        *,
        columns: str = "*",
        ilike: Optional[Mapping[str, str]] = None,
        limit: Optional[int] = None,
    ) -> List[Row]:
        query = self._supabase.table(table).select(columns)
        for column, value in (filters or {}).items():
            query = query.eq(column, value)
        for column, pattern in (ilike or {}).items():
            query = query.ilike(column, pattern)
        if limit is not None:
            query = query.limit(limit)
        return self._execute(table, query)

    def delete(self, table: str, filters: Mapping[str, Any]) -> List[Row]:
        if not filters:
            raise ValueError("Refusing to delete without filters")
        query = self._supabase.table(table).delete()
        for column, value in filters.items():
            query = query.eq(column, value)
        return self._execute(table, query)
