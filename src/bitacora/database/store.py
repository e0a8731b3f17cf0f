"""Relational store abstraction.

The engine only needs predicate selects, multi-row inserts and filtered
updates. ``SQLiteStore`` implements them on a local database file;
``SupabaseStore`` (see supabase_store.py) on the hosted PostgreSQL tables.
Both raise ``StoreError`` for every backend failure.
"""

from __future__ import annotations

import json
import logging
import re
import sqlite3
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Sequence

from src.common.config import Settings

from .connection import get_connection, init_db

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

_SQL_OPERATORS = {
    "eq": "=",
    "gt": ">",
    "gte": ">=",
    "lt": "<",
    "lte": "<=",
    "in": "IN",
}


class StoreError(Exception):
    """A query or write against the store failed."""


@dataclass(frozen=True)
class Filter:
    """A single column predicate."""

    column: str
    op: str
    value: Any

    def __post_init__(self) -> None:
        if self.op not in _SQL_OPERATORS:
            raise ValueError(f"Unsupported filter operator: {self.op}")

    @classmethod
    def eq(cls, column: str, value: Any) -> Filter:
        return cls(column, "eq", value)

    @classmethod
    def gte(cls, column: str, value: Any) -> Filter:
        return cls(column, "gte", value)

    @classmethod
    def lt(cls, column: str, value: Any) -> Filter:
        return cls(column, "lt", value)

    @classmethod
    def lte(cls, column: str, value: Any) -> Filter:
        return cls(column, "lte", value)

    @classmethod
    def in_(cls, column: str, values: Iterable[Any]) -> Filter:
        return cls(column, "in", tuple(values))


@dataclass(frozen=True)
class Order:
    """Sort key for a select."""

    column: str
    ascending: bool = True


def to_store_value(value: Any) -> Any:
    """Convert Python values to plain JSON-compatible store values."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, (tuple, list)):
        return [to_store_value(v) for v in value]
    return value


class RelationalStore(ABC):
    """Minimal table store used by the repositories."""

    @abstractmethod
    def select(
        self,
        table: str,
        filters: Sequence[Filter] = (),
        order_by: Sequence[Order] = (),
    ) -> list[dict]:
        """Return all rows of ``table`` matching every filter."""

    @abstractmethod
    def insert(self, table: str, rows: Sequence[dict]) -> list[dict]:
        """Insert rows and return them with their assigned ids."""

    @abstractmethod
    def update(self, table: str, patch: dict, filters: Sequence[Filter]) -> int:
        """Apply ``patch`` to matching rows and return how many changed."""


class SQLiteStore(RelationalStore):
    """RelationalStore on a local SQLite file.

    A connection is opened per call; multi-row inserts run in one
    transaction, so a failed batch leaves no rows behind.
    """

    def __init__(self, db_path: str | Path, initialize: bool = True) -> None:
        self.db_path = Path(db_path)
        if initialize:
            init_db(self.db_path)

    def select(
        self,
        table: str,
        filters: Sequence[Filter] = (),
        order_by: Sequence[Order] = (),
    ) -> list[dict]:
        where, params = self._where(filters)
        sql = f"SELECT * FROM {_ident(table)}{where}"
        if order_by:
            keys = ", ".join(
                f"{_ident(o.column)} {'ASC' if o.ascending else 'DESC'}" for o in order_by
            )
            sql += f" ORDER BY {keys}"

        conn = get_connection(self.db_path)
        try:
            rows = conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise StoreError(f"select from {table} failed: {e}") from e
        finally:
            conn.close()
        return [dict(row) for row in rows]

    def insert(self, table: str, rows: Sequence[dict]) -> list[dict]:
        if not rows:
            return []
        conn = get_connection(self.db_path)
        inserted: list[dict] = []
        try:
            for row in rows:
                columns = [_ident(c) for c in row]
                placeholders = ", ".join("?" for _ in columns)
                cursor = conn.execute(
                    f"INSERT INTO {_ident(table)} ({', '.join(columns)}) VALUES ({placeholders})",
                    [_sqlite_value(v) for v in row.values()],
                )
                inserted.append({**row, "id": cursor.lastrowid})
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise StoreError(f"insert into {table} failed: {e}") from e
        finally:
            conn.close()
        logger.debug("Inserted %d rows into %s", len(inserted), table)
        return inserted

    def update(self, table: str, patch: dict, filters: Sequence[Filter]) -> int:
        if not patch:
            return 0
        assignments = ", ".join(f"{_ident(c)} = ?" for c in patch)
        where, params = self._where(filters)
        conn = get_connection(self.db_path)
        try:
            cursor = conn.execute(
                f"UPDATE {_ident(table)} SET {assignments}{where}",
                [_sqlite_value(v) for v in patch.values()] + params,
            )
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise StoreError(f"update of {table} failed: {e}") from e
        finally:
            conn.close()
        return cursor.rowcount

    @staticmethod
    def _where(filters: Sequence[Filter]) -> tuple[str, list]:
        clauses: list[str] = []
        params: list = []
        for f in filters:
            column = _ident(f.column)
            if f.op == "in":
                values = list(f.value)
                if not values:
                    clauses.append("0")
                    continue
                clauses.append(f"{column} IN ({', '.join('?' for _ in values)})")
                params.extend(_sqlite_value(v) for v in values)
            else:
                clauses.append(f"{column} {_SQL_OPERATORS[f.op]} ?")
                params.append(_sqlite_value(f.value))
        if not clauses:
            return "", params
        return " WHERE " + " AND ".join(clauses), params


def _ident(name: str) -> str:
    if not _IDENTIFIER.match(name):
        raise StoreError(f"Invalid identifier: {name!r}")
    return name


def _sqlite_value(value: Any) -> Any:
    if isinstance(value, dict):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, bool):
        return int(value)
    return to_store_value(value)


def get_store(settings: Settings | None = None) -> RelationalStore:
    """Build the store selected by ``settings.database.backend``."""
    settings = settings or Settings.load()
    if settings.database.backend == "supabase":
        from .supabase_store import SupabaseStore

        return SupabaseStore(settings.supabase.url, settings.supabase.service_key)
    return SQLiteStore(settings.database.db_abs_path)
