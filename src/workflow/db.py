from __future__ import annotations

import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Generator, Optional

from .storage import KeyValueBackend


@dataclass(frozen=True)
class _Cols:
    table: str = "kv"
    key: str = "key"
    value: str = "value"
    updated_at: str = "updated_at"


_COLS = _Cols()


class SQLiteBackend(KeyValueBackend):
    """
    Key-value backend persisted in a single SQLite table.
    """

    def __init__(self, db_path: str) -> None:
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._db_path = db_path
        self._init_db()

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_COLS.table} (
                    {_COLS.key} TEXT PRIMARY KEY,
                    {_COLS.value} TEXT NOT NULL,
                    {_COLS.updated_at} TEXT NOT NULL
                )
                """
            )

    def get(self, key: str) -> Optional[str]:
        with self._conn() as conn:
            row = conn.execute(
                f"SELECT {_COLS.value} FROM {_COLS.table} WHERE {_COLS.key} = ?", (key,)
            ).fetchone()
            return str(row[_COLS.value]) if row else None

    def set(self, key: str, value: str) -> None:
        now = datetime.now(timezone.utc).isoformat()
        with self._conn() as conn:
            conn.execute(
                f"""
                INSERT INTO {_COLS.table} ({_COLS.key}, {_COLS.value}, {_COLS.updated_at})
                VALUES (?, ?, ?)
                ON CONFLICT({_COLS.key}) DO UPDATE SET
                    {_COLS.value} = excluded.{_COLS.value},
                    {_COLS.updated_at} = excluded.{_COLS.updated_at}
                """,
                (key, value, now),
            )

    def delete(self, key: str) -> bool:
        with self._conn() as conn:
            cur = conn.execute(f"DELETE FROM {_COLS.table} WHERE {_COLS.key} = ?", (key,))
            return cur.rowcount > 0
