"""SQLite adapter built on the stdlib sqlite3 driver."""

from __future__ import annotations

import sqlite3
from typing import Any

from row_orm.adapters.pooled import PooledAdapter
from row_orm.core.connection import ConnectionConfig
from row_orm.core.exceptions import ConnectionError  # noqa: A004


class SqliteAdapter(PooledAdapter):
    """SQLite adapter.

    Each pooled connection to ``:memory:`` is its own database, so callers
    sharing in-memory data must use ``pool_size=1``.
    """

    paramstyle_name = "named"

    def connect(self, config: ConnectionConfig) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(config.database, **config.extra)
        except sqlite3.Error as e:
            raise ConnectionError(
                f"Cannot open SQLite database '{config.database}': {e}"
            ) from e
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys=ON")
        return conn

    def execute(
        self,
        connection: sqlite3.Connection,
        sql: str,
        params: dict[str, Any] | None = None,
    ) -> sqlite3.Cursor:
        return connection.execute(sql, params or {})
