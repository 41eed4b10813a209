"""Query execution engine.

The Engine compiles a Query (or takes inline SQL), normalizes parameters for
the adapter, executes it on a pooled connection, and optionally applies a
mapper to the resulting row dicts.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Union

from row_orm.core.connection import ConnectionConfig, ConnectionManager
from row_orm.core.exceptions import MultipleRowsError, QueryExecutionError
from row_orm.core.params import coerce_params, normalize_params

if TYPE_CHECKING:
    from row_orm.core.query import Query
    from row_orm.mapping.protocol import Mapper

logger = logging.getLogger(__name__)

Statement = Union["Query", str]
Listener = Callable[[str, dict[str, Any]], None]


def _rows_to_dicts(cursor: Any) -> list[dict[str, Any]]:
    """Convert cursor results to list of dicts.

    Handles both tuple-like rows and dict-like rows from different adapters.
    """
    if cursor.description is None:
        return []
    columns = [desc[0] for desc in cursor.description]
    rows = cursor.fetchall()
    if not rows:
        return []

    if isinstance(rows[0], dict):
        return [dict(row) for row in rows]

    return [dict(zip(columns, row, strict=True)) for row in rows]


class Engine:
    """Synchronous query execution engine.

    Listeners registered with :meth:`add_listener` are called with the final
    SQL text and parameters before every statement.
    """

    def __init__(self, connection_manager: ConnectionManager) -> None:
        self._connection_manager = connection_manager
        self._paramstyle: str = connection_manager.adapter.paramstyle
        self._log_level = logging.INFO if connection_manager.config.echo else logging.DEBUG
        self._listeners: list[Listener] = []

    @classmethod
    def from_config(cls, config: ConnectionConfig) -> Engine:
        """Create an Engine from a ConnectionConfig."""
        return cls(ConnectionManager(config))

    @property
    def connection_manager(self) -> ConnectionManager:
        return self._connection_manager

    def add_listener(self, listener: Listener) -> None:
        """Register a callable invoked as ``listener(sql, params)`` per statement."""
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        self._listeners.remove(listener)

    def _prepare(
        self, statement: Statement, params: dict[str, Any] | None
    ) -> tuple[str, dict[str, Any], str]:
        """Return ``(sql, params, label)`` ready for the adapter."""
        if isinstance(statement, str):
            sql, bound, label = statement, coerce_params(params), "<inline>"
        else:
            sql, bound = statement.compile()
            bound.update(coerce_params(params))
            label = statement.table
        return normalize_params(sql, self._paramstyle), bound, label

    def _run(self, statement: Statement, params: dict[str, Any] | None, *, commit: bool) -> Any:
        sql, bound, label = self._prepare(statement, params)
        for listener in self._listeners:
            listener(sql, bound)
        logger.log(self._log_level, "%s %r", sql, bound)

        with self._connection_manager.get_connection() as conn:
            try:
                cursor = self._connection_manager.adapter.execute(conn, sql, bound)
                if commit:
                    conn.commit()
                    return int(cursor.rowcount)
                return _rows_to_dicts(cursor)
            except Exception as e:
                raise QueryExecutionError(label, str(e)) from e

    def fetch_all(
        self,
        statement: Statement,
        params: dict[str, Any] | None = None,
        *,
        mapper: Mapper[Any] | None = None,
    ) -> Any:
        """Fetch all matching rows."""
        rows = self._run(statement, params, commit=False)
        if mapper is not None:
            return mapper.map_many(rows)
        return rows

    def fetch_one(
        self,
        statement: Statement,
        params: dict[str, Any] | None = None,
        *,
        mapper: Mapper[Any] | None = None,
    ) -> Any:
        """Fetch a single row.

        Returns None if zero rows match.
        Raises MultipleRowsError if more than one row matches.
        """
        rows = self._run(statement, params, commit=False)
        if not rows:
            return None
        if len(rows) > 1:
            label = statement if isinstance(statement, str) else statement.table
            raise MultipleRowsError(label, len(rows))
        if mapper is not None:
            return mapper.map_one(rows[0])
        return rows[0]

    def fetch_scalar(
        self,
        statement: Statement,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Fetch a single scalar value (first column of first row)."""
        rows = self._run(statement, params, commit=False)
        if not rows:
            return None
        return next(iter(rows[0].values()))

    def execute(
        self,
        statement: Statement,
        params: dict[str, Any] | None = None,
    ) -> int:
        """Execute a write statement. Returns affected row count."""
        return int(self._run(statement, params, commit=True))

    def close(self) -> None:
        """Close the underlying connection pool."""
        self._connection_manager.close_pool()
