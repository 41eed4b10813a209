"""PostgreSQL adapter using psycopg (v3+)."""

from __future__ import annotations

from typing import Any

from row_orm.adapters.pooled import PooledAdapter
from row_orm.core.connection import ConnectionConfig
from row_orm.core.exceptions import ConnectionError  # noqa: A004


def _quote(value: Any) -> str:
    text = str(value)
    if text and not any(ch in text for ch in " '\\"):
        return text
    return "'" + text.replace("\\", "\\\\").replace("'", "\\'") + "'"


def _build_conninfo(config: ConnectionConfig) -> str:
    """libpq ``key=value`` string; values with spaces or quotes are quoted."""
    fields = {
        "host": config.host,
        "port": config.port,
        "user": config.user,
        "password": config.password,
        "dbname": config.database,
    }
    return " ".join(f"{key}={_quote(value)}" for key, value in fields.items() if value is not None)


class PostgresqlAdapter(PooledAdapter):
    """Autocommit psycopg connections returning dict rows.

    ``config.extra`` is passed through to ``psycopg.connect``.
    """

    paramstyle_name = "pyformat"

    def connect(self, config: ConnectionConfig) -> Any:
        import psycopg
        from psycopg.rows import dict_row

        try:
            return psycopg.connect(
                _build_conninfo(config), row_factory=dict_row, autocommit=True, **config.extra
            )
        except psycopg.Error as e:
            raise ConnectionError(f"Cannot connect to PostgreSQL: {e}") from e

    def execute(self, connection: Any, sql: str, params: dict[str, Any] | None = None) -> Any:
        return connection.execute(sql, params or None)
