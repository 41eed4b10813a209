"""Fixed-size connection pool shared by the bundled adapters.

Connections are opened up front by :meth:`PooledAdapter.create_pool` and
kept in a plain list; the Engine holds one for the length of a statement.
"""

from __future__ import annotations

from typing import Any

from row_orm.core.connection import ConnectionConfig
from row_orm.core.exceptions import PoolError


class PooledAdapter:
    """Adapter base: subclasses implement :meth:`connect` and :meth:`execute`."""

    paramstyle_name = "named"

    @property
    def paramstyle(self) -> str:
        return self.paramstyle_name

    def connect(self, config: ConnectionConfig) -> Any:
        raise NotImplementedError

    def create_pool(self, config: ConnectionConfig) -> list[Any]:
        return [self.connect(config) for _ in range(config.pool_size)]

    def acquire_connection(self, pool: list[Any]) -> Any:
        if not pool:
            raise PoolError(f"{type(self).__name__}: every pooled connection is in use")
        return pool.pop()

    def release_connection(self, connection: Any, pool: list[Any]) -> None:
        pool.append(connection)

    def close_pool(self, pool: list[Any]) -> None:
        while pool:
            pool.pop().close()

    def execute(self, connection: Any, sql: str, params: dict[str, Any] | None = None) -> Any:
        raise NotImplementedError
