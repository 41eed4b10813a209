"""Adapter protocol.

The Engine borrows one connection per statement, runs it through
:meth:`Adapter.execute` and reads the cursor's ``description`` and
``fetchall()``. Adapters differ only in how they connect, which placeholder
style their driver expects, and what a row looks like (tuple or mapping).
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from row_orm.core.connection import ConnectionConfig


@runtime_checkable
class Adapter(Protocol):
    """What ConnectionManager and Engine need from a backend."""

    @property
    def paramstyle(self) -> str:
        """``"named"`` keeps ``:name`` placeholders; ``"pyformat"`` rewrites to ``%(name)s``."""
        ...

    def create_pool(self, config: ConnectionConfig) -> Any: ...

    def acquire_connection(self, pool: Any) -> Any: ...

    def release_connection(self, connection: Any, pool: Any) -> None: ...

    def close_pool(self, pool: Any) -> None: ...

    def execute(self, connection: Any, sql: str, params: dict[str, Any] | None = None) -> Any:
        """Run one statement and return a cursor (``description``, ``fetchall()``, ``rowcount``)."""
        ...
