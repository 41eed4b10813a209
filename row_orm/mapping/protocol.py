"""Mapper protocol accepted by :class:`~row_orm.core.engine.Engine`.

``fetch_all`` hands every row dict to ``map_many``; ``fetch_one`` hands its
single row to ``map_one``. :class:`~row_orm.mapping.model.ModelMapper` is
the implementation used for records and for relation batches.
"""

from __future__ import annotations

from typing import Any, Protocol, TypeVar, runtime_checkable

T_co = TypeVar("T_co", covariant=True)


@runtime_checkable
class Mapper(Protocol[T_co]):
    """Turns row dicts into objects."""

    def map_one(self, row: dict[str, Any]) -> T_co: ...

    def map_many(self, rows: list[dict[str, Any]]) -> list[T_co]: ...
