"""Row-to-object mapper.

Supports Model records, Pydantic models, dataclasses and plain classes.
"""

from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from row_orm.core.exceptions import ColumnMismatchError
from row_orm.mapping.record import Model

if TYPE_CHECKING:
    from row_orm.core.engine import Engine

T = TypeVar("T")


def _is_pydantic_model(cls: type) -> bool:
    """Check if a class is a Pydantic BaseModel."""
    from pydantic import BaseModel

    return isinstance(cls, type) and issubclass(cls, BaseModel)


class ModelMapper(Generic[T]):
    """Row-to-object mapper.

    Detection order:
    1. Model subclass -> target_class.from_row(row, engine)
    2. Pydantic BaseModel -> model_validate(row)
    3. dataclass / plain class -> target_class(**row)

    Args:
        target_class: The class to construct from row data.
        aliases: Optional column-name to field-name mapping.
        engine: Engine remembered by Model records for lazy loading.
    """

    def __init__(
        self,
        target_class: type[T],
        aliases: dict[str, str] | None = None,
        engine: Engine | None = None,
    ) -> None:
        self._target_class = target_class
        self._aliases = aliases
        self._engine = engine
        self._is_record = isinstance(target_class, type) and issubclass(target_class, Model)
        self._is_pydantic = not self._is_record and _is_pydantic_model(target_class)
        self._is_dataclass = dataclasses.is_dataclass(target_class)

    @property
    def target_class(self) -> type[T]:
        return self._target_class

    def _apply_aliases(self, row: dict[str, Any]) -> dict[str, Any]:
        """Apply column aliases to the row."""
        if not self._aliases:
            return row
        return {self._aliases.get(key, key): value for key, value in row.items()}

    def map_one(self, row: dict[str, Any]) -> T:
        """Map a single row to target_class instance."""
        row = self._apply_aliases(row)

        if self._is_record:
            return self._target_class.from_row(row, self._engine)  # type: ignore[attr-defined, no-any-return]

        if self._is_pydantic:
            try:
                return self._target_class.model_validate(row)  # type: ignore[attr-defined, no-any-return]
            except Exception as e:
                raise ColumnMismatchError(self._target_class.__name__, [str(e)]) from e

        try:
            return self._target_class(**row)
        except TypeError as e:
            raise ColumnMismatchError(self._target_class.__name__, [str(e)]) from e

    def map_many(self, rows: list[dict[str, Any]]) -> list[T]:
        """Map all rows via map_one."""
        return [self.map_one(row) for row in rows]
