"""Fluent SELECT builder.

Every value is bound as a ``:pN`` placeholder; identifiers are checked
against a bare-name pattern before they reach the SQL text. The only raw SQL
a Query accepts comes through :meth:`Query.select` expressions and
:meth:`Query.where_raw` fragments, both written by the calling code.
"""

from __future__ import annotations

import copy
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from row_orm.core.exceptions import QueryBuildError
from row_orm.core.params import is_column_reference, is_identifier, placeholder_names

if TYPE_CHECKING:
    from row_orm.core.engine import Engine

_OPERATORS = frozenset({"=", "!=", "<>", "<", "<=", ">", ">=", "LIKE", "NOT LIKE"})
_JOIN_KINDS = frozenset({"INNER", "LEFT"})


def _column(name: str) -> str:
    if not is_column_reference(name):
        raise QueryBuildError(f"Invalid column reference: {name!r}")
    return name


class Query:
    """Chainable SELECT query bound (optionally) to an Engine.

    Builder methods mutate the query and return it, so calls can be chained.
    Use :meth:`clone` to branch a query.
    """

    def __init__(self, table: str, engine: Engine | None = None) -> None:
        if not is_identifier(table):
            raise QueryBuildError(f"Invalid table name: {table!r}")
        self.table = table
        self.engine = engine
        self._columns: list[str] = []
        self._distinct = False
        self._joins: list[str] = []
        self._wheres: list[str] = []
        self._params: dict[str, Any] = {}
        self._group_by: list[str] = []
        self._order_by: list[str] = []
        self._limit: int | None = None
        self._offset: int | None = None
        self._seq = 0

    def _bind(self, value: Any) -> str:
        name = f"p{self._seq}"
        while name in self._params:
            self._seq += 1
            name = f"p{self._seq}"
        self._seq += 1
        self._params[name] = value
        return f":{name}"

    # --- building ---

    def select(self, *columns: str) -> Query:
        """Set the projection. Accepts column names or SQL expressions."""
        if not columns:
            raise QueryBuildError("select() requires at least one column")
        self._columns.extend(columns)
        return self

    def distinct(self, enabled: bool = True) -> Query:
        self._distinct = enabled
        return self

    def where(self, column: str, value: Any, operator: str = "=") -> Query:
        """AND a ``column <operator> value`` predicate.

        ``None`` with ``=`` / ``!=`` renders ``IS NULL`` / ``IS NOT NULL``.
        """
        op = operator.upper()
        if op not in _OPERATORS:
            raise QueryBuildError(f"Unsupported operator: {operator!r}")
        column = _column(column)
        if value is None:
            if op == "=":
                return self.where_null(column)
            if op in ("!=", "<>"):
                return self.where_null(column, negate=True)
            raise QueryBuildError(f"Cannot compare NULL with {operator!r}")
        self._wheres.append(f"{column} {op} {self._bind(value)}")
        return self

    def where_in(self, column: str, values: Iterable[Any]) -> Query:
        """AND a ``column IN (...)`` predicate. An empty list matches nothing."""
        column = _column(column)
        values = list(values)
        if not values:
            self._wheres.append("1 = 0")
            return self
        placeholders = ", ".join(self._bind(value) for value in values)
        self._wheres.append(f"{column} IN ({placeholders})")
        return self

    def where_null(self, column: str, negate: bool = False) -> Query:
        column = _column(column)
        self._wheres.append(f"{column} IS {'NOT ' if negate else ''}NULL")
        return self

    def where_raw(self, fragment: str, params: dict[str, Any] | None = None) -> Query:
        """AND a raw SQL fragment using its own ``:name`` placeholders."""
        params = params or {}
        missing = [name for name in placeholder_names(fragment) if name not in params]
        if missing:
            raise QueryBuildError(f"Missing parameters for where_raw: {missing}")
        for name, value in params.items():
            if name in self._params and self._params[name] != value:
                raise QueryBuildError(f"Parameter ':{name}' is already bound")
            self._params[name] = value
        self._wheres.append(f"({fragment})")
        return self

    def join(self, table: str, first: str, second: str, kind: str = "INNER") -> Query:
        """Add ``<kind> JOIN table ON first = second``."""
        kind = kind.upper()
        if kind not in _JOIN_KINDS:
            raise QueryBuildError(f"Unsupported join kind: {kind!r}")
        if not is_identifier(table):
            raise QueryBuildError(f"Invalid table name: {table!r}")
        self._joins.append(f"{kind} JOIN {table} ON {_column(first)} = {_column(second)}")
        return self

    def group_by(self, *columns: str) -> Query:
        self._group_by.extend(_column(column) for column in columns)
        return self

    def order_by(self, column: str, direction: str = "ASC") -> Query:
        direction = direction.upper()
        if direction not in ("ASC", "DESC"):
            raise QueryBuildError(f"Unsupported order direction: {direction!r}")
        self._order_by.append(f"{_column(column)} {direction}")
        return self

    def limit(self, limit: int | None) -> Query:
        self._limit = limit
        return self

    def offset(self, offset: int | None) -> Query:
        self._offset = offset
        return self

    # --- output ---

    def compile(self) -> tuple[str, dict[str, Any]]:
        """Render the SQL text and a copy of the bound parameters."""
        parts = ["SELECT"]
        if self._distinct:
            parts.append("DISTINCT")
        parts.append(", ".join(self._columns) if self._columns else "*")
        parts.append(f"FROM {self.table}")
        parts.extend(self._joins)
        if self._wheres:
            parts.append("WHERE " + " AND ".join(self._wheres))
        if self._group_by:
            parts.append("GROUP BY " + ", ".join(self._group_by))
        if self._order_by:
            parts.append("ORDER BY " + ", ".join(self._order_by))
        if self._limit is not None:
            parts.append(f"LIMIT {int(self._limit)}")
        if self._offset is not None:
            if self._limit is None:
                raise QueryBuildError("offset() requires limit()")
            parts.append(f"OFFSET {int(self._offset)}")
        return " ".join(parts), dict(self._params)

    def execute(self) -> list[dict[str, Any]]:
        """Run the query on its engine and return row dicts."""
        if self.engine is None:
            raise QueryBuildError(f"Query on '{self.table}' is not bound to an engine")
        rows: list[dict[str, Any]] = self.engine.fetch_all(self)
        return rows

    def clone(self) -> Query:
        clone = copy.copy(self)
        clone._columns = list(self._columns)
        clone._joins = list(self._joins)
        clone._wheres = list(self._wheres)
        clone._params = dict(self._params)
        clone._group_by = list(self._group_by)
        clone._order_by = list(self._order_by)
        return clone

    def __repr__(self) -> str:
        sql, params = self.compile()
        return f"<Query {sql!r} {params!r}>"
