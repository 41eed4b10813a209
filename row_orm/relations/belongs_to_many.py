"""BelongsToMany: owner and related rows associated through a pivot table."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional, Union

from row_orm.core.enums import RelationKind
from row_orm.core.exceptions import KeyConventionError
from row_orm.core.query import Query
from row_orm.relations.base import (
    COUNT_KEY,
    COUNT_VALUE,
    PIVOT_PARENT,
    PIVOT_RELATED,
    Relation,
    Scope,
    apply_scope,
)
from row_orm.relations.naming import check_identifier, foreign_key_for, joining_table

if TYPE_CHECKING:
    from row_orm.core.engine import Engine


@dataclass(frozen=True, repr=False)
class BelongsToMany(Relation):
    """Many-to-many relation.

    ``table`` holds ``(foreign_pivot_key, related_pivot_key)`` pairs linking
    ``owner.parent_key`` to ``related.related_key``.

    Defaults: ``table = joining_table(owner, related)``,
    ``foreign_pivot_key = <owner>_id``, ``related_pivot_key = <related>_id``,
    ``parent_key = related_key = "id"``.
    """

    kind = RelationKind.MANY_TO_MANY

    table: Optional[str] = None
    foreign_pivot_key: Optional[str] = None
    related_pivot_key: Optional[str] = None
    parent_key: Optional[str] = None
    related_key: Optional[str] = None

    def _bind_keys(self) -> None:
        owner_name = self.owner.__name__
        self._set(
            table=check_identifier(
                self.table or joining_table(owner_name, self.related_name), "table"
            ),
            foreign_pivot_key=check_identifier(
                self.foreign_pivot_key or foreign_key_for(owner_name), "foreign_pivot_key"
            ),
            related_pivot_key=check_identifier(
                self.related_pivot_key or foreign_key_for(self.related_name),
                "related_pivot_key",
            ),
            parent_key=check_identifier(self.parent_key or "id", "parent_key"),
            related_key=check_identifier(self.related_key or "id", "related_key"),
        )
        if self.foreign_pivot_key == self.related_pivot_key:
            raise KeyConventionError(
                self.foreign_pivot_key,  # type: ignore[arg-type]
                "foreign_pivot_key and related_pivot_key must differ; "
                "declare them explicitly for self-referential relations",
            )

    @property
    def local_column(self) -> str:
        return self.parent_key  # type: ignore[return-value]

    @property
    def remote_column(self) -> str:
        return f"{self.table}.{self.foreign_pivot_key}"

    @property
    def match_column(self) -> str:
        return self.related_key  # type: ignore[return-value]

    def new_query(self, engine: Engine | None) -> Query:
        """Related rows joined to the pivot; only related columns are selected."""
        related_table = self.related_model.__table__
        return (
            Query(related_table, engine)
            .select(f"{related_table}.*")
            .join(
                self.table,  # type: ignore[arg-type]
                f"{self.table}.{self.related_pivot_key}",
                f"{related_table}.{self.related_key}",
            )
        )

    def build_pivot_query(self, engine: Engine | None, keys: Iterable[Any]) -> Query:
        """Pivot pairs for the parent key set, in pivot-table order."""
        return (
            Query(self.table, engine)  # type: ignore[arg-type]
            .select(
                f"{self.table}.{self.foreign_pivot_key} AS {PIVOT_PARENT}",
                f"{self.table}.{self.related_pivot_key} AS {PIVOT_RELATED}",
            )
            .where_in(self.remote_column, keys)
        )

    def build_count_query(
        self, engine: Engine | None, keys: list[Any], scope: Scope | None = None
    ) -> Query:
        """Count pivot rows per parent, joined to related rows so dangling pivots drop out."""
        related_table = self.related_model.__table__
        query = (
            Query(related_table, engine)
            .join(
                self.table,  # type: ignore[arg-type]
                f"{self.table}.{self.related_pivot_key}",
                f"{related_table}.{self.related_key}",
            )
            .where_in(self.remote_column, keys)
        )
        query = apply_scope(query, scope)
        return query.select(
            f"{self.remote_column} AS {COUNT_KEY}", f"COUNT(*) AS {COUNT_VALUE}"
        ).group_by(self.remote_column)


def belongs_to_many(
    related: Union[str, type],
    table: Optional[str] = None,
    foreign_pivot_key: Optional[str] = None,
    related_pivot_key: Optional[str] = None,
    parent_key: Optional[str] = None,
    related_key: Optional[str] = None,
) -> Any:
    """Declare a many-to-many relation through a pivot table."""
    return BelongsToMany(
        related,
        table=table,
        foreign_pivot_key=foreign_pivot_key,
        related_pivot_key=related_pivot_key,
        parent_key=parent_key,
        related_key=related_key,
    )
