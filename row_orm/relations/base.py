"""Relationship descriptor base class.

A relation is declared as a class attribute of a Model::

    class User(Model):
        posts = has_many("Post")

When the model class is created the declaration is *bound*: a copy is made
with its owner, its name and every defaulted key filled in, and stored in
``User.__relations__``. Loading code only ever looks relations up in that
table.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar, Optional, Union

from row_orm.core.enums import RelationKind
from row_orm.core.query import Query

if TYPE_CHECKING:
    from row_orm.core.engine import Engine
    from row_orm.mapping.record import Model

Scope = Callable[[Query], Optional[Query]]

# Aliases used in count and pivot queries so they never collide with real columns.
COUNT_KEY = "__relation_key"
COUNT_VALUE = "__relation_count"
PIVOT_PARENT = "__pivot_parent"
PIVOT_RELATED = "__pivot_related"


def apply_scope(query: Query, scope: Scope | None) -> Query:
    """Apply a caller scope; scopes may mutate in place or return a query."""
    if scope is None:
        return query
    result = scope(query)
    return query if result is None else result


@dataclass(frozen=True)
class Relation:
    """Immutable description of one relationship.

    Subclasses fill in :attr:`kind`, implement :meth:`_bind_keys`, and expose
    the two columns that drive matching: :attr:`local_column` (read from
    each parent) and :attr:`remote_column` (filtered with ``IN`` on the
    related side).
    """

    kind: ClassVar[RelationKind]

    related: Union[str, type]
    name: str = field(default="", compare=False)
    owner: Any = field(default=None, compare=False, repr=False)

    # --- declaration ---

    def __set_name__(self, owner: type, name: str) -> None:
        object.__setattr__(self, "name", name)

    def __get__(self, instance: Model | None, owner: type) -> Any:
        if instance is None:
            return owner.__relations__.get(self.name, self)
        return instance.related(self.name)

    def bind(self, owner: type[Model], name: str) -> Relation:
        """Return a copy owned by *owner* with defaulted keys resolved."""
        bound = dataclasses.replace(self, name=name, owner=owner)
        bound._bind_keys()
        return bound

    def _bind_keys(self) -> None:
        raise NotImplementedError

    def _set(self, **values: str) -> None:
        for attr, value in values.items():
            object.__setattr__(self, attr, value)

    # --- resolution ---

    @property
    def related_name(self) -> str:
        related = self.related
        return related if isinstance(related, str) else related.__name__

    @property
    def related_model(self) -> type[Model]:
        """The related model class.

        Raises:
            UnresolvableModelError: If the related name is not registered.
        """
        if isinstance(self.related, str):
            registry = self.owner.__registry__
            return registry.get(self.related)
        return self.related

    def validate(self) -> Relation:
        """Resolve the related model now and return self.

        Raises:
            UnresolvableModelError: If the related name is not registered.
        """
        if isinstance(self.related, str):
            self.owner.__registry__.get(self.related)
        return self

    @property
    def many(self) -> bool:
        return self.kind.is_many

    @property
    def local_column(self) -> str:
        raise NotImplementedError

    @property
    def remote_column(self) -> str:
        raise NotImplementedError

    def empty_value(self) -> Any:
        """Loaded-but-empty value: ``[]`` for *-to-many, ``None`` otherwise."""
        return [] if self.many else None

    def parent_keys(self, parents: Iterable[Model]) -> list[Any]:
        """Distinct non-null join key values, in first-seen order."""
        seen: dict[Any, None] = {}
        for parent in parents:
            value = parent.get(self.local_column)
            if value is not None:
                seen.setdefault(value, None)
        return list(seen)

    # --- queries ---

    def new_query(self, engine: Engine | None) -> Query:
        """Unconstrained query over the related table."""
        return Query(self.related_model.__table__, engine)

    def build_eager_query(
        self, engine: Engine | None, parents: Iterable[Model], scope: Scope | None = None
    ) -> Query:
        """One query for the whole batch: ``remote_column IN (parent keys)``."""
        return self._constrained(engine, self.parent_keys(parents), scope, eager=True)

    def build_single_query(
        self, engine: Engine | None, parent: Model, scope: Scope | None = None
    ) -> Query:
        """Query for a single parent (lazy loading)."""
        key = parent.get(self.local_column)
        return self._constrained(engine, [] if key is None else [key], scope, eager=False)

    def _constrained(
        self, engine: Engine | None, keys: list[Any], scope: Scope | None, *, eager: bool
    ) -> Query:
        query = self.new_query(engine)
        if eager or len(keys) != 1:
            query.where_in(self.remote_column, keys)
        else:
            query.where(self.remote_column, keys[0])
        return apply_scope(query, scope)

    def build_count_query(
        self, engine: Engine | None, keys: list[Any], scope: Scope | None = None
    ) -> Query:
        """``SELECT remote, COUNT(*) ... GROUP BY remote`` for the key set."""
        query = self.new_query(engine).where_in(self.remote_column, keys)
        query = apply_scope(query, scope)
        return query.select(
            f"{self.remote_column} AS {COUNT_KEY}", f"COUNT(*) AS {COUNT_VALUE}"
        ).group_by(self.remote_column)

    def __repr__(self) -> str:
        owner = self.owner.__name__ if self.owner is not None else "?"
        return f"<{type(self).__name__} {owner}.{self.name} -> {self.related_name}>"
