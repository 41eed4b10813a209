"""Model-level query with relation loading.

A ModelQuery wraps a :class:`~row_orm.core.query.Query` over a model's
table. ``with_relations`` and ``with_counts`` record what to resolve after
the base rows are fetched; every builder method returns a new ModelQuery so
a configured query can be reused as a template.
"""

from __future__ import annotations

import copy
from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from row_orm.core.query import Query
from row_orm.loading.builder import PathSpec, plan
from row_orm.loading.counts import CountAggregator, CountSpec, plan_counts
from row_orm.loading.eager import EagerLoader
from row_orm.loading.plan import LoadPlan
from row_orm.mapping.model import ModelMapper
from row_orm.mapping.record import Model

if TYPE_CHECKING:
    from row_orm.core.engine import Engine

M = TypeVar("M", bound=Model)


class ModelQuery(Generic[M]):
    """Immutable query over one model, with eager loading and counting."""

    def __init__(self, engine: Engine, model: type[M]) -> None:
        self._engine = engine
        self._model = model
        self._query = Query(model.__table__, engine)
        self._relation_specs: list[PathSpec] = []
        self._plan: LoadPlan = LoadPlan(model)
        self._count_specs: list[CountSpec] = []

    @property
    def model(self) -> type[M]:
        return self._model

    @property
    def load_plan(self) -> LoadPlan:
        return self._plan

    def _clone(self) -> ModelQuery[M]:
        clone = copy.copy(self)
        clone._query = self._query.clone()
        clone._relation_specs = list(self._relation_specs)
        clone._count_specs = list(self._count_specs)
        return clone

    # --- relation loading ---

    def with_relations(self, *paths: PathSpec) -> ModelQuery[M]:
        """Eager-load relation paths after fetching.

        Each item is a dotted path or a ``{path: scope}`` mapping. Paths are
        validated immediately.
        """
        clone = self._clone()
        clone._relation_specs.extend(paths)
        clone._plan = plan(self._model, clone._relation_specs)
        return clone

    def with_counts(self, *names: PathSpec) -> ModelQuery[M]:
        """Attach ``<name>_count`` for each relation name after fetching."""
        clone = self._clone()
        clone._count_specs.extend(plan_counts(self._model, names))
        return clone

    # --- filtering ---

    def where(self, column: str, value: Any, operator: str = "=") -> ModelQuery[M]:
        clone = self._clone()
        clone._query.where(column, value, operator)
        return clone

    def where_in(self, column: str, values: Iterable[Any]) -> ModelQuery[M]:
        clone = self._clone()
        clone._query.where_in(column, values)
        return clone

    def where_raw(self, fragment: str, params: dict[str, Any] | None = None) -> ModelQuery[M]:
        clone = self._clone()
        clone._query.where_raw(fragment, params)
        return clone

    def order_by(self, column: str, direction: str = "ASC") -> ModelQuery[M]:
        clone = self._clone()
        clone._query.order_by(column, direction)
        return clone

    def limit(self, limit: int | None) -> ModelQuery[M]:
        clone = self._clone()
        clone._query.limit(limit)
        return clone

    def offset(self, offset: int | None) -> ModelQuery[M]:
        clone = self._clone()
        clone._query.offset(offset)
        return clone

    # --- execution ---

    def fetch_all(self) -> list[M]:
        """Fetch records, then resolve relations and counts for the batch."""
        mapper: ModelMapper[M] = ModelMapper(self._model, engine=self._engine)
        records: list[M] = self._engine.fetch_all(self._query, mapper=mapper)
        if records:
            EagerLoader(self._engine).load(records, self._plan)
            aggregator = CountAggregator(self._engine)
            for relation, scope in self._count_specs:
                aggregator.attach_counts(records, relation, scope)
        return records

    def first(self) -> M | None:
        """First record (after ordering), or None."""
        records = self.limit(1).fetch_all()
        return records[0] if records else None

    def find(self, key: Any) -> M | None:
        """Record whose primary key equals *key*, or None."""
        return self.where(f"{self._model.__table__}.{self._model.__primary_key__}", key).first()

    def __iter__(self) -> Iterator[M]:
        return iter(self.fetch_all())

    def __repr__(self) -> str:
        return f"<ModelQuery {self._model.__name__} relations={self._plan.paths()}>"
