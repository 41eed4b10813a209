"""Repository base class.

Thin wrapper over Engine + ModelQuery for DDD-oriented usage. Subclasses
add domain-specific finders built from :meth:`Repository.query`.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from row_orm.loading.builder import PathSpec
from row_orm.loading.counts import load_counts
from row_orm.loading.eager import load_relations
from row_orm.mapping.record import Model
from row_orm.repository.query import ModelQuery

if TYPE_CHECKING:
    from row_orm.core.engine import Engine

M = TypeVar("M", bound=Model)


class Repository(Generic[M]):
    """Base repository for one model.

    Args:
        engine: Engine used for every query.
        model: Model class the repository serves.
    """

    def __init__(self, engine: Engine, model: type[M]) -> None:
        self.engine = engine
        self.model = model

    def query(self) -> ModelQuery[M]:
        """A fresh ModelQuery over the model's table."""
        return ModelQuery(self.engine, self.model)

    def with_relations(self, *paths: PathSpec) -> ModelQuery[M]:
        return self.query().with_relations(*paths)

    def with_counts(self, *names: PathSpec) -> ModelQuery[M]:
        return self.query().with_counts(*names)

    def find(self, key: Any) -> M | None:
        return self.query().find(key)

    def find_all(self, limit: int | None = None, offset: int | None = None) -> list[M]:
        return self.query().limit(limit).offset(offset).fetch_all()

    def first(self) -> M | None:
        return self.query().first()

    def load(self, records: Sequence[M], *paths: PathSpec) -> Sequence[M]:
        """Eager-load relation paths onto records fetched elsewhere."""
        return load_relations(self.engine, records, *paths)

    def load_counts(self, records: Sequence[M], *names: PathSpec) -> Sequence[M]:
        """Attach relation counts onto records fetched elsewhere."""
        return load_counts(self.engine, records, *names)
