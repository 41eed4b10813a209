"""Relation count aggregator.

Counts related rows per parent with a single ``GROUP BY`` query; related
rows are never fetched. Parents missing from the result get ``0``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, Any, Optional

from row_orm.core.exceptions import HeterogeneousBatchError, InvalidRelationPathError
from row_orm.loading.builder import PathSpec, iter_path_specs, split_path
from row_orm.relations.base import COUNT_KEY, COUNT_VALUE, Relation, Scope

if TYPE_CHECKING:
    from row_orm.core.engine import Engine
    from row_orm.mapping.record import Model

logger = logging.getLogger(__name__)

CountSpec = tuple[Relation, Optional[Scope]]


def plan_counts(model: type[Model], names: Iterable[PathSpec]) -> list[CountSpec]:
    """Resolve count names (or ``{name: scope}`` mappings) to relations.

    Raises:
        InvalidRelationPathError: For dotted or empty names.
        UnknownRelationError: If *model* declares no such relation.
        UnresolvableModelError: If the related model is not registered.
    """
    specs: list[CountSpec] = []
    for name, scope in iter_path_specs(names):
        if len(split_path(name)) != 1:
            raise InvalidRelationPathError(name, "counts take a single relation name")
        specs.append((model.relationship(name).validate(), scope))
    return specs


class CountAggregator:
    """Attaches ``<relation>_count`` values to parent batches."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def counts(
        self, parents: Iterable[Model], relation: Relation, scope: Scope | None = None
    ) -> dict[Any, int]:
        """Parent key -> count, for the keys present in *parents*."""
        keys = relation.validate().parent_keys(parents)
        if not keys:
            logger.debug("%r: no parent keys, skipping count query", relation)
            return {}
        rows = relation.build_count_query(self._engine, keys, scope).execute()
        logger.debug("%r: counted %d keys, %d non-empty", relation, len(keys), len(rows))
        return {row[COUNT_KEY]: int(row[COUNT_VALUE]) for row in rows}

    def attach_counts(
        self, parents: Sequence[Model], relation: Relation, scope: Scope | None = None
    ) -> None:
        """Set ``<relation>_count`` on every parent; zero when nothing matched."""
        for parent in parents:
            if not isinstance(parent, relation.owner):
                raise HeterogeneousBatchError(relation.owner.__name__, type(parent).__name__)
        counts = self.counts(parents, relation, scope)
        for parent in parents:
            key = parent.get(relation.local_column)
            parent.set_count(relation.name, counts.get(key, 0) if key is not None else 0)


def load_counts(engine: Engine, records: Sequence[Model], *names: PathSpec) -> Sequence[Model]:
    """Attach counts for *names* onto an already fetched, homogeneous batch."""
    if not records:
        return records
    aggregator = CountAggregator(engine)
    for relation, scope in plan_counts(type(records[0]), names):
        aggregator.attach_counts(records, relation, scope)
    return records
