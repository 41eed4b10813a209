"""Batch resolver.

Resolves one relation for a whole batch of parents with a fixed number of
queries: one for has-one, has-many and belongs-to, two for belongs-to-many
(related rows, then pivot rows). Results are grouped into a dictionary keyed
by join value and handed back to each parent.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from row_orm.core.enums import RelationKind
from row_orm.core.exceptions import HeterogeneousBatchError
from row_orm.mapping.model import ModelMapper
from row_orm.relations.base import PIVOT_PARENT, PIVOT_RELATED, Relation, Scope

if TYPE_CHECKING:
    from row_orm.core.engine import Engine
    from row_orm.mapping.record import Model

logger = logging.getLogger(__name__)

Assignment = tuple["Model", Any]


def pending_parents(parents: Iterable[Model], relation: Relation) -> list[Model]:
    """Parents that still need *relation*, de-duplicated by identity, in order.

    Raises:
        HeterogeneousBatchError: If a parent is not an instance of the owner.
    """
    owner = relation.owner
    seen: set[int] = set()
    pending: list[Model] = []
    for parent in parents:
        if not isinstance(parent, owner):
            raise HeterogeneousBatchError(owner.__name__, type(parent).__name__)
        if id(parent) in seen or parent.relation_loaded(relation.name):
            continue
        seen.add(id(parent))
        pending.append(parent)
    return pending


def build_dictionary(records: list[Model], column: str, many: bool) -> dict[Any, Any]:
    """Group *records* by *column*.

    For to-one relations the first record seen for a key wins; later ones
    are dropped.
    """
    dictionary: dict[Any, Any] = {}
    for record in records:
        key = record.get(column)
        if key is None:
            continue
        if many:
            dictionary.setdefault(key, []).append(record)
        else:
            dictionary.setdefault(key, record)
    return dictionary


class BatchResolver:
    """Resolves relations for parent batches against an Engine."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def resolve(
        self, parents: Iterable[Model], relation: Relation, scope: Scope | None = None
    ) -> None:
        """Resolve *relation* and attach the results to each parent in place."""
        for parent, value in self.match(parents, relation, scope):
            parent.set_relation(relation.name, value)

    def match(
        self, parents: Iterable[Model], relation: Relation, scope: Scope | None = None
    ) -> list[Assignment]:
        """Run the batch queries and return ``(parent, value)`` pairs.

        Nothing is attached; parents that already hold the relation are
        skipped. Every returned value is explicit: a record, a list, ``None``
        or ``[]``.
        """
        pending = pending_parents(parents, relation.validate())
        if not pending:
            return []

        keys = relation.parent_keys(pending)
        if not keys:
            logger.debug("%r: no parent keys, skipping query", relation)
            return [(parent, relation.empty_value()) for parent in pending]

        if relation.kind is RelationKind.MANY_TO_MANY:
            dictionary = self._pivot_dictionary(relation, pending, keys, scope)
        else:
            rows = relation.build_eager_query(self._engine, pending, scope).execute()
            records = self._map(relation, rows)
            dictionary = build_dictionary(records, relation.match_column, relation.many)
            logger.debug("%r: %d keys, %d rows", relation, len(keys), len(rows))

        assignments: list[Assignment] = []
        for parent in pending:
            key = parent.get(relation.local_column)
            found = dictionary.get(key) if key is not None else None
            if found is None:
                value = relation.empty_value()
            elif relation.many:
                value = list(found)
            else:
                value = found
            assignments.append((parent, value))
        return assignments

    def _map(self, relation: Relation, rows: list[dict[str, Any]]) -> list[Model]:
        mapper: ModelMapper[Model] = ModelMapper(relation.related_model, engine=self._engine)
        return mapper.map_many(rows)

    def _pivot_dictionary(
        self,
        relation: Any,
        pending: list[Model],
        keys: list[Any],
        scope: Scope | None,
    ) -> dict[Any, list[Model]]:
        """Parent key -> related records, routed through the pivot rows."""
        rows = relation.build_eager_query(self._engine, pending, scope).execute()
        pivots = relation.build_pivot_query(self._engine, keys).execute()
        logger.debug(
            "%r: %d keys, %d rows, %d pivot rows", relation, len(keys), len(rows), len(pivots)
        )

        # A related row joined to several parents comes back once per parent;
        # keep one record per related key.
        related: dict[Any, Model] = {}
        for record in self._map(relation, rows):
            related.setdefault(record.get(relation.match_column), record)

        parents_by_related: dict[Any, list[Any]] = {}
        for pivot in pivots:
            parents_by_related.setdefault(pivot[PIVOT_RELATED], []).append(pivot[PIVOT_PARENT])

        dictionary: dict[Any, list[Model]] = {}
        for related_key, record in related.items():
            for parent_key in parents_by_related.get(related_key, ()):
                dictionary.setdefault(parent_key, []).append(record)
        return dictionary
