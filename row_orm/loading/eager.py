"""Breadth-first eager loader.

Executes a LoadPlan level by level. Every node at depth *d* is resolved for
the full batch before any node at depth *d + 1*, and a child node's parents
are all records its parent node produced, across every parent at once. This
keeps the query count per plan node constant regardless of batch size.

Results are staged and attached only after the last query succeeds, so an
error anywhere leaves every record exactly as it was.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, Any

from row_orm.core.exceptions import HeterogeneousBatchError
from row_orm.loading.builder import PathSpec, plan
from row_orm.loading.plan import LoadPlan, LoadPlanNode
from row_orm.loading.resolver import BatchResolver

if TYPE_CHECKING:
    from row_orm.core.engine import Engine
    from row_orm.mapping.record import Model

logger = logging.getLogger(__name__)


def _flatten(values: Iterable[Any]) -> list[Model]:
    """Concatenate related values into one batch, de-duplicated by identity."""
    seen: set[int] = set()
    batch: list[Model] = []
    for value in values:
        items = value if isinstance(value, list) else ([] if value is None else [value])
        for item in items:
            if id(item) not in seen:
                seen.add(id(item))
                batch.append(item)
    return batch


class EagerLoader:
    """Runs load plans against an Engine."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._resolver = BatchResolver(engine)

    def load(self, records: Sequence[Model], load_plan: LoadPlan) -> Sequence[Model]:
        """Resolve every node of *load_plan* for *records* and return them."""
        if not records or not load_plan:
            return records
        for record in records:
            if not isinstance(record, load_plan.model):
                raise HeterogeneousBatchError(load_plan.model.__name__, type(record).__name__)

        # (id(record), relation name) -> (record, relation name, value)
        staged: dict[tuple[int, str], tuple[Model, str, Any]] = {}
        level: list[tuple[tuple[LoadPlanNode, ...], list[Model]]] = [
            (load_plan.nodes, list(records))
        ]
        depth = 0
        while level:
            depth += 1
            next_level: list[tuple[tuple[LoadPlanNode, ...], list[Model]]] = []
            for nodes, parents in level:
                for node in nodes:
                    children = self._resolve_node(node, parents, staged)
                    if node.children and children:
                        next_level.append((node.children, children))
            logger.debug("Resolved depth %d of %s", depth, load_plan.model.__name__)
            level = next_level

        for record, name, value in staged.values():
            record.set_relation(name, value)
        return records

    def _resolve_node(
        self,
        node: LoadPlanNode,
        parents: list[Model],
        staged: dict[tuple[int, str], tuple[Model, str, Any]],
    ) -> list[Model]:
        """Stage *node* for *parents*; return the next level's parent batch."""
        unstaged = [parent for parent in parents if (id(parent), node.name) not in staged]
        for parent, value in self._resolver.match(unstaged, node.relation, node.scope):
            staged[(id(parent), node.name)] = (parent, node.name, value)

        values = []
        for parent in parents:
            entry = staged.get((id(parent), node.name))
            if entry is not None:
                values.append(entry[2])
            elif parent.relation_loaded(node.name):
                values.append(parent.related(node.name))
        return _flatten(values)


def load_relations(
    engine: Engine, records: Sequence[Model], *paths: PathSpec
) -> Sequence[Model]:
    """Eager-load *paths* onto an already fetched, homogeneous batch."""
    if not records:
        return records
    return EagerLoader(engine).load(records, plan(type(records[0]), paths))
