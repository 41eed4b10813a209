"""Load plan data classes.

Frozen dataclasses describing which relations to resolve and in what shape.
Built per query by :class:`~row_orm.loading.builder.LoadPlanBuilder`; used by
:class:`~row_orm.loading.eager.EagerLoader` at execution time.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from row_orm.relations.base import Relation, Scope

if TYPE_CHECKING:
    from row_orm.mapping.record import Model


@dataclass(frozen=True)
class LoadPlanNode:
    """One relation to resolve, plus the relations to resolve beneath it.

    ``scope`` applies to this node's query only; children never inherit it.
    """

    name: str
    relation: Relation
    scope: Optional[Scope] = None
    children: tuple[LoadPlanNode, ...] = field(default_factory=tuple)

    @property
    def depth(self) -> int:
        """Height of the subtree rooted here (1 for a leaf)."""
        return 1 + max((child.depth for child in self.children), default=0)


@dataclass(frozen=True)
class LoadPlan:
    """Compiled load plan for one root model."""

    model: type[Model]
    nodes: tuple[LoadPlanNode, ...] = field(default_factory=tuple)

    @property
    def depth(self) -> int:
        return max((node.depth for node in self.nodes), default=0)

    def levels(self) -> Iterator[tuple[LoadPlanNode, ...]]:
        """Yield nodes grouped by nesting depth, shallowest first."""
        level = self.nodes
        while level:
            yield level
            level = tuple(child for node in level for child in node.children)

    def paths(self) -> list[str]:
        """Dotted paths of every node, depth-first."""
        result: list[str] = []

        def _walk(nodes: tuple[LoadPlanNode, ...], prefix: str) -> None:
            for node in nodes:
                path = prefix + node.name
                result.append(path)
                _walk(node.children, path + ".")

        _walk(self.nodes, "")
        return result

    def __bool__(self) -> bool:
        return bool(self.nodes)
