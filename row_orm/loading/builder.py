"""Eager load planner.

Turns relation paths such as ``"posts"``, ``"posts.comments"`` and
``{"comments": scope}`` into a :class:`LoadPlan` tree. Paths sharing a first
segment become one node; the remainder is planned against the related model.
Every segment is checked against the owning model when the plan is built.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Union

from row_orm.core.exceptions import ConflictingScopeError, InvalidRelationPathError
from row_orm.loading.plan import LoadPlan, LoadPlanNode
from row_orm.relations.base import Scope

if TYPE_CHECKING:
    from row_orm.mapping.record import Model

logger = logging.getLogger(__name__)

PathSpec = Union[str, Mapping[str, Scope]]


def split_path(path: str) -> list[str]:
    """Split a dotted path, rejecting empty segments."""
    if not isinstance(path, str) or not path:
        raise InvalidRelationPathError(str(path), "path must be a non-empty string")
    segments = [segment.strip() for segment in path.split(".")]
    if any(not segment for segment in segments):
        raise InvalidRelationPathError(path, "empty segment")
    return segments


def iter_path_specs(specs: Iterable[PathSpec]) -> Iterable[tuple[str, Scope | None]]:
    """Flatten strings and ``{path: scope}`` mappings into ``(path, scope)`` pairs."""
    for spec in specs:
        if isinstance(spec, Mapping):
            yield from spec.items()
        else:
            yield spec, None


class _Draft:
    """Mutable node used while paths are being merged."""

    def __init__(self, name: str, path: str, model: type[Model]) -> None:
        self.name = name
        self.path = path
        self.relation = model.relationship(name)
        self.scope: Scope | None = None
        self.children: dict[str, _Draft] = {}

    def set_scope(self, scope: Scope) -> None:
        if self.scope is not None and self.scope is not scope:
            raise ConflictingScopeError(self.path)
        self.scope = scope

    def freeze(self) -> LoadPlanNode:
        return LoadPlanNode(
            name=self.name,
            relation=self.relation,
            scope=self.scope,
            children=tuple(child.freeze() for child in self.children.values()),
        )


class LoadPlanBuilder:
    """Fluent builder for load plans.

    Example::

        plan = (
            LoadPlanBuilder(User)
            .include("posts.comments")
            .include("profile")
            .include("posts", scope=lambda q: q.where("published", True))
            .build()
        )
    """

    def __init__(self, model: type[Model]) -> None:
        self._model = model
        self._roots: dict[str, _Draft] = {}

    def include(self, path: str, scope: Scope | None = None) -> LoadPlanBuilder:
        """Add one dotted path; *scope* applies to its last segment only.

        Raises:
            InvalidRelationPathError: On empty segments.
            UnknownRelationError: If a segment is not declared on its model.
            UnresolvableModelError: If an intermediate related model is unknown.
        """
        segments = split_path(path)
        model = self._model
        drafts = self._roots
        draft: _Draft | None = None
        walked: list[str] = []
        for segment in segments:
            walked.append(segment)
            draft = drafts.get(segment)
            if draft is None:
                draft = _Draft(segment, ".".join(walked), model)
                drafts[segment] = draft
            model = draft.relation.related_model
            drafts = draft.children

        if scope is not None and draft is not None:
            draft.set_scope(scope)
        return self

    def include_all(self, specs: Iterable[PathSpec]) -> LoadPlanBuilder:
        for path, scope in iter_path_specs(specs):
            self.include(path, scope)
        return self

    def build(self) -> LoadPlan:
        """Freeze the merged paths into a LoadPlan."""
        plan = LoadPlan(
            model=self._model,
            nodes=tuple(draft.freeze() for draft in self._roots.values()),
        )
        logger.debug("Planned %s: %s", self._model.__name__, plan.paths())
        return plan


def plan(model: type[Model], paths: Iterable[PathSpec]) -> LoadPlan:
    """Build a LoadPlan for *model* from relation paths."""
    if isinstance(paths, (str, Mapping)):
        paths = [paths]
    return LoadPlanBuilder(model).include_all(paths).build()
