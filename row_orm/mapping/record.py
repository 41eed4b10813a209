"""Record base class.

A Model instance is one fetched row: its column values, a write-once cache
of resolved relations, and any relation counts attached to it. Relations are
never fetched implicitly; reading an unloaded relation raises, and
:meth:`Model.load` is the explicit lazy path.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, ClassVar

from row_orm.core.exceptions import (
    DetachedRecordError,
    RelationNotLoadedError,
    RelationStateError,
    UnknownRelationError,
)
from row_orm.core.registry import ModelRegistry, default_registry
from row_orm.relations.base import Relation
from row_orm.relations.naming import check_identifier, default_table

if TYPE_CHECKING:
    from row_orm.core.engine import Engine

logger = logging.getLogger(__name__)

COUNT_SUFFIX = "_count"


@dataclass(frozen=True)
class RelationState:
    """Tagged relation value: ``loaded`` tells "not fetched" from "fetched, empty"."""

    loaded: bool
    value: Any = None


NOT_LOADED = RelationState(loaded=False)


class Model:
    """Base class for records.

    Subclasses declare ``__table__`` (default: snake_case plural of the class
    name), ``__primary_key__`` (default ``"id"``) and relations as class
    attributes. Pass ``registry=`` in the class statement to register into a
    registry other than the default one.
    """

    __table__: ClassVar[str]
    __primary_key__: ClassVar[str] = "id"
    __relations__: ClassVar[Mapping[str, Relation]] = MappingProxyType({})
    __registry__: ClassVar[ModelRegistry] = default_registry

    def __init_subclass__(cls, registry: ModelRegistry | None = None, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if registry is not None:
            cls.__registry__ = registry
        if "__table__" not in cls.__dict__:
            cls.__table__ = default_table(cls.__name__)
        check_identifier(cls.__table__, "__table__")
        check_identifier(cls.__primary_key__, "__primary_key__")

        relations: dict[str, Relation] = {}
        for klass in reversed(cls.__mro__):
            for name, value in vars(klass).items():
                if isinstance(value, Relation):
                    relations[name] = value.bind(cls, name)
        cls.__relations__ = MappingProxyType(relations)
        cls.__registry__.register(cls)

    def __init__(self, **attributes: Any) -> None:
        self.attributes: dict[str, Any] = dict(attributes)
        self._relations: dict[str, Any] = {}
        self._counts: dict[str, int] = {}
        self._engine: Engine | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any], engine: Engine | None = None) -> Model:
        """Build a record from a row dict, remembering *engine* for lazy loads."""
        record = cls(**row)
        record._engine = engine
        return record

    @classmethod
    def relationship(cls, name: str) -> Relation:
        """The bound descriptor for *name*.

        Raises:
            UnknownRelationError: If the model declares no such relation.
        """
        try:
            return cls.__relations__[name]
        except KeyError:
            raise UnknownRelationError(cls.__name__, name) from None

    # --- columns ---

    def __getitem__(self, column: str) -> Any:
        return self.attributes[column]

    def get(self, column: str, default: Any = None) -> Any:
        return self.attributes.get(column, default)

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal lookup fails: columns, then counts.
        attributes = self.__dict__.get("attributes")
        if attributes is not None and name in attributes:
            return attributes[name]
        counts = self.__dict__.get("_counts")
        if counts is not None and name.endswith(COUNT_SUFFIX):
            relation = name[: -len(COUNT_SUFFIX)]
            if relation in counts:
                return counts[relation]
        raise AttributeError(f"'{type(self).__name__}' record has no attribute '{name}'")

    @property
    def key(self) -> Any:
        """Primary key value."""
        return self.attributes.get(self.__primary_key__)

    # --- relations ---

    def get_relation(self, name: str) -> RelationState:
        """Tagged state of relation *name*; never performs I/O."""
        self.relationship(name)
        if name in self._relations:
            return RelationState(loaded=True, value=self._relations[name])
        return NOT_LOADED

    def relation_loaded(self, name: str) -> bool:
        return name in self._relations

    def related(self, name: str) -> Any:
        """Loaded value of relation *name*.

        Raises:
            RelationNotLoadedError: If the relation has not been resolved.
        """
        state = self.get_relation(name)
        if not state.loaded:
            raise RelationNotLoadedError(type(self).__name__, name)
        return state.value

    def set_relation(self, name: str, value: Any) -> None:
        """Attach a resolved value. Each relation can be set once per record."""
        self.relationship(name)
        if name in self._relations:
            raise RelationStateError(type(self).__name__, name)
        self._relations[name] = value

    @property
    def loaded_relations(self) -> Mapping[str, Any]:
        return MappingProxyType(self._relations)

    def load(self, name: str, engine: Engine | None = None) -> Any:
        """Resolve relation *name* for this record alone and return it.

        Already-loaded relations are returned from the cache without a query.
        """
        state = self.get_relation(name)
        if state.loaded:
            return state.value

        engine = engine or self._engine
        if engine is None:
            raise DetachedRecordError(type(self).__name__)

        relation = self.relationship(name)
        if self.get(relation.local_column) is None:
            value = relation.empty_value()
        else:
            rows = relation.build_single_query(engine, self).execute()
            related_model = relation.related_model
            records = [related_model.from_row(row, engine) for row in rows]
            value = records if relation.many else (records[0] if records else None)
        logger.debug("Lazy-loaded %s.%s", type(self).__name__, name)
        self.set_relation(name, value)
        return value

    # --- counts ---

    def set_count(self, name: str, count: int) -> None:
        self.relationship(name)
        self._counts[name] = count

    def get_count(self, name: str) -> int | None:
        """Attached count for relation *name*, or None if never counted."""
        return self._counts.get(name)

    @property
    def counts(self) -> Mapping[str, int]:
        return MappingProxyType(self._counts)

    # --- output ---

    def to_dict(self) -> dict[str, Any]:
        """Columns, ``<relation>_count`` values and loaded relations, recursively."""
        data = dict(self.attributes)
        for name, count in self._counts.items():
            data[name + COUNT_SUFFIX] = count
        for name, value in self._relations.items():
            if isinstance(value, list):
                data[name] = [item.to_dict() for item in value]
            else:
                data[name] = value.to_dict() if value is not None else None
        return data

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.__primary_key__}={self.key!r}>"
