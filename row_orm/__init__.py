"""RowORM - relationship declarations, eager loading and counts for row mapping."""

from __future__ import annotations

from row_orm.core.connection import ConnectionConfig, ConnectionManager
from row_orm.core.engine import Engine
from row_orm.core.enums import DatabaseBackend, RelationKind
from row_orm.core.exceptions import (
    AdapterError,
    ColumnMismatchError,
    ConfigurationError,
    ConflictingScopeError,
    ConnectionError,  # noqa: A004
    DetachedRecordError,
    DuplicateModelError,
    ExecutionError,
    HeterogeneousBatchError,
    InvalidRelationPathError,
    KeyConventionError,
    MappingError,
    MultipleRowsError,
    PoolError,
    QueryBuildError,
    QueryExecutionError,
    RelationNotLoadedError,
    RelationStateError,
    RowORMError,
    UnknownRelationError,
    UnresolvableModelError,
)
from row_orm.core.query import Query
from row_orm.core.registry import ModelRegistry, default_registry
from row_orm.loading import (
    BatchResolver,
    CountAggregator,
    EagerLoader,
    LoadPlan,
    LoadPlanBuilder,
    LoadPlanNode,
    load_counts,
    load_relations,
    plan,
)
from row_orm.mapping import NOT_LOADED, Model, ModelMapper, RelationState
from row_orm.relations import (
    BelongsTo,
    BelongsToMany,
    HasMany,
    HasOne,
    Relation,
    belongs_to,
    belongs_to_many,
    has_many,
    has_one,
)
from row_orm.repository import ModelQuery, Repository

__version__ = "0.1.0"

__all__ = [
    # Connection
    "ConnectionConfig",
    "ConnectionManager",
    # Engine
    "Engine",
    "Query",
    # Models
    "Model",
    "ModelMapper",
    "ModelRegistry",
    "default_registry",
    "RelationState",
    "NOT_LOADED",
    # Relations
    "Relation",
    "HasOne",
    "HasMany",
    "BelongsTo",
    "BelongsToMany",
    "has_one",
    "has_many",
    "belongs_to",
    "belongs_to_many",
    # Loading
    "LoadPlan",
    "LoadPlanNode",
    "LoadPlanBuilder",
    "plan",
    "BatchResolver",
    "EagerLoader",
    "CountAggregator",
    "load_relations",
    "load_counts",
    # Repository
    "Repository",
    "ModelQuery",
    # Enums
    "DatabaseBackend",
    "RelationKind",
    # Exceptions
    "RowORMError",
    "ConfigurationError",
    "UnknownRelationError",
    "UnresolvableModelError",
    "DuplicateModelError",
    "KeyConventionError",
    "InvalidRelationPathError",
    "ConflictingScopeError",
    "ExecutionError",
    "QueryBuildError",
    "QueryExecutionError",
    "MultipleRowsError",
    "MappingError",
    "ColumnMismatchError",
    "HeterogeneousBatchError",
    "RelationStateError",
    "RelationNotLoadedError",
    "DetachedRecordError",
    "AdapterError",
    "ConnectionError",
    "PoolError",
]
