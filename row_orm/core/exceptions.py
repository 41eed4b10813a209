"""RowORM exception hierarchy.

All exceptions are RowORM-specific. Raw driver exceptions are wrapped once
by the engine and never exposed to callers.
"""

from __future__ import annotations


class RowORMError(Exception):
    """Base exception for all RowORM errors."""


# --- Configuration ---


class ConfigurationError(RowORMError):
    """Base for declaration and planning errors.

    These are raised synchronously when a model is declared or a load plan
    is built, never while rows are being matched.
    """


class UnknownRelationError(ConfigurationError):
    """Raised when a relation name is not declared on a model."""

    def __init__(self, model_name: str, relation_name: str) -> None:
        self.model_name = model_name
        self.relation_name = relation_name
        super().__init__(f"Model '{model_name}' has no relation '{relation_name}'")


class UnresolvableModelError(ConfigurationError):
    """Raised when a related model name is not in the registry."""

    def __init__(self, model_name: str) -> None:
        self.model_name = model_name
        super().__init__(f"Model not registered: '{model_name}'")


class DuplicateModelError(ConfigurationError):
    """Raised when two different classes register under the same name."""

    def __init__(self, model_name: str) -> None:
        self.model_name = model_name
        super().__init__(f"Duplicate model name '{model_name}'")


class KeyConventionError(ConfigurationError):
    """Raised when a declared or derived identifier is not a valid SQL name."""

    def __init__(self, identifier: str, detail: str) -> None:
        self.identifier = identifier
        super().__init__(f"Invalid identifier '{identifier}': {detail}")


class InvalidRelationPathError(ConfigurationError):
    """Raised for malformed relation paths (empty segments, etc.)."""

    def __init__(self, path: str, detail: str) -> None:
        self.path = path
        super().__init__(f"Invalid relation path '{path}': {detail}")


class ConflictingScopeError(ConfigurationError):
    """Raised when one plan node is given two different scopes."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Relation path '{path}' has more than one scope")


# --- Execution ---


class ExecutionError(RowORMError):
    """Base for query building and execution errors."""


class QueryBuildError(ExecutionError):
    """Raised when a Query is assembled from invalid parts."""


class QueryExecutionError(ExecutionError):
    """Raised when the database driver rejects a statement."""

    def __init__(self, label: str, detail: str) -> None:
        self.label = label
        super().__init__(f"Query execution failed for '{label}': {detail}")


class MultipleRowsError(ExecutionError):
    """Raised when fetch_one encounters more than one row."""

    def __init__(self, label: str, row_count: int) -> None:
        self.label = label
        self.row_count = row_count
        super().__init__(f"fetch_one for '{label}' returned {row_count} rows (expected 0 or 1)")


# --- Mapping ---


class MappingError(RowORMError):
    """Base for mapping and record-state errors."""


class ColumnMismatchError(MappingError):
    """Raised when required fields cannot be mapped from row columns."""

    def __init__(self, target_class: str, missing_fields: list[str]) -> None:
        self.target_class = target_class
        self.missing_fields = missing_fields
        super().__init__(f"Cannot map to {target_class}: missing fields {missing_fields}")


class HeterogeneousBatchError(MappingError):
    """Raised when a parent batch mixes record types."""

    def __init__(self, expected: str, found: str) -> None:
        self.expected = expected
        self.found = found
        super().__init__(f"Batch of '{expected}' records contains a '{found}'")


class RelationStateError(MappingError):
    """Raised when a loaded relation would be overwritten."""

    def __init__(self, model_name: str, relation_name: str) -> None:
        self.model_name = model_name
        self.relation_name = relation_name
        super().__init__(
            f"Relation '{relation_name}' on '{model_name}' is already loaded; "
            "fetch the record again to reload it"
        )


class RelationNotLoadedError(MappingError):
    """Raised when an unloaded relation is read without an explicit load."""

    def __init__(self, model_name: str, relation_name: str) -> None:
        self.model_name = model_name
        self.relation_name = relation_name
        super().__init__(
            f"Relation '{relation_name}' on '{model_name}' is not loaded. "
            "Use with_relations() or record.load()"
        )


class DetachedRecordError(MappingError):
    """Raised when lazy loading is attempted without an engine."""

    def __init__(self, model_name: str) -> None:
        self.model_name = model_name
        super().__init__(f"'{model_name}' record is not bound to an engine")


# --- Adapter ---


class AdapterError(RowORMError):
    """Base for adapter errors."""


class ConnectionError(AdapterError):  # noqa: A001
    """Raised on connection failures."""


class PoolError(AdapterError):
    """Raised on connection pool failures."""
