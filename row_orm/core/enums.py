"""Enumerations shared across the package."""

from __future__ import annotations

from enum import Enum


class DatabaseBackend(Enum):
    """Supported database backends."""

    SQLITE = "sqlite"
    POSTGRESQL = "postgresql"


class RelationKind(Enum):
    """Cardinality of a declared relationship."""

    ONE_TO_ONE = "one_to_one"
    ONE_TO_MANY = "one_to_many"
    MANY_TO_ONE = "many_to_one"
    MANY_TO_MANY = "many_to_many"

    @property
    def is_many(self) -> bool:
        """True when the loaded value is a list."""
        return self in (RelationKind.ONE_TO_MANY, RelationKind.MANY_TO_MANY)
