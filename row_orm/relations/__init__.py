"""Relationship declarations."""

from __future__ import annotations

from row_orm.relations.base import Relation, Scope
from row_orm.relations.belongs_to import BelongsTo, belongs_to
from row_orm.relations.belongs_to_many import BelongsToMany, belongs_to_many
from row_orm.relations.has import HasMany, HasOne, has_many, has_one
from row_orm.relations.naming import default_table, foreign_key_for, joining_table

__all__ = [
    "Relation",
    "Scope",
    "HasOne",
    "HasMany",
    "BelongsTo",
    "BelongsToMany",
    "has_one",
    "has_many",
    "belongs_to",
    "belongs_to_many",
    "foreign_key_for",
    "joining_table",
    "default_table",
]
