"""Mapping layer - transform row dicts into records."""

from __future__ import annotations

from row_orm.mapping.model import ModelMapper
from row_orm.mapping.protocol import Mapper
from row_orm.mapping.record import NOT_LOADED, Model, RelationState

__all__ = [
    "Mapper",
    "ModelMapper",
    "Model",
    "RelationState",
    "NOT_LOADED",
]
