"""Repository layer - DDD repository pattern."""

from __future__ import annotations

from row_orm.repository.base import Repository
from row_orm.repository.query import ModelQuery

__all__ = [
    "Repository",
    "ModelQuery",
]
