"""HasOne / HasMany: the related table carries a key pointing at the owner."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union

from row_orm.core.enums import RelationKind
from row_orm.relations.base import Relation
from row_orm.relations.naming import check_identifier, foreign_key_for


@dataclass(frozen=True, repr=False)
class HasOne(Relation):
    """One related row whose ``foreign_key`` equals the owner's ``local_key``.

    Defaults: ``foreign_key = <owner>_id``, ``local_key`` = owner primary key.
    """

    kind = RelationKind.ONE_TO_ONE

    foreign_key: Optional[str] = None
    local_key: Optional[str] = None

    def _bind_keys(self) -> None:
        self._set(
            foreign_key=check_identifier(
                self.foreign_key or foreign_key_for(self.owner.__name__), "foreign_key"
            ),
            local_key=check_identifier(
                self.local_key or self.owner.__primary_key__, "local_key"
            ),
        )

    @property
    def local_column(self) -> str:
        return self.local_key  # type: ignore[return-value]

    @property
    def remote_column(self) -> str:
        return f"{self.related_model.__table__}.{self.foreign_key}"

    @property
    def match_column(self) -> str:
        """Column on related rows compared against parent keys."""
        return self.foreign_key  # type: ignore[return-value]


@dataclass(frozen=True, repr=False)
class HasMany(HasOne):
    """All related rows whose ``foreign_key`` equals the owner's ``local_key``."""

    kind = RelationKind.ONE_TO_MANY


def has_one(
    related: Union[str, type],
    foreign_key: Optional[str] = None,
    local_key: Optional[str] = None,
) -> Any:
    """Declare a one-to-one relation."""
    return HasOne(related, foreign_key=foreign_key, local_key=local_key)


def has_many(
    related: Union[str, type],
    foreign_key: Optional[str] = None,
    local_key: Optional[str] = None,
) -> Any:
    """Declare a one-to-many relation."""
    return HasMany(related, foreign_key=foreign_key, local_key=local_key)
