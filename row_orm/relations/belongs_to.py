"""BelongsTo: the owner carries a key pointing at the related row."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union

from row_orm.core.enums import RelationKind
from row_orm.relations.base import Relation
from row_orm.relations.naming import check_identifier, foreign_key_for


@dataclass(frozen=True, repr=False)
class BelongsTo(Relation):
    """The related row whose ``owner_key`` equals the owner's ``foreign_key``.

    Defaults: ``foreign_key = <related>_id``, ``owner_key = "id"``.
    """

    kind = RelationKind.MANY_TO_ONE

    foreign_key: Optional[str] = None
    owner_key: Optional[str] = None

    def _bind_keys(self) -> None:
        self._set(
            foreign_key=check_identifier(
                self.foreign_key or foreign_key_for(self.related_name), "foreign_key"
            ),
            owner_key=check_identifier(self.owner_key or "id", "owner_key"),
        )

    @property
    def local_column(self) -> str:
        return self.foreign_key  # type: ignore[return-value]

    @property
    def remote_column(self) -> str:
        return f"{self.related_model.__table__}.{self.owner_key}"

    @property
    def match_column(self) -> str:
        return self.owner_key  # type: ignore[return-value]


def belongs_to(
    related: Union[str, type],
    foreign_key: Optional[str] = None,
    owner_key: Optional[str] = None,
) -> Any:
    """Declare a many-to-one relation."""
    return BelongsTo(related, foreign_key=foreign_key, owner_key=owner_key)
