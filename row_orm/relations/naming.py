"""Key and table naming conventions.

These rules are part of the public contract: application SQL refers to the
tables and columns they produce.

    foreign_key_for("User")            -> "user_id"
    foreign_key_for("BlogPost")        -> "blogpost_id"
    joining_table("User", "Role")      -> "role_user"
    default_table("BlogPost")          -> "blog_posts"
"""

from __future__ import annotations

import re

from row_orm.core.exceptions import KeyConventionError
from row_orm.core.params import is_identifier
from row_orm.core.registry import basename

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def foreign_key_for(model_name: str) -> str:
    """Foreign key column pointing at *model_name*: lower-cased basename + ``_id``."""
    return basename(model_name).lower() + "_id"


def joining_table(first: str, second: str) -> str:
    """Pivot table for two models.

    The two class basenames are sorted as written (code point order, so
    case matters), joined with ``_``, and the result is lower-cased.
    """
    return "_".join(sorted([basename(first), basename(second)])).lower()


def default_table(model_name: str) -> str:
    """Table for a model without ``__table__``: snake_case basename + ``s``."""
    return _CAMEL_BOUNDARY.sub("_", basename(model_name)).lower() + "s"


def check_identifier(identifier: str, role: str) -> str:
    """Return *identifier* or raise KeyConventionError naming its *role*."""
    if not is_identifier(identifier):
        raise KeyConventionError(identifier, f"{role} must be a bare SQL identifier")
    return identifier
