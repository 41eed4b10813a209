"""SQL parameter normalization.

Converts `:name` parameter syntax to driver-specific format.
Handles string literal exclusion and PostgreSQL `::typecast` syntax.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Any

# Matches :name but not ::typecast and not inside words
_PARAM_PATTERN = re.compile(r"(?<![:\w]):([a-zA-Z_]\w*)")

# Matches single-quoted string literals (with escaped quotes handled)
_STRING_LITERAL_PATTERN = re.compile(r"'(?:[^'\\]|\\.)*'")

_IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def normalize_params(sql: str, paramstyle: str) -> str:
    """Convert :name parameters to the target param style.

    Args:
        sql: SQL string with :name parameters.
        paramstyle: Target style - 'named' (no conversion) or 'pyformat' (%(name)s).

    Returns:
        SQL with parameters converted to the target style.
    """
    if paramstyle == "named":
        return sql
    return _convert_to_pyformat(sql)


@lru_cache(maxsize=256)
def _convert_to_pyformat(sql: str) -> str:
    """Convert :name params to %(name)s, preserving string literals."""
    parts: list[str] = []
    last_end = 0

    for match in _STRING_LITERAL_PATTERN.finditer(sql):
        start, end = match.span()
        if start > last_end:
            parts.append(_PARAM_PATTERN.sub(r"%(\1)s", sql[last_end:start]))
        parts.append(match.group())
        last_end = end

    if last_end < len(sql):
        parts.append(_PARAM_PATTERN.sub(r"%(\1)s", sql[last_end:]))

    return "".join(parts)


def is_identifier(name: str) -> bool:
    """Return True if *name* is a bare SQL identifier (no quoting needed)."""
    return bool(_IDENTIFIER_PATTERN.match(name))


def is_column_reference(name: str) -> bool:
    """Return True for ``column`` or ``table.column`` references."""
    parts = name.split(".")
    return len(parts) <= 2 and all(is_identifier(part) for part in parts)


def placeholder_names(sql: str) -> list[str]:
    """List the distinct :name placeholders in *sql*, in order of appearance."""
    names: list[str] = []
    last_end = 0
    segments: list[str] = []
    for match in _STRING_LITERAL_PATTERN.finditer(sql):
        segments.append(sql[last_end : match.start()])
        last_end = match.end()
    segments.append(sql[last_end:])
    for segment in segments:
        for name in _PARAM_PATTERN.findall(segment):
            if name not in names:
                names.append(name)
    return names


def coerce_params(params: dict[str, Any] | None) -> dict[str, Any]:
    """Return a fresh dict for *params* (``None`` becomes empty)."""
    return dict(params) if params else {}
