"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

import pytest

from row_orm.core.connection import ConnectionConfig
from row_orm.core.engine import Engine

from tests.models import SCHEMA, SEED


@pytest.fixture
def sqlite_config() -> ConnectionConfig:
    """SQLite in-memory connection config (one connection, one database)."""
    return ConnectionConfig(driver="sqlite", database=":memory:", pool_size=1)


@pytest.fixture
def engine(sqlite_config: ConnectionConfig) -> Iterator[Engine]:
    """Engine over an in-memory database with the blog schema and seed rows."""
    eng = Engine.from_config(sqlite_config)
    for statement in SCHEMA + SEED:
        eng.execute(statement)
    yield eng
    eng.close()


@pytest.fixture
def statements(engine: Engine) -> Iterator[list[str]]:
    """SQL text of every statement the engine runs during the test."""
    captured: list[str] = []

    def _capture(sql: str, params: dict[str, Any]) -> None:
        captured.append(sql)

    engine.add_listener(_capture)
    yield captured
    engine.remove_listener(_capture)
