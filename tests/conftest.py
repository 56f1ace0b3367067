from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002

from diffchange.adapters.sqlalchemy import (
    SqlAlchemyFileCache,
    create_all_tables,
    shutdown,
    start_mappers,
    startup,
)

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("DIFFCHANGE_SERVER_URL", "http://diff.test")

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture
def scenario_payload() -> dict[str, object]:
    return {
        "format": "line",
        "records": [
            {
                "id": "A",
                "fields": [{"key": "name", "oldValue": "Bob", "newValue": "Bob"}],
            },
            {
                "id": "B",
                "fields": [{"key": "name", "oldValue": "Bob", "newValue": "Rob"}],
            },
            {
                "id": "C",
                "fields": [{"key": "name", "oldValue": None, "newValue": "New"}],
            },
        ],
    }


@pytest.fixture
def mass_payload() -> dict[str, object]:
    return {
        "format": "block",
        "records": [
            {
                "id": "record1",
                "fields": [
                    {"key": "status", "oldValue": "Active", "newValue": "Inactive"},
                    {"key": "owner", "oldValue": "ann", "newValue": "ann"},
                ],
            },
            {
                "id": "record2",
                "fields": [
                    {"key": "status", "oldValue": "Active", "newValue": "Inactive"},
                    {"key": "owner", "oldValue": "ann", "newValue": "bea"},
                ],
            },
        ],
    }


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    start_mappers()
    create_all_tables(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def file_cache(sqlite_engine: Engine) -> Iterator[SqlAlchemyFileCache]:
    startup(engine=sqlite_engine, force=True)
    try:
        yield SqlAlchemyFileCache()
    finally:
        shutdown()
