"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from row_mapper.core.connection import ConnectionConfig, DataLayer

LIBRARY_SCHEMA = [
    "CREATE TABLE authors ("
    "id INTEGER PRIMARY KEY AUTOINCREMENT, "
    "name TEXT NOT NULL, "
    "email TEXT)",
    "CREATE TABLE books ("
    "id INTEGER PRIMARY KEY AUTOINCREMENT, "
    "title TEXT NOT NULL, "
    "author_id INTEGER REFERENCES authors(id), "
    "cover BLOB, "
    "pages INTEGER)",
    "CREATE TABLE events ("
    "id INTEGER PRIMARY KEY AUTOINCREMENT, "
    "label VARCHAR(40) NOT NULL, "
    "happened_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP)",
]


@pytest.fixture
def sqlite_config() -> ConnectionConfig:
    """SQLite in-memory connection config."""
    return ConnectionConfig(driver="sqlite", database=":memory:")


@pytest.fixture
def data_layer(sqlite_config: ConnectionConfig) -> Iterator[DataLayer]:
    """An open data layer over an empty in-memory database."""
    layer = DataLayer(sqlite_config)
    yield layer
    layer.close()


@pytest.fixture
def library(data_layer: DataLayer) -> DataLayer:
    """Data layer with the authors/books/events tables created.

    Usage:
        library.execute("INSERT INTO authors (name) VALUES (?)", ("Ann",))
    """
    for ddl in LIBRARY_SCHEMA:
        data_layer.execute(ddl)
    return data_layer


@pytest.fixture
def count_rows(library: DataLayer):
    """Helper returning the number of rows in a table."""

    def _count(table: str) -> int:
        row = library.fetch_one(f"SELECT COUNT(*) AS n FROM {table}")
        assert row is not None
        return int(row["n"])

    return _count
