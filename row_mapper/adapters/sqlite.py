"""SQLite adapter using stdlib sqlite3."""

from __future__ import annotations

import sqlite3
from typing import Any

from row_mapper.core.connection import ConnectionConfig
from row_mapper.core.enums import DatabaseBackend


class SqliteAdapter:
    """SQLite adapter using stdlib sqlite3.

    Connections run with ``isolation_level=None`` so every statement
    autocommits unless the data layer issued an explicit BEGIN.
    """

    @property
    def backend(self) -> DatabaseBackend:
        return DatabaseBackend.SQLITE

    @property
    def paramstyle(self) -> str:
        return "qmark"

    @property
    def identifier_quote(self) -> str:
        return "`"

    @property
    def blob_types(self) -> frozenset[str]:
        return frozenset({"blob"})

    @property
    def default_values_clause(self) -> str:
        return "DEFAULT VALUES"

    def connect(self, config: ConnectionConfig) -> sqlite3.Connection:
        conn = sqlite3.connect(config.database, isolation_level=None)
        conn.row_factory = sqlite3.Row
        if config.extra.get("foreign_keys", True):
            conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def close(self, connection: sqlite3.Connection) -> None:
        connection.close()

    def execute(
        self,
        connection: sqlite3.Connection,
        sql: str,
        params: tuple[Any, ...] = (),
    ) -> sqlite3.Cursor:
        return connection.execute(sql, params)

    def schema_name(self, config: ConnectionConfig) -> str:
        return "main"

    def catalog_query(self, schema: str, table: str) -> tuple[str, tuple[Any, ...]]:
        # pragma_table_info only looks at the main schema
        sql = (
            'SELECT name, type AS datatype, "notnull" = 0 AS nullable, '
            "pk > 0 AS is_primary_key "
            "FROM pragma_table_info(?) ORDER BY cid"
        )
        return sql, (table,)

    def returning_clause(self, primary_key: str) -> str:
        return ""

    def generated_key(self, cursor: sqlite3.Cursor, primary_key: str) -> Any:
        return cursor.lastrowid
