"""MySQL adapter using mysql-connector-python."""

from __future__ import annotations

from typing import Any

from row_mapper.core.connection import ConnectionConfig
from row_mapper.core.enums import DatabaseBackend

_COLUMNS_SQL = (
    "SELECT "
    "`COLUMN_NAME` AS name, "
    "`DATA_TYPE` AS datatype, "
    "`IS_NULLABLE` = 'YES' AS nullable, "
    "`COLUMN_KEY` = 'PRI' AS is_primary_key "
    "FROM `information_schema`.`COLUMNS` "
    "WHERE `TABLE_SCHEMA` = ? AND `TABLE_NAME` = ? "
    "ORDER BY `ORDINAL_POSITION`"
)


class MysqlAdapter:
    """MySQL adapter using mysql-connector-python."""

    @property
    def backend(self) -> DatabaseBackend:
        return DatabaseBackend.MYSQL

    @property
    def paramstyle(self) -> str:
        return "format"

    @property
    def identifier_quote(self) -> str:
        return "`"

    @property
    def blob_types(self) -> frozenset[str]:
        return frozenset({"tinyblob", "blob", "mediumblob", "longblob"})

    @property
    def default_values_clause(self) -> str:
        return "() VALUES ()"

    def connect(self, config: ConnectionConfig) -> Any:
        import mysql.connector

        return mysql.connector.connect(
            host=config.host,
            port=config.port,
            user=config.user,
            password=config.password,
            database=config.database,
            autocommit=True,
        )

    def close(self, connection: Any) -> None:
        connection.close()

    def execute(self, connection: Any, sql: str, params: tuple[Any, ...] = ()) -> Any:
        """Execute SQL and return a buffered cursor with dictionary results."""
        cursor = connection.cursor(dictionary=True, buffered=True)
        cursor.execute(sql, params)
        return cursor

    def schema_name(self, config: ConnectionConfig) -> str:
        return config.database

    def catalog_query(self, schema: str, table: str) -> tuple[str, tuple[Any, ...]]:
        return _COLUMNS_SQL, (schema, table)

    def returning_clause(self, primary_key: str) -> str:
        return ""

    def generated_key(self, cursor: Any, primary_key: str) -> Any:
        return cursor.lastrowid
