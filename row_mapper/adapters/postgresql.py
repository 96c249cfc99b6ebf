"""PostgreSQL adapter using psycopg (v3+)."""

from __future__ import annotations

from typing import Any

from row_mapper.core.connection import ConnectionConfig
from row_mapper.core.enums import DatabaseBackend

_COLUMNS_SQL = (
    "SELECT "
    "c.column_name AS name, "
    "c.data_type AS datatype, "
    "c.is_nullable = 'YES' AS nullable, "
    "k.column_name IS NOT NULL AS is_primary_key "
    "FROM information_schema.columns c "
    "LEFT JOIN ("
    "SELECT kcu.table_schema, kcu.table_name, kcu.column_name "
    "FROM information_schema.key_column_usage kcu "
    "JOIN information_schema.table_constraints tc "
    "ON tc.constraint_name = kcu.constraint_name "
    "AND tc.constraint_schema = kcu.constraint_schema "
    "AND tc.table_name = kcu.table_name "
    "WHERE tc.constraint_type = 'PRIMARY KEY'"
    ") k ON k.table_schema = c.table_schema "
    "AND k.table_name = c.table_name "
    "AND k.column_name = c.column_name "
    "WHERE c.table_schema = ? AND c.table_name = ? "
    "ORDER BY c.ordinal_position"
)


def _build_conninfo(config: ConnectionConfig) -> str:
    """Build a libpq connection string from config fields."""
    parts: list[str] = []
    if config.host is not None:
        parts.append(f"host={config.host}")
    if config.port is not None:
        parts.append(f"port={config.port}")
    if config.user is not None:
        parts.append(f"user={config.user}")
    if config.password is not None:
        parts.append(f"password={config.password}")
    parts.append(f"dbname={config.database}")
    return " ".join(parts)


class PostgresqlAdapter:
    """PostgreSQL adapter using psycopg (v3+)."""

    @property
    def backend(self) -> DatabaseBackend:
        return DatabaseBackend.POSTGRESQL

    @property
    def paramstyle(self) -> str:
        return "format"

    @property
    def identifier_quote(self) -> str:
        return '"'

    @property
    def blob_types(self) -> frozenset[str]:
        return frozenset({"bytea"})

    @property
    def default_values_clause(self) -> str:
        return "DEFAULT VALUES"

    def connect(self, config: ConnectionConfig) -> Any:
        import psycopg
        import psycopg.rows

        return psycopg.connect(
            _build_conninfo(config),
            row_factory=psycopg.rows.dict_row,
            autocommit=True,
        )

    def close(self, connection: Any) -> None:
        connection.close()

    def execute(self, connection: Any, sql: str, params: tuple[Any, ...] = ()) -> Any:
        return connection.execute(sql, params)

    def schema_name(self, config: ConnectionConfig) -> str:
        return str(config.extra.get("schema", "public"))

    def catalog_query(self, schema: str, table: str) -> tuple[str, tuple[Any, ...]]:
        return _COLUMNS_SQL, (schema, table)

    def returning_clause(self, primary_key: str) -> str:
        return f" RETURNING {primary_key}"

    def generated_key(self, cursor: Any, primary_key: str) -> Any:
        row = cursor.fetchone()
        if row is None:
            return None
        if isinstance(row, dict):
            return next(iter(row.values()))
        return row[0]
