"""Connection configuration and the data layer.

ConnectionConfig and MapperSettings are Pydantic models for type-safe
configuration. DataLayer owns one driver connection through an adapter and
is the only object that executes SQL.
"""

from __future__ import annotations

import importlib
import logging
from typing import Any

from pydantic import BaseModel

from row_mapper.core.enums import DecodePolicy
from row_mapper.core.exceptions import (
    AdapterError,
    QueryExecutionError,
    TransactionStateError,
)
from row_mapper.core.params import coerce_params, count_placeholders, normalize_placeholders
from row_mapper.core.transaction import TransactionManager

logger = logging.getLogger(__name__)


class ConnectionConfig(BaseModel):
    """Configuration for database connections."""

    driver: str
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str
    extra: dict[str, Any] = {}


class MapperSettings(BaseModel):
    """Behaviour switches shared by every registry bound to a data layer."""

    decode_errors: DecodePolicy = DecodePolicy.NULLIFY
    log_statements: bool = False


# Adapter module mapping: driver name → (module_path, class_name)
_ADAPTER_MAP: dict[str, tuple[str, str]] = {
    "sqlite": ("row_mapper.adapters.sqlite", "SqliteAdapter"),
    "postgresql": ("row_mapper.adapters.postgresql", "PostgresqlAdapter"),
    "mysql": ("row_mapper.adapters.mysql", "MysqlAdapter"),
}


def _load_adapter(driver: str) -> Any:
    """Load an adapter by driver name."""
    driver_lower = driver.lower()
    if driver_lower not in _ADAPTER_MAP:
        raise AdapterError(f"Unsupported database driver: {driver}")

    module_path, cls_name = _ADAPTER_MAP[driver_lower]
    try:
        module = importlib.import_module(module_path)
        return getattr(module, cls_name)()
    except (ImportError, AttributeError) as e:
        raise AdapterError(f"Failed to load adapter for '{driver}': {e}") from e


def rows_to_dicts(cursor: Any) -> list[dict[str, Any]]:
    """Convert cursor results to list of dicts.

    Handles both tuple-like rows and dict-like rows from different adapters.
    """
    if cursor.description is None:
        return []
    columns = [desc[0] for desc in cursor.description]
    rows = cursor.fetchall()
    if not rows:
        return []

    # Already dicts (psycopg dict_row, MySQL dictionary cursor)
    if isinstance(rows[0], dict):
        return [dict(row) for row in rows]

    return [dict(zip(columns, row, strict=True)) for row in rows]


class Statement:
    """A reusable parameterized statement bound to one data layer.

    The SQL is written with ``?`` placeholders and normalized to the
    driver's paramstyle once, when the statement is prepared.
    """

    def __init__(self, data_layer: DataLayer, sql: str) -> None:
        self._data_layer = data_layer
        self.sql = sql
        self.native_sql = normalize_placeholders(sql, data_layer.adapter.paramstyle)
        self.param_count = count_placeholders(sql)

    def execute(self, params: Any = None) -> Any:
        """Execute and return the driver cursor."""
        values = coerce_params(params)
        if len(values) != self.param_count:
            raise QueryExecutionError(
                self.sql,
                f"expected {self.param_count} parameters, got {len(values)}",
            )
        return self._data_layer.run(self.native_sql, values, label=self.sql)

    def fetch_all(self, params: Any = None) -> list[dict[str, Any]]:
        """Execute and return every row as a dict."""
        cursor = self.execute(params)
        try:
            return rows_to_dicts(cursor)
        except Exception as e:
            raise QueryExecutionError(self.sql, str(e)) from e

    def fetch_one(self, params: Any = None) -> dict[str, Any] | None:
        """Execute and return the first row, or None."""
        rows = self.fetch_all(params)
        return rows[0] if rows else None

    def __repr__(self) -> str:
        return f"Statement({self.sql!r})"


class DataLayer:
    """Owns one database connection and executes every statement.

    Statements autocommit unless a transaction was opened with
    :meth:`begin` or :meth:`transaction`.

    Args:
        config: Connection configuration.
        settings: Mapper behaviour shared by registries bound to this layer.
    """

    def __init__(self, config: ConnectionConfig, settings: MapperSettings | None = None) -> None:
        self.config = config
        self.settings = settings or MapperSettings()
        self._adapter = _load_adapter(config.driver)
        self._connection: Any = None
        self._in_transaction = False

    @classmethod
    def from_config(cls, config: ConnectionConfig, **settings: Any) -> DataLayer:
        """Create a DataLayer from a ConnectionConfig and optional settings."""
        return cls(config, MapperSettings(**settings))

    @property
    def adapter(self) -> Any:
        return self._adapter

    @property
    def connection(self) -> Any:
        """The driver connection, opened on first use."""
        if self._connection is None:
            try:
                self._connection = self._adapter.connect(self.config)
            except Exception as e:
                raise AdapterError(f"Failed to connect to '{self.config.database}': {e}") from e
        return self._connection

    @property
    def in_transaction(self) -> bool:
        return self._in_transaction

    def database_name(self) -> str:
        return self.config.database

    def schema_name(self) -> str:
        """Schema name catalog lookups are filtered by."""
        return str(self._adapter.schema_name(self.config))

    def quote(self, identifier: str) -> str:
        """Quote a table or column name for this backend."""
        q = self._adapter.identifier_quote
        return q + identifier.replace(q, q + q) + q

    def prepare(self, sql: str) -> Statement:
        """Prepare a statement written with ``?`` placeholders."""
        return Statement(self, sql)

    def run(self, native_sql: str, params: tuple[Any, ...], *, label: str | None = None) -> Any:
        """Execute driver-native SQL, wrapping driver errors."""
        if self.settings.log_statements or logger.isEnabledFor(logging.DEBUG):
            logger.debug("Executing %s with %r", label or native_sql, params)
        try:
            return self._adapter.execute(self.connection, native_sql, params)
        except AdapterError:
            raise
        except Exception as e:
            raise QueryExecutionError(label or native_sql, str(e)) from e

    def execute(self, sql: str, params: Any = None) -> Any:
        """Execute a one-off statement and return the driver cursor."""
        return self.prepare(sql).execute(params)

    def fetch_all(self, sql: str, params: Any = None) -> list[dict[str, Any]]:
        return self.prepare(sql).fetch_all(params)

    def fetch_one(self, sql: str, params: Any = None) -> dict[str, Any] | None:
        return self.prepare(sql).fetch_one(params)

    def begin(self) -> None:
        """Open a transaction on the shared connection."""
        if self._in_transaction:
            raise TransactionStateError("active", "begin")
        self.run("BEGIN", ())
        self._in_transaction = True

    def commit(self) -> None:
        if not self._in_transaction:
            raise TransactionStateError("idle", "commit")
        self._in_transaction = False
        self.run("COMMIT", ())

    def rollback(self) -> None:
        if not self._in_transaction:
            raise TransactionStateError("idle", "rollback")
        self._in_transaction = False
        self.run("ROLLBACK", ())

    def transaction(self) -> TransactionManager:
        """Create a new transaction context manager."""
        return TransactionManager(self)

    def close(self) -> None:
        """Close the connection."""
        if self._connection is not None:
            self._adapter.close(self._connection)
            self._connection = None
            self._in_transaction = False

    def __enter__(self) -> DataLayer:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
