"""Database adapter protocol.

Every adapter module MUST implement this protocol. The mapper only talks to
drivers through it, so all backends expose an identical surface.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from row_mapper.core.connection import ConnectionConfig
    from row_mapper.core.enums import DatabaseBackend


@runtime_checkable
class Adapter(Protocol):
    """Synchronous database adapter protocol."""

    @property
    def backend(self) -> DatabaseBackend:
        """Backend this adapter drives."""
        ...

    @property
    def paramstyle(self) -> str:
        """Parameter binding style: 'qmark' (?) or 'format' (%s)."""
        ...

    @property
    def identifier_quote(self) -> str:
        """Character used to quote table and column names."""
        ...

    @property
    def blob_types(self) -> frozenset[str]:
        """Catalog datatypes able to hold a serialized value."""
        ...

    @property
    def default_values_clause(self) -> str:
        """Tail of an INSERT statement that sets no explicit column."""
        ...

    def connect(self, config: ConnectionConfig) -> Any:
        """Open a connection in autocommit mode."""
        ...

    def close(self, connection: Any) -> None:
        """Close a connection."""
        ...

    def execute(self, connection: Any, sql: str, params: tuple[Any, ...] = ()) -> Any:
        """Execute SQL and return a cursor-like object."""
        ...

    def schema_name(self, config: ConnectionConfig) -> str:
        """Schema that catalog lookups are scoped to."""
        ...

    def catalog_query(self, schema: str, table: str) -> tuple[str, tuple[Any, ...]]:
        """Column catalog query for *table*.

        The query yields ``name``, ``datatype``, ``nullable`` and
        ``is_primary_key`` in ordinal order.
        """
        ...

    def returning_clause(self, primary_key: str) -> str:
        """Suffix appended to an INSERT to obtain the generated key, or ''."""
        ...

    def generated_key(self, cursor: Any, primary_key: str) -> Any:
        """Read the generated primary key after an INSERT."""
        ...
