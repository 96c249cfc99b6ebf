"""Schema introspection.

Reads column metadata for a table from the database catalog. The catalog
query itself is backend specific and supplied by the adapter; every adapter
yields the same four columns.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from row_mapper.core.exceptions import QueryExecutionError, SchemaError

if TYPE_CHECKING:
    from row_mapper.core.connection import DataLayer

logger = logging.getLogger(__name__)

_TYPE_SUFFIX = re.compile(r"\s*\(.*\)\s*$")


@dataclass(frozen=True)
class ColumnInfo:
    """One column as reported by the catalog."""

    name: str
    datatype: str
    nullable: bool
    is_primary_key: bool


def normalize_datatype(raw: Any) -> str:
    """Lower-case a catalog datatype and drop any length suffix.

    ``VARCHAR(20)`` → ``varchar``. Some drivers hand back bytes.
    """
    if raw is None:
        return ""
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8")
    return _TYPE_SUFFIX.sub("", str(raw)).strip().lower()


class SchemaIntrospector:
    """Describes tables through the data layer's catalog."""

    def __init__(self, data_layer: DataLayer) -> None:
        self._data_layer = data_layer

    def describe_columns(self, table: str) -> list[ColumnInfo]:
        """Return the table's columns in ordinal order.

        Raises:
            SchemaError: If the catalog query fails or the table has no columns.
        """
        schema = self._data_layer.schema_name()
        sql, params = self._data_layer.adapter.catalog_query(schema, table)
        try:
            rows = self._data_layer.fetch_all(sql, params)
        except QueryExecutionError as e:
            raise SchemaError(table, str(e)) from e

        if not rows:
            raise SchemaError(table, f"no columns found in schema '{schema}'")

        columns = [
            ColumnInfo(
                name=str(row["name"]),
                datatype=normalize_datatype(row["datatype"]),
                nullable=bool(row["nullable"]),
                is_primary_key=bool(row["is_primary_key"]),
            )
            for row in rows
        ]
        logger.debug("Described '%s': %s", table, [c.name for c in columns])
        return columns

    def primary_key_columns(self, table: str) -> list[str]:
        """Names of the table's primary-key columns."""
        return [c.name for c in self.describe_columns(table) if c.is_primary_key]
