"""Unit tests for SchemaIntrospector."""

from __future__ import annotations

import pytest

from row_mapper.core.connection import DataLayer
from row_mapper.core.exceptions import SchemaError
from row_mapper.core.schema import ColumnInfo, SchemaIntrospector, normalize_datatype


class TestSchemaIntrospector:
    def test_describe_columns_in_order(self, library: DataLayer) -> None:
        columns = SchemaIntrospector(library).describe_columns("authors")
        assert columns == [
            ColumnInfo(name="id", datatype="integer", nullable=True, is_primary_key=True),
            ColumnInfo(name="name", datatype="text", nullable=False, is_primary_key=False),
            ColumnInfo(name="email", datatype="text", nullable=True, is_primary_key=False),
        ]

    def test_length_suffix_dropped(self, library: DataLayer) -> None:
        columns = SchemaIntrospector(library).describe_columns("events")
        assert columns[1].datatype == "varchar"
        assert columns[2].datatype == "timestamp"

    def test_missing_table(self, library: DataLayer) -> None:
        with pytest.raises(SchemaError, match="nope"):
            SchemaIntrospector(library).describe_columns("nope")

    def test_primary_key_columns(self, library: DataLayer) -> None:
        assert SchemaIntrospector(library).primary_key_columns("books") == ["id"]


class TestNormalizeDatatype:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("VARCHAR(20)", "varchar"),
            ("decimal(10, 2)", "decimal"),
            (b"BLOB", "blob"),
            ("", ""),
            (None, ""),
        ],
    )
    def test_normalize(self, raw: object, expected: str) -> None:
        assert normalize_datatype(raw) == expected
