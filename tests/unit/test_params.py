"""Unit tests for placeholder normalization."""

from __future__ import annotations

from row_mapper.core.params import coerce_params, count_placeholders, normalize_placeholders


class TestNormalizePlaceholders:
    def test_qmark_passthrough(self) -> None:
        sql = "SELECT * FROM users WHERE id = ?"
        assert normalize_placeholders(sql, "qmark") == sql

    def test_format_conversion(self) -> None:
        sql = "SELECT * FROM users WHERE id = ? AND name = ?"
        result = normalize_placeholders(sql, "format")
        assert result == "SELECT * FROM users WHERE id = %s AND name = %s"

    def test_string_literal_preserved(self) -> None:
        sql = "SELECT * FROM users WHERE note = 'why?' AND id = ?"
        result = normalize_placeholders(sql, "format")
        assert result == "SELECT * FROM users WHERE note = 'why?' AND id = %s"

    def test_quoted_identifiers_preserved(self) -> None:
        sql = 'SELECT `a?`, "b?" FROM t WHERE c = ?'
        result = normalize_placeholders(sql, "format")
        assert result == 'SELECT `a?`, "b?" FROM t WHERE c = %s'

    def test_percent_is_escaped(self) -> None:
        sql = "SELECT * FROM t WHERE name LIKE 'a%' AND id = ?"
        result = normalize_placeholders(sql, "format")
        assert result == "SELECT * FROM t WHERE name LIKE 'a%%' AND id = %s"


class TestCountPlaceholders:
    def test_ignores_quoted(self) -> None:
        assert count_placeholders("SELECT '?', `?` FROM t WHERE a = ? AND b = ?") == 2

    def test_none(self) -> None:
        assert count_placeholders("SELECT 1") == 0


class TestCoerceParams:
    def test_none(self) -> None:
        assert coerce_params(None) == ()

    def test_list_to_tuple(self) -> None:
        assert coerce_params([1, 2]) == (1, 2)

    def test_scalar_wrapped(self) -> None:
        assert coerce_params(5) == (5,)
