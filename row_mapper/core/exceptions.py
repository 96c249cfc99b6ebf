"""RowMapper exception hierarchy.

All exceptions are RowMapper-specific. Raw driver exceptions are never
exposed to callers: they are chained onto a QueryExecutionError.
"""

from __future__ import annotations

from typing import Any


class RowMapperError(Exception):
    """Base exception for all RowMapper errors."""


# --- Schema / binding ---


class SchemaError(RowMapperError):
    """Raised when a table cannot be described from the database catalog."""

    def __init__(self, table: str, detail: str) -> None:
        self.table = table
        super().__init__(f"Cannot describe table '{table}': {detail}")


class BindingError(RowMapperError):
    """Raised when a type's declared mapping cannot be satisfied by the schema."""

    def __init__(self, target_class: str, detail: str) -> None:
        self.target_class = target_class
        super().__init__(f"Cannot bind {target_class}: {detail}")


# --- Construction ---


class NoMatchingConstructor(RowMapperError):
    """Raised when no declared constructor accepts the supplied extra arguments."""

    def __init__(self, target_class: str, args: tuple[Any, ...]) -> None:
        self.target_class = target_class
        self.args_types = [type(a).__name__ for a in args]
        prototype = ", ".join(self.args_types)
        super().__init__(f"Could not find a constructor matching '{target_class}({prototype})'")


class FieldDecodeError(RowMapperError):
    """Raised when a column value cannot be decoded into its field."""

    def __init__(self, target_class: str, field_name: str, detail: str) -> None:
        self.target_class = target_class
        self.field_name = field_name
        super().__init__(f"Cannot decode {target_class}.{field_name}: {detail}")


class EntityConstructionError(RowMapperError):
    """Raised when a declared constructor fails while building an entity from a row."""

    def __init__(self, target_class: str, detail: str) -> None:
        self.target_class = target_class
        super().__init__(f"Cannot construct {target_class}: {detail}")


class FieldAssignmentError(RowMapperError):
    """Raised when a decoded value cannot be written into its field."""

    def __init__(self, target_class: str, field_name: str, detail: str) -> None:
        self.target_class = target_class
        self.field_name = field_name
        super().__init__(f"Cannot assign {target_class}.{field_name}: {detail}")


# --- Persistence ---


class NotNullViolation(RowMapperError):
    """Raised when persisting None into a column declared NOT NULL."""

    def __init__(self, target_class: str, field_name: str, table: str, column: str) -> None:
        self.target_class = target_class
        self.field_name = field_name
        self.table = table
        self.column = column
        super().__init__(
            f"Field {target_class}.{field_name} cannot be None, "
            f"'{table}'.'{column}' is declared NOT NULL"
        )


class EntityStateError(RowMapperError):
    """Raised when an operation is invalid for the entity's lifecycle state."""

    def __init__(self, target_class: str, state: str, attempted_action: str) -> None:
        self.target_class = target_class
        self.state = state
        self.attempted_action = attempted_action
        super().__init__(f"Cannot {attempted_action} {target_class} in state '{state}'")


class MissingRowError(RowMapperError):
    """Raised when a persisted entity no longer has a backing row."""

    def __init__(self, table: str, key: Any) -> None:
        self.table = table
        self.key = key
        super().__init__(f"Invalid object reference, primary key {key!r} not found in '{table}'")


# --- Criteria ---


class CriteriaError(RowMapperError):
    """Base for malformed criteria trees."""


class DuplicateLimitError(CriteriaError):
    """Raised when a criteria tree holds more than one limit."""

    def __init__(self) -> None:
        super().__init__("Got multiple limit keywords")


class InvalidLimitError(CriteriaError):
    """Raised when a limit is not an integer."""

    def __init__(self, value: Any) -> None:
        self.value = value
        super().__init__(f"Limit expected an integer, got {type(value).__name__}")


class UnknownCriteriaKeyword(CriteriaError):
    """Raised for an unrecognised @keyword in a criteria tree."""

    def __init__(self, keyword: str) -> None:
        self.keyword = keyword
        super().__init__(f"Unknown keyword '{keyword}' passed as criteria")


class MalformedCriteria(CriteriaError):
    """Raised when a criteria group is not a collection of key/value pairs."""

    def __init__(self, keyword: str, value: Any) -> None:
        self.keyword = keyword
        self.value = value
        super().__init__(
            f"'{keyword}' expects a mapping of criteria, got {type(value).__name__}: {value!r}"
        )


# --- Execution ---


class QueryExecutionError(RowMapperError):
    """Raised when the database rejects or fails a statement."""

    def __init__(self, sql: str, detail: str) -> None:
        self.sql = sql
        super().__init__(f"Query failed: {detail}")


# --- Transaction ---


class TransactionError(RowMapperError):
    """Base for transaction errors."""


class TransactionStateError(TransactionError):
    """Raised on invalid transaction state transitions."""

    def __init__(self, current_state: str, attempted_action: str) -> None:
        self.current_state = current_state
        self.attempted_action = attempted_action
        super().__init__(f"Cannot {attempted_action} transaction in state '{current_state}'")


# --- Adapter ---


class AdapterError(RowMapperError):
    """Raised when a database adapter cannot be loaded or connected."""
