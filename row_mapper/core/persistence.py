"""Insert/update lifecycle.

A transient entity is INSERT'ed and refreshed from the generated key; a
persisted one is UPDATE'd by primary key. The engine opens no transaction:
callers wanting atomicity across calls wrap them in
``DataLayer.transaction()``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from row_mapper.core.exceptions import (
    EntityStateError,
    MissingRowError,
    NotNullViolation,
    QueryExecutionError,
)
from row_mapper.mapping.state import is_persisted, mark_persisted, state_of
from row_mapper.mapping.factory import EntityFactory

if TYPE_CHECKING:
    from row_mapper.core.registry import EntityRegistry
    from row_mapper.mapping.plan import ColumnDescriptor

logger = logging.getLogger(__name__)


class PersistenceEngine:
    """Stores and refreshes entities of one registry."""

    def __init__(self, registry: EntityRegistry) -> None:
        self._registry = registry
        self._factory = EntityFactory(registry)

    def persist(self, item: Any) -> bool:
        """Store *item*, reporting failure instead of raising.

        Returns:
            True if the row was written, False otherwise. The reason for a
            failure is logged; the in-memory entity is left unchanged.
        """
        try:
            self.store(item)
        except Exception:
            statement = self._registry.update if is_persisted(item) else self._registry.insert
            logger.exception(
                "Failed to persist %s into '%s'; statement was: %s",
                self._registry.entity_class.__name__,
                self._registry.table,
                statement.sql if statement is not None else "<none>",
            )
            return False
        return True

    def store(self, item: Any) -> None:
        """Store *item*: INSERT if transient, UPDATE if persisted.

        Raises:
            NotNullViolation: If a NOT NULL column would receive None. Raised
                before any SQL runs.
            EntityStateError: If a reference points at an entity that was never
                stored. Raised before any SQL runs.
            QueryExecutionError: If the database rejects the statement.
            MissingRowError: If the inserted row cannot be read back.
        """
        values = self.column_values(item)

        if not is_persisted(item):
            key = self._insert(values)
            # apply() decodes the whole row before the first setter runs
            self._factory.apply(item, self._fetch(key))
            mark_persisted(item)
            logger.debug("Inserted %s with key %r", self._registry.entity_class.__name__, key)
            return

        if self._registry.update is None:
            # Nothing but the primary key is mapped
            return
        self._registry.update.execute([*values, self._registry.primary_key_of(item)])

    def refresh(self, item: Any) -> None:
        """Overwrite every mapped field of *item* from its row.

        Raises:
            EntityStateError: If *item* was never stored.
            MissingRowError: If its row no longer exists.
        """
        if not is_persisted(item):
            raise EntityStateError(
                self._registry.entity_class.__name__, state_of(item).value, "refresh"
            )
        self._factory.apply(item, self._fetch(self._registry.primary_key_of(item)))

    def column_values(self, item: Any) -> list[Any]:
        """Bind values for every non-primary-key column, in column order.

        Raises:
            NotNullViolation: If a NOT NULL column would receive None.
            EntityStateError: If a referenced entity was never stored.
        """
        values: list[Any] = []
        for column in self._registry.writable_columns:
            value = self._encode(column, item)
            if value is None and not column.nullable:
                raise NotNullViolation(
                    self._registry.entity_class.__name__,
                    column.field_name,
                    self._registry.table,
                    column.column_name,
                )
            values.append(value)
        return values

    def _encode(self, column: ColumnDescriptor, item: Any) -> Any:
        value = column.get(item)
        if value is None:
            return None
        if column.is_reference:
            referenced = column.reference_registry()
            key = referenced.primary_key_of(value)  # type: ignore[union-attr]
            if key is None or not is_persisted(value):
                raise EntityStateError(
                    type(value).__name__,
                    state_of(value).value,
                    f"store {self._registry.entity_class.__name__}.{column.field_name} "
                    "as a reference to",
                )
            return key
        if column.is_serialized:
            return column.codec.encode(value)  # type: ignore[union-attr]
        return value

    def _insert(self, values: list[Any]) -> Any:
        statement = self._registry.insert
        cursor = statement.execute(values)
        key = self._registry.data_layer.adapter.generated_key(
            cursor, self._registry.primary_key.column_name
        )
        if key is None:
            raise QueryExecutionError(statement.sql, "no generated key returned")
        return key

    def _fetch(self, key: Any) -> dict[str, Any]:
        row = self._registry.select_by_id.fetch_one((key,))
        if row is None:
            raise MissingRowError(self._registry.table, key)
        return row
