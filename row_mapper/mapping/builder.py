"""Entity mapping DSL builder.

Provides a fluent builder declaring how a type maps onto a table::

    books = (
        entity(Book, table="books")
        .column("id")
        .column("title", datatype=str)
        .column("author", "author_id", references=lambda: authors)
        .column("cover", serializes=Cover)
        .constructor(Book)
        .build(data_layer)
    )

Nothing is inspected at runtime: every mapped field and every constructor
is named explicitly.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from row_mapper.core.connection import DataLayer
from row_mapper.core.registry import EntityRegistry
from row_mapper.mapping.plan import ColumnSpec, ConstructorSpec, Getter, Setter


def entity(entity_class: type, table: str | None = None) -> EntityMappingBuilder:
    """Entry point for the mapping DSL.

    Args:
        entity_class: The mapped class.
        table: Table name. Defaults to the lowercase class name.

    Returns:
        A builder for chaining mapping declarations.
    """
    if table is None:
        table = entity_class.__name__.lower()
    return EntityMappingBuilder(entity_class, table)


class EntityMappingBuilder:
    """Fluent builder for entity mapping definitions."""

    def __init__(self, entity_class: type, table: str) -> None:
        self._entity_class = entity_class
        self._table = table
        self._columns: list[ColumnSpec] = []
        self._constructors: list[ConstructorSpec] = []

    def column(
        self,
        field_name: str,
        column_name: str | None = None,
        *,
        datatype: type | None = None,
        references: EntityRegistry | Callable[[], EntityRegistry] | None = None,
        serializes: type | None = None,
        getter: Getter | None = None,
        setter: Setter | None = None,
    ) -> EntityMappingBuilder:
        """Map one field to one column.

        Args:
            field_name: Attribute on the entity.
            column_name: Table column. Defaults to *field_name*.
            datatype: Python type raw values are validated against.
            references: Registry of the type this column's key points at,
                or a callable returning it (for types bound later).
            serializes: Type stored as an opaque blob in this column.
            getter: Reads the field; defaults to attribute access.
            setter: Writes the field; defaults to attribute assignment.
        """
        self._columns.append(
            ColumnSpec(
                field_name=field_name,
                column_name=column_name or field_name,
                datatype=datatype,
                references=references,
                serializes=serializes,
                getter=getter,
                setter=setter,
            )
        )
        return self

    def columns(self, *field_names: str) -> EntityMappingBuilder:
        """Map several fields to same-named columns."""
        for name in field_names:
            self.column(name)
        return self

    def constructor(self, factory: Callable[..., Any], *arg_types: type) -> EntityMappingBuilder:
        """Declare a constructor taking extra arguments of *arg_types*.

        Constructors are tried in declaration order; the first one whose
        arity and argument types match the call's extra arguments is used.
        """
        self._constructors.append(ConstructorSpec(factory=factory, arg_types=tuple(arg_types)))
        return self

    def build(self, data_layer: DataLayer) -> EntityRegistry:
        """Bind the declarations against the live schema.

        Raises:
            SchemaError: If the table cannot be described.
            BindingError: If a declaration does not fit the table.
        """
        constructors = self._constructors or [ConstructorSpec(factory=self._entity_class)]
        return EntityRegistry.bind(
            data_layer,
            self._entity_class,
            self._table,
            self._columns,
            constructors,
        )
