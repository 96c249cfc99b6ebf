"""Entity registry - the bound mapping of one type onto one table.

A registry is built once per type (see ``row_mapper.mapping.builder``) and
is read-only afterwards. It owns the column descriptors, the declared
constructors and the SQL templates every read and write reuses.

Prepared statements share the data layer's connection: a registry must not
be used from several threads without external locking.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from row_mapper.core.connection import DataLayer, MapperSettings, Statement
from row_mapper.core.schema import SchemaIntrospector

if TYPE_CHECKING:
    from collections.abc import Sequence

    from row_mapper.mapping.plan import ColumnDescriptor, ColumnSpec, ConstructorSpec


@dataclass(frozen=True)
class EntityRegistry:
    """Immutable per-type mapping state."""

    entity_class: type
    table: str
    columns: tuple[ColumnDescriptor, ...]
    constructors: tuple[ConstructorSpec, ...]
    data_layer: DataLayer = field(repr=False, compare=False)
    select_all: Statement = field(repr=False, compare=False)
    select_by_id: Statement = field(repr=False, compare=False)
    insert: Statement = field(repr=False, compare=False)
    update: Statement | None = field(repr=False, compare=False)

    @classmethod
    def bind(
        cls,
        data_layer: DataLayer,
        entity_class: type,
        table: str,
        specs: Sequence[ColumnSpec],
        constructors: Sequence[ConstructorSpec],
    ) -> EntityRegistry:
        """Introspect *table*, bind *specs* and prepare the SQL templates.

        Raises:
            SchemaError: If the table cannot be described.
            BindingError: If the declared mapping does not fit the table.
        """
        from row_mapper.mapping.binder import FieldBinder

        binder = FieldBinder(SchemaIntrospector(data_layer), data_layer.adapter.blob_types)
        columns = binder.bind(entity_class, specs, table)

        q = data_layer.quote
        pk = next(c for c in columns if c.is_primary_key)
        select = f"SELECT {', '.join(q(c.column_name) for c in columns)} FROM {q(table)}"
        writable = [c for c in columns if not c.is_primary_key]

        if writable:
            insert_sql = (
                f"INSERT INTO {q(table)} ({', '.join(q(c.column_name) for c in writable)}) "
                f"VALUES ({', '.join('?' for _ in writable)})"
            )
            update: Statement | None = data_layer.prepare(
                f"UPDATE {q(table)} SET "
                f"{', '.join(f'{q(c.column_name)} = ?' for c in writable)} "
                f"WHERE {q(pk.column_name)} = ?"
            )
        else:
            insert_sql = f"INSERT INTO {q(table)} {data_layer.adapter.default_values_clause}"
            update = None
        insert_sql += data_layer.adapter.returning_clause(q(pk.column_name))

        return cls(
            entity_class=entity_class,
            table=table,
            columns=columns,
            constructors=tuple(constructors),
            data_layer=data_layer,
            select_all=data_layer.prepare(select),
            select_by_id=data_layer.prepare(f"{select} WHERE {q(pk.column_name)} = ? LIMIT 1"),
            insert=data_layer.prepare(insert_sql),
            update=update,
        )

    @property
    def settings(self) -> MapperSettings:
        return self.data_layer.settings

    @property
    def primary_key(self) -> ColumnDescriptor:
        return next(c for c in self.columns if c.is_primary_key)

    @property
    def writable_columns(self) -> tuple[ColumnDescriptor, ...]:
        """Every column except the primary key, in declaration order."""
        return tuple(c for c in self.columns if not c.is_primary_key)

    def column(self, field_name: str) -> ColumnDescriptor:
        """Look up a descriptor by field name."""
        for c in self.columns:
            if c.field_name == field_name:
                return c
        raise KeyError(field_name)

    def primary_key_of(self, entity: Any) -> Any:
        """Current primary-key value of *entity*."""
        return self.primary_key.get(entity)

    def selection_sql(self, where: str, limit: int | None = None) -> str:
        """SELECT over the mapped columns with an optional WHERE and LIMIT."""
        sql = self.select_all.sql
        if where:
            sql += f" WHERE {where}"
        if limit is not None:
            sql += f" LIMIT {int(limit)}"
        return sql
