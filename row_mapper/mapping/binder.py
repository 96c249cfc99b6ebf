"""Field binding.

Resolves a type's declared column table against the introspected schema and
produces the ordered, immutable ColumnDescriptor list for its registry.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from pydantic import TypeAdapter
from pydantic.errors import PydanticSchemaGenerationError

from row_mapper.core.exceptions import BindingError
from row_mapper.core.schema import ColumnInfo, SchemaIntrospector
from row_mapper.mapping.codec import JsonCodec
from row_mapper.mapping.plan import ColumnDescriptor, ColumnSpec, Getter, Setter
from row_mapper.mapping.state import STATE_ATTR, can_hold_state

logger = logging.getLogger(__name__)

# Null is accepted by such columns and stored as the current time
_NULL_AS_NOW_TYPES = frozenset({"timestamp"})


def _attribute_getter(name: str) -> Getter:
    def getter(entity: Any) -> Any:
        return getattr(entity, name, None)

    return getter


def _attribute_setter(name: str) -> Setter:
    def setter(entity: Any, value: Any) -> None:
        setattr(entity, name, value)

    return setter


class FieldBinder:
    """Checks declared columns against a table and builds descriptors.

    Args:
        introspector: Source of the table's column metadata.
        blob_types: Datatypes accepted for serialized columns.
    """

    def __init__(self, introspector: SchemaIntrospector, blob_types: Iterable[str]) -> None:
        self._introspector = introspector
        self._blob_types = frozenset(blob_types)

    def bind(
        self,
        entity_class: type,
        specs: Iterable[ColumnSpec],
        table: str,
    ) -> tuple[ColumnDescriptor, ...]:
        """Bind every declared column of *entity_class* to *table*.

        Raises:
            SchemaError: If the table cannot be described.
            BindingError: If a declaration cannot be satisfied by the table.
        """
        cls_name = entity_class.__name__
        if not can_hold_state(entity_class):
            raise BindingError(
                cls_name,
                "instances cannot record their persistence state; "
                f"add a '__dict__' or '{STATE_ATTR}' slot",
            )
        available = {c.name: c for c in self._introspector.describe_columns(table)}

        descriptors: list[ColumnDescriptor] = []
        seen_fields: set[str] = set()
        seen_columns: set[str] = set()

        for spec in specs:
            if spec.field_name in seen_fields:
                raise BindingError(cls_name, f"field '{spec.field_name}' is mapped twice")
            if spec.column_name in seen_columns:
                raise BindingError(cls_name, f"column `{spec.column_name}` is mapped twice")
            seen_fields.add(spec.field_name)
            seen_columns.add(spec.column_name)

            info = available.get(spec.column_name)
            if info is None:
                raise BindingError(
                    cls_name,
                    f"{cls_name}.{spec.field_name} refers to `{table}`.`{spec.column_name}` "
                    "which is not available (unknown column)",
                )

            descriptors.append(self._describe(cls_name, table, spec, info))

        primary = [d for d in descriptors if d.is_primary_key]
        if not primary:
            table_keys = [c.name for c in available.values() if c.is_primary_key]
            detail = (
                f"primary key `{table}`.`{table_keys[0]}` is not mapped"
                if len(table_keys) == 1
                else f"`{table}` needs exactly one primary key column, found {table_keys}"
            )
            raise BindingError(cls_name, detail)
        if len(primary) > 1:
            raise BindingError(
                cls_name,
                f"composite primary keys are not supported: {[d.column_name for d in primary]}",
            )

        logger.debug("Bound %s to '%s' with %d columns", cls_name, table, len(descriptors))
        return tuple(descriptors)

    def _describe(
        self,
        cls_name: str,
        table: str,
        spec: ColumnSpec,
        info: ColumnInfo,
    ) -> ColumnDescriptor:
        if spec.references is not None and spec.serializes is not None:
            raise BindingError(
                cls_name,
                f"{cls_name}.{spec.field_name} cannot be both a reference and serialized",
            )

        codec = None
        if spec.serializes is not None:
            if info.datatype not in self._blob_types:
                raise BindingError(
                    cls_name,
                    f"{cls_name}.{spec.field_name} (serialized) refers to "
                    f"`{table}`.`{spec.column_name}` which has datatype '{info.datatype}': "
                    f"serialized column must be blob-typed ({sorted(self._blob_types)})",
                )
            try:
                codec = JsonCodec(spec.serializes)
            except TypeError as e:
                raise BindingError(cls_name, str(e)) from e

        validator = None
        if spec.datatype is not None and spec.references is None and spec.serializes is None:
            try:
                validator = TypeAdapter(spec.datatype)
            except PydanticSchemaGenerationError as e:
                raise BindingError(
                    cls_name, f"{cls_name}.{spec.field_name} has unsupported datatype: {e}"
                ) from e

        return ColumnDescriptor(
            field_name=spec.field_name,
            field_datatype=spec.datatype or spec.serializes,
            column_name=spec.column_name,
            column_datatype=info.datatype,
            nullable=info.nullable or info.datatype in _NULL_AS_NOW_TYPES,
            is_primary_key=info.is_primary_key,
            getter=spec.getter or _attribute_getter(spec.field_name),
            setter=spec.setter or _attribute_setter(spec.field_name),
            reference=spec.references,
            serialize_type=spec.serializes,
            codec=codec,
            validator=validator,
        )
