"""Row-to-entity construction.

EntityFactory picks a declared constructor for the caller's extra
arguments, then fills every mapped field from the row: reference columns
load the referenced entity by key, serialized columns are decoded, plain
columns are assigned (validated against the declared datatype, if any).

Decoding is staged into a DecodedRow before any field is written, so an
entity is either fully updated or left untouched.

Entities loaded while building one row share a LoadContext: a reference to
a row already being built resolves to the same object, so self-referencing
and cyclic rows load once each.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from row_mapper.core.enums import DecodePolicy
from row_mapper.core.exceptions import (
    EntityConstructionError,
    FieldAssignmentError,
    FieldDecodeError,
    NoMatchingConstructor,
)
from row_mapper.mapping.state import mark_persisted

if TYPE_CHECKING:
    from row_mapper.core.registry import EntityRegistry
    from row_mapper.mapping.plan import ColumnDescriptor, ConstructorSpec

logger = logging.getLogger(__name__)

# (entity class, table, primary key) -> entity
LoadContext = dict[tuple[type, str, Any], Any]


@dataclass
class DecodedRow:
    """Field values decoded from one row, plus the fields that failed."""

    values: dict[str, Any] = field(default_factory=dict)
    failures: dict[str, FieldDecodeError] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures


class EntityFactory:
    """Builds and refreshes entities of one registry from result rows."""

    def __init__(self, registry: EntityRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> EntityRegistry:
        return self._registry

    def select_constructor(self, extras: Sequence[Any] = ()) -> ConstructorSpec:
        """First declared constructor accepting *extras*.

        Raises:
            NoMatchingConstructor: If none accepts them.
        """
        args = tuple(extras)
        for candidate in self._registry.constructors:
            if candidate.accepts(args):
                return candidate
        raise NoMatchingConstructor(self._registry.entity_class.__name__, args)

    def instantiate(
        self,
        row: dict[str, Any],
        extras: Sequence[Any] = (),
        loading: LoadContext | None = None,
    ) -> Any:
        """Construct a persisted entity from *row*.

        Raises:
            NoMatchingConstructor: If no constructor accepts *extras*.
            EntityConstructionError: If the selected constructor fails.
            FieldDecodeError: If a plain column has the wrong type, or a
                reference/serialized column fails under DecodePolicy.RAISE.
            FieldAssignmentError: If a field setter fails.
        """
        ctor = self.select_constructor(extras)
        try:
            item = ctor.factory(*extras)
        except Exception as e:
            raise EntityConstructionError(
                self._registry.entity_class.__name__, f"{ctor} raised {e!r}"
            ) from e

        loading = self._context_for(item, row, loading)
        self.assign(item, self.stage(row, loading))
        mark_persisted(item)
        return item

    def apply(self, item: Any, row: dict[str, Any]) -> None:
        """Overwrite every mapped field of *item* with *row*'s values."""
        self.assign(item, self.stage(row, self._context_for(item, row)))

    def stage(self, row: dict[str, Any], loading: LoadContext | None = None) -> dict[str, Any]:
        """Decoded field values for *row*, with failures resolved per DecodePolicy."""
        return self._resolve(self.decode(row, loading))

    def assign(self, item: Any, values: dict[str, Any]) -> None:
        """Write staged *values* into *item*.

        Raises:
            FieldAssignmentError: If a setter fails.
        """
        for column in self._registry.columns:
            try:
                column.set(item, values[column.field_name])
            except Exception as e:
                raise FieldAssignmentError(
                    self._registry.entity_class.__name__, column.field_name, repr(e)
                ) from e

    def decode(self, row: dict[str, Any], loading: LoadContext | None = None) -> DecodedRow:
        """Decode every column of *row* without touching any entity.

        Reference and serialized columns that cannot be decoded are recorded
        in ``failures``; plain columns of the wrong type raise.
        """
        loading = {} if loading is None else loading
        decoded = DecodedRow()
        for column in self._registry.columns:
            raw = row.get(column.column_name)
            if column.is_reference or column.is_serialized:
                try:
                    decoded.values[column.field_name] = self._decode_composite(
                        column, raw, loading
                    )
                except FieldDecodeError as e:
                    decoded.failures[column.field_name] = e
                    decoded.values[column.field_name] = None
            else:
                decoded.values[column.field_name] = self._decode_plain(column, raw)
        return decoded

    def _resolve(self, decoded: DecodedRow) -> dict[str, Any]:
        if decoded.ok:
            return decoded.values
        if self._registry.settings.decode_errors is DecodePolicy.RAISE:
            raise next(iter(decoded.failures.values()))
        for error in decoded.failures.values():
            logger.warning("%s; field set to None", error)
        return decoded.values

    def _context_for(
        self, item: Any, row: dict[str, Any], loading: LoadContext | None = None
    ) -> LoadContext:
        loading = {} if loading is None else loading
        key = row.get(self._registry.primary_key.column_name)
        loading[(self._registry.entity_class, self._registry.table, key)] = item
        return loading

    def _decode_plain(self, column: ColumnDescriptor, raw: Any) -> Any:
        if raw is None or column.validator is None:
            return raw
        try:
            return column.validator.validate_python(raw)
        except ValidationError as e:
            raise FieldDecodeError(
                self._registry.entity_class.__name__,
                column.field_name,
                f"`{column.column_name}` value {raw!r} is not a valid "
                f"{getattr(column.field_datatype, '__name__', column.field_datatype)}",
            ) from e

    def _decode_composite(self, column: ColumnDescriptor, raw: Any, loading: LoadContext) -> Any:
        if raw is None:
            return None
        cls_name = self._registry.entity_class.__name__
        try:
            if column.is_reference:
                referenced = column.reference_registry()
                item = load_by_id(referenced, raw, loading=loading)
                if item is None:
                    raise LookupError(
                        f"no {referenced.entity_class.__name__} with key {raw!r} "
                        f"in '{referenced.table}'"
                    )
                return item
            return column.codec.decode(raw)  # type: ignore[union-attr]
        except Exception as e:
            raise FieldDecodeError(cls_name, column.field_name, str(e)) from e


def load_by_id(
    registry: EntityRegistry,
    key: Any,
    extras: Sequence[Any] = (),
    *,
    loading: LoadContext | None = None,
) -> Any:
    """Read one entity by primary key, or None if no row has that key.

    With *loading*, an entity already built for the same key is returned
    without a query.

    Raises:
        QueryExecutionError: If the query fails.
        NoMatchingConstructor: If no constructor accepts *extras*.
    """
    if loading is not None:
        cached = loading.get((registry.entity_class, registry.table, key))
        if cached is not None:
            return cached
    row = registry.select_by_id.fetch_one((key,))
    if row is None:
        return None
    return EntityFactory(registry).instantiate(row, extras, loading)
