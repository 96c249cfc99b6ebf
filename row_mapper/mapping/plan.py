"""Mapping plan data classes.

Frozen dataclasses describing how one type maps onto one table. ColumnSpec
and ConstructorSpec are what a caller declares; ColumnDescriptor is what the
binder produces once the declaration has been checked against the schema.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pydantic import TypeAdapter

    from row_mapper.core.registry import EntityRegistry
    from row_mapper.mapping.codec import Codec

Getter = Callable[[Any], Any]
Setter = Callable[[Any, Any], None]


@dataclass(frozen=True)
class ColumnSpec:
    """A declared field-to-column mapping, not yet checked against the schema."""

    field_name: str
    column_name: str
    datatype: type | None = None
    references: Any = None  # EntityRegistry, or a zero-arg callable returning one
    serializes: type | None = None
    getter: Getter | None = None
    setter: Setter | None = None


@dataclass(frozen=True)
class ConstructorSpec:
    """A declared way to build an empty entity from caller-supplied arguments."""

    factory: Callable[..., Any]
    arg_types: tuple[type, ...] = ()

    def accepts(self, args: tuple[Any, ...]) -> bool:
        """True if *args* match the declared arity and types.

        ``None`` is accepted in place of any type.
        """
        if len(args) != len(self.arg_types):
            return False
        return all(
            arg is None or isinstance(arg, arg_type)
            for arg, arg_type in zip(args, self.arg_types, strict=True)
        )

    def __str__(self) -> str:
        name = getattr(self.factory, "__qualname__", repr(self.factory))
        return f"{name}({', '.join(t.__name__ for t in self.arg_types)})"


@dataclass(frozen=True)
class ColumnDescriptor:
    """Binds one in-memory field to one table column."""

    field_name: str
    field_datatype: type | None
    column_name: str
    column_datatype: str
    nullable: bool
    is_primary_key: bool
    getter: Getter = field(compare=False, repr=False)
    setter: Setter = field(compare=False, repr=False)
    reference: Any = field(default=None, compare=False, repr=False)
    serialize_type: type | None = None
    codec: Codec | None = field(default=None, compare=False, repr=False)
    validator: TypeAdapter[Any] | None = field(default=None, compare=False, repr=False)

    @property
    def is_reference(self) -> bool:
        return self.reference is not None

    @property
    def is_serialized(self) -> bool:
        return self.serialize_type is not None

    def reference_registry(self) -> EntityRegistry | None:
        """The referenced type's registry, resolving a lazy declaration."""
        from row_mapper.core.registry import EntityRegistry

        if self.reference is None or isinstance(self.reference, EntityRegistry):
            return self.reference
        return self.reference()  # type: ignore[no-any-return]

    @property
    def reference_type(self) -> type | None:
        registry = self.reference_registry()
        return registry.entity_class if registry is not None else None

    def get(self, entity: Any) -> Any:
        return self.getter(entity)

    def set(self, entity: Any, value: Any) -> None:
        self.setter(entity, value)
