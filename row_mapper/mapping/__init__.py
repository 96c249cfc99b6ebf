"""Mapping layer - declare, bind and construct entities."""

from __future__ import annotations

from row_mapper.mapping.binder import FieldBinder
from row_mapper.mapping.builder import EntityMappingBuilder, entity
from row_mapper.mapping.codec import Codec, CodecError, JsonCodec
from row_mapper.mapping.factory import DecodedRow, EntityFactory, load_by_id
from row_mapper.mapping.plan import ColumnDescriptor, ColumnSpec, ConstructorSpec
from row_mapper.mapping.state import (
    Entity,
    can_hold_state,
    is_persisted,
    mark_persisted,
    state_of,
)

__all__ = [
    "entity",
    "EntityMappingBuilder",
    "FieldBinder",
    "EntityFactory",
    "DecodedRow",
    "load_by_id",
    "Entity",
    "state_of",
    "is_persisted",
    "mark_persisted",
    "can_hold_state",
    "Codec",
    "CodecError",
    "JsonCodec",
    "ColumnSpec",
    "ConstructorSpec",
    "ColumnDescriptor",
]
