"""RowMapper - declarative object/row mapping over a relational table."""

from __future__ import annotations

from row_mapper.core.connection import (
    ConnectionConfig,
    DataLayer,
    MapperSettings,
    Statement,
)
from row_mapper.core.criteria import (
    NOT_NULL,
    NULL,
    CompiledCriteria,
    Criteria,
    CriteriaCompiler,
    Equals,
    Group,
    IsNotNull,
    IsNull,
    Limit,
    parse_criteria,
)
from row_mapper.core.enums import DatabaseBackend, DecodePolicy, EntityState, Glue
from row_mapper.core.exceptions import (
    AdapterError,
    BindingError,
    CriteriaError,
    DuplicateLimitError,
    EntityConstructionError,
    EntityStateError,
    FieldAssignmentError,
    FieldDecodeError,
    InvalidLimitError,
    MalformedCriteria,
    MissingRowError,
    NoMatchingConstructor,
    NotNullViolation,
    QueryExecutionError,
    RowMapperError,
    SchemaError,
    TransactionError,
    TransactionStateError,
    UnknownCriteriaKeyword,
)
from row_mapper.core.persistence import PersistenceEngine
from row_mapper.core.registry import EntityRegistry
from row_mapper.core.result import QueryResult
from row_mapper.core.schema import ColumnInfo, SchemaIntrospector
from row_mapper.core.transaction import TransactionManager
from row_mapper.mapping import (
    ColumnDescriptor,
    DecodedRow,
    Entity,
    EntityFactory,
    EntityMappingBuilder,
    FieldBinder,
    entity,
    is_persisted,
    state_of,
)
from row_mapper.repository import Repository

__all__ = [
    # Connection
    "ConnectionConfig",
    "MapperSettings",
    "DataLayer",
    "Statement",
    "TransactionManager",
    # Schema
    "ColumnInfo",
    "SchemaIntrospector",
    # Mapping
    "entity",
    "EntityMappingBuilder",
    "FieldBinder",
    "ColumnDescriptor",
    "EntityRegistry",
    "EntityFactory",
    "DecodedRow",
    "Entity",
    "state_of",
    "is_persisted",
    # Criteria
    "Criteria",
    "CriteriaCompiler",
    "CompiledCriteria",
    "parse_criteria",
    "Equals",
    "IsNull",
    "IsNotNull",
    "Group",
    "Limit",
    "NULL",
    "NOT_NULL",
    # Persistence / reads
    "PersistenceEngine",
    "Repository",
    "QueryResult",
    # Enums
    "DatabaseBackend",
    "DecodePolicy",
    "EntityState",
    "Glue",
    # Exceptions
    "RowMapperError",
    "SchemaError",
    "BindingError",
    "NoMatchingConstructor",
    "FieldDecodeError",
    "EntityConstructionError",
    "FieldAssignmentError",
    "NotNullViolation",
    "EntityStateError",
    "MissingRowError",
    "CriteriaError",
    "DuplicateLimitError",
    "InvalidLimitError",
    "UnknownCriteriaKeyword",
    "MalformedCriteria",
    "QueryExecutionError",
    "TransactionError",
    "TransactionStateError",
    "AdapterError",
]
