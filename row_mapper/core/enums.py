"""Enumerations shared across the mapper."""

from __future__ import annotations

from enum import Enum


class DatabaseBackend(Enum):
    """Supported database backends."""

    SQLITE = "sqlite"
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"


class EntityState(Enum):
    """Lifecycle state of a mapped object."""

    TRANSIENT = "transient"
    PERSISTED = "persisted"


class DecodePolicy(Enum):
    """What to do when a reference or serialized column cannot be decoded."""

    NULLIFY = "nullify"
    RAISE = "raise"


class Glue(Enum):
    """Boolean operator joining the clauses of a criteria group."""

    AND = "AND"
    OR = "OR"
