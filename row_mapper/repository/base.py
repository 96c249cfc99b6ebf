"""Repository - the operation set over one entity registry.

Thin wrapper over EntityFactory, CriteriaCompiler and PersistenceEngine.
The registry is passed in explicitly; nothing is cached per class.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, Generic, TypeVar

from row_mapper.core.connection import Statement
from row_mapper.core.criteria import CriteriaCompiler, CriteriaLike
from row_mapper.core.exceptions import RowMapperError
from row_mapper.core.persistence import PersistenceEngine
from row_mapper.core.registry import EntityRegistry
from row_mapper.core.result import QueryResult
from row_mapper.mapping.factory import EntityFactory, load_by_id

T = TypeVar("T")

logger = logging.getLogger(__name__)


class Repository(Generic[T]):
    """Reads and writes entities of one registry.

    Subclasses add domain-specific finders on top of :meth:`selection`.
    """

    def __init__(self, registry: EntityRegistry) -> None:
        self.registry = registry
        self.factory = EntityFactory(registry)
        self.persistence = PersistenceEngine(registry)
        self.compiler = CriteriaCompiler(registry.data_layer.quote)

    def by_id(self, key: Any, *extras: Any) -> T | None:
        """Entity with primary key *key*, or None.

        Raises:
            QueryExecutionError: If the query fails.
            NoMatchingConstructor: If no constructor accepts *extras*.
        """
        return load_by_id(self.registry, key, extras)  # type: ignore[no-any-return]

    def all(self, *extras: Any) -> QueryResult[T]:
        """Every row of the table."""
        return self._collect(self.registry.select_all, (), extras)

    def selection(self, criteria: CriteriaLike = None, *extras: Any) -> QueryResult[T]:
        """Rows matching *criteria*.

        Raises:
            CriteriaError: If *criteria* is malformed. Execution failures are
                reported through the result instead.
        """
        compiled = self.compiler.compile(criteria)
        sql = self.registry.selection_sql(compiled.where, compiled.limit)
        statement = self.registry.data_layer.prepare(sql)
        return self._collect(statement, compiled.values, extras)

    def persist(self, item: T) -> bool:
        """INSERT or UPDATE *item*; False (and a log record) on failure."""
        return self.persistence.persist(item)

    def store(self, item: T) -> None:
        """Like :meth:`persist` but raises on failure."""
        self.persistence.store(item)

    def refresh(self, item: T) -> None:
        """Reload every mapped field of *item* from the database."""
        self.persistence.refresh(item)

    def primary_key(self, item: T) -> Any:
        return self.registry.primary_key_of(item)

    def _collect(
        self,
        statement: Statement,
        values: Sequence[Any],
        extras: Sequence[Any],
    ) -> QueryResult[T]:
        result: QueryResult[T] = QueryResult(sql=statement.sql)
        try:
            for row in statement.fetch_all(tuple(values)):
                result.items.append(self.factory.instantiate(row, extras))
        except RowMapperError as e:
            result.error = e
            logger.error(
                "Read of '%s' stopped after %d row(s): %s; query was: %s; extras were: %r; "
                "constructors: %s",
                self.registry.table,
                len(result.items),
                e,
                statement.sql,
                tuple(extras),
                [str(c) for c in self.registry.constructors],
            )
        return result
