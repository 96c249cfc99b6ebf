"""Multi-row read results."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from row_mapper.core.exceptions import RowMapperError

T = TypeVar("T")


@dataclass
class QueryResult(Generic[T]):
    """Entities read by a multi-row query.

    A failure part way through a read does not discard the rows already
    converted: they are kept in ``items`` and the failure in ``error``.
    """

    items: list[T] = field(default_factory=list)
    error: RowMapperError | None = None
    sql: str = ""

    @property
    def complete(self) -> bool:
        """True if every row was read and converted."""
        return self.error is None

    def unwrap(self) -> list[T]:
        """Return the items, raising the recorded error if the read was partial."""
        if self.error is not None:
            raise self.error
        return self.items

    def __iter__(self) -> Iterator[T]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __getitem__(self, index: int) -> T:
        return self.items[index]
