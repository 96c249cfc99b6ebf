"""Transaction management.

Provides a context manager for running several statements atomically on a
data layer's connection. Auto-commits on success, auto-rolls-back on
exception. The mapper's write path never opens a transaction itself.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

from row_mapper.core.exceptions import TransactionStateError

if TYPE_CHECKING:
    from row_mapper.core.connection import DataLayer


class _TxState(Enum):
    IDLE = "idle"
    ACTIVE = "active"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class TransactionManager:
    """Synchronous transaction context manager."""

    def __init__(self, data_layer: DataLayer) -> None:
        self._data_layer = data_layer
        self._state = _TxState.IDLE

    @property
    def state(self) -> str:
        return self._state.value

    def __enter__(self) -> TransactionManager:
        self._data_layer.begin()
        self._state = _TxState.ACTIVE
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        if self._state != _TxState.ACTIVE:
            return
        if exc_type is not None:
            self._data_layer.rollback()
            self._state = _TxState.ROLLED_BACK
        else:
            self._data_layer.commit()
            self._state = _TxState.COMMITTED

    def commit(self) -> None:
        """Explicitly commit the transaction."""
        self._check_active("commit")
        self._data_layer.commit()
        self._state = _TxState.COMMITTED

    def rollback(self) -> None:
        """Explicitly rollback the transaction."""
        self._check_active("rollback")
        self._data_layer.rollback()
        self._state = _TxState.ROLLED_BACK

    def _check_active(self, action: str) -> None:
        if self._state != _TxState.ACTIVE:
            raise TransactionStateError(self._state.value, action)
