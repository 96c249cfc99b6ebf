"""Unit tests for TransactionManager."""

from __future__ import annotations

import pytest

from row_mapper.core.connection import DataLayer
from row_mapper.core.exceptions import TransactionStateError


@pytest.fixture
def tx_layer(data_layer: DataLayer) -> DataLayer:
    data_layer.execute("CREATE TABLE users (id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT)")
    return data_layer


def _count(layer: DataLayer) -> int:
    row = layer.fetch_one("SELECT COUNT(*) AS cnt FROM users")
    assert row is not None
    return int(row["cnt"])


class TestTransactionManager:
    def test_commit_persists_changes(self, tx_layer: DataLayer) -> None:
        with tx_layer.transaction() as tx:
            tx_layer.execute("INSERT INTO users (name) VALUES (?)", ("Alice",))
            assert tx.state == "active"

        assert tx.state == "committed"
        assert _count(tx_layer) == 1

    def test_auto_rollback_on_exception(self, tx_layer: DataLayer) -> None:
        with pytest.raises(RuntimeError, match="boom"), tx_layer.transaction():
            tx_layer.execute("INSERT INTO users (name) VALUES (?)", ("Alice",))
            raise RuntimeError("boom")

        assert _count(tx_layer) == 0
        assert not tx_layer.in_transaction

    def test_explicit_rollback(self, tx_layer: DataLayer) -> None:
        with tx_layer.transaction() as tx:
            tx_layer.execute("INSERT INTO users (name) VALUES (?)", ("Alice",))
            tx.rollback()

        assert tx.state == "rolled_back"
        assert _count(tx_layer) == 0

    def test_commit_after_rollback_raises(self, tx_layer: DataLayer) -> None:
        with tx_layer.transaction() as tx:
            tx.rollback()
            with pytest.raises(TransactionStateError):
                tx.commit()

    def test_nested_begin_raises(self, tx_layer: DataLayer) -> None:
        with tx_layer.transaction(), pytest.raises(TransactionStateError):
            tx_layer.begin()

    def test_commit_without_begin(self, tx_layer: DataLayer) -> None:
        with pytest.raises(TransactionStateError, match="idle"):
            tx_layer.commit()

    def test_autocommit_outside_transaction(self, tx_layer: DataLayer) -> None:
        tx_layer.execute("INSERT INTO users (name) VALUES (?)", ("Alice",))
        tx_layer.begin()
        tx_layer.rollback()
        assert _count(tx_layer) == 1
