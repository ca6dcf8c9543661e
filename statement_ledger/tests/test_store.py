"""
Tests for the in-memory transaction store.
"""
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from ..core.errors import TransactionNotFoundError
from ..core.store import InMemoryTransactionStore
from ..models.schema import NewTransaction, TransactionType, TransactionUpdate
from .conftest import make_transaction


def new_transaction(day, amount="10", transaction_type="expenditure"):
    return NewTransaction(
        transaction_date=datetime(2024, 1, day, 12, tzinfo=timezone.utc),
        amount=Decimal(amount),
        description=f"Day {day}",
        transaction_type=transaction_type,
    )


@pytest.fixture
def store():
    return InMemoryTransactionStore()


class TestInsert:

    def test_ids_are_sequential(self, store):
        first = store.insert("alice", new_transaction(1))
        second = store.insert("bob", new_transaction(2))
        assert (first.id, second.id) == (1, 2)

    def test_created_at_defaults_to_now(self, store):
        row = store.insert("alice", new_transaction(1))
        assert row.created_at.tzinfo == timezone.utc
        assert row.running_balance is None

    def test_put_keeps_id(self, store):
        store.put("alice", make_transaction(7, "2024-01-01T00:00:00+00:00", "deposit", "5"))
        row = store.insert("alice", new_transaction(2))
        assert row.id == 8
        assert [t.id for t in store.list_all("alice")] == [7, 8]


class TestQueries:

    @pytest.fixture
    def filled(self, store):
        for day in (9, 3, 5):
            store.insert("alice", new_transaction(day))
        store.insert("bob", new_transaction(4))
        return store

    def test_list_all_scoped_and_ordered(self, filled):
        rows = filled.list_all("alice")
        assert [t.transaction_date.day for t in rows] == [3, 5, 9]
        assert filled.list_all("carol") == []

    def test_date_range_is_inclusive(self, filled):
        rows = filled.list_by_date_range(
            "alice",
            datetime(2024, 1, 3, 12, tzinfo=timezone.utc),
            datetime(2024, 1, 5, 12, tzinfo=timezone.utc),
        )
        assert [t.transaction_date.day for t in rows] == [3, 5]

    def test_naive_bounds_are_utc(self, filled):
        rows = filled.list_by_date_range("alice", datetime(2024, 1, 4), datetime(2024, 1, 10))
        assert [t.transaction_date.day for t in rows] == [5, 9]


class TestChanges:

    def test_partial_update(self, store):
        row = store.insert("alice", new_transaction(1))
        updated = store.update("alice", row.id, TransactionUpdate(transaction_type="deposit"))
        assert updated.transaction_type == TransactionType.DEPOSIT
        assert updated.amount == Decimal("10")
        assert store.list_all("alice") == [updated]

    def test_update_validates_amount(self):
        with pytest.raises(ValueError):
            TransactionUpdate(amount=Decimal("0"))

    def test_update_of_other_owner_fails(self, store):
        row = store.insert("alice", new_transaction(1))
        with pytest.raises(TransactionNotFoundError) as exc_info:
            store.update("bob", row.id, TransactionUpdate(description="x"))
        assert exc_info.value.transaction_id == row.id
        assert exc_info.value.owner_id == "bob"

    def test_delete(self, store):
        row = store.insert("alice", new_transaction(1))
        store.delete("alice", row.id)
        assert store.list_all("alice") == []
        with pytest.raises(TransactionNotFoundError):
            store.delete("alice", row.id)

    def test_not_found_is_lookup_error(self, store):
        with pytest.raises(LookupError):
            store.delete("alice", 42)
