"""
Data-access contract for persisted transactions, plus an in-memory store.

Every operation is scoped by an opaque ``owner_id``. Errors raised by a store
propagate to the caller unchanged; the ledger never retries.
"""
from datetime import datetime, timezone
from typing import Dict, List, Protocol
import logging

from .errors import TransactionNotFoundError
from ..models.schema import NewTransaction, Transaction, TransactionUpdate

logger = logging.getLogger(__name__)


class TransactionStore(Protocol):
    """What the ledger needs from the persistence layer."""

    def insert(self, owner_id: str, transaction: NewTransaction) -> Transaction:
        ...

    def update(self, owner_id: str, transaction_id: int, changes: TransactionUpdate) -> Transaction:
        ...

    def delete(self, owner_id: str, transaction_id: int) -> None:
        ...

    def list_by_date_range(self, owner_id: str, start: datetime, end: datetime) -> List[Transaction]:
        ...

    def list_all(self, owner_id: str) -> List[Transaction]:
        ...


class InMemoryTransactionStore:
    """Dictionary-backed store; ids are assigned sequentially across owners."""

    def __init__(self):
        self._rows: Dict[str, Dict[int, Transaction]] = {}
        self._next_id = 1

    def insert(self, owner_id: str, transaction: NewTransaction) -> Transaction:
        row = Transaction(
            id=self._next_id,
            created_at=transaction.created_at or datetime.now(timezone.utc),
            **transaction.model_dump(exclude={'created_at'}),
        )
        self._rows.setdefault(owner_id, {})[row.id] = row
        self._next_id += 1
        logger.debug(f"Inserted transaction {row.id} for owner {owner_id}")
        return row

    def put(self, owner_id: str, transaction: Transaction) -> Transaction:
        """Store an already persisted row, keeping its id."""
        self._rows.setdefault(owner_id, {})[transaction.id] = transaction
        self._next_id = max(self._next_id, transaction.id + 1)
        return transaction

    def update(self, owner_id: str, transaction_id: int, changes: TransactionUpdate) -> Transaction:
        rows = self._rows.get(owner_id, {})
        if transaction_id not in rows:
            raise TransactionNotFoundError(owner_id, transaction_id)

        updated = rows[transaction_id].model_copy(update=changes.model_dump(exclude_unset=True))
        # model_copy does not validate
        updated = Transaction.model_validate(updated.model_dump())
        rows[transaction_id] = updated
        return updated

    def delete(self, owner_id: str, transaction_id: int) -> None:
        rows = self._rows.get(owner_id, {})
        if transaction_id not in rows:
            raise TransactionNotFoundError(owner_id, transaction_id)
        del rows[transaction_id]

    def list_by_date_range(self, owner_id: str, start: datetime, end: datetime) -> List[Transaction]:
        """Transactions with ``start <= transaction_date <= end``, in date order."""
        start = _utc(start)
        end = _utc(end)
        return sorted(
            (t for t in self._rows.get(owner_id, {}).values()
             if start <= t.transaction_date <= end),
            key=lambda t: t.transaction_date,
        )

    def list_all(self, owner_id: str) -> List[Transaction]:
        return sorted(self._rows.get(owner_id, {}).values(), key=lambda t: t.transaction_date)


def _utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment
