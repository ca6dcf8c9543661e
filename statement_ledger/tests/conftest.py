"""
Shared fixtures for ledger tests.
"""
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from ..models.schema import Transaction, TransactionType


def make_transaction(id, when, transaction_type, amount, description="Test transaction"):
    """Build a persisted transaction; ``when`` is an ISO string or datetime."""
    if isinstance(when, str):
        when = datetime.fromisoformat(when)
    return Transaction(
        id=id,
        transaction_date=when,
        amount=Decimal(str(amount)),
        description=description,
        transaction_type=TransactionType(transaction_type),
        created_at=datetime(2024, 6, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def three_month_ledger():
    """Jan to Mar 2024 with every transaction type, given out of order."""
    return [
        make_transaction(5, "2024-03-01T09:00:00+00:00", "deposit", "500"),
        make_transaction(2, "2024-01-10T12:00:00+00:00", "expenditure", "50"),
        make_transaction(4, "2024-02-03T08:00:00+00:00", "uncertain", "30"),
        make_transaction(1, "2024-01-05T10:00:00+00:00", "deposit", "200"),
        make_transaction(3, "2024-02-02T18:30:00+00:00", "expenditure", "100"),
    ]
