"""
Ledger aggregation: running balances and per-period bank statements.

Two balance semantics are kept apart:

- ``running_balances`` folds the *whole history* from the initial balance and
  backs statement generation.
- ``window_balances`` restarts from a caller-supplied baseline and only covers
  the transactions it is given, for displaying an isolated date range.
"""
import calendar
import re
from collections import OrderedDict
from datetime import datetime, time, timedelta, timezone
from decimal import Decimal
from itertools import accumulate
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple
import logging

from .errors import MalformedInputError
from ..models.schema import BankStatement, StatementDateRange, Transaction, TransactionType

logger = logging.getLogger(__name__)

DEFAULT_INITIAL_BALANCE = Decimal('1000')
OVERALL_STATEMENT_ID = "overall"

_MONTH_KEY = re.compile(r'^(\d{4})-(\d{2})$')
_END_OF_DAY = time(23, 59, 59, 999000)


def balance_effect(transaction: Transaction) -> Decimal:
    """Signed change a transaction applies to the balance."""
    if transaction.transaction_type == TransactionType.DEPOSIT:
        return transaction.amount
    if transaction.transaction_type == TransactionType.EXPENDITURE:
        return -transaction.amount
    return Decimal('0')


def sort_chronologically(transactions: Iterable[Transaction]) -> List[Transaction]:
    return sorted(transactions, key=lambda t: (t.transaction_date, t.id))


def running_balances(transactions: Iterable[Transaction],
                     initial_balance: Decimal = DEFAULT_INITIAL_BALANCE) -> Mapping[int, Decimal]:
    """
    Fold the full history into a read-only ``{transaction id: balance after it}`` table.

    Args:
        transactions: Transactions in any order
        initial_balance: Balance before the earliest transaction

    Returns:
        Immutable mapping of post-transaction balances
    """
    ordered = sort_chronologically(transactions)
    balances = accumulate(
        (balance_effect(t) for t in ordered),
        initial=Decimal(initial_balance),
    )
    next(balances)
    return MappingProxyType({t.id: balance for t, balance in zip(ordered, balances)})


def window_balances(transactions: Iterable[Transaction],
                    initial_balance: Decimal = DEFAULT_INITIAL_BALANCE) -> List[Transaction]:
    """
    Recompute balances over just the given transactions, starting from a baseline.

    Returns:
        Transactions in chronological order, decorated with ``running_balance``
    """
    ordered = sort_chronologically(transactions)
    table = running_balances(ordered, initial_balance)
    return [t.with_running_balance(table[t.id]) for t in ordered]


def month_key(moment: datetime) -> str:
    """UTC ``YYYY-MM`` key of a timestamp."""
    utc = moment.astimezone(timezone.utc)
    return f"{utc.year:04d}-{utc.month:02d}"


def start_of_day(moment: datetime) -> datetime:
    utc = moment.astimezone(timezone.utc)
    return datetime.combine(utc.date(), time.min, tzinfo=timezone.utc)


def end_of_day(moment: datetime) -> datetime:
    utc = moment.astimezone(timezone.utc)
    return datetime.combine(utc.date(), _END_OF_DAY, tzinfo=timezone.utc)


def parse_month_key(statement_id: str) -> Tuple[datetime, datetime]:
    """
    Turn a ``YYYY-MM`` statement id into its UTC month boundary.

    Raises:
        MalformedInputError: If the id is not a valid month key
    """
    match = _MONTH_KEY.match(statement_id or '')
    if not match:
        raise MalformedInputError(f"Invalid statement id: {statement_id!r}")

    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12 or year < 1:
        raise MalformedInputError(f"Invalid statement id: {statement_id!r}")

    last_day = calendar.monthrange(year, month)[1]
    start = datetime(year, month, 1, tzinfo=timezone.utc)
    end = datetime(year, month, last_day, tzinfo=timezone.utc) + timedelta(days=1) - timedelta(microseconds=1)
    return start, end


def build_statement(statement_id: str, transactions: Sequence[Transaction],
                    balances: Mapping[int, Decimal]) -> BankStatement:
    """
    Build one statement from chronologically ordered transactions and the
    whole-history balance table.
    """
    first, last = transactions[0], transactions[-1]

    total_expenditures = sum(
        (t.amount for t in transactions if t.transaction_type == TransactionType.EXPENDITURE),
        Decimal('0'),
    )
    total_deposits = sum(
        (t.amount for t in transactions if t.transaction_type == TransactionType.DEPOSIT),
        Decimal('0'),
    )

    return BankStatement(
        id=statement_id,
        date_range=StatementDateRange(
            start=start_of_day(first.transaction_date),
            end=end_of_day(last.transaction_date),
        ),
        transaction_count=len(transactions),
        starting_balance=balances[first.id] - balance_effect(first),
        ending_balance=balances[last.id],
        total_expenditures=total_expenditures,
        total_deposits=total_deposits,
    )


def group_by_month(transactions: Iterable[Transaction]) -> Dict[str, List[Transaction]]:
    """Chronologically ordered transactions per UTC month key."""
    groups: Dict[str, List[Transaction]] = OrderedDict()
    for transaction in sort_chronologically(transactions):
        groups.setdefault(month_key(transaction.transaction_date), []).append(transaction)
    return groups


def monthly_statements(transactions: Iterable[Transaction],
                       initial_balance: Decimal = DEFAULT_INITIAL_BALANCE) -> List[BankStatement]:
    """
    One statement per UTC calendar month, most recent first.

    An empty input gives an empty list.
    """
    ordered = sort_chronologically(transactions)
    if not ordered:
        return []

    balances = running_balances(ordered, initial_balance)
    statements = [
        build_statement(key, group, balances)
        for key, group in group_by_month(ordered).items()
    ]
    statements.sort(key=lambda s: s.date_range.start, reverse=True)
    return statements


def overall_statement(transactions: Iterable[Transaction],
                      initial_balance: Decimal = DEFAULT_INITIAL_BALANCE) -> Optional[BankStatement]:
    """Statement spanning the full history, or None when there are no transactions."""
    ordered = sort_chronologically(transactions)
    if not ordered:
        return None
    return build_statement(OVERALL_STATEMENT_ID, ordered, running_balances(ordered, initial_balance))


def statement_baseline(statement_id: str, statements: Sequence[BankStatement],
                       initial_balance: Decimal = DEFAULT_INITIAL_BALANCE) -> Decimal:
    """Ending balance of the statement just before ``statement_id``, else the initial balance."""
    start, _ = parse_month_key(statement_id)
    earlier = [s for s in statements
               if s.id != OVERALL_STATEMENT_ID and s.date_range.start < start]
    if not earlier:
        return Decimal(initial_balance)
    return max(earlier, key=lambda s: s.date_range.start).ending_balance


class LedgerAggregator:
    """
    Statement queries for one owner, backed by a transaction store.

    Every call reads the store afresh; nothing is cached between calls.
    """

    def __init__(self, store, owner_id: str,
                 initial_balance: Decimal = DEFAULT_INITIAL_BALANCE):
        self.store = store
        self.owner_id = owner_id
        self.initial_balance = Decimal(initial_balance)

    @classmethod
    def from_settings(cls, store, owner_id: str, settings) -> "LedgerAggregator":
        return cls(store, owner_id, initial_balance=settings.ledger.initial_balance)

    def get_bank_statements(self) -> List[BankStatement]:
        """Monthly statements, most recent first."""
        transactions = self.store.list_all(self.owner_id)
        statements = monthly_statements(transactions, self.initial_balance)
        logger.info(f"Built {len(statements)} statements from {len(transactions)} transactions")
        return statements

    def get_overall_statement(self) -> Optional[BankStatement]:
        return overall_statement(self.store.list_all(self.owner_id), self.initial_balance)

    def get_transactions_with_balance(self, start: datetime, end: datetime,
                                      initial_balance: Optional[Decimal] = None) -> List[Transaction]:
        """Transactions in ``[start, end]`` with balances restarted from a baseline."""
        baseline = self.initial_balance if initial_balance is None else Decimal(initial_balance)
        transactions = self.store.list_by_date_range(self.owner_id, start, end)
        return window_balances(transactions, baseline)

    def get_transactions_by_statement_id(self, statement_id: str) -> List[Transaction]:
        """
        Transactions of one statement with running balances.

        Args:
            statement_id: ``"overall"`` or a ``YYYY-MM`` month key

        Raises:
            MalformedInputError: If the id is neither
        """
        if statement_id == OVERALL_STATEMENT_ID:
            return window_balances(self.store.list_all(self.owner_id), self.initial_balance)

        start, end = parse_month_key(statement_id)
        baseline = statement_baseline(statement_id, self.get_bank_statements(), self.initial_balance)
        logger.debug(f"Statement {statement_id}: baseline {baseline}")
        return self.get_transactions_with_balance(start, end, baseline)
