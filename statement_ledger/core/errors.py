"""
Exceptions surfaced to callers of the ledger pipeline.
"""


class MalformedInputError(ValueError):
    """Raised for caller input that cannot be interpreted, e.g. a bad statement id."""


class TransactionNotFoundError(LookupError):
    """Raised by a store when a transaction id does not exist for the owner."""

    def __init__(self, owner_id: str, transaction_id: int):
        super().__init__(f"Transaction {transaction_id} not found for owner {owner_id!r}")
        self.owner_id = owner_id
        self.transaction_id = transaction_id
