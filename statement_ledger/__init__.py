"""
Statement Ledger

Rebuilds the reading order of financial document pages from positioned text
runs, extracts provisional transactions line by line, and aggregates persisted
transactions into monthly and overall bank statements with running balances.
"""

__version__ = "1.0.0"

from .core.layout import LayoutReconstructor, reconstruct_page
from .core.extractors import FieldExtractor
from .core.document import parse_document, parse_document_text, reconstruct_document, render_document_text
from .core.ledger import LedgerAggregator, monthly_statements, overall_statement, running_balances, window_balances
from .core.errors import MalformedInputError
from .models.schema import ParsedDocument, ParsedPage, ParsedTransaction, Transaction, TransactionType, BankStatement

__all__ = [
    "LayoutReconstructor",
    "reconstruct_page",
    "FieldExtractor",
    "parse_document",
    "parse_document_text",
    "reconstruct_document",
    "render_document_text",
    "LedgerAggregator",
    "monthly_statements",
    "overall_statement",
    "running_balances",
    "window_balances",
    "MalformedInputError",
    "ParsedDocument",
    "ParsedPage",
    "ParsedTransaction",
    "Transaction",
    "TransactionType",
    "BankStatement"
]
