"""
Pydantic models for parsed documents, ledger transactions and bank statements.
"""
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class ParsedTransaction(BaseModel):
    """Provisional per-line record produced by the field extractor."""
    date: Optional[str] = None
    amount: Optional[str] = None
    location: Optional[str] = None
    category: Optional[str] = None
    description: str = ""
    raw_text: str = ""
    line_number: int
    is_new_line: bool = False


class IdentifiedData(BaseModel):
    """Every distinct date, amount, location and category found on a page."""
    dates: List[str] = Field(default_factory=list)
    amounts: List[str] = Field(default_factory=list)
    locations: List[str] = Field(default_factory=list)
    categories: List[str] = Field(default_factory=list)


class ParsedPage(BaseModel):
    """One reconstructed page."""
    page_number: int
    text: str = ""
    paragraphs: List[str] = Field(default_factory=list)
    transactions: List[ParsedTransaction] = Field(default_factory=list)
    identified_data: IdentifiedData = Field(default_factory=IdentifiedData)
    error: Optional[str] = None

    @property
    def has_content(self) -> bool:
        return bool(self.text)


class DocumentDateRange(BaseModel):
    earliest: str
    latest: str


class DocumentAmountRange(BaseModel):
    min: str
    max: str
    total: str


class DocumentSummary(BaseModel):
    """Aggregate statistics over every page of a document."""
    total_pages: int = 0
    page_numbers: List[int] = Field(default_factory=list)
    has_content: bool = False
    total_transactions: int = 0
    date_range: Optional[DocumentDateRange] = None
    amount_range: Optional[DocumentAmountRange] = None
    locations: List[str] = Field(default_factory=list)
    categories: List[str] = Field(default_factory=list)


class ParsedDocument(BaseModel):
    """Complete parse result handed to the review step."""
    pages: List[ParsedPage] = Field(default_factory=list)
    summary: DocumentSummary = Field(default_factory=DocumentSummary)


class TransactionType(str, Enum):
    EXPENDITURE = "expenditure"
    DEPOSIT = "deposit"
    UNCERTAIN = "uncertain"


class NewTransaction(BaseModel):
    """Insert shape for the data-access layer."""
    transaction_date: datetime
    amount: Decimal = Field(gt=0)
    description: str
    location: Optional[str] = None
    transaction_type: TransactionType
    category: Optional[str] = None
    created_at: Optional[datetime] = None

    @field_validator('transaction_date', 'created_at')
    @classmethod
    def normalize_timezone(cls, v):
        return _as_utc(v) if v is not None else v


class TransactionUpdate(BaseModel):
    """Partial update; only the fields that are set are applied."""
    transaction_date: Optional[datetime] = None
    amount: Optional[Decimal] = Field(default=None, gt=0)
    description: Optional[str] = None
    location: Optional[str] = None
    transaction_type: Optional[TransactionType] = None
    category: Optional[str] = None

    @field_validator('transaction_date')
    @classmethod
    def normalize_timezone(cls, v):
        return _as_utc(v) if v is not None else v


class Transaction(BaseModel):
    """Persisted, authoritative ledger row."""
    model_config = ConfigDict(frozen=True)

    id: int
    transaction_date: datetime
    amount: Decimal = Field(gt=0)
    description: str
    location: Optional[str] = None
    transaction_type: TransactionType
    category: Optional[str] = None
    created_at: datetime
    running_balance: Optional[Decimal] = None

    @field_validator('transaction_date', 'created_at')
    @classmethod
    def normalize_timezone(cls, v):
        return _as_utc(v)

    def with_running_balance(self, balance: Decimal) -> "Transaction":
        """Return a copy decorated with the given running balance."""
        return self.model_copy(update={"running_balance": balance})


class StatementDateRange(BaseModel):
    start: datetime
    end: datetime


class BankStatement(BaseModel):
    """Aggregated view of a month (``YYYY-MM``) or of the whole history (``overall``)."""
    id: str
    date_range: StatementDateRange
    transaction_count: int
    starting_balance: Decimal
    ending_balance: Decimal
    total_expenditures: Decimal
    total_deposits: Decimal


class TextStats(BaseModel):
    words: int
    lines: int
    characters: int
    characters_no_spaces: int
