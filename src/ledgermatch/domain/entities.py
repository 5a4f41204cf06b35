"""Domain model entities for ledgermatch.

These are pure data classes representing business concepts, independent of
database schema. The matching engine only ever sees these, never ORM rows.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional

from ledgermatch.domain.errors import ValidationError


class RecordStatus(str, Enum):
    """Reconciliation status carried by both ledgers."""

    PENDING = "pending"
    RECONCILED = "reconciled"


class MatchMethod(str, Enum):
    """Which pass (or user action) produced a match."""

    EXACT = "exact"
    DATE_AMOUNT = "date_amount"
    AMOUNT_RANGE = "amount_range"
    FUZZY = "fuzzy"
    MANUAL = "manual"

    @property
    def is_automatic(self) -> bool:
        return self is not MatchMethod.MANUAL


class TransactionType(str, Enum):
    """Bank-side classification of a statement line."""

    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    TRANSFER = "transfer"
    PAYMENT = "payment"
    FEE = "fee"
    OTHER = "other"


class DocumentType(str, Enum):
    """Accounting document classification."""

    INVOICE = "invoice"
    CREDIT_NOTE = "credit_note"
    DEBIT_NOTE = "debit_note"
    OTHER = "other"


class DocumentDirection(str, Enum):
    """Whether the document was issued by the company or received by it."""

    ISSUED = "issued"
    RECEIVED = "received"


@dataclass(frozen=True)
class Company:
    """Company domain entity; owns bank accounts and accounting entries."""

    id: int
    name: str
    tax_id: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class BankAccount:
    """Bank account domain entity."""

    id: int
    company_id: int
    name: str
    bank_name: str
    account_number: Optional[str]
    currency: str
    created_at: datetime


@dataclass(frozen=True)
class BankTransaction:
    """Bank statement line."""

    id: int
    bank_account_id: Optional[int]
    date: date
    amount: Decimal
    description: Optional[str]
    reference: Optional[str]
    status: RecordStatus
    transaction_type: TransactionType = TransactionType.OTHER
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class AccountingEntry:
    """Internally booked ledger line."""

    id: int
    company_id: int
    date: date
    amount: Decimal
    description: Optional[str]
    reference: Optional[str]
    status: RecordStatus
    document_type: DocumentType = DocumentType.OTHER
    document_direction: Optional[DocumentDirection] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Match:
    """A confirmed pairing of one bank transaction and one accounting entry."""

    id: int
    bank_transaction_id: int
    accounting_entry_id: int
    bank_account_id: Optional[int]
    method: MatchMethod
    confidence: int
    notes: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar-date window; either bound may be open."""

    start: Optional[date] = None
    end: Optional[date] = None

    def __post_init__(self) -> None:
        if self.start is not None and self.end is not None and self.start > self.end:
            raise ValidationError(f"Date range start {self.start} is after end {self.end}")


@dataclass(frozen=True)
class ReconciliationSettings:
    """Per-company run parameters for auto-reconciliation."""

    company_id: int
    tolerance_days: int = 7
    amount_tolerance: Decimal = Decimal("0.01")
    min_match_score: int = 70
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class ReconciliationSummary:
    """Reconciliation status of one bank account."""

    bank_account_id: int
    reconciled_count: int
    pending_count: int
    reconciled_amount: Decimal
    pending_amount: Decimal
    matches_by_method: dict[MatchMethod, int] = field(default_factory=dict)
    last_match_at: Optional[datetime] = None

    @property
    def total_count(self) -> int:
        return self.reconciled_count + self.pending_count

    @property
    def reconciled_ratio(self) -> float:
        if self.total_count == 0:
            return 0.0
        return self.reconciled_count / self.total_count


@dataclass(frozen=True)
class MatchDetail:
    """A match together with the two records it pairs."""

    match: Match
    transaction: BankTransaction
    entry: AccountingEntry


@dataclass(frozen=True)
class ReconciliationRule:
    """User-defined criteria that single out bank transactions.

    ``description_pattern`` and ``amount_pattern`` hold alternatives
    separated by ``|``. Lower priority values are evaluated first.
    """

    id: int
    company_id: int
    name: str
    description_pattern: Optional[str]
    amount_pattern: Optional[str]
    transaction_type: Optional[TransactionType]
    priority: int
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
