"""Ledger domain service: companies, bank accounts and both ledgers' records.

This is the ingestion-side surface. It enforces the guarantees the
matching engine relies on: calendar dates, signed Decimal amounts and
trimmed text fields.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Optional

from ledgermatch.database.base import Database
from ledgermatch.domain import errors
from ledgermatch.domain.entities import (
    AccountingEntry,
    BankAccount,
    BankTransaction,
    Company,
    DateRange,
    DocumentDirection,
    DocumentType,
    RecordStatus,
    TransactionType,
)
from ledgermatch.domain.errors import ConflictError, NotFoundError, ValidationError
from ledgermatch.logger import get_logger
from ledgermatch.utils.normalization import as_calendar_date, clean_text

logger = get_logger(__name__)


def _coerce_amount(amount) -> Decimal:
    if isinstance(amount, float):
        amount = str(amount)
    try:
        value = Decimal(amount)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"Invalid amount '{amount}'")
    if not value.is_finite():
        raise ValidationError(f"Invalid amount '{amount}'")
    return value


def _coerce_date(value) -> date:
    if not isinstance(value, (date, datetime)):
        raise ValidationError(f"Invalid date '{value}'")
    return as_calendar_date(value)


class LedgerService:
    """Service for managing companies, bank accounts and ledger records."""

    def __init__(self, db: Database):
        """Initialize ledger service.

        Args:
            db: Database instance
        """
        self.db = db

    # Companies
    def create_company(self, name: str, tax_id: Optional[str] = None) -> int:
        """Create a company.

        Raises:
            ValidationError: If the name is blank
            ConflictError: If a company with that name exists
        """
        name = clean_text(name)
        if name is None:
            raise ValidationError("Company name is required")
        if any(c.name == name for c in self.db.list_companies()):
            raise ConflictError(f"Company with name '{name}' already exists")
        return self.db.create_company(name=name, tax_id=clean_text(tax_id))

    def get_company(self, company_id: int) -> Optional[Company]:
        return self.db.get_company(company_id)

    def list_companies(self) -> list[Company]:
        return self.db.list_companies()

    # Bank accounts
    def create_bank_account(
        self,
        company_id: int,
        name: str,
        bank_name: Optional[str] = None,
        account_number: Optional[str] = None,
        currency: str = "CLP",
    ) -> int:
        """Create a bank account owned by a company.

        The bank name defaults to the account name.

        Raises:
            NotFoundError: If the company doesn't exist
            ConflictError: If an account with that name exists
        """
        if self.db.get_company(company_id) is None:
            raise NotFoundError(errors.company_not_found(company_id))

        name = clean_text(name)
        if name is None:
            raise ValidationError("Bank account name is required")
        if any(a.name == name for a in self.db.list_bank_accounts()):
            raise ConflictError(f"Bank account with name '{name}' already exists")

        currency = (clean_text(currency) or "CLP").upper()
        if len(currency) != 3:
            raise ValidationError(f"Invalid currency code '{currency}'")

        return self.db.create_bank_account(
            company_id=company_id,
            name=name,
            bank_name=clean_text(bank_name) or name,
            account_number=clean_text(account_number),
            currency=currency,
        )

    def get_bank_account(self, bank_account_id: int) -> Optional[BankAccount]:
        return self.db.get_bank_account(bank_account_id)

    def require_bank_account(self, bank_account_id: int) -> BankAccount:
        """Get a bank account or raise NotFoundError."""
        account = self.db.get_bank_account(bank_account_id)
        if account is None:
            raise NotFoundError(errors.bank_account_not_found(bank_account_id))
        return account

    def list_bank_accounts(self, company_id: Optional[int] = None) -> list[BankAccount]:
        return self.db.list_bank_accounts(company_id=company_id)

    # Bank transactions
    def add_bank_transaction(
        self,
        bank_account_id: int,
        date: date,
        amount: Decimal,
        description: Optional[str] = None,
        reference: Optional[str] = None,
        transaction_type: TransactionType = TransactionType.OTHER,
    ) -> int:
        """Record one bank statement line as pending.

        Args:
            bank_account_id: Owning bank account
            date: Statement date
            amount: Signed amount, credits positive, debits negative
            description: Optional statement description
            reference: Optional statement reference or document number
            transaction_type: Bank-side classification

        Returns:
            Bank transaction ID

        Raises:
            NotFoundError: If the bank account doesn't exist
            ValidationError: If the date or amount is invalid
        """
        self.require_bank_account(bank_account_id)
        txn_id = self.db.create_bank_transaction(
            bank_account_id=bank_account_id,
            date=_coerce_date(date),
            amount=_coerce_amount(amount),
            description=clean_text(description),
            reference=clean_text(reference),
            transaction_type=TransactionType(transaction_type),
        )
        logger.debug("Bank transaction recorded", bank_transaction_id=txn_id, bank_account_id=bank_account_id)
        return txn_id

    def get_bank_transaction(self, transaction_id: int) -> Optional[BankTransaction]:
        return self.db.get_bank_transaction(transaction_id)

    def list_bank_transactions(
        self,
        bank_account_id: int,
        date_range: Optional[DateRange] = None,
        status: Optional[RecordStatus] = None,
    ) -> list[BankTransaction]:
        """List a bank account's transactions.

        Raises:
            NotFoundError: If the bank account doesn't exist
        """
        self.require_bank_account(bank_account_id)
        date_range = date_range or DateRange()
        return self.db.list_bank_transactions(
            bank_account_id,
            start_date=date_range.start,
            end_date=date_range.end,
            status=status,
        )

    # Accounting entries
    def add_accounting_entry(
        self,
        company_id: int,
        date: date,
        amount: Decimal,
        description: Optional[str] = None,
        reference: Optional[str] = None,
        document_type: DocumentType = DocumentType.OTHER,
        document_direction: Optional[DocumentDirection] = None,
    ) -> int:
        """Record one accounting entry as pending.

        Raises:
            NotFoundError: If the company doesn't exist
            ValidationError: If the date or amount is invalid
        """
        if self.db.get_company(company_id) is None:
            raise NotFoundError(errors.company_not_found(company_id))
        entry_id = self.db.create_accounting_entry(
            company_id=company_id,
            date=_coerce_date(date),
            amount=_coerce_amount(amount),
            description=clean_text(description),
            reference=clean_text(reference),
            document_type=DocumentType(document_type),
            document_direction=DocumentDirection(document_direction) if document_direction else None,
        )
        logger.debug("Accounting entry recorded", accounting_entry_id=entry_id, company_id=company_id)
        return entry_id

    def get_accounting_entry(self, entry_id: int) -> Optional[AccountingEntry]:
        return self.db.get_accounting_entry(entry_id)

    def list_accounting_entries(
        self,
        company_id: int,
        date_range: Optional[DateRange] = None,
        status: Optional[RecordStatus] = None,
    ) -> list[AccountingEntry]:
        """List a company's accounting entries.

        Raises:
            NotFoundError: If the company doesn't exist
        """
        if self.db.get_company(company_id) is None:
            raise NotFoundError(errors.company_not_found(company_id))
        date_range = date_range or DateRange()
        return self.db.list_accounting_entries(
            company_id,
            start_date=date_range.start,
            end_date=date_range.end,
            status=status,
        )
