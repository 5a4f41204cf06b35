"""Abstract record store interface."""

from abc import ABC, abstractmethod
from typing import Optional
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from ledgermatch.domain.entities import (
    AccountingEntry,
    BankAccount,
    BankTransaction,
    Company,
    DocumentDirection,
    DocumentType,
    Match,
    MatchMethod,
    RecordStatus,
    ReconciliationRule,
    ReconciliationSettings,
    TransactionType,
)


class Database(ABC):
    """Abstract record store for ledgermatch.

    Implementations raise ``StoreError`` for I/O failures, ``NotFoundError``
    for missing rows on write paths, and ``ConflictError`` when a match
    would violate the one-active-match-per-record rule.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Company operations
    @abstractmethod
    def create_company(self, name: str, tax_id: Optional[str] = None) -> int:
        """Create a company. Returns company ID."""
        pass

    @abstractmethod
    def get_company(self, company_id: int) -> Optional[Company]:
        """Get company by ID."""
        pass

    @abstractmethod
    def list_companies(self) -> list[Company]:
        """List all companies."""
        pass

    # Bank account operations
    @abstractmethod
    def create_bank_account(
        self,
        company_id: int,
        name: str,
        bank_name: str,
        account_number: Optional[str] = None,
        currency: str = "CLP",
    ) -> int:
        """Create a bank account. Returns bank account ID."""
        pass

    @abstractmethod
    def get_bank_account(self, bank_account_id: int) -> Optional[BankAccount]:
        """Get bank account by ID."""
        pass

    @abstractmethod
    def list_bank_accounts(self, company_id: Optional[int] = None) -> list[BankAccount]:
        """List bank accounts, optionally filtered by company."""
        pass

    # Bank transaction operations
    @abstractmethod
    def create_bank_transaction(
        self,
        bank_account_id: Optional[int],
        date: date,
        amount: Decimal,
        description: Optional[str] = None,
        reference: Optional[str] = None,
        transaction_type: TransactionType = TransactionType.OTHER,
    ) -> int:
        """Create a pending bank transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def get_bank_transaction(self, transaction_id: int) -> Optional[BankTransaction]:
        """Get bank transaction by ID."""
        pass

    @abstractmethod
    def list_bank_transactions(
        self,
        bank_account_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Optional[RecordStatus] = None,
    ) -> list[BankTransaction]:
        """List an account's bank transactions in ascending ID order.

        Args:
            bank_account_id: Owning bank account
            start_date: Optional inclusive lower bound on the transaction date
            end_date: Optional inclusive upper bound on the transaction date
            status: Optional status filter
        """
        pass

    @abstractmethod
    def set_bank_transaction_status(self, transaction_id: int, status: RecordStatus) -> None:
        """Overwrite a bank transaction's status."""
        pass

    # Accounting entry operations
    @abstractmethod
    def create_accounting_entry(
        self,
        company_id: int,
        date: date,
        amount: Decimal,
        description: Optional[str] = None,
        reference: Optional[str] = None,
        document_type: DocumentType = DocumentType.OTHER,
        document_direction: Optional[DocumentDirection] = None,
    ) -> int:
        """Create a pending accounting entry. Returns entry ID."""
        pass

    @abstractmethod
    def get_accounting_entry(self, entry_id: int) -> Optional[AccountingEntry]:
        """Get accounting entry by ID."""
        pass

    @abstractmethod
    def list_accounting_entries(
        self,
        company_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Optional[RecordStatus] = None,
    ) -> list[AccountingEntry]:
        """List a company's accounting entries in ascending ID order."""
        pass

    @abstractmethod
    def set_accounting_entry_status(self, entry_id: int, status: RecordStatus) -> None:
        """Overwrite an accounting entry's status."""
        pass

    @abstractmethod
    def set_record_statuses(
        self,
        transaction_statuses: dict[int, RecordStatus],
        entry_statuses: dict[int, RecordStatus],
    ) -> None:
        """Overwrite the status of several transactions and entries in one
        transaction.

        Raises:
            NotFoundError: If any record is missing; nothing is changed
            StoreError: On any store failure; nothing is changed
        """
        pass

    # Match operations
    @abstractmethod
    def create_match(
        self,
        bank_transaction_id: int,
        accounting_entry_id: int,
        method: MatchMethod,
        confidence: int,
        notes: Optional[str] = None,
    ) -> Match:
        """Insert a match and mark both records reconciled, atomically.

        The match carries the transaction's bank account ID.

        Raises:
            NotFoundError: If the transaction or entry is missing, or the
                transaction has no bank account
            ConflictError: If either record is no longer pending
            StoreError: On any store failure; nothing is written
        """
        pass

    @abstractmethod
    def get_match(self, match_id: int) -> Optional[Match]:
        """Get match by ID."""
        pass

    @abstractmethod
    def list_matches(
        self,
        bank_account_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Match]:
        """List matches in ascending ID order.

        Optionally limited to one bank account and to matches created
        within an inclusive window of calendar days.
        """
        pass

    @abstractmethod
    def delete_match(self, match_id: int) -> Match:
        """Delete a match and reset both records to pending, atomically.

        Returns the deleted match.

        Raises:
            NotFoundError: If the match does not exist
            StoreError: On any store failure; the match is left in place
        """
        pass

    @abstractmethod
    def backfill_match_bank_accounts(self) -> int:
        """Fill the bank account ID of matches that lack it from their
        transaction. Returns the number of matches updated."""
        pass

    # Settings operations
    @abstractmethod
    def get_reconciliation_settings(self, company_id: int) -> Optional[ReconciliationSettings]:
        """Get stored reconciliation settings for a company."""
        pass

    @abstractmethod
    def save_reconciliation_settings(self, settings: ReconciliationSettings) -> None:
        """Insert or replace a company's reconciliation settings."""
        pass

    @abstractmethod
    def delete_reconciliation_settings(self, company_id: int) -> None:
        """Remove a company's stored settings, if any."""
        pass

    # Rule operations
    @abstractmethod
    def create_rule(
        self,
        company_id: int,
        name: str,
        description_pattern: Optional[str] = None,
        amount_pattern: Optional[str] = None,
        transaction_type: Optional[TransactionType] = None,
        priority: int = 100,
        is_active: bool = True,
    ) -> int:
        """Create a reconciliation rule. Returns rule ID.

        Raises:
            ConflictError: If the company already has a rule with this name
        """
        pass

    @abstractmethod
    def get_rule(self, rule_id: int) -> Optional[ReconciliationRule]:
        """Get reconciliation rule by ID."""
        pass

    @abstractmethod
    def list_rules(self, company_id: int, active_only: bool = False) -> list[ReconciliationRule]:
        """List a company's rules by ascending priority, then ID."""
        pass

    @abstractmethod
    def update_rule(self, rule: ReconciliationRule) -> None:
        """Store every editable field of an existing rule.

        Raises:
            NotFoundError: If the rule does not exist
            ConflictError: If the new name is taken within the company
        """
        pass

    @abstractmethod
    def delete_rule(self, rule_id: int) -> None:
        """Delete a reconciliation rule.

        Raises:
            NotFoundError: If the rule does not exist
        """
        pass
