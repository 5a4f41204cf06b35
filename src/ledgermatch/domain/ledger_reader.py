"""Reads the unmatched side of both ledgers for one reconciliation run."""

from dataclasses import dataclass
from typing import Optional

from ledgermatch.database.base import Database
from ledgermatch.domain import errors
from ledgermatch.domain.entities import (
    AccountingEntry,
    BankAccount,
    BankTransaction,
    DateRange,
    RecordStatus,
)
from ledgermatch.domain.errors import NotFoundError
from ledgermatch.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class UnmatchedRecords:
    """Pending records on both sides, in stable (ascending ID) order."""

    bank_account: BankAccount
    transactions: tuple[BankTransaction, ...]
    entries: tuple[AccountingEntry, ...]


class LedgerReader:
    """Fetches pending bank transactions and accounting entries."""

    def __init__(self, db: Database):
        self.db = db

    def read_unmatched(
        self, bank_account_id: int, date_range: Optional[DateRange] = None
    ) -> UnmatchedRecords:
        """Read pending transactions of a bank account and pending entries of
        its company, optionally restricted to a date window.

        The window applies to each record's own date, bounds inclusive.

        Raises:
            NotFoundError: If the bank account doesn't exist
            StoreError: If the store fails; nothing is returned
        """
        account = self.db.get_bank_account(bank_account_id)
        if account is None:
            raise NotFoundError(errors.bank_account_not_found(bank_account_id))

        date_range = date_range or DateRange()
        transactions = self.db.list_bank_transactions(
            bank_account_id,
            start_date=date_range.start,
            end_date=date_range.end,
            status=RecordStatus.PENDING,
        )
        entries = self.db.list_accounting_entries(
            account.company_id,
            start_date=date_range.start,
            end_date=date_range.end,
            status=RecordStatus.PENDING,
        )

        logger.info(
            "Unmatched records loaded",
            bank_account_id=bank_account_id,
            company_id=account.company_id,
            start_date=str(date_range.start) if date_range.start else None,
            end_date=str(date_range.end) if date_range.end else None,
            transactions=len(transactions),
            entries=len(entries),
        )
        return UnmatchedRecords(
            bank_account=account,
            transactions=tuple(transactions),
            entries=tuple(entries),
        )
