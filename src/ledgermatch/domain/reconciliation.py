"""Reconciliation domain service.

Entry points used by the CLI (or any other presentation layer) to run
auto-reconciliation, create and undo manual matches, preview scores and
report on a bank account's reconciliation state.
"""

from collections import Counter
from decimal import Decimal
from typing import Optional

from ledgermatch.database.base import Database
from ledgermatch.domain import errors, scoring
from ledgermatch.domain.entities import (
    AccountingEntry,
    BankTransaction,
    DateRange,
    Match,
    MatchDetail,
    RecordStatus,
    ReconciliationSummary,
)
from ledgermatch.domain.errors import NotFoundError, ValidationError
from ledgermatch.domain.ledger_reader import LedgerReader
from ledgermatch.domain.match_writer import MatchWriter
from ledgermatch.domain.matcher import MultiPassMatcher
from ledgermatch.domain.settings import (
    ReconciliationSettingsService,
    validate_amount_tolerance,
    validate_tolerance_days,
)
from ledgermatch.logger import get_logger

logger = get_logger(__name__)


class ReconciliationService:
    """Service for matching bank transactions against accounting entries."""

    def __init__(self, db: Database):
        """Initialize reconciliation service.

        Args:
            db: Database instance
        """
        self.db = db
        self.reader = LedgerReader(db)
        self.writer = MatchWriter(db)
        self.settings = ReconciliationSettingsService(db)

    def _require_bank_account(self, bank_account_id: int):
        account = self.db.get_bank_account(bank_account_id)
        if account is None:
            raise NotFoundError(errors.bank_account_not_found(bank_account_id))
        return account

    def _require_transaction(self, transaction_id: int) -> BankTransaction:
        transaction = self.db.get_bank_transaction(transaction_id)
        if transaction is None:
            raise NotFoundError(errors.bank_transaction_not_found(transaction_id))
        return transaction

    def _require_entry(self, entry_id: int) -> AccountingEntry:
        entry = self.db.get_accounting_entry(entry_id)
        if entry is None:
            raise NotFoundError(errors.accounting_entry_not_found(entry_id))
        return entry

    def auto_reconcile(
        self,
        bank_account_id: int,
        date_range: Optional[DateRange] = None,
        tolerance_days: Optional[int] = None,
        amount_tolerance: Optional[Decimal] = None,
    ) -> list[Match]:
        """Run all matching passes over a bank account's pending records.

        Tolerances left as None come from the company's stored settings,
        which fall back to 7 days and 0.01.

        Args:
            bank_account_id: Bank account to reconcile
            date_range: Optional window applied to both ledgers
            tolerance_days: Maximum day difference for the amount-range pass
            amount_tolerance: Maximum relative amount difference for scoring

        Returns:
            Matches created by this run

        Raises:
            ValidationError: If no bank account is given or a tolerance is invalid
            NotFoundError: If the bank account doesn't exist
            ConflictError, StoreError: If a match cannot be written
        """
        if not bank_account_id:
            raise ValidationError("A bank account is required for auto-reconciliation")
        account = self._require_bank_account(bank_account_id)
        settings = self.settings.get_settings(account.company_id)

        matcher = MultiPassMatcher(
            self.reader,
            self.writer,
            tolerance_days=(
                validate_tolerance_days(tolerance_days)
                if tolerance_days is not None
                else settings.tolerance_days
            ),
            amount_tolerance=(
                validate_amount_tolerance(amount_tolerance)
                if amount_tolerance is not None
                else settings.amount_tolerance
            ),
            min_score=settings.min_match_score,
        )
        return matcher.run(bank_account_id, date_range)

    def create_manual_match(self, transaction_id: int, entry_id: int) -> Match:
        """Pair a transaction and an entry chosen by the user (confidence 100).

        Raises:
            NotFoundError: If either record is missing or the transaction has
                no bank account
            ConflictError: If either record is already reconciled
        """
        return self.writer.create_manual_match(transaction_id, entry_id)

    def undo_match(self, match_id: int) -> None:
        """Remove a match, returning both records to pending.

        Raises:
            NotFoundError: If the match doesn't exist
        """
        self.writer.delete_match(match_id)

    def score_candidate(
        self,
        transaction: BankTransaction,
        entry: AccountingEntry,
        amount_tolerance: Decimal = scoring.DEFAULT_AMOUNT_TOLERANCE,
    ) -> int:
        return scoring.score_candidate(transaction, entry, amount_tolerance)

    def preview_score(
        self,
        transaction_id: int,
        entry_id: int,
        amount_tolerance: Optional[Decimal] = None,
    ) -> scoring.ScoreBreakdown:
        """Score a stored pair without writing anything.

        The amount tolerance defaults to the company's setting.
        """
        transaction = self._require_transaction(transaction_id)
        entry = self._require_entry(entry_id)
        if amount_tolerance is None:
            amount_tolerance = self.settings.get_settings(entry.company_id).amount_tolerance
        else:
            amount_tolerance = validate_amount_tolerance(amount_tolerance)
        return scoring.explain_score(transaction, entry, amount_tolerance)

    def list_matches(
        self, bank_account_id: int, date_range: Optional[DateRange] = None
    ) -> list[Match]:
        """List a bank account's matches in creation order.

        ``date_range`` limits the result to matches created on those days.
        """
        self._require_bank_account(bank_account_id)
        date_range = date_range or DateRange()
        return self.db.list_matches(
            bank_account_id=bank_account_id,
            start_date=date_range.start,
            end_date=date_range.end,
        )

    def match_report(
        self, bank_account_id: int, date_range: Optional[DateRange] = None
    ) -> list[MatchDetail]:
        """Matches of a bank account with both paired records.

        Raises:
            NotFoundError: If the bank account doesn't exist, or a match
                points at a record that no longer exists
        """
        details = []
        for match in self.list_matches(bank_account_id, date_range):
            details.append(
                MatchDetail(
                    match=match,
                    transaction=self._require_transaction(match.bank_transaction_id),
                    entry=self._require_entry(match.accounting_entry_id),
                )
            )
        return details

    def get_summary(self, bank_account_id: int) -> ReconciliationSummary:
        """Counts and totals of reconciled and pending transactions."""
        self._require_bank_account(bank_account_id)
        transactions = self.db.list_bank_transactions(bank_account_id)
        matches = self.db.list_matches(bank_account_id=bank_account_id)

        reconciled = [t for t in transactions if t.status == RecordStatus.RECONCILED]
        pending = [t for t in transactions if t.status == RecordStatus.PENDING]

        return ReconciliationSummary(
            bank_account_id=bank_account_id,
            reconciled_count=len(reconciled),
            pending_count=len(pending),
            reconciled_amount=sum((t.amount for t in reconciled), Decimal(0)),
            pending_amount=sum((t.amount for t in pending), Decimal(0)),
            matches_by_method=dict(Counter(m.method for m in matches)),
            last_match_at=max((m.created_at for m in matches), default=None),
        )

    def repair_statuses(self, bank_account_id: int) -> dict[str, int]:
        """Make record statuses agree with the stored matches.

        Reconciled records with no match go back to pending, and pending
        records that have a match are marked reconciled. Covers the bank
        account's transactions and its company's entries.

        All changes are written in one store transaction, so a failure
        leaves every status as it was.

        Returns:
            Number of records changed, keyed by kind and new status

        Raises:
            NotFoundError: If the bank account doesn't exist
            StoreError: If the changes cannot be written; nothing is changed
        """
        account = self._require_bank_account(bank_account_id)

        matched_transactions = set()
        matched_entries = set()
        for match in self.db.list_matches():
            matched_transactions.add(match.bank_transaction_id)
            matched_entries.add(match.accounting_entry_id)

        transaction_statuses = {}
        for transaction in self.db.list_bank_transactions(bank_account_id):
            expected = (
                RecordStatus.RECONCILED
                if transaction.id in matched_transactions
                else RecordStatus.PENDING
            )
            if transaction.status != expected:
                transaction_statuses[transaction.id] = expected

        entry_statuses = {}
        for entry in self.db.list_accounting_entries(account.company_id):
            expected = (
                RecordStatus.RECONCILED if entry.id in matched_entries else RecordStatus.PENDING
            )
            if entry.status != expected:
                entry_statuses[entry.id] = expected

        counts = {
            "transactions_reset": _count(transaction_statuses, RecordStatus.PENDING),
            "transactions_reconciled": _count(transaction_statuses, RecordStatus.RECONCILED),
            "entries_reset": _count(entry_statuses, RecordStatus.PENDING),
            "entries_reconciled": _count(entry_statuses, RecordStatus.RECONCILED),
        }

        if transaction_statuses or entry_statuses:
            self.db.set_record_statuses(transaction_statuses, entry_statuses)
            logger.warning("Record statuses repaired", bank_account_id=bank_account_id, **counts)
        return counts


def _count(statuses: dict[int, RecordStatus], status: RecordStatus) -> int:
    return sum(1 for value in statuses.values() if value == status)
