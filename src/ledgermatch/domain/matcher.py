"""Multi-pass auto-reconciliation.

Four strategies run in a fixed order over the pending records of one bank
account. Earlier passes take priority: once a transaction or entry is
matched it is excluded from every later pass of the same run. Within a
pass, transactions are visited in ascending ID order and each one takes
its pick greedily; there is no global optimisation across transactions.

    1. exact         reference equality, or entry reference inside the
                     transaction description                  -> 100
    2. date_amount   same day and same absolute amount        -> 95
    3. amount_range  same absolute amount within tolerance_days,
                     closest date wins                        -> 85
    4. fuzzy         amount within amount_tolerance and score >= min_score,
                     best score wins                          -> score

In passes 3 and 4 a tie goes to the candidate seen last.

Every accepted pair is written before the next transaction is considered.
A failed write stops the run; pairs already written stay written.
"""

from collections.abc import Callable, Sequence
from decimal import Decimal
from typing import Optional

import structlog

from ledgermatch.domain.entities import (
    AccountingEntry,
    BankTransaction,
    DateRange,
    Match,
    MatchMethod,
)
from ledgermatch.domain.errors import ValidationError
from ledgermatch.domain.ledger_reader import LedgerReader
from ledgermatch.domain.match_writer import MatchWriter
from ledgermatch.domain.scoring import DEFAULT_AMOUNT_TOLERANCE, score_candidate
from ledgermatch.logger import get_logger
from ledgermatch.utils.normalization import (
    absolute_amount,
    day_difference,
    relative_amount_difference,
)

logger = get_logger(__name__)

DEFAULT_TOLERANCE_DAYS = 7
DEFAULT_MIN_SCORE = 70

EXACT_CONFIDENCE = 100
DATE_AMOUNT_CONFIDENCE = 95
AMOUNT_RANGE_CONFIDENCE = 85


def reference_matches(transaction: BankTransaction, entry: AccountingEntry) -> bool:
    entry_ref = (entry.reference or "").strip()
    if not entry_ref:
        return False
    if (transaction.reference or "").strip() == entry_ref:
        return True
    return entry_ref in (transaction.description or "")


def same_magnitude(transaction: BankTransaction, entry: AccountingEntry) -> bool:
    return absolute_amount(transaction.amount) == absolute_amount(entry.amount)


class MultiPassMatcher:
    """Runs the four matching passes for one bank account.

    Exclusion sets live on the instance for the duration of ``run`` and are
    reset at its start, so a matcher can be reused but never shares state
    between runs.
    """

    def __init__(
        self,
        reader: LedgerReader,
        writer: MatchWriter,
        tolerance_days: int = DEFAULT_TOLERANCE_DAYS,
        amount_tolerance: Decimal = DEFAULT_AMOUNT_TOLERANCE,
        min_score: int = DEFAULT_MIN_SCORE,
    ):
        if tolerance_days < 0:
            raise ValidationError(f"Tolerance days must be non-negative, got {tolerance_days}")
        if amount_tolerance < 0:
            raise ValidationError(f"Amount tolerance must be non-negative, got {amount_tolerance}")
        self.reader = reader
        self.writer = writer
        self.tolerance_days = tolerance_days
        self.amount_tolerance = Decimal(amount_tolerance)
        self.min_score = min_score
        self.matches: list[Match] = []
        self._matched_transactions: set[int] = set()
        self._matched_entries: set[int] = set()

    def run(self, bank_account_id: int, date_range: Optional[DateRange] = None) -> list[Match]:
        """Match pending records of a bank account.

        Returns:
            Matches written by this run, in write order

        Raises:
            ValidationError: If no bank account is given
            NotFoundError: If the bank account doesn't exist
            ConflictError, StoreError: If a write fails; ``self.matches``
                still holds what was written before the failure
        """
        if not bank_account_id:
            raise ValidationError("A bank account is required for auto-reconciliation")

        self.matches = []
        self._matched_transactions = set()
        self._matched_entries = set()

        with structlog.contextvars.bound_contextvars(bank_account_id=bank_account_id):
            records = self.reader.read_unmatched(bank_account_id, date_range)
            transactions, entries = records.transactions, records.entries
            logger.info(
                "Auto-reconciliation started",
                transactions=len(transactions),
                entries=len(entries),
                tolerance_days=self.tolerance_days,
                amount_tolerance=str(self.amount_tolerance),
                min_score=self.min_score,
            )
            if not transactions or not entries:
                logger.info("Nothing to reconcile")
                return []

            passes: Sequence[tuple[MatchMethod, Callable]] = (
                (MatchMethod.EXACT, self._exact_reference_pass),
                (MatchMethod.DATE_AMOUNT, self._date_amount_pass),
                (MatchMethod.AMOUNT_RANGE, self._amount_range_pass),
                (MatchMethod.FUZZY, self._fuzzy_pass),
            )
            for method, run_pass in passes:
                before = len(self.matches)
                try:
                    run_pass(transactions, entries)
                except Exception:
                    logger.exception(
                        "Auto-reconciliation aborted",
                        pass_type=method.value,
                        matches_written=len(self.matches),
                    )
                    raise
                logger.info("Pass completed", pass_type=method.value, matches=len(self.matches) - before)

            logger.info("Auto-reconciliation finished", matches=len(self.matches))
            return list(self.matches)

    def _unmatched(self, records, matched: set[int]):
        return [r for r in records if r.id not in matched]

    def _accept(
        self,
        transaction: BankTransaction,
        entry: AccountingEntry,
        method: MatchMethod,
        confidence: int,
    ) -> None:
        match = self.writer.create_match(transaction.id, entry.id, method, confidence)
        self.matches.append(match)
        self._matched_transactions.add(transaction.id)
        self._matched_entries.add(entry.id)

    def _first_candidate(self, transactions, entries, predicate, method, confidence) -> None:
        for transaction in self._unmatched(transactions, self._matched_transactions):
            for entry in self._unmatched(entries, self._matched_entries):
                if predicate(transaction, entry):
                    self._accept(transaction, entry, method, confidence)
                    break

    def _exact_reference_pass(self, transactions, entries) -> None:
        self._first_candidate(
            transactions, entries, reference_matches, MatchMethod.EXACT, EXACT_CONFIDENCE
        )

    def _date_amount_pass(self, transactions, entries) -> None:
        def same_day_same_amount(transaction, entry):
            return same_magnitude(transaction, entry) and day_difference(transaction.date, entry.date) == 0

        self._first_candidate(
            transactions,
            entries,
            same_day_same_amount,
            MatchMethod.DATE_AMOUNT,
            DATE_AMOUNT_CONFIDENCE,
        )

    def _amount_range_pass(self, transactions, entries) -> None:
        for transaction in self._unmatched(transactions, self._matched_transactions):
            closest = None
            closest_days = None
            for entry in self._unmatched(entries, self._matched_entries):
                if not same_magnitude(transaction, entry):
                    continue
                days = day_difference(transaction.date, entry.date)
                if days > self.tolerance_days:
                    continue
                # ties go to the later candidate
                if closest_days is None or days <= closest_days:
                    closest, closest_days = entry, days
            if closest is not None:
                self._accept(transaction, closest, MatchMethod.AMOUNT_RANGE, AMOUNT_RANGE_CONFIDENCE)

    def _fuzzy_pass(self, transactions, entries) -> None:
        for transaction in self._unmatched(transactions, self._matched_transactions):
            best = None
            best_score = 0
            for entry in self._unmatched(entries, self._matched_entries):
                if relative_amount_difference(transaction.amount, entry.amount) > self.amount_tolerance:
                    continue
                score = score_candidate(transaction, entry, self.amount_tolerance)
                logger.debug(
                    "Fuzzy candidate scored",
                    bank_transaction_id=transaction.id,
                    accounting_entry_id=entry.id,
                    score=score,
                )
                if score >= self.min_score and score >= best_score:
                    best, best_score = entry, score
            if best is not None:
                self._accept(transaction, best, MatchMethod.FUZZY, best_score)
