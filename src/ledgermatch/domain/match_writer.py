"""Match persistence: creating a match and undoing one."""

from typing import Optional

from ledgermatch.database.base import Database
from ledgermatch.domain.entities import Match, MatchMethod
from ledgermatch.domain.errors import ValidationError
from ledgermatch.logger import get_logger

logger = get_logger(__name__)

MANUAL_CONFIDENCE = 100


def default_notes(method: MatchMethod, confidence: int) -> str:
    kind = "auto" if method.is_automatic else "manual"
    return f"{kind} reconciliation with {confidence}% confidence"


class MatchWriter:
    """Writes and removes matches.

    Each operation is a single store transaction: the match row and both
    status flags change together or not at all.
    """

    def __init__(self, db: Database):
        self.db = db

    def create_match(
        self,
        transaction_id: int,
        entry_id: int,
        method: MatchMethod,
        confidence: int,
        notes: Optional[str] = None,
    ) -> Match:
        """Persist a match and mark both records reconciled.

        Args:
            transaction_id: Bank transaction ID
            entry_id: Accounting entry ID
            method: Pass (or manual action) that produced the pairing
            confidence: Score in 1..100
            notes: Free text; a description of the method is used if omitted

        Returns:
            The stored match

        Raises:
            ValidationError: If confidence is outside 1..100
            NotFoundError: If the transaction is missing or has no bank
                account, or the entry is missing
            ConflictError: If either record is no longer pending
            StoreError: If the store fails
        """
        method = MatchMethod(method)
        if isinstance(confidence, bool) or not isinstance(confidence, int):
            raise ValidationError(f"Confidence must be an integer, got {confidence!r}")
        if not 1 <= confidence <= 100:
            raise ValidationError(f"Confidence must be between 1 and 100, got {confidence}")

        match = self.db.create_match(
            bank_transaction_id=transaction_id,
            accounting_entry_id=entry_id,
            method=method,
            confidence=confidence,
            notes=notes or default_notes(method, confidence),
        )
        logger.info(
            "Match created",
            match_id=match.id,
            bank_transaction_id=transaction_id,
            accounting_entry_id=entry_id,
            method=method.value,
            confidence=confidence,
        )
        return match

    def create_manual_match(self, transaction_id: int, entry_id: int) -> Match:
        return self.create_match(transaction_id, entry_id, MatchMethod.MANUAL, MANUAL_CONFIDENCE)

    def delete_match(self, match_id: int) -> Match:
        """Delete a match and return both records to pending.

        Raises:
            NotFoundError: If the match doesn't exist
            StoreError: If the store fails; the match is left in place
        """
        match = self.db.delete_match(match_id)
        logger.info(
            "Match removed",
            match_id=match_id,
            bank_transaction_id=match.bank_transaction_id,
            accounting_entry_id=match.accounting_entry_id,
        )
        return match
