"""Per-company reconciliation settings."""

from decimal import Decimal, InvalidOperation
from typing import Optional

from ledgermatch.database.base import Database
from ledgermatch.domain import errors
from ledgermatch.domain.entities import ReconciliationSettings
from ledgermatch.domain.errors import NotFoundError, ValidationError
from ledgermatch.logger import get_logger

logger = get_logger(__name__)

MAX_TOLERANCE_DAYS = 365
# Matches the scale of reconciliation_settings.amount_tolerance
AMOUNT_TOLERANCE_STEP = Decimal("0.0001")


def validate_tolerance_days(value) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"Tolerance days must be an integer, got {value!r}")
    if not 0 <= value <= MAX_TOLERANCE_DAYS:
        raise ValidationError(f"Tolerance days must be between 0 and {MAX_TOLERANCE_DAYS}, got {value}")
    return value


def validate_amount_tolerance(value) -> Decimal:
    try:
        tolerance = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Invalid amount tolerance '{value}'")
    if not tolerance.is_finite() or not Decimal(0) <= tolerance <= Decimal(1):
        raise ValidationError(f"Amount tolerance must be between 0 and 1, got {value}")
    if tolerance != tolerance.quantize(AMOUNT_TOLERANCE_STEP):
        raise ValidationError(
            f"Amount tolerance allows at most 4 decimal places, got {value}"
        )
    return tolerance


def validate_min_match_score(value) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"Minimum match score must be an integer, got {value!r}")
    if not 1 <= value <= 100:
        raise ValidationError(f"Minimum match score must be between 1 and 100, got {value}")
    return value


class ReconciliationSettingsService:
    """Reads and updates a company's auto-reconciliation parameters."""

    def __init__(self, db: Database):
        self.db = db

    def _require_company(self, company_id: int) -> None:
        if self.db.get_company(company_id) is None:
            raise NotFoundError(errors.company_not_found(company_id))

    def get_settings(self, company_id: int) -> ReconciliationSettings:
        """Stored settings for a company, or the defaults if none are stored."""
        self._require_company(company_id)
        stored = self.db.get_reconciliation_settings(company_id)
        return stored if stored is not None else ReconciliationSettings(company_id=company_id)

    def update_settings(
        self,
        company_id: int,
        tolerance_days: Optional[int] = None,
        amount_tolerance: Optional[Decimal] = None,
        min_match_score: Optional[int] = None,
    ) -> ReconciliationSettings:
        """Change some settings; the ones left as None keep their value.

        Raises:
            NotFoundError: If the company doesn't exist
            ValidationError: If a value is out of range
        """
        current = self.get_settings(company_id)
        updated = ReconciliationSettings(
            company_id=company_id,
            tolerance_days=(
                validate_tolerance_days(tolerance_days)
                if tolerance_days is not None
                else current.tolerance_days
            ),
            amount_tolerance=(
                validate_amount_tolerance(amount_tolerance)
                if amount_tolerance is not None
                else current.amount_tolerance
            ),
            min_match_score=(
                validate_min_match_score(min_match_score)
                if min_match_score is not None
                else current.min_match_score
            ),
        )
        self.db.save_reconciliation_settings(updated)
        logger.info(
            "Reconciliation settings updated",
            company_id=company_id,
            tolerance_days=updated.tolerance_days,
            amount_tolerance=str(updated.amount_tolerance),
            min_match_score=updated.min_match_score,
        )
        return self.get_settings(company_id)

    def reset_settings(self, company_id: int) -> ReconciliationSettings:
        """Drop stored settings so the defaults apply again."""
        self._require_company(company_id)
        self.db.delete_reconciliation_settings(company_id)
        logger.info("Reconciliation settings reset", company_id=company_id)
        return ReconciliationSettings(company_id=company_id)
