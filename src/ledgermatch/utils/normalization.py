"""Amount, date and text helpers shared by the scorer and the matcher."""

import re
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

_DIGIT_RUN = re.compile(r"\d{4,}")


def absolute_amount(amount: Decimal) -> Decimal:
    """Return the magnitude of a signed amount."""
    return abs(Decimal(amount))


def relative_amount_difference(transaction_amount: Decimal, entry_amount: Decimal) -> Decimal:
    """Relative difference of the two magnitudes, measured against the
    transaction.

    A zero transaction amount is measured against 1 instead.
    """
    tx_abs = absolute_amount(transaction_amount)
    entry_abs = absolute_amount(entry_amount)
    denominator = tx_abs if tx_abs != 0 else Decimal(1)
    return abs((tx_abs - entry_abs) / denominator)


def as_calendar_date(value: date | datetime) -> date:
    """Drop any time-of-day component."""
    if isinstance(value, datetime):
        return value.date()
    return value


def day_difference(first: date | datetime, second: date | datetime) -> int:
    """Absolute number of calendar days between two dates."""
    return abs((as_calendar_date(first) - as_calendar_date(second)).days)


def same_sign(first: Decimal, second: Decimal) -> bool:
    """True when both amounts are inflows (>= 0) or both are outflows."""
    return (first >= 0) == (second >= 0)


def clean_text(value: Optional[str]) -> Optional[str]:
    """Trim a free-text field; blank strings become None."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def folded(value: Optional[str]) -> str:
    """Lowercased, trimmed text, empty string for missing values."""
    return (value or "").strip().lower()


def numeric_tokens(text: str) -> list[str]:
    """Digit runs of length four or more, in order of appearance."""
    return _DIGIT_RUN.findall(text)
