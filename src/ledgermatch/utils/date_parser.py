"""Date parsing utilities."""

import re
from datetime import date, timedelta
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

from ledgermatch.domain.entities import DateRange

PERIODS = ("this-week", "this-month", "this-year", "last-week", "last-month", "last-year")

_DAYS_AGO = re.compile(r"^(\d+)\s+days?\s+ago$")


def _start_of(period: str, today: date) -> date:
    if period == "week":
        return today - timedelta(days=today.weekday())
    if period == "month":
        return today.replace(day=1)
    if period == "year":
        return today.replace(month=1, day=1)
    raise ValueError(f"Unknown period '{period}'")


def _step(period: str) -> relativedelta:
    return {
        "week": relativedelta(weeks=1),
        "month": relativedelta(months=1),
        "year": relativedelta(years=1),
    }[period]


def parse_date(date_str: str, today: Optional[date] = None) -> date:
    """Parse a date string into a calendar date.

    Accepts ISO and other absolute formats understood by dateutil, plus a
    few relative forms: "today", "yesterday", "N days ago", and
    "this/last week|month|year" (the first day of that period).

    Args:
        date_str: Date string
        today: Reference day for relative forms (defaults to date.today())

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    text = date_str.strip().lower()
    today = today or date.today()

    if text == "today":
        return today
    if text == "yesterday":
        return today - timedelta(days=1)

    days_ago = _DAYS_AGO.match(text)
    if days_ago:
        return today - timedelta(days=int(days_ago.group(1)))

    for prefix in ("this ", "last "):
        if text.startswith(prefix):
            period = text[len(prefix):]
            if period not in ("week", "month", "year"):
                break
            start = _start_of(period, today)
            return start if prefix == "this " else start - _step(period)

    try:
        return date_parser.parse(date_str.strip(), dayfirst=False).date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def get_date_range(period: str, today: Optional[date] = None) -> DateRange:
    """Get the date window for a named period.

    "this-*" periods end today; "last-*" periods cover the whole previous
    week, month or year.

    Raises:
        ValueError: If period string is not recognized
    """
    key = period.strip().lower()
    if key not in PERIODS:
        raise ValueError(f"Unknown period: '{period}'. Supported periods: {', '.join(PERIODS)}")

    today = today or date.today()
    which, unit = key.split("-")
    current_start = _start_of(unit, today)

    if which == "this":
        return DateRange(start=current_start, end=today)
    return DateRange(start=current_start - _step(unit), end=current_start - timedelta(days=1))
