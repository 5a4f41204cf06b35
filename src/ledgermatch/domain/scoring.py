"""Confidence scoring for a candidate (bank transaction, accounting entry) pair.

The score is a gate followed by a sum. A pair whose amounts differ by more
than the amount tolerance is rejected outright with 0; otherwise sign,
amount, date and description components are added and the total is
clamped to 0..100.
"""

from dataclasses import dataclass
from decimal import Decimal

from ledgermatch.domain.entities import AccountingEntry, BankTransaction
from ledgermatch.utils.normalization import (
    day_difference,
    folded,
    numeric_tokens,
    relative_amount_difference,
    same_sign,
)

DEFAULT_AMOUNT_TOLERANCE = Decimal("0.01")

SIGN_MATCH_POINTS = 20
SIGN_MISMATCH_PENALTY = -40

# (upper bound on relative difference, points); first bound that holds wins
AMOUNT_TIERS: tuple[tuple[Decimal, int], ...] = (
    (Decimal("0"), 50),
    (Decimal("0.01"), 45),
    (Decimal("0.03"), 40),
    (Decimal("0.05"), 35),
    (Decimal("0.10"), 25),
    (Decimal("0.20"), 15),
)

# (upper bound on day difference, points)
DATE_TIERS: tuple[tuple[int, int], ...] = (
    (0, 30),
    (3, 25),
    (7, 20),
    (14, 15),
    (30, 10),
)
DATE_FLOOR_POINTS = 5

REFERENCE_EQUAL_POINTS = 20
REFERENCE_CONTAINED_POINTS = 15
SHARED_NUMBER_POINTS = 10
SHARED_KEYWORD_POINTS = 5

KEYWORDS = (
    "invoice",
    "payment",
    "transfer",
    "deposit",
    "charge",
    "purchase",
    "sale",
    "factura",
    "pago",
    "transferencia",
    "abono",
    "cargo",
    "compra",
    "venta",
)


@dataclass(frozen=True)
class ScoreBreakdown:
    """Components of a confidence score."""

    sign: int
    amount: int
    date: int
    description: int
    relative_difference: Decimal
    day_difference: int
    rejected: bool
    total: int


def amount_points(relative_difference: Decimal) -> int:
    for bound, points in AMOUNT_TIERS:
        if relative_difference <= bound:
            return points
    return 0


def date_points(days: int) -> int:
    for bound, points in DATE_TIERS:
        if days <= bound:
            return points
    return DATE_FLOOR_POINTS


def description_points(transaction: BankTransaction, entry: AccountingEntry) -> int:
    """Reference/description affinity; the first rule that applies wins."""
    tx_ref = folded(transaction.reference)
    tx_desc = folded(transaction.description)
    entry_ref = folded(entry.reference)
    entry_desc = folded(entry.description)

    if tx_ref and entry_ref and tx_ref == entry_ref:
        return REFERENCE_EQUAL_POINTS

    if (
        (tx_ref and entry_ref and (tx_ref in entry_ref or entry_ref in tx_ref))
        or (entry_ref and entry_ref in tx_desc)
        or (tx_ref and tx_ref in entry_desc)
    ):
        return REFERENCE_CONTAINED_POINTS

    tx_text = f"{tx_desc} {tx_ref}"
    entry_text = f"{entry_ref} {entry_desc}"

    entry_numbers = set(numeric_tokens(entry_text))
    if any(number in entry_numbers for number in numeric_tokens(tx_text)):
        return SHARED_NUMBER_POINTS

    if any(keyword in tx_text and keyword in entry_text for keyword in KEYWORDS):
        return SHARED_KEYWORD_POINTS

    return 0


def explain_score(
    transaction: BankTransaction,
    entry: AccountingEntry,
    amount_tolerance: Decimal = DEFAULT_AMOUNT_TOLERANCE,
) -> ScoreBreakdown:
    """Score a candidate pair and return every component."""
    sign = SIGN_MATCH_POINTS if same_sign(transaction.amount, entry.amount) else SIGN_MISMATCH_PENALTY
    rel_diff = relative_amount_difference(transaction.amount, entry.amount)
    days = day_difference(transaction.date, entry.date)

    if rel_diff > amount_tolerance:
        return ScoreBreakdown(
            sign=sign,
            amount=0,
            date=0,
            description=0,
            relative_difference=rel_diff,
            day_difference=days,
            rejected=True,
            total=0,
        )

    amount = amount_points(rel_diff)
    dated = date_points(days)
    described = description_points(transaction, entry)
    total = max(0, min(100, sign + amount + dated + described))

    return ScoreBreakdown(
        sign=sign,
        amount=amount,
        date=dated,
        description=described,
        relative_difference=rel_diff,
        day_difference=days,
        rejected=False,
        total=total,
    )


def score_candidate(
    transaction: BankTransaction,
    entry: AccountingEntry,
    amount_tolerance: Decimal = DEFAULT_AMOUNT_TOLERANCE,
) -> int:
    """Confidence (0-100) that the two records describe the same event.

    Deterministic and side-effect free. Returns 0 whenever the relative
    amount difference exceeds ``amount_tolerance``.
    """
    return explain_score(transaction, entry, amount_tolerance).total
