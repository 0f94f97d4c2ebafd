"""
Period aggregation service.

Filters payout and expense records by date range, platform and status, and
computes the period sums every other service builds on:

- received: Σ netAmount over RECEIVED payouts
- expected: Σ netAmount × probability over PENDING/PROCESSING payouts,
  probability defaulting to the configured `default_payout_probability`
- expenses: Σ amount

Expected income is a probability-weighted expectation, not a raw sum, so
low-confidence payouts are discounted.

All functions are pure; empty inputs yield empty lists or 0.0.
"""

from typing import Iterable, List, Optional, Sequence, TypeVar

from payout_insights.core.config import get_settings
from payout_insights.models import (
    EXPECTED_STATUSES,
    DateRange,
    Expense,
    Payout,
    PayoutStatus,
    Platform,
)

T = TypeVar("T", Payout, Expense)


# =============================================================================
# Filters
# =============================================================================


def filter_by_date_range(
    items: Sequence[T],
    date_range: DateRange,
    include_end: bool = True,
) -> List[T]:
    """
    Keep items whose date falls inside the range.

    Args:
        items: Payouts or expenses
        date_range: Window to keep
        include_end: When False the window is half-open, [start, end)

    Returns:
        Items in their original order
    """
    start, end = date_range.startDate, date_range.endDate
    if include_end:
        return [item for item in items if start <= item.date <= end]
    return [item for item in items if start <= item.date < end]


def filter_by_platform(
    items: Sequence[T],
    platforms: Optional[Iterable[Platform]],
) -> List[T]:
    """
    Keep items belonging to one of the selected platforms.

    An empty (or missing) selection means "all platforms" and passes every
    item through, including expenses without a platform.
    """
    selected = set(platforms or ())
    if not selected:
        return list(items)
    return [item for item in items if item.platform is not None and item.platform in selected]


def filter_by_status(
    payouts: Iterable[Payout],
    statuses: Optional[Iterable[PayoutStatus]],
) -> List[Payout]:
    """Keep payouts in one of the given statuses; empty selection keeps all."""
    selected = set(statuses or ())
    if not selected:
        return list(payouts)
    return [payout for payout in payouts if payout.status in selected]


def is_expected(payout: Payout) -> bool:
    return payout.status in EXPECTED_STATUSES


# =============================================================================
# Calculators
# =============================================================================


def calculate_received(payouts: Iterable[Payout]) -> float:
    """Sum of net amounts over received payouts."""
    received = filter_by_status(payouts, [PayoutStatus.RECEIVED])
    return sum((p.netAmount for p in received), 0.0)


def calculate_expected(
    payouts: Iterable[Payout],
    default_probability: Optional[float] = None,
) -> float:
    """
    Probability-weighted sum of net amounts over pending/processing payouts.

    Args:
        payouts: Payout records (any status; non-expected ones are ignored)
        default_probability: Probability for payouts without one. Falls back
            to the `default_payout_probability` setting.

    Returns:
        Σ netAmount × probability
    """
    if default_probability is None:
        default_probability = get_settings().default_payout_probability

    total = 0.0
    for payout in filter_by_status(payouts, EXPECTED_STATUSES):
        probability = payout.probability if payout.probability is not None else default_probability
        total += payout.netAmount * probability
    return total


def calculate_expenses(expenses: Iterable[Expense]) -> float:
    """Sum of expense amounts."""
    return sum((e.amount for e in expenses), 0.0)


def calculate_fees(payouts: Iterable[Payout]) -> float:
    return sum((p.fees for p in payouts), 0.0)


def calculate_gross(payouts: Iterable[Payout]) -> float:
    return sum((p.grossAmount for p in payouts), 0.0)
