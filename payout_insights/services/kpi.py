"""
KPI comparison service.

Computes the dashboard KPIs (received, expected, expenses) for the current
period and compares each one with the previous period of identical duration.

Previous period:
    duration   = endDate - startDate
    prevStart  = startDate - duration
    prevEnd    = startDate

Boundary handling:
    The current period is filtered inclusively on both ends. The previous
    period is filtered half-open, [prevStart, prevEnd), so a record stamped
    exactly at startDate is counted once, in the current period.

Change percentage:
    changePercentage = change / previous x 100, or 0 when previous is 0.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple

from payout_insights.models import (
    DateRange,
    Expense,
    KPIData,
    KPIMetric,
    Payout,
    Platform,
)
from payout_insights.services.aggregation import (
    calculate_expected,
    calculate_expenses,
    calculate_received,
    filter_by_date_range,
    filter_by_platform,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PeriodSummary:
    """Filtered records and their sums for one reporting window."""

    date_range: DateRange
    payouts: Tuple[Payout, ...]
    expenses: Tuple[Expense, ...]
    received: float
    expected: float
    expenses_total: float

    @property
    def payout_count(self) -> int:
        return len(self.payouts)

    @property
    def expense_count(self) -> int:
        return len(self.expenses)

    @property
    def actual_profit(self) -> float:
        return self.received - self.expenses_total

    @property
    def total_income(self) -> float:
        return self.received + self.expected

    @property
    def expected_net(self) -> float:
        return self.received + self.expected - self.expenses_total


def get_previous_period(date_range: DateRange) -> DateRange:
    """
    Window of the same duration immediately preceding `date_range`.

    Example:
        Oct 8 00:00 - Oct 15 00:00 -> Oct 1 00:00 - Oct 8 00:00
    """
    duration = date_range.duration
    return DateRange(
        startDate=date_range.startDate - duration,
        endDate=date_range.startDate,
    )


def get_comparison_window(date_range: DateRange) -> DateRange:
    """
    Previous period start through current period end.

    Loading records for this window gives the KPI and insight services both
    periods to compare; they filter each period themselves.
    """
    return DateRange(
        startDate=get_previous_period(date_range).startDate,
        endDate=date_range.endDate,
        label=date_range.label,
    )


def summarize_period(
    payouts: Sequence[Payout],
    expenses: Sequence[Expense],
    date_range: DateRange,
    platforms: Optional[Iterable[Platform]] = None,
    include_end: bool = True,
) -> PeriodSummary:
    """
    Filter records to a window and platform selection and sum them.

    Args:
        payouts: All payout records
        expenses: All expense records
        date_range: Window to summarise
        platforms: Platform filter; empty or None means all
        include_end: Whether endDate itself belongs to the window

    Returns:
        PeriodSummary with the filtered records and received/expected/expenses
    """
    selected = list(platforms or ())
    period_payouts = filter_by_platform(
        filter_by_date_range(payouts, date_range, include_end=include_end),
        selected,
    )
    period_expenses = filter_by_platform(
        filter_by_date_range(expenses, date_range, include_end=include_end),
        selected,
    )
    return PeriodSummary(
        date_range=date_range,
        payouts=tuple(period_payouts),
        expenses=tuple(period_expenses),
        received=calculate_received(period_payouts),
        expected=calculate_expected(period_payouts),
        expenses_total=calculate_expenses(period_expenses),
    )


def summarize_previous_period(
    payouts: Sequence[Payout],
    expenses: Sequence[Expense],
    date_range: DateRange,
    platforms: Optional[Iterable[Platform]] = None,
) -> PeriodSummary:
    """Summary of the period preceding `date_range`, end bound excluded."""
    return summarize_period(
        payouts,
        expenses,
        get_previous_period(date_range),
        platforms,
        include_end=False,
    )


def calculate_kpi_metric(current: float, previous: float) -> KPIMetric:
    change = current - previous
    change_percentage = 0.0 if previous == 0 else (change / previous) * 100
    return KPIMetric(
        total=current,
        change=change,
        changePercentage=change_percentage,
    )


def calculate_kpi_data(
    payouts: Sequence[Payout],
    expenses: Sequence[Expense],
    date_range: DateRange,
    platforms: Optional[Iterable[Platform]] = None,
) -> KPIData:
    """
    Current-versus-previous KPIs for received, expected and expenses.

    Args:
        payouts: All payout records
        expenses: All expense records
        date_range: Current window
        platforms: Platform filter; empty or None means all

    Returns:
        KPIData with one KPIMetric per KPI
    """
    selected = list(platforms or ())
    current = summarize_period(payouts, expenses, date_range, selected)
    previous = summarize_previous_period(payouts, expenses, date_range, selected)

    logger.debug(
        "KPI comparison: %d/%d payouts, %d/%d expenses (current/previous)",
        current.payout_count,
        previous.payout_count,
        current.expense_count,
        previous.expense_count,
    )

    return KPIData(
        received=calculate_kpi_metric(current.received, previous.received),
        expected=calculate_kpi_metric(current.expected, previous.expected),
        expenses=calculate_kpi_metric(current.expenses_total, previous.expenses_total),
    )
