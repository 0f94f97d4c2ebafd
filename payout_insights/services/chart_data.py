"""
Time-bucketing service for chart series.

Records are first restricted to the inclusive date range and the platform
selection, then walked from startDate to endDate (inclusive) in steps of one
day (daily) or seven days (weekly). Each bucket covers the half-open window
[bucketStart, bucketStart + step), and is summed with the period aggregation
calculators.

Because filtering happens before bucketing, the last bucket never picks up
records past endDate, and the buckets reconcile with the period totals:

    Σ bucket.received == calculate_received(filtered records)
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Sequence

from payout_insights.models import (
    ChartDataPoint,
    ChartInterval,
    DateRange,
    Expense,
    Payout,
    Platform,
    ensure_utc,
    format_day,
)
from payout_insights.services.aggregation import (
    calculate_expected,
    calculate_expenses,
    calculate_received,
    filter_by_date_range,
    filter_by_platform,
    is_expected,
)

INTERVAL_STEPS = {
    ChartInterval.DAILY: timedelta(days=1),
    ChartInterval.WEEKLY: timedelta(days=7),
}


def generate_chart_data(
    payouts: Sequence[Payout],
    expenses: Sequence[Expense],
    date_range: DateRange,
    platforms: Optional[Iterable[Platform]] = None,
    interval: ChartInterval = ChartInterval.DAILY,
) -> List[ChartDataPoint]:
    """
    Bucket records into chronological chart points.

    Args:
        payouts: All payout records
        expenses: All expense records
        date_range: Window to chart
        platforms: Platform filter; empty or None means all
        interval: Daily or weekly buckets

    Returns:
        One ChartDataPoint per bucket. A range spanning n days produces
        n + 1 daily buckets.
    """
    step = INTERVAL_STEPS[ChartInterval(interval)]
    selected = list(platforms or ())

    filtered_payouts = filter_by_platform(filter_by_date_range(payouts, date_range), selected)
    filtered_expenses = filter_by_platform(filter_by_date_range(expenses, date_range), selected)

    points: List[ChartDataPoint] = []
    bucket_start = date_range.startDate
    while bucket_start <= date_range.endDate:
        bucket_end = bucket_start + step

        bucket_payouts = [p for p in filtered_payouts if bucket_start <= p.date < bucket_end]
        bucket_expenses = [e for e in filtered_expenses if bucket_start <= e.date < bucket_end]

        points.append(
            ChartDataPoint(
                date=format_day(bucket_start),
                received=calculate_received(bucket_payouts),
                expected=calculate_expected(bucket_payouts),
                expenses=calculate_expenses(bucket_expenses),
            )
        )
        bucket_start = bucket_end

    return points


# =============================================================================
# Single-day drill-down
# =============================================================================


@dataclass(frozen=True)
class DayTransactions:
    """Records behind one chart bucket, as shown in a transaction panel."""

    day: str
    payouts: List[Payout]
    expenses: List[Expense]
    received: float
    expected: float
    expenses_total: float


def get_transactions_for_day(
    payouts: Sequence[Payout],
    expenses: Sequence[Expense],
    day: datetime,
    platforms: Optional[Iterable[Platform]] = None,
) -> DayTransactions:
    """
    Payouts and expenses stamped on one UTC calendar day.

    The expected total here is the raw (unweighted) net amount of pending and
    processing payouts, which is what a detail panel lists line by line.
    """
    key = format_day(ensure_utc(day))
    selected = list(platforms or ())

    day_payouts = [p for p in filter_by_platform(payouts, selected) if format_day(p.date) == key]
    day_expenses = [e for e in filter_by_platform(expenses, selected) if format_day(e.date) == key]

    return DayTransactions(
        day=key,
        payouts=day_payouts,
        expenses=day_expenses,
        received=calculate_received(day_payouts),
        expected=sum((p.netAmount for p in day_payouts if is_expected(p)), 0.0),
        expenses_total=calculate_expenses(day_expenses),
    )
