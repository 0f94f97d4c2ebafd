"""
Pytest test module for the KPI comparison service.

Test Categories:
- TestPreviousPeriod: Previous period and comparison window arithmetic
- TestPeriodBoundaries: A record at startDate is counted once, in the current period
- TestKPIData: Totals, changes and percentages
"""

import math
from datetime import timedelta
from typing import List

import pytest

from payout_insights.models import DateRange, Expense, Payout, PayoutStatus, Platform
from payout_insights.services.kpi import (
    calculate_kpi_data,
    calculate_kpi_metric,
    get_comparison_window,
    get_previous_period,
    summarize_period,
    summarize_previous_period,
)
from payout_insights.tests.conftest import make_payout, utc


class TestPreviousPeriod:

    def test_previous_period_same_duration(self, week_range: DateRange) -> None:
        previous = get_previous_period(week_range)
        assert previous.startDate == utc(2025, 10, 1)
        assert previous.endDate == utc(2025, 10, 8)
        assert previous.duration == week_range.duration

    def test_previous_period_of_partial_days(self) -> None:
        date_range = DateRange(startDate=utc(2025, 10, 1, 12), endDate=utc(2025, 10, 2, 18))
        previous = get_previous_period(date_range)
        assert previous.startDate == utc(2025, 10, 1, 12) - timedelta(hours=30)
        assert previous.endDate == date_range.startDate

    def test_zero_length_range(self) -> None:
        instant = utc(2025, 10, 1, 9)
        previous = get_previous_period(DateRange(startDate=instant, endDate=instant))
        assert previous.startDate == instant and previous.endDate == instant

    def test_comparison_window_spans_both_periods(self, week_range: DateRange) -> None:
        window = get_comparison_window(week_range)
        assert window.startDate == utc(2025, 10, 1), "Window must start at the previous period"
        assert window.endDate == week_range.endDate


@pytest.mark.boundary
class TestPeriodBoundaries:
    """
    The current window is inclusive, the previous window half-open.

    A payout stamped exactly at startDate would otherwise appear in both
    windows.
    """

    def test_record_at_start_counts_only_in_current(self, week_range: DateRange) -> None:
        payouts = [make_payout(700, week_range.startDate)]

        current = summarize_period(payouts, [], week_range)
        previous = summarize_previous_period(payouts, [], week_range)

        assert current.received == 700.0, f"Expected 700 in current, got {current.received}"
        assert previous.received == 0.0, f"Boundary payout double counted: {previous.received}"

    def test_record_at_previous_start_counts_in_previous(self, week_range: DateRange) -> None:
        payouts = [make_payout(250, utc(2025, 10, 1))]
        previous = summarize_previous_period(payouts, [], week_range)
        assert previous.received == 250.0

    def test_kpi_change_with_boundary_record(self, week_range: DateRange) -> None:
        kpis = calculate_kpi_data([make_payout(700, week_range.startDate)], [], week_range)
        assert kpis.received.total == 700.0
        assert kpis.received.change == 700.0
        assert kpis.received.changePercentage == 0.0


class TestKPIData:

    def test_single_payout_with_empty_previous_period(self, week_range: DateRange) -> None:
        """One received payout of 1000, nothing before: change 1000, percentage 0."""
        payouts = [make_payout(1000, utc(2025, 10, 10))]
        kpis = calculate_kpi_data(payouts, [], week_range, [])

        assert kpis.received.total == 1000.0
        assert kpis.received.change == 1000.0
        assert kpis.received.changePercentage == 0.0, (
            f"Expected 0 when previous is 0, got {kpis.received.changePercentage}"
        )
        assert kpis.expected.total == 0.0
        assert kpis.expenses.total == 0.0

    def test_sample_window(
        self,
        sample_payouts: List[Payout],
        sample_expenses: List[Expense],
        week_range: DateRange,
    ) -> None:
        kpis = calculate_kpi_data(sample_payouts, sample_expenses, week_range)

        assert kpis.received.total == 1500.0
        assert kpis.received.change == 300.0
        assert math.isclose(kpis.received.changePercentage, 25.0)

        assert math.isclose(kpis.expected.total, 360.0)
        assert kpis.expected.changePercentage == 0.0

        assert kpis.expenses.total == 150.0
        assert kpis.expenses.change == 70.0
        assert math.isclose(kpis.expenses.changePercentage, 87.5)

    def test_platform_filter_applies_to_both_periods(
        self,
        sample_payouts: List[Payout],
        sample_expenses: List[Expense],
        week_range: DateRange,
    ) -> None:
        kpis = calculate_kpi_data(sample_payouts, sample_expenses, week_range, [Platform.SHOPIFY])

        assert kpis.received.total == 1000.0
        assert kpis.received.change == -200.0
        assert math.isclose(kpis.received.changePercentage, -200.0 / 1200.0 * 100)
        assert kpis.expenses.total == 100.0, "Platformless expenses drop out under a filter"

    def test_metric_change_percentage(self) -> None:
        metric = calculate_kpi_metric(150.0, 100.0)
        assert metric.total == 150.0
        assert metric.change == 50.0
        assert metric.changePercentage == 50.0

    def test_metric_previous_zero(self) -> None:
        metric = calculate_kpi_metric(-20.0, 0.0)
        assert metric.change == -20.0
        assert metric.changePercentage == 0.0

    def test_period_summary_derived_values(
        self,
        sample_payouts: List[Payout],
        sample_expenses: List[Expense],
        week_range: DateRange,
    ) -> None:
        summary = summarize_period(sample_payouts, sample_expenses, week_range)

        assert summary.payout_count == 5
        assert summary.expense_count == 2
        assert summary.actual_profit == 1350.0
        assert math.isclose(summary.total_income, 1860.0)
        assert math.isclose(summary.expected_net, 1710.0)

    def test_pending_payouts_do_not_count_as_received(self, week_range: DateRange) -> None:
        payouts = [make_payout(500, utc(2025, 10, 9), status=PayoutStatus.PENDING, probability=1.0)]
        kpis = calculate_kpi_data(payouts, [], week_range)
        assert kpis.received.total == 0.0
        assert kpis.expected.total == 500.0
