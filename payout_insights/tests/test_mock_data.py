"""
Pytest test module for seeded mock data generation.

Test Categories:
- TestMockPayouts: Determinism, coverage, status rules, amount ranges
- TestMockExpenses: Determinism, categories, amount ranges
"""

from collections import Counter

import pytest

from payout_insights.models import PayoutStatus
from payout_insights.services.mock_data import (
    EXPENSE_CATEGORIES,
    MOCK_MONTHS,
    generate_mock_expenses,
    generate_mock_payouts,
)
from payout_insights.tests.conftest import utc

AFTER_MOCK_YEAR = utc(2026, 1, 1)
BEFORE_MOCK_YEAR = utc(2025, 1, 1)


class TestMockPayouts:

    def test_same_seed_same_output(self) -> None:
        first = generate_mock_payouts(count_per_month=40, seed=3, reference_time=AFTER_MOCK_YEAR)
        second = generate_mock_payouts(count_per_month=40, seed=3, reference_time=AFTER_MOCK_YEAR)
        assert first == second

    def test_different_seed_different_output(self) -> None:
        first = generate_mock_payouts(count_per_month=40, seed=3, reference_time=AFTER_MOCK_YEAR)
        second = generate_mock_payouts(count_per_month=40, seed=4, reference_time=AFTER_MOCK_YEAR)
        assert first != second

    def test_count_and_months(self) -> None:
        payouts = generate_mock_payouts(count_per_month=45, seed=1, year=2025, reference_time=AFTER_MOCK_YEAR)

        assert len(payouts) == 45 * len(MOCK_MONTHS)
        months = Counter(p.date.month for p in payouts)
        assert sorted(months) == list(MOCK_MONTHS)
        assert all(count == 45 for count in months.values()), f"Uneven months: {months}"
        assert all(p.date.year == 2025 for p in payouts)

    def test_sorted_by_date_with_unique_ids(self) -> None:
        payouts = generate_mock_payouts(count_per_month=30, seed=1, reference_time=AFTER_MOCK_YEAR)
        dates = [p.date for p in payouts]
        assert dates == sorted(dates)
        assert len({p.id for p in payouts}) == len(payouts)

    def test_even_spread_over_days(self) -> None:
        """30 September payouts land one per day."""
        payouts = generate_mock_payouts(count_per_month=30, seed=5, reference_time=AFTER_MOCK_YEAR)
        september_days = [p.date.day for p in payouts if p.date.month == 9]
        assert sorted(september_days) == list(range(1, 31))

    def test_past_payouts_are_settled(self) -> None:
        payouts = generate_mock_payouts(count_per_month=50, seed=2, reference_time=AFTER_MOCK_YEAR)
        statuses = {p.status for p in payouts}
        assert statuses <= {PayoutStatus.RECEIVED, PayoutStatus.PROCESSING}
        assert PayoutStatus.RECEIVED in statuses

    def test_future_payouts_are_outstanding(self) -> None:
        payouts = generate_mock_payouts(count_per_month=50, seed=2, reference_time=BEFORE_MOCK_YEAR)
        statuses = {p.status for p in payouts}
        assert statuses <= {PayoutStatus.PENDING, PayoutStatus.PROCESSING}
        for payout in payouts:
            if payout.status == PayoutStatus.PENDING:
                assert 0.7 <= payout.probability <= 0.95
            else:
                assert payout.probability is None

    def test_amount_ranges(self) -> None:
        payouts = generate_mock_payouts(count_per_month=60, seed=9, reference_time=AFTER_MOCK_YEAR)
        for payout in payouts:
            assert 100 <= payout.grossAmount <= 5000
            assert payout.fees == pytest.approx(payout.grossAmount - payout.netAmount, abs=0.011)
            assert 0.019 <= payout.fees / payout.grossAmount <= 0.051

    def test_defaults_come_from_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MOCK_PAYOUTS_PER_MONTH", "10")
        monkeypatch.setenv("MOCK_YEAR", "2024")
        payouts = generate_mock_payouts(reference_time=AFTER_MOCK_YEAR)
        assert len(payouts) == 40
        assert all(p.date.year == 2024 for p in payouts)


class TestMockExpenses:

    def test_same_seed_same_output(self) -> None:
        assert generate_mock_expenses(count_per_month=20, seed=8) == generate_mock_expenses(
            count_per_month=20, seed=8
        )

    def test_count_categories_and_amounts(self) -> None:
        expenses = generate_mock_expenses(count_per_month=25, seed=8)

        assert len(expenses) == 100
        assert {e.date.month for e in expenses} == set(MOCK_MONTHS)
        for expense in expenses:
            assert expense.category in EXPENSE_CATEGORIES
            assert 50 <= expense.amount <= 1000
            assert expense.description.startswith(expense.category)

    def test_sorted_by_date(self) -> None:
        dates = [e.date for e in generate_mock_expenses(count_per_month=25, seed=8)]
        assert dates == sorted(dates)
