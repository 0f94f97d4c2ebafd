"""
Seeded mock data for demos and the upstream-failure fallback.

Generates payouts and expenses for September to December of the configured
mock year, spread evenly across the days of each month with random
times of day (UTC).

Payout rules:
- platform uniformly random
- gross 100-5000, fee rate 2-5%, net = gross - fees (cents)
- before `reference_time`: 90% received, 10% processing
- from `reference_time` on: pending or processing, 50/50
- pending payouts carry a probability of 0.70-0.95

Expense rules:
- amount 50-1000
- category from a fixed list, platform attached half of the time

Output is fully determined by (seed, year, counts, reference_time).
"""

import calendar
from datetime import datetime, timedelta, timezone
from typing import List, Optional

import numpy as np

from payout_insights.core.config import get_settings
from payout_insights.models import (
    Expense,
    Payout,
    PayoutStatus,
    Platform,
    ensure_utc,
)
from payout_insights.services.formatting import platform_label

MOCK_MONTHS = (9, 10, 11, 12)

EXPENSE_CATEGORIES = [
    "Platform Fees",
    "Marketing",
    "Software",
    "Shipping",
    "Supplies",
    "Other",
]

_PLATFORMS = list(Platform)
_ID_ALPHABET = list("ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789")


def _random_amount(rng: np.random.Generator, low: float, high: float) -> float:
    return round(float(rng.uniform(low, high)), 2)


def _random_time(rng: np.random.Generator, year: int, month: int, day: int) -> datetime:
    seconds = int(rng.integers(0, 24 * 60 * 60))
    return datetime(year, month, day, tzinfo=timezone.utc) + timedelta(seconds=seconds)


def _daily_counts(count: int, days_in_month: int) -> List[int]:
    """Spread `count` over the month; the first `count % days` days get one extra."""
    per_day, remainder = divmod(count, days_in_month)
    return [per_day + (1 if day <= remainder else 0) for day in range(1, days_in_month + 1)]


def _month_payouts(
    rng: np.random.Generator,
    year: int,
    month: int,
    count: int,
    start_id: int,
    reference_time: datetime,
) -> List[Payout]:
    payouts: List[Payout] = []
    days_in_month = calendar.monthrange(year, month)[1]

    for day, day_count in enumerate(_daily_counts(count, days_in_month), start=1):
        for _ in range(day_count):
            platform = _PLATFORMS[int(rng.integers(0, len(_PLATFORMS)))]
            date = _random_time(rng, year, month, day)

            if date < reference_time:
                status = PayoutStatus.RECEIVED if rng.random() > 0.1 else PayoutStatus.PROCESSING
            else:
                status = PayoutStatus.PENDING if rng.random() > 0.5 else PayoutStatus.PROCESSING

            gross = _random_amount(rng, 100, 5000)
            fee_rate = _random_amount(rng, 0.02, 0.05)
            fees = round(gross * fee_rate, 2)
            probability = _random_amount(rng, 0.7, 0.95) if status == PayoutStatus.PENDING else None
            reference = "".join(rng.choice(_ID_ALPHABET, size=7))

            payouts.append(
                Payout(
                    id=f"payout-{start_id + len(payouts)}",
                    platform=platform,
                    grossAmount=gross,
                    fees=fees,
                    netAmount=round(gross - fees, 2),
                    date=date,
                    status=status,
                    probability=probability,
                    transactionId=f"TXN-{reference}",
                    description=f"{platform_label(platform)} payout",
                )
            )
    return payouts


def _month_expenses(
    rng: np.random.Generator,
    year: int,
    month: int,
    count: int,
    start_id: int,
) -> List[Expense]:
    expenses: List[Expense] = []
    days_in_month = calendar.monthrange(year, month)[1]

    for day, day_count in enumerate(_daily_counts(count, days_in_month), start=1):
        for _ in range(day_count):
            category = EXPENSE_CATEGORIES[int(rng.integers(0, len(EXPENSE_CATEGORIES)))]
            platform: Optional[Platform] = None
            if rng.random() > 0.5:
                platform = _PLATFORMS[int(rng.integers(0, len(_PLATFORMS)))]

            expenses.append(
                Expense(
                    id=f"expense-{start_id + len(expenses)}",
                    amount=_random_amount(rng, 50, 1000),
                    date=_random_time(rng, year, month, day),
                    category=category,
                    description=f"{category} - {platform.value}" if platform else category,
                    platform=platform,
                )
            )
    return expenses


def generate_mock_payouts(
    count_per_month: Optional[int] = None,
    seed: Optional[int] = None,
    year: Optional[int] = None,
    reference_time: Optional[datetime] = None,
) -> List[Payout]:
    """
    Generate mock payouts sorted by date.

    Args:
        count_per_month: Payouts per month (default: `mock_payouts_per_month`)
        seed: Random seed (default: `mock_seed`)
        year: Calendar year (default: `mock_year`)
        reference_time: Boundary between settled and upcoming payouts
            (default: now)

    Returns:
        Payouts for September-December, oldest first
    """
    settings = get_settings()
    count = settings.mock_payouts_per_month if count_per_month is None else count_per_month
    rng = np.random.default_rng(settings.mock_seed if seed is None else seed)
    year = settings.mock_year if year is None else year
    reference_time = ensure_utc(reference_time) if reference_time else datetime.now(timezone.utc)

    payouts: List[Payout] = []
    for index, month in enumerate(MOCK_MONTHS):
        payouts.extend(_month_payouts(rng, year, month, count, index * count + 1, reference_time))
    return sorted(payouts, key=lambda p: p.date)


def generate_mock_expenses(
    count_per_month: Optional[int] = None,
    seed: Optional[int] = None,
    year: Optional[int] = None,
) -> List[Expense]:
    """Generate mock expenses for September-December, oldest first."""
    settings = get_settings()
    count = settings.mock_expenses_per_month if count_per_month is None else count_per_month
    # Offset the seed so payouts and expenses draw independent streams
    rng = np.random.default_rng((settings.mock_seed if seed is None else seed) + 1)
    year = settings.mock_year if year is None else year

    expenses: List[Expense] = []
    for index, month in enumerate(MOCK_MONTHS):
        expenses.extend(_month_expenses(rng, year, month, count, index * count + 1))
    return sorted(expenses, key=lambda e: e.date)
