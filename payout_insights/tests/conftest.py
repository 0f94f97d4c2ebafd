"""
Pytest Configuration and Shared Fixtures for Payout Insights Tests.

This module provides fixtures and configuration for all tests, supporting:
- Async test execution with pytest-asyncio
- Record factories for payouts and expenses with UTC timestamps
- Reporting windows with a known previous period
- A settings cache reset so environment overrides never leak between tests

Record factories are plain functions so test modules can import them:

    from payout_insights.tests.conftest import make_payout, make_expense
"""

from datetime import datetime, timezone
from itertools import count
from typing import Generator, List, Optional

import pytest

from payout_insights.core.config import get_settings
from payout_insights.core.dependencies import get_repository
from payout_insights.models import (
    DateRange,
    Expense,
    Payout,
    PayoutStatus,
    Platform,
)


# ============================================================
# PYTEST HOOKS
# ============================================================

def pytest_configure(config) -> None:
    """
    Configure custom pytest markers for test organization.

    Custom markers defined:
    - slow: Marks tests as slow (deselect with -m "not slow")
    - integration: Marks tests exercising the HTTP surface end to end
    - boundary: Marks tests pinning period boundary behaviour

    Args:
        config: Pytest configuration object
    """
    config.addinivalue_line(
        'markers',
        'slow: marks tests as slow (deselect with -m "not slow")'
    )
    config.addinivalue_line(
        'markers',
        'integration: marks tests exercising the HTTP surface end to end'
    )
    config.addinivalue_line(
        'markers',
        'boundary: marks tests pinning period boundary behaviour'
    )


# ============================================================
# RECORD FACTORIES
# ============================================================

_ids = count(1)


def utc(year: int, month: int, day: int, hour: int = 0, minute: int = 0, second: int = 0) -> datetime:
    """Shorthand for an aware UTC datetime."""
    return datetime(year, month, day, hour, minute, second, tzinfo=timezone.utc)


def make_payout(
    net: float,
    date: datetime,
    status: PayoutStatus = PayoutStatus.RECEIVED,
    platform: Platform = Platform.SHOPIFY,
    fees: float = 0.0,
    probability: Optional[float] = None,
    gross: Optional[float] = None,
) -> Payout:
    """
    Build a payout; gross defaults to net + fees.

    Args:
        net: Net amount
        date: Settlement timestamp
        status: Settlement state
        platform: Sales channel
        fees: Fees withheld
        probability: Settlement likelihood for expected payouts
        gross: Gross amount override
    """
    return Payout(
        id=f"payout-{next(_ids)}",
        platform=platform,
        grossAmount=net + fees if gross is None else gross,
        fees=fees,
        netAmount=net,
        date=date,
        status=status,
        probability=probability,
    )


def make_expense(
    amount: float,
    date: datetime,
    platform: Optional[Platform] = None,
    category: str = "Other",
) -> Expense:
    return Expense(
        id=f"expense-{next(_ids)}",
        amount=amount,
        date=date,
        category=category,
        platform=platform,
    )


# ============================================================
# SETTINGS FIXTURES
# ============================================================

@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """
    Clear cached settings and repository around every test.

    Tests that patch environment variables with monkeypatch see the new
    values on their next get_settings() call.
    """
    get_settings.cache_clear()
    get_repository.cache_clear()
    yield
    get_settings.cache_clear()
    get_repository.cache_clear()


# ============================================================
# DATE RANGE FIXTURES
# ============================================================

@pytest.fixture
def week_range() -> DateRange:
    """Oct 8 00:00 to Oct 15 00:00; previous period Oct 1 to Oct 8."""
    return DateRange(startDate=utc(2025, 10, 8), endDate=utc(2025, 10, 15), label="Week")


@pytest.fixture
def ten_day_range() -> DateRange:
    """Oct 1 00:00 to Oct 10 23:59:59."""
    return DateRange(startDate=utc(2025, 10, 1), endDate=utc(2025, 10, 10, 23, 59, 59))


# ============================================================
# SAMPLE DATA FIXTURES
# ============================================================

@pytest.fixture
def sample_payouts() -> List[Payout]:
    """
    Mixed payouts around the week_range window.

    Current window (Oct 8-15):
    - received: 1000 (shopify) + 500 (stripe) = 1500
    - expected: 400 pending @0.5 (etsy) + 200 processing, default 0.8 (amazon)
      = 200 + 160 = 360
    - failed: 300 (ignored)
    Previous window (Oct 1-8): received 1200 (shopify)
    Outside both: received 999 on Oct 20
    """
    return [
        make_payout(1000, utc(2025, 10, 9, 10), platform=Platform.SHOPIFY, fees=30),
        make_payout(500, utc(2025, 10, 10, 12), platform=Platform.STRIPE, fees=15),
        make_payout(400, utc(2025, 10, 12), status=PayoutStatus.PENDING, platform=Platform.ETSY, probability=0.5),
        make_payout(200, utc(2025, 10, 13), status=PayoutStatus.PROCESSING, platform=Platform.AMAZON),
        make_payout(300, utc(2025, 10, 11), status=PayoutStatus.FAILED, platform=Platform.SHOPIFY),
        make_payout(1200, utc(2025, 10, 3), platform=Platform.SHOPIFY, fees=36),
        make_payout(999, utc(2025, 10, 20), platform=Platform.SHOPIFY),
    ]


@pytest.fixture
def sample_expenses() -> List[Expense]:
    """
    Expenses around the week_range window.

    Current window: 100 (shopify) + 50 (no platform) = 150
    Previous window: 80
    """
    return [
        make_expense(100, utc(2025, 10, 9), platform=Platform.SHOPIFY, category="Marketing"),
        make_expense(50, utc(2025, 10, 14), category="Software"),
        make_expense(80, utc(2025, 10, 2), category="Shipping"),
    ]

