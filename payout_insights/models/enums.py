"""
Enumeration definitions for the Payout Insights service.

All enums inherit from both `str` and `Enum` to ensure JSON serialization
compatibility with Pydantic models, enabling automatic serialization and
deserialization in API responses.

Label lookup tables (platform names, status names, category names) live next
to their enums as plain dictionaries.
"""

from enum import Enum
from typing import Dict, List


class Platform(str, Enum):
    """
    Sales channel a payout or expense belongs to.

    Values: 'shopify' | 'stripe' | 'etsy' | 'amazon'
    """
    SHOPIFY = "shopify"
    STRIPE = "stripe"
    ETSY = "etsy"
    AMAZON = "amazon"


PLATFORM_LABELS: Dict[Platform, str] = {
    Platform.SHOPIFY: "Shopify",
    Platform.STRIPE: "Stripe",
    Platform.ETSY: "Etsy",
    Platform.AMAZON: "Amazon",
}

PLATFORM_COLORS: Dict[Platform, str] = {
    Platform.SHOPIFY: "#96bf48",
    Platform.STRIPE: "#635bff",
    Platform.ETSY: "#f1641e",
    Platform.AMAZON: "#ff9900",
}


class PayoutStatus(str, Enum):
    """
    Settlement state of a payout.

    - received: Funds have landed; counted in received income
    - pending: Announced but not yet processing; counted in expected income
    - processing: In flight; counted in expected income
    - failed: Will not settle; excluded from both totals
    """
    RECEIVED = "received"
    PENDING = "pending"
    PROCESSING = "processing"
    FAILED = "failed"


STATUS_LABELS: Dict[PayoutStatus, str] = {
    PayoutStatus.RECEIVED: "Received",
    PayoutStatus.PENDING: "Pending",
    PayoutStatus.PROCESSING: "Processing",
    PayoutStatus.FAILED: "Failed",
}

# Statuses whose payouts still count towards expected income
EXPECTED_STATUSES = (PayoutStatus.PENDING, PayoutStatus.PROCESSING)


class InsightCategory(str, Enum):
    """
    Category of a generated insight.

    Declaration order is significant: the first four members are the
    required categories and are emitted in this order.
    """
    ANOMALIES = "anomalies"
    PLATFORM_PERFORMANCE = "platform_performance"
    FEES_REFUNDS = "fees_refunds"
    FORECAST_WHATIFS = "forecast_whatifs"
    TIMING_RELIABILITY = "timing_reliability"
    TREND_MOMENTUM = "trend_momentum"


INSIGHT_CATEGORY_LABELS: Dict[InsightCategory, str] = {
    InsightCategory.ANOMALIES: "Anomalies",
    InsightCategory.PLATFORM_PERFORMANCE: "Platform Performance",
    InsightCategory.FEES_REFUNDS: "Fees & Refunds",
    InsightCategory.FORECAST_WHATIFS: "Forecast & What-ifs",
    InsightCategory.TIMING_RELIABILITY: "Timing & Reliability",
    InsightCategory.TREND_MOMENTUM: "Trend & Momentum",
}

# Categories that always contribute exactly one insight
REQUIRED_CATEGORIES: List[InsightCategory] = [
    InsightCategory.ANOMALIES,
    InsightCategory.PLATFORM_PERFORMANCE,
    InsightCategory.FEES_REFUNDS,
    InsightCategory.FORECAST_WHATIFS,
]


class InsightSeverity(str, Enum):
    """
    Visual severity of an insight.

    Values: 'info' | 'success' | 'warning' | 'danger'
    """
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    DANGER = "danger"


class InsightMetric(str, Enum):
    """Financial quantity an insight talks about."""
    POTENTIAL_INCOME = "potential_income"
    POTENTIAL_LOSS = "potential_loss"
    ACTUAL_PROFIT = "actual_profit"
    MIXED = "mixed"


class ChartInterval(str, Enum):
    """Bucket width for chart series."""
    DAILY = "daily"
    WEEKLY = "weekly"


class KPIMetricType(str, Enum):
    """KPI series a dashboard can show."""
    RECEIVED = "received"
    EXPECTED = "expected"
    EXPENSES = "expenses"
