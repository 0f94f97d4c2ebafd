"""
Package initialization file for the Payout Insights models.

This module exports all Pydantic schemas and enumerations from schemas.py and
enums.py, making them importable from payout_insights.models directly.

Usage:
    from payout_insights.models import (
        Platform,
        PayoutStatus,
        Payout,
        Expense,
        DateRange,
        Insight,
    )
"""

# =============================================================================
# Enums and lookup tables
# =============================================================================

from payout_insights.models.enums import (
    Platform,
    PayoutStatus,
    InsightCategory,
    InsightSeverity,
    InsightMetric,
    ChartInterval,
    KPIMetricType,
    PLATFORM_LABELS,
    PLATFORM_COLORS,
    STATUS_LABELS,
    INSIGHT_CATEGORY_LABELS,
    REQUIRED_CATEGORIES,
    EXPECTED_STATUSES,
)

# =============================================================================
# Schemas
# =============================================================================

from payout_insights.models.schemas import (
    # Helpers
    ensure_utc,
    format_day,
    # Core records
    Payout,
    Expense,
    DateRange,
    # KPI and chart
    KPIMetric,
    KPIData,
    ChartDataPoint,
    # Insights
    InsightPeriod,
    Insight,
    # Upstream DTOs
    ChannelDto,
    FinancialRecordDto,
    InsightPeriodDto,
    InsightDto,
    InsightResponseDto,
    # API envelopes
    DashboardQuery,
    KPIResponse,
    ChartDataResponse,
    InsightsResponse,
    DashboardResponse,
    DayTransactionsQuery,
    DayTransactionsResponse,
)


__all__ = [
    # Enums
    'Platform',
    'PayoutStatus',
    'InsightCategory',
    'InsightSeverity',
    'InsightMetric',
    'ChartInterval',
    'KPIMetricType',
    'PLATFORM_LABELS',
    'PLATFORM_COLORS',
    'STATUS_LABELS',
    'INSIGHT_CATEGORY_LABELS',
    'REQUIRED_CATEGORIES',
    'EXPECTED_STATUSES',
    # Helpers
    'ensure_utc',
    'format_day',
    # Core records
    'Payout',
    'Expense',
    'DateRange',
    # KPI and chart
    'KPIMetric',
    'KPIData',
    'ChartDataPoint',
    # Insights
    'InsightPeriod',
    'Insight',
    # Upstream DTOs
    'ChannelDto',
    'FinancialRecordDto',
    'InsightPeriodDto',
    'InsightDto',
    'InsightResponseDto',
    # API envelopes
    'DashboardQuery',
    'KPIResponse',
    'ChartDataResponse',
    'InsightsResponse',
    'DashboardResponse',
    'DayTransactionsQuery',
    'DayTransactionsResponse',
]
