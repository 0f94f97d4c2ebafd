"""
Payout Insights Services Module

Business logic for the payout dashboard. Every service except the data
source is pure and stateless.

Services:
- aggregation: Date/platform/status filters and period sums
- kpi: Current versus previous period KPI comparison
- chart_data: Daily/weekly chart buckets and single-day drill-down
- signals: Statistical signal extraction (z-scores, shares, fee rates)
- insights: Candidate scoring and six-slot insight selection
- formatting: Currency and percentage rendering
- data_mappers: Upstream DTO to domain model mapping
- mock_data: Seeded mock payouts and expenses
- data_source: Async upstream API client and repository with mock fallback

All services are consumed by the API layer (payout_insights/api/).
"""

# =============================================================================
# Aggregation Service Exports
# =============================================================================

from payout_insights.services.aggregation import (
    filter_by_date_range,
    filter_by_platform,
    filter_by_status,
    is_expected,
    calculate_received,
    calculate_expected,
    calculate_expenses,
    calculate_fees,
    calculate_gross,
)

# =============================================================================
# KPI Service Exports
# =============================================================================

from payout_insights.services.kpi import (
    PeriodSummary,
    get_comparison_window,
    get_previous_period,
    summarize_period,
    summarize_previous_period,
    calculate_kpi_metric,
    calculate_kpi_data,
)

# =============================================================================
# Chart Data Service Exports
# =============================================================================

from payout_insights.services.chart_data import (
    DayTransactions,
    generate_chart_data,
    get_transactions_for_day,
)

# =============================================================================
# Signal Extraction Exports
# =============================================================================

from payout_insights.services.signals import (
    SignalSet,
    extract_signals,
    build_daily_profit_series,
    mean,
    std_dev,
    z_score,
    clamp,
)

# =============================================================================
# Insight Engine Exports
# =============================================================================

from payout_insights.services.insights import (
    Candidate,
    build_candidates,
    generate_insights,
    learning_insight,
    score_candidate,
    select_insights,
)

# =============================================================================
# Upstream Data Exports
# =============================================================================

from payout_insights.services.data_mappers import (
    map_channel_to_platform,
    map_financial_records_to_payouts,
    map_financial_records_to_expenses,
    map_insight_dtos,
)

from payout_insights.services.mock_data import (
    generate_mock_payouts,
    generate_mock_expenses,
)

from payout_insights.services.data_source import (
    DataSourceError,
    FinancialApiClient,
    FinancialData,
    FinancialDataRepository,
)

__all__ = [
    # aggregation
    "filter_by_date_range",
    "filter_by_platform",
    "filter_by_status",
    "is_expected",
    "calculate_received",
    "calculate_expected",
    "calculate_expenses",
    "calculate_fees",
    "calculate_gross",
    # kpi
    "PeriodSummary",
    "get_comparison_window",
    "get_previous_period",
    "summarize_period",
    "summarize_previous_period",
    "calculate_kpi_metric",
    "calculate_kpi_data",
    # chart_data
    "DayTransactions",
    "generate_chart_data",
    "get_transactions_for_day",
    # signals
    "SignalSet",
    "extract_signals",
    "build_daily_profit_series",
    "mean",
    "std_dev",
    "z_score",
    "clamp",
    # insights
    "Candidate",
    "build_candidates",
    "generate_insights",
    "learning_insight",
    "score_candidate",
    "select_insights",
    # upstream data
    "map_channel_to_platform",
    "map_financial_records_to_payouts",
    "map_financial_records_to_expenses",
    "map_insight_dtos",
    "generate_mock_payouts",
    "generate_mock_expenses",
    "DataSourceError",
    "FinancialApiClient",
    "FinancialData",
    "FinancialDataRepository",
]
