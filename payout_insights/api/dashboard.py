"""
FastAPI router module for dashboard endpoints.

Body-driven endpoints take the records inline (DashboardQuery) and are pure
computations:
- POST /dashboard/kpis: Received/expected/expenses versus the previous period
- POST /dashboard/chart: Daily or weekly chart buckets
- POST /dashboard: KPIs, chart and insights in one payload
- POST /dashboard/transactions: Records and totals for one UTC day

Repository-driven endpoints load records from the upstream financial API
(optionally falling back to mock data):
- GET /dashboard/channels: Upstream sales channels
- GET /dashboard/summary: Same payload as POST /dashboard
"""

import logging
from datetime import datetime
from typing import List

from fastapi import APIRouter, HTTPException, Query
from pydantic import ValidationError

from payout_insights.core.dependencies import RepositoryDep
from payout_insights.models import (
    ChannelDto,
    ChartDataResponse,
    ChartInterval,
    DashboardQuery,
    DashboardResponse,
    DateRange,
    DayTransactionsQuery,
    DayTransactionsResponse,
    KPIResponse,
)
from payout_insights.services.chart_data import generate_chart_data, get_transactions_for_day
from payout_insights.services.data_source import DataSourceError
from payout_insights.services.insights import generate_insights
from payout_insights.services.kpi import calculate_kpi_data, get_previous_period

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


# =============================================================================
# Helper Functions
# =============================================================================


def parse_date_range(start_date: datetime, end_date: datetime) -> DateRange:
    """
    Build a DateRange from query parameters.

    Raises:
        HTTPException 400: If endDate is before startDate
    """
    try:
        return DateRange(startDate=start_date, endDate=end_date)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Invalid date range: {e.errors()[0]['msg']}")


# =============================================================================
# Body-driven Endpoints
# =============================================================================


@router.post("/kpis", response_model=KPIResponse)
async def compute_kpis(query: DashboardQuery) -> KPIResponse:
    """
    Compute the KPI comparison for a reporting window.

    The previous period has the same duration and ends at startDate; records
    stamped exactly at startDate only count towards the current period.

    Raises:
        HTTPException 500: If the computation fails
    """
    try:
        kpis = calculate_kpi_data(query.payouts, query.expenses, query.dateRange, query.platforms)
        return KPIResponse(
            dateRange=query.dateRange,
            previousPeriod=get_previous_period(query.dateRange),
            kpis=kpis,
        )
    except Exception as e:
        logger.error(f"Error computing KPIs: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Error computing KPIs: {str(e)}",
        )


@router.post("/chart", response_model=ChartDataResponse)
async def compute_chart(query: DashboardQuery) -> ChartDataResponse:
    """Bucket records into chart points at the requested interval."""
    try:
        points = generate_chart_data(
            query.payouts,
            query.expenses,
            query.dateRange,
            query.platforms,
            query.interval,
        )
        return ChartDataResponse(interval=query.interval, points=points)
    except Exception as e:
        logger.error(f"Error computing chart data: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Error computing chart data: {str(e)}",
        )


@router.post("", response_model=DashboardResponse)
async def compute_dashboard(query: DashboardQuery) -> DashboardResponse:
    """
    Compute KPIs, chart buckets and insights in one call.

    KPIs and chart honour the platform filter. Insights always look at every
    platform so that platform share and fee comparisons stay meaningful.
    """
    try:
        kpis = calculate_kpi_data(query.payouts, query.expenses, query.dateRange, query.platforms)
        return DashboardResponse(
            kpis=kpis,
            chart=generate_chart_data(
                query.payouts,
                query.expenses,
                query.dateRange,
                query.platforms,
                query.interval,
            ),
            insights=generate_insights(query.payouts, query.expenses, query.dateRange, kpis),
        )
    except Exception as e:
        logger.error(f"Error computing dashboard: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Error computing dashboard: {str(e)}",
        )


@router.post("/transactions", response_model=DayTransactionsResponse)
async def day_transactions(query: DayTransactionsQuery) -> DayTransactionsResponse:
    """Payouts and expenses behind one chart bucket, with their totals."""
    try:
        details = get_transactions_for_day(
            query.payouts,
            query.expenses,
            query.day,
            query.platforms,
        )
        return DayTransactionsResponse(
            day=details.day,
            payouts=details.payouts,
            expenses=details.expenses,
            received=details.received,
            expected=details.expected,
            expensesTotal=details.expenses_total,
        )
    except Exception as e:
        logger.error(f"Error loading day transactions: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Error loading day transactions: {str(e)}",
        )


# =============================================================================
# Repository-driven Endpoints
# =============================================================================


@router.get("/channels", response_model=List[ChannelDto])
async def list_channels(repository: RepositoryDep) -> List[ChannelDto]:
    """
    List upstream sales channels.

    Raises:
        HTTPException 502: If the upstream API fails and the mock fallback is off
    """
    try:
        return await repository.load_channels()
    except DataSourceError as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.get("/summary", response_model=DashboardResponse)
async def dashboard_summary(
    repository: RepositoryDep,
    start_date: datetime = Query(..., alias="startDate", description="Inclusive window start"),
    end_date: datetime = Query(..., alias="endDate", description="Inclusive window end"),
    channel_ids: List[int] = Query(default=[], alias="channelIds", description="Upstream channel filter"),
    interval: ChartInterval = Query(ChartInterval.DAILY, description="Chart bucket width"),
) -> DashboardResponse:
    """
    Load records for a window and compute the full dashboard.

    Raises:
        HTTPException 400: If endDate is before startDate
        HTTPException 502: If the upstream API fails and the mock fallback is off
        HTTPException 500: If the computation fails
    """
    date_range = parse_date_range(start_date, end_date)

    try:
        data = await repository.load(date_range, channel_ids)
        kpis = calculate_kpi_data(data.payouts, data.expenses, date_range)
        return DashboardResponse(
            kpis=kpis,
            chart=generate_chart_data(data.payouts, data.expenses, date_range, interval=interval),
            insights=generate_insights(data.payouts, data.expenses, date_range, kpis),
            usedFallbackData=data.used_fallback,
        )
    except DataSourceError as e:
        logger.warning(f"Upstream financial API unavailable: {e}")
        raise HTTPException(status_code=502, detail=str(e))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error computing dashboard summary: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Error computing dashboard summary: {str(e)}",
        )
