"""
FastAPI router module for insight endpoints.

- POST /insights: Generate the six ranked insights for inline records
- GET /insights/financial: Upstream insights for a window, or locally
  generated ones when the upstream API fails and the mock fallback is on

Insights always cover every platform; there is no platform filter here.
"""

import logging
from datetime import datetime

from fastapi import APIRouter, HTTPException, Query

from payout_insights.api.dashboard import parse_date_range
from payout_insights.core.dependencies import RepositoryDep
from payout_insights.models import DashboardQuery, InsightsResponse
from payout_insights.services.data_source import DataSourceError
from payout_insights.services.insights import generate_insights

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/insights", tags=["insights"])


@router.post("", response_model=InsightsResponse)
async def compute_insights(query: DashboardQuery) -> InsightsResponse:
    """
    Generate insights for inline records.

    Always returns exactly six insights: one per required category (Anomalies,
    Platform Performance, Fees & Refunds, Forecast & What-ifs), then the best
    remaining candidates, padded with learning placeholders.

    Raises:
        HTTPException 500: If insight generation fails
    """
    try:
        insights = generate_insights(query.payouts, query.expenses, query.dateRange)
        return InsightsResponse(period=query.dateRange.period(), insights=insights)
    except Exception as e:
        logger.error(f"Error generating insights: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Error generating insights: {str(e)}",
        )


@router.get("/financial", response_model=InsightsResponse)
async def financial_insights(
    repository: RepositoryDep,
    start_date: datetime = Query(..., alias="startDate", description="Inclusive window start"),
    end_date: datetime = Query(..., alias="endDate", description="Inclusive window end"),
) -> InsightsResponse:
    """
    Fetch insights for a window from the upstream financial API.

    Raises:
        HTTPException 400: If endDate is before startDate
        HTTPException 502: If the upstream API fails and the mock fallback is off
    """
    date_range = parse_date_range(start_date, end_date)

    try:
        insights, used_fallback = await repository.load_insights(date_range)
        if used_fallback:
            logger.info(f"Served {len(insights)} locally generated insights")
        return InsightsResponse(period=date_range.period(), insights=insights)
    except DataSourceError as e:
        logger.warning(f"Upstream insights unavailable: {e}")
        raise HTTPException(status_code=502, detail=str(e))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error loading financial insights: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Error loading financial insights: {str(e)}",
        )
