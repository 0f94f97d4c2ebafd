"""
API package initialization.

This package contains FastAPI router modules for the Payout Insights service:
- dashboard: KPI comparison, chart buckets and the combined dashboard payload
- insights: Ranked insight generation and upstream insight retrieval
"""

from fastapi import APIRouter

from payout_insights.api.dashboard import router as dashboard_router
from payout_insights.api.insights import router as insights_router

# Create main API router
api_router = APIRouter()

# Both routers carry their own prefix
api_router.include_router(dashboard_router)
api_router.include_router(insights_router)

__all__ = [
    "api_router",
    "dashboard_router",
    "insights_router",
]
