"""
FastAPI application entry point for the Payout Insights API.

Configures logging and CORS, registers the API routers and starts the ASGI
server when run directly.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from payout_insights import __version__
from payout_insights.api import api_router
from payout_insights.core.config import get_settings

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Lifespan context manager for FastAPI application startup and shutdown events.

    On startup the upstream API location and fallback policy are logged, so a
    dashboard showing mock data can be traced back to configuration.
    """
    settings = get_settings()
    logger.info("Payout Insights API starting")
    logger.info(
        f"Upstream financial API: {settings.data_api_base_url} "
        f"(mock fallback {'on' if settings.use_mock_fallback else 'off'})"
    )

    yield

    logger.info("Payout Insights API shutting down")


# Create FastAPI application
app = FastAPI(
    title="Payout Insights API",
    version=__version__,
    description=(
        "Financial analytics for multi-platform sellers. "
        "Provides KPI comparisons, cash-flow chart series and ranked insights "
        "over payouts and expenses."
    ),
    lifespan=lifespan,
)

# Configure CORS middleware for the dashboard frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register API routers (each carries its own prefix)
app.include_router(api_router)


@app.get("/health")
async def health_check():
    """
    Health check endpoint for monitoring and load balancer probes.

    Returns:
        Dict with status 'healthy'
    """
    return {"status": "healthy"}


@app.get("/")
async def root():
    """
    Root endpoint providing API information.

    Returns:
        Dict with API name and version
    """
    return {
        "name": "Payout Insights API",
        "version": __version__,
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


# Run with uvicorn when executed directly
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "payout_insights.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
