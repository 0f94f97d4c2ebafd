"""
FastAPI dependency injection module for the Payout Insights service.

Provides reusable dependencies for configuration access and the financial
data repository, so endpoints stay free of construction details and tests
can swap either one through `app.dependency_overrides`.

Key Dependencies Provided:
- get_settings_dependency: Returns the cached Settings singleton
- get_repository: Returns the FinancialDataRepository for the process
- SettingsDep: Type alias for injecting Settings into endpoints
- RepositoryDep: Type alias for injecting the repository into endpoints

Usage Examples:
    @router.get("/insights/financial")
    async def financial_insights(
        repository: RepositoryDep,
        settings: SettingsDep
    ) -> InsightsResponse:
        insights, _ = await repository.load_insights(date_range)
        ...

    # In tests
    app.dependency_overrides[get_repository] = lambda: fake_repository
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from payout_insights.core.config import Settings, get_settings
from payout_insights.services.data_source import FinancialDataRepository


# =============================================================================
# Settings Dependency
# =============================================================================

def get_settings_dependency() -> Settings:
    """
    Return the Settings singleton instance.

    This is a thin wrapper around get_settings() to enable FastAPI's
    dependency override mechanism for testing:

        app.dependency_overrides[get_settings_dependency] = lambda: test_settings
    """
    return get_settings()


# =============================================================================
# Repository Dependency
# =============================================================================

@lru_cache()
def get_repository() -> FinancialDataRepository:
    """
    Return the process-wide financial data repository.

    Cached so the mock fallback data is generated at most once.
    """
    return FinancialDataRepository(settings=get_settings())


# =============================================================================
# Type Aliases for Dependency Injection
# =============================================================================

# Usage: async def endpoint(settings: SettingsDep)
SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]

# Usage: async def endpoint(repository: RepositoryDep)
RepositoryDep = Annotated[FinancialDataRepository, Depends(get_repository)]
