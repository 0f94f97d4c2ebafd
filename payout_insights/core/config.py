"""
Settings and environment management module for the Payout Insights service.

This module provides centralized configuration management using pydantic-settings,
which automatically loads settings from environment variables and .env files.

Key Features:
- Environment variable validation and type coercion
- Sensible defaults for development
- Singleton pattern via @lru_cache for efficient access
- Insight engine tuning values (probability default, recency weight, thresholds)
- Upstream financial data API location and mock fallback policy

Environment Variables:
- DATA_API_BASE_URL: Upstream financial data API (default: http://localhost:5000)
- DATA_API_TIMEOUT_SECONDS: Request timeout for the upstream API (default: 10)
- USE_MOCK_FALLBACK: Serve seeded mock data when the upstream API fails
- DEFAULT_PAYOUT_PROBABILITY: Probability applied to expected payouts without one
- CURRENCY_SYMBOL: Symbol used when rendering insight messages

Insight Engine Defaults:
- default_payout_probability: 0.8 (expected payouts without explicit probability)
- insight_count: 6 (fixed size of the insight list)
- recency_weight: 1.2 (multiplier applied to every candidate score)
- anomaly_z_threshold: -1.5 (daily profit z-score that flags an anomaly)
- fee_delta_threshold: 0.003 (fee-rate shift that makes a fee insight)
- fee_min_sample_size: 3 (payouts needed before a fee shift is trusted)

Usage:
    from payout_insights.core.config import get_settings

    settings = get_settings()
    probability = settings.default_payout_probability
"""

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    The class inherits from pydantic-settings BaseSettings which provides:
    - Automatic loading from environment variables (case-insensitive)
    - Support for .env file loading
    - Type validation and coercion
    - Default values for every setting, so the service starts without a .env

    Attributes:
        data_api_base_url: Base URL of the upstream financial data API.
        data_api_timeout_seconds: Timeout applied to upstream requests.
        use_mock_fallback: Whether failed upstream fetches fall back to mock data.
        mock_seed: Seed for the deterministic mock data generator.
        mock_year: Calendar year the mock data is generated for.
        mock_payouts_per_month: Mock payouts generated per month.
        mock_expenses_per_month: Mock expenses generated per month.
        mapped_fee_rate: Fee rate applied when mapping upstream income records.
        mapped_pending_probability: Probability given to mapped pending payouts.
        default_payout_probability: Probability for expected payouts without one.
        insight_count: Number of insights returned by the engine.
        recency_weight: Fixed recency multiplier in candidate scores.
        anomaly_z_threshold: Z-score at or below which a day is anomalous.
        fee_delta_threshold: Minimum absolute fee-rate shift for a fee insight.
        fee_min_sample_size: Minimum payouts per platform for a fee insight.
        currency_symbol: Currency symbol used in rendered messages.
        cors_origins: Origins allowed to call the HTTP API.
    """

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore',
        case_sensitive=False,
    )

    # =========================================================================
    # Upstream Financial Data API
    # =========================================================================

    # REST API serving channels, income records, expenses and insights
    data_api_base_url: str = 'http://localhost:5000'

    data_api_timeout_seconds: float = 10.0

    # When the upstream API is unreachable, serve generated mock data instead
    # of failing the request
    use_mock_fallback: bool = False

    # =========================================================================
    # Mock Data Generation
    # =========================================================================

    mock_seed: int = 42
    mock_year: int = 2025
    mock_payouts_per_month: int = 500
    mock_expenses_per_month: int = 300

    # =========================================================================
    # Upstream Record Mapping
    # =========================================================================

    # Income records arrive without fee breakdowns; fees are estimated
    mapped_fee_rate: float = 0.04

    mapped_pending_probability: float = 0.85

    # =========================================================================
    # Insight Engine
    # =========================================================================

    # Expected income is discounted by this probability when a payout does
    # not carry its own
    default_payout_probability: float = 0.8

    insight_count: int = 6

    recency_weight: float = 1.2

    anomaly_z_threshold: float = -1.5

    fee_delta_threshold: float = 0.003

    fee_min_sample_size: int = 3

    currency_symbol: str = '€'

    # =========================================================================
    # HTTP Surface
    # =========================================================================

    cors_origins: List[str] = [
        'http://localhost:5173',  # Vite dev server
        'http://127.0.0.1:5173',
    ]


@lru_cache()
def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Returns a cached Settings instance, ensuring that environment variables
    are only loaded once during the application lifecycle.

    Returns:
        Settings: The application settings instance with all configuration values.

    Raises:
        pydantic.ValidationError: If an environment variable has an invalid value
            (e.g., DEFAULT_PAYOUT_PROBABILITY=abc).

    Example:
        >>> settings = get_settings()
        >>> settings.insight_count
        6

    Note:
        To refresh settings in tests, clear the cache:
        >>> get_settings.cache_clear()
    """
    return Settings()
