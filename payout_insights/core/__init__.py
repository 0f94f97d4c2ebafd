"""
Core infrastructure package for the Payout Insights service.

Provides:
- Configuration management via pydantic-settings
- FastAPI dependency injection utilities

Re-exports allow simplified imports like:

    from payout_insights.core import get_settings

The dependency aliases live in `payout_insights.core.dependencies` and are
imported from there directly, because they pull in the service layer.
"""

# =============================================================================
# Re-exports from payout_insights.core.config
# =============================================================================
from payout_insights.core.config import Settings, get_settings

# =============================================================================
# Public API Definition
# =============================================================================

__all__ = [
    'Settings',
    'get_settings',
]
