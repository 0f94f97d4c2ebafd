"""
Payout Insights Package.

FastAPI service for multi-platform seller finances: period KPIs compared
with the previous period, cash-flow chart buckets and six ranked insights
derived from payouts and expenses.

Subpackages:
    - api: FastAPI route handlers
    - core: Configuration and dependencies
    - models: Pydantic schemas and enums
    - services: Aggregation, KPI, charting, signal and insight services
"""

__version__ = "1.0.0"
