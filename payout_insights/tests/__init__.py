'''
Payout Insights Test Suite

Test Modules:
-------------
- test_aggregation.py: Period filtering and received/expected/expense totals
  - Inclusive date ranges, platform filters
  - Probability-weighted expected income

- test_kpi.py: KPI comparison against the previous period
  - Previous window arithmetic
  - Boundary record counted once (current inclusive, previous half-open)

- test_chart_data.py: Daily and weekly chart buckets

- test_signals.py: Signal extraction
  - Daily profit series, z-score anomalies
  - Platform share shift, fee-rate shift, forecast, completion, momentum

- test_insights.py: Scoring and selection of exactly six insights
  - Required category coverage, placeholders, rendered messages

- test_data_mappers.py: Upstream DTO to domain mapping
- test_mock_data.py: Seeded mock data generation
- test_data_source.py: Upstream API client and mock fallback
- test_api.py: HTTP endpoints (marked integration)

Running Tests:
--------------
    pip install -e ".[test]"
    pytest -v
    pytest -m "not slow and not integration"

Configuration:
--------------
See conftest.py for shared fixtures and test configuration.
'''

# This file enables pytest discovery of the tests directory

__all__ = []
