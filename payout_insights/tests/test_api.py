"""
Pytest test module for the HTTP API.

Body-driven endpoints are exercised with inline records. Repository-driven
endpoints get a repository backed by `httpx.MockTransport` through
`app.dependency_overrides`.

Test Categories:
- TestServiceEndpoints: Health and root
- TestDashboardEndpoints: KPIs, chart, combined dashboard, day drill-down, validation
- TestInsightsEndpoints: Inline insight generation
- TestUpstreamEndpoints: Channels, summary and financial insights
"""

from typing import Generator

import httpx
import pytest
from fastapi.testclient import TestClient

from payout_insights import __version__
from payout_insights.core.config import Settings
from payout_insights.core.dependencies import get_repository
from payout_insights.main import app
from payout_insights.services.data_source import FinancialApiClient, FinancialDataRepository

pytestmark = pytest.mark.integration

WEEK = {"startDate": "2025-10-08T00:00:00Z", "endDate": "2025-10-15T00:00:00Z"}

PAYOUTS = [
    {
        "id": "p1",
        "platform": "shopify",
        "grossAmount": 1030,
        "fees": 30,
        "netAmount": 1000,
        "date": "2025-10-09T10:00:00Z",
        "status": "received",
    },
    {
        "id": "p2",
        "platform": "etsy",
        "grossAmount": 400,
        "fees": 0,
        "netAmount": 400,
        "date": "2025-10-12T00:00:00Z",
        "status": "pending",
        "probability": 0.5,
    },
    {
        "id": "p3",
        "platform": "shopify",
        "grossAmount": 1200,
        "fees": 0,
        "netAmount": 1200,
        "date": "2025-10-03T00:00:00Z",
        "status": "received",
    },
]

EXPENSES = [
    {
        "id": "e1",
        "amount": 100,
        "date": "2025-10-09T00:00:00Z",
        "category": "Marketing",
        "description": "Ads",
        "platform": "shopify",
    }
]

UPSTREAM = {
    "/api/Channels": [{"id": 2, "name": "Shopify"}],
    "/api/Financial/received-income": [
        {"date": "2025-10-09T10:00:00Z", "value": 1000, "channelId": 2, "channelName": "Shopify"},
        {"date": "2025-10-03T10:00:00Z", "value": 1200, "channelId": 2, "channelName": "Shopify"},
    ],
    "/api/Financial/expected-income": [],
    "/api/Financial/expenses": [],
    "/api/Insights/financial": {"insights": [{"id": "up-1", "title": "Upstream", "confidence": 0.5}]},
}


def _repository(status_code: int = 200, use_mock_fallback: bool = False) -> FinancialDataRepository:
    def handler(request: httpx.Request) -> httpx.Response:
        if status_code != 200:
            return httpx.Response(status_code, text="unavailable")
        return httpx.Response(200, json=UPSTREAM[request.url.path])

    client = FinancialApiClient(base_url="http://upstream.test", transport=httpx.MockTransport(handler))
    settings = Settings(
        use_mock_fallback=use_mock_fallback,
        mock_payouts_per_month=31,
        mock_expenses_per_month=10,
    )
    return FinancialDataRepository(client=client, settings=settings)


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


class TestServiceEndpoints:

    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_root(self, client: TestClient) -> None:
        body = client.get("/").json()
        assert body["name"] == "Payout Insights API"
        assert body["version"] == __version__


class TestDashboardEndpoints:

    def test_kpis(self, client: TestClient) -> None:
        response = client.post("/dashboard/kpis", json={"payouts": PAYOUTS, "expenses": EXPENSES, "dateRange": WEEK})

        assert response.status_code == 200, response.text
        body = response.json()
        assert body["kpis"]["received"]["total"] == 1000.0
        assert body["kpis"]["received"]["change"] == -200.0
        assert body["kpis"]["expected"]["total"] == 200.0
        assert body["kpis"]["expenses"]["total"] == 100.0
        assert body["previousPeriod"]["startDate"].startswith("2025-10-01T00:00:00")

    def test_kpis_platform_filter(self, client: TestClient) -> None:
        response = client.post(
            "/dashboard/kpis",
            json={"payouts": PAYOUTS, "dateRange": WEEK, "platforms": ["etsy"]},
        )
        assert response.json()["kpis"]["received"]["total"] == 0.0

    def test_chart_daily(self, client: TestClient) -> None:
        response = client.post("/dashboard/chart", json={"payouts": PAYOUTS, "expenses": EXPENSES, "dateRange": WEEK})

        assert response.status_code == 200, response.text
        body = response.json()
        assert body["interval"] == "daily"
        assert len(body["points"]) == 8
        assert body["points"][1] == {
            "date": "2025-10-09",
            "received": 1000.0,
            "expected": 0.0,
            "expenses": 100.0,
        }

    def test_chart_weekly(self, client: TestClient) -> None:
        response = client.post("/dashboard/chart", json={"dateRange": WEEK, "interval": "weekly"})
        assert [p["date"] for p in response.json()["points"]] == ["2025-10-08", "2025-10-15"]

    def test_dashboard(self, client: TestClient) -> None:
        response = client.post("/dashboard", json={"payouts": PAYOUTS, "expenses": EXPENSES, "dateRange": WEEK})

        assert response.status_code == 200, response.text
        body = response.json()
        assert len(body["chart"]) == 8
        assert len(body["insights"]) == 6
        assert body["usedFallbackData"] is False

    def test_day_transactions(self, client: TestClient) -> None:
        response = client.post(
            "/dashboard/transactions",
            json={"payouts": PAYOUTS, "expenses": EXPENSES, "day": "2025-10-09T17:30:00Z"},
        )

        assert response.status_code == 200, response.text
        body = response.json()
        assert body["day"] == "2025-10-09"
        assert [p["id"] for p in body["payouts"]] == ["p1"]
        assert [e["id"] for e in body["expenses"]] == ["e1"]
        assert body["received"] == 1000.0
        assert body["expensesTotal"] == 100.0

    def test_day_transactions_expected_is_unweighted(self, client: TestClient) -> None:
        response = client.post(
            "/dashboard/transactions",
            json={"payouts": PAYOUTS, "day": "2025-10-12T00:00:00Z", "platforms": ["etsy"]},
        )
        body = response.json()
        assert body["expected"] == 400.0
        assert body["received"] == 0.0

    def test_inverted_range_is_rejected(self, client: TestClient) -> None:
        inverted = {"startDate": WEEK["endDate"], "endDate": WEEK["startDate"]}
        response = client.post("/dashboard/kpis", json={"dateRange": inverted})
        assert response.status_code == 422

    def test_unknown_platform_is_rejected(self, client: TestClient) -> None:
        payout = dict(PAYOUTS[0], platform="ebay")
        response = client.post("/dashboard/kpis", json={"payouts": [payout], "dateRange": WEEK})
        assert response.status_code == 422


class TestInsightsEndpoints:

    def test_six_insights_with_period(self, client: TestClient) -> None:
        response = client.post("/insights", json={"payouts": PAYOUTS, "expenses": EXPENSES, "dateRange": WEEK})

        assert response.status_code == 200, response.text
        body = response.json()
        assert body["period"] == {"from": "2025-10-08", "to": "2025-10-15"}
        assert len(body["insights"]) == 6
        assert [i["category"] for i in body["insights"][:4]] == [
            "anomalies",
            "platform_performance",
            "fees_refunds",
            "forecast_whatifs",
        ]
        assert all(i["period"]["from"] == "2025-10-08" for i in body["insights"])

    def test_empty_records(self, client: TestClient) -> None:
        body = client.post("/insights", json={"dateRange": WEEK}).json()
        assert [i["confidence"] for i in body["insights"]] == [0.3] * 6


class TestUpstreamEndpoints:

    def test_channels(self, client: TestClient) -> None:
        app.dependency_overrides[get_repository] = lambda: _repository()
        response = client.get("/dashboard/channels")
        assert response.status_code == 200
        assert response.json() == [{"id": 2, "name": "Shopify"}]

    def test_channels_upstream_failure(self, client: TestClient) -> None:
        app.dependency_overrides[get_repository] = lambda: _repository(status_code=500)
        assert client.get("/dashboard/channels").status_code == 502

    def test_summary(self, client: TestClient) -> None:
        app.dependency_overrides[get_repository] = lambda: _repository()
        response = client.get("/dashboard/summary", params={**WEEK, "channelIds": [2, 3]})

        assert response.status_code == 200, response.text
        body = response.json()
        assert body["kpis"]["received"]["total"] == pytest.approx(960.0)
        assert body["kpis"]["received"]["change"] == pytest.approx(-192.0)
        assert body["kpis"]["received"]["changePercentage"] == pytest.approx(-16.6667, rel=1e-4)
        assert len(body["insights"]) == 6
        assert body["usedFallbackData"] is False

    def test_summary_fallback(self, client: TestClient) -> None:
        app.dependency_overrides[get_repository] = lambda: _repository(status_code=503, use_mock_fallback=True)
        body = client.get("/dashboard/summary", params=WEEK).json()
        assert body["usedFallbackData"] is True
        assert len(body["chart"]) == 8

    def test_summary_fallback_compares_with_previous_period(self, client: TestClient) -> None:
        """Mock September records feed the previous period of a late-October window."""
        app.dependency_overrides[get_repository] = lambda: _repository(status_code=503, use_mock_fallback=True)
        params = {"startDate": "2025-10-16T00:00:00Z", "endDate": "2025-10-31T23:59:59Z"}
        received = client.get("/dashboard/summary", params=params).json()["kpis"]["received"]

        assert received["total"] > 0
        assert received["change"] != pytest.approx(received["total"]), "Previous period was not loaded"
        assert received["changePercentage"] != 0.0

    def test_summary_upstream_failure(self, client: TestClient) -> None:
        app.dependency_overrides[get_repository] = lambda: _repository(status_code=503)
        response = client.get("/dashboard/summary", params=WEEK)
        assert response.status_code == 502

    def test_summary_inverted_range(self, client: TestClient) -> None:
        app.dependency_overrides[get_repository] = lambda: _repository()
        params = {"startDate": WEEK["endDate"], "endDate": WEEK["startDate"]}
        assert client.get("/dashboard/summary", params=params).status_code == 400

    def test_financial_insights(self, client: TestClient) -> None:
        app.dependency_overrides[get_repository] = lambda: _repository()
        body = client.get("/insights/financial", params=WEEK).json()

        assert [i["id"] for i in body["insights"]] == ["up-1"]
        assert body["insights"][0]["category"] == "anomalies"

    def test_financial_insights_upstream_failure(self, client: TestClient) -> None:
        app.dependency_overrides[get_repository] = lambda: _repository(status_code=500)
        assert client.get("/insights/financial", params=WEEK).status_code == 502
