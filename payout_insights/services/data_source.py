"""
Upstream financial data access.

`FinancialApiClient` talks to the upstream REST API with httpx:

    GET /api/Channels
    GET /api/Financial/received-income?startDate&endDate&channelIds...
    GET /api/Financial/expected-income?startDate&endDate&channelIds...
    GET /api/Financial/expenses?startDate&endDate&channelIds...
    GET /api/Insights/financial?startDate&endDate

Dates are sent as ISO-8601 strings and `channelIds` is repeated once per id.
Every transport, status or payload failure surfaces as `DataSourceError`.

`FinancialDataRepository` loads the requested window together with its
previous period, so KPI changes and period-over-period signals have both
sides to compare. It maps the DTOs into domain records and, when
`use_mock_fallback` is enabled, answers failed fetches with seeded mock data
restricted to the same span.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple

import httpx
from pydantic import TypeAdapter, ValidationError

from payout_insights.core.config import Settings, get_settings
from payout_insights.models import (
    ChannelDto,
    DateRange,
    Expense,
    FinancialRecordDto,
    Insight,
    InsightResponseDto,
    Payout,
    PayoutStatus,
)
from payout_insights.services.aggregation import filter_by_date_range
from payout_insights.services.data_mappers import (
    map_financial_records_to_expenses,
    map_financial_records_to_payouts,
    map_insight_dtos,
)
from payout_insights.services.insights import generate_insights
from payout_insights.services.kpi import get_comparison_window
from payout_insights.services.mock_data import generate_mock_expenses, generate_mock_payouts

logger = logging.getLogger(__name__)

_CHANNELS = TypeAdapter(List[ChannelDto])
_RECORDS = TypeAdapter(List[FinancialRecordDto])

MOCK_CHANNELS = [
    ChannelDto(id=1, name="Amazon"),
    ChannelDto(id=2, name="Shopify"),
    ChannelDto(id=3, name="Stripe"),
    ChannelDto(id=4, name="Etsy"),
]


class DataSourceError(Exception):
    """Raised when the upstream financial API cannot serve a request."""


# =============================================================================
# HTTP Client
# =============================================================================


class FinancialApiClient:
    """
    Async client for the upstream financial API.

    Args:
        base_url: API root (default: `data_api_base_url`)
        timeout: Request timeout in seconds (default: `data_api_timeout_seconds`)
        transport: Optional httpx transport, e.g. `httpx.MockTransport` in tests
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.data_api_base_url).rstrip("/")
        self.timeout = settings.data_api_timeout_seconds if timeout is None else timeout
        self._transport = transport

    async def _get(self, path: str, params: Optional[List[Tuple[str, str]]] = None) -> Any:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
                headers={"Content-Type": "application/json"},
            ) as client:
                response = await client.get(path, params=params)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"API error {e.response.status_code} for {path}: {e.response.text}")
            raise DataSourceError(f"{path} returned {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error(f"Network error for {path}: {e}")
            raise DataSourceError(f"{path} is unreachable: {e}") from e
        except ValueError as e:
            raise DataSourceError(f"{path} returned invalid JSON") from e

    @staticmethod
    def _range_params(
        date_range: DateRange,
        channel_ids: Optional[Sequence[int]] = None,
    ) -> List[Tuple[str, str]]:
        params = [
            ("startDate", date_range.startDate.isoformat()),
            ("endDate", date_range.endDate.isoformat()),
        ]
        for channel_id in channel_ids or ():
            params.append(("channelIds", str(channel_id)))
        return params

    async def _get_records(
        self,
        path: str,
        date_range: DateRange,
        channel_ids: Optional[Sequence[int]],
    ) -> List[FinancialRecordDto]:
        payload = await self._get(path, self._range_params(date_range, channel_ids))
        try:
            return _RECORDS.validate_python(payload)
        except ValidationError as e:
            raise DataSourceError(f"{path} returned malformed records") from e

    async def fetch_channels(self) -> List[ChannelDto]:
        payload = await self._get("/api/Channels")
        try:
            return _CHANNELS.validate_python(payload)
        except ValidationError as e:
            raise DataSourceError("/api/Channels returned malformed channels") from e

    async def fetch_received_income(
        self,
        date_range: DateRange,
        channel_ids: Optional[Sequence[int]] = None,
    ) -> List[FinancialRecordDto]:
        return await self._get_records("/api/Financial/received-income", date_range, channel_ids)

    async def fetch_expected_income(
        self,
        date_range: DateRange,
        channel_ids: Optional[Sequence[int]] = None,
    ) -> List[FinancialRecordDto]:
        return await self._get_records("/api/Financial/expected-income", date_range, channel_ids)

    async def fetch_expenses(
        self,
        date_range: DateRange,
        channel_ids: Optional[Sequence[int]] = None,
    ) -> List[FinancialRecordDto]:
        return await self._get_records("/api/Financial/expenses", date_range, channel_ids)

    async def fetch_insights(self, date_range: DateRange) -> InsightResponseDto:
        payload = await self._get("/api/Insights/financial", self._range_params(date_range))
        try:
            return InsightResponseDto.model_validate(payload)
        except ValidationError as e:
            raise DataSourceError("/api/Insights/financial returned malformed insights") from e


# =============================================================================
# Repository
# =============================================================================


@dataclass
class FinancialData:
    """Records loaded for a reporting window and its previous period."""

    payouts: List[Payout] = field(default_factory=list)
    expenses: List[Expense] = field(default_factory=list)
    used_fallback: bool = False


class FinancialDataRepository:
    """
    Loads domain records from the upstream API with optional mock fallback.

    Mock records are generated once per repository and reused.
    """

    def __init__(
        self,
        client: Optional[FinancialApiClient] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.client = client or FinancialApiClient(
            base_url=self.settings.data_api_base_url,
            timeout=self.settings.data_api_timeout_seconds,
        )
        self._mock_payouts: Optional[List[Payout]] = None
        self._mock_expenses: Optional[List[Expense]] = None

    def _mock_records(self) -> Tuple[List[Payout], List[Expense]]:
        if self._mock_payouts is None or self._mock_expenses is None:
            self._mock_payouts = generate_mock_payouts(
                count_per_month=self.settings.mock_payouts_per_month,
                seed=self.settings.mock_seed,
                year=self.settings.mock_year,
            )
            self._mock_expenses = generate_mock_expenses(
                count_per_month=self.settings.mock_expenses_per_month,
                seed=self.settings.mock_seed,
                year=self.settings.mock_year,
            )
        return self._mock_payouts, self._mock_expenses

    def mock_data(self, date_range: DateRange) -> FinancialData:
        """Mock records for `date_range` and its previous period (channel filters do not apply)."""
        payouts, expenses = self._mock_records()
        window = get_comparison_window(date_range)
        return FinancialData(
            payouts=filter_by_date_range(payouts, window),
            expenses=filter_by_date_range(expenses, window),
            used_fallback=True,
        )

    async def load_channels(self) -> List[ChannelDto]:
        try:
            return await self.client.fetch_channels()
        except DataSourceError:
            if not self.settings.use_mock_fallback:
                raise
            logger.warning("Using mock channels as fallback")
            return list(MOCK_CHANNELS)

    async def load(
        self,
        date_range: DateRange,
        channel_ids: Optional[Sequence[int]] = None,
    ) -> FinancialData:
        """
        Load received and expected payouts plus expenses for a window and its
        previous period.

        Args:
            date_range: Current reporting window
            channel_ids: Upstream channel filter; empty or None means all

        Returns:
            FinancialData; `used_fallback` is True when mock data was served

        Raises:
            DataSourceError: Upstream failure with the mock fallback disabled
        """
        channels = list(channel_ids or ()) or None
        window = get_comparison_window(date_range)
        try:
            received, expected, expenses = await asyncio.gather(
                self.client.fetch_received_income(window, channels),
                self.client.fetch_expected_income(window, channels),
                self.client.fetch_expenses(window, channels),
            )
        except DataSourceError as e:
            if not self.settings.use_mock_fallback:
                raise
            logger.warning(f"Using mock financial data as fallback: {e}")
            return self.mock_data(date_range)

        payouts = map_financial_records_to_payouts(received, PayoutStatus.RECEIVED)
        payouts.extend(map_financial_records_to_payouts(expected, PayoutStatus.PENDING))
        logger.info(
            f"Loaded {len(payouts)} payouts and {len(expenses)} expenses "
            f"for {window.startDate.isoformat()}..{window.endDate.isoformat()}"
        )
        return FinancialData(
            payouts=payouts,
            expenses=map_financial_records_to_expenses(expenses, "Expense"),
        )

    async def load_insights(self, date_range: DateRange) -> Tuple[List[Insight], bool]:
        """
        Upstream insights for a window.

        With the mock fallback enabled, a failed fetch is answered by the
        local insight engine over whatever records can be loaded.

        Returns:
            (insights, used_fallback)
        """
        try:
            response = await self.client.fetch_insights(date_range)
        except DataSourceError as e:
            if not self.settings.use_mock_fallback:
                raise
            logger.warning(f"Using generated insights as fallback: {e}")
            data = await self.load(date_range)
            return generate_insights(data.payouts, data.expenses, date_range), True

        return map_insight_dtos(response.insights or []), False
