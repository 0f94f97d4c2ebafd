"""
Pydantic request/response models for the Payout Insights service.

This module provides type-safe data validation and serialization for:
- Core financial records (payouts, expenses) and date ranges
- KPI comparison results and chart series
- Generated insights
- Upstream financial API DTOs (channels, financial records, insights)
- API request/response envelopes

Field names are camelCase to match the dashboard's JSON contract.

Timestamps are normalised to timezone-aware UTC datetimes at the model
boundary; naive datetimes are interpreted as UTC. Every downstream
comparison and day-key derivation relies on this.

All models use Pydantic v2 syntax with proper field validation and examples.
"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from payout_insights.models.enums import (
    ChartInterval,
    InsightCategory,
    InsightMetric,
    InsightSeverity,
    PayoutStatus,
    Platform,
)


def ensure_utc(value: datetime) -> datetime:
    """Return `value` as an aware UTC datetime (naive values are taken as UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_day(value: datetime) -> str:
    """Format a datetime as its UTC calendar day, `YYYY-MM-DD`."""
    return ensure_utc(value).date().isoformat()


# =============================================================================
# Core Financial Records
# =============================================================================


class Payout(BaseModel):
    """
    A platform settlement record, received or expected.

    `netAmount` is assumed to equal `grossAmount - fees`; the relation is not
    enforced because upstream systems round independently.
    """
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "id": "payout-1",
                "platform": "shopify",
                "grossAmount": 1200.00,
                "fees": 36.00,
                "netAmount": 1164.00,
                "date": "2025-10-03T14:22:00Z",
                "status": "pending",
                "probability": 0.85,
                "transactionId": "TXN-8F2KQ1A",
                "description": "Shopify payout"
            }
        }
    )

    id: str = Field(
        ...,
        description="Unique payout identifier"
    )
    platform: Platform = Field(
        ...,
        description="Sales channel that issued the payout"
    )
    grossAmount: float = Field(
        ...,
        description="Amount before platform fees"
    )
    fees: float = Field(
        default=0.0,
        description="Platform fees withheld"
    )
    netAmount: float = Field(
        ...,
        description="Amount after fees (grossAmount - fees)"
    )
    date: datetime = Field(
        ...,
        description="Settlement or expected settlement timestamp"
    )
    status: PayoutStatus = Field(
        ...,
        description="Settlement state"
    )
    probability: Optional[float] = Field(
        default=None,
        ge=0.0,
        le=1.0,
        description="Likelihood an expected payout settles (pending/processing only)"
    )
    transactionId: Optional[str] = Field(
        default=None,
        description="Platform transaction reference"
    )
    description: Optional[str] = Field(
        default=None,
        description="Free-text description"
    )

    @field_validator("date")
    @classmethod
    def _date_to_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class Expense(BaseModel):
    """A cash outflow record, optionally tied to a platform."""
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "id": "expense-1",
                "amount": 250.00,
                "date": "2025-10-04T09:00:00Z",
                "category": "Marketing",
                "description": "Marketing - etsy",
                "platform": "etsy"
            }
        }
    )

    id: str = Field(
        ...,
        description="Unique expense identifier"
    )
    amount: float = Field(
        ...,
        ge=0.0,
        description="Expense amount (positive)"
    )
    date: datetime = Field(
        ...,
        description="Expense timestamp"
    )
    category: str = Field(
        default="Other",
        description="Free-text expense category"
    )
    description: str = Field(
        default="",
        description="Free-text description"
    )
    platform: Optional[Platform] = Field(
        default=None,
        description="Sales channel the expense relates to, if any"
    )

    @field_validator("date")
    @classmethod
    def _date_to_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class InsightPeriod(BaseModel):
    """Reporting window of an insight, as `YYYY-MM-DD` strings."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    from_: str = Field(
        ...,
        alias="from",
        description="First day of the period"
    )
    to: str = Field(
        ...,
        description="Last day of the period"
    )


class DateRange(BaseModel):
    """
    Inclusive reporting window.

    Both bounds are inclusive for filtering. The previous period derived
    from a range has the same duration and ends at this range's start.
    """
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "startDate": "2025-10-01T00:00:00Z",
                "endDate": "2025-10-31T23:59:59Z",
                "label": "October"
            }
        }
    )

    startDate: datetime = Field(
        ...,
        description="Inclusive start of the range"
    )
    endDate: datetime = Field(
        ...,
        description="Inclusive end of the range"
    )
    label: Optional[str] = Field(
        default=None,
        description="Human-readable label, e.g. 'Last 7 days'"
    )

    @field_validator("startDate", "endDate")
    @classmethod
    def _bounds_to_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @model_validator(mode="after")
    def _check_order(self) -> "DateRange":
        if self.endDate < self.startDate:
            raise ValueError("endDate must not be before startDate")
        return self

    @property
    def duration(self) -> timedelta:
        return self.endDate - self.startDate

    def period(self) -> InsightPeriod:
        return InsightPeriod(**{"from": format_day(self.startDate), "to": format_day(self.endDate)})


# =============================================================================
# KPI and Chart Models
# =============================================================================


class KPIMetric(BaseModel):
    """
    Aggregate for one KPI with period-over-period comparison.

    changePercentage is 0 whenever the previous total is 0.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "total": 12500.0,
                "change": 2500.0,
                "changePercentage": 25.0
            }
        }
    )

    total: float = Field(
        ...,
        description="Sum for the current period"
    )
    change: float = Field(
        ...,
        description="total minus previous total"
    )
    changePercentage: float = Field(
        ...,
        description="change / previous x 100, or 0 when previous is 0"
    )


class KPIData(BaseModel):
    """The three dashboard KPIs."""

    received: KPIMetric
    expected: KPIMetric
    expenses: KPIMetric


class ChartDataPoint(BaseModel):
    """One chart bucket; series values may be omitted."""

    date: str = Field(
        ...,
        description="Bucket start day, YYYY-MM-DD"
    )
    received: Optional[float] = Field(default=None)
    expected: Optional[float] = Field(default=None)
    expenses: Optional[float] = Field(default=None)


# =============================================================================
# Insight Model
# =============================================================================


class Insight(BaseModel):
    """
    A scored, categorized, human-readable observation.

    `message` is fully rendered and already includes the computed numbers.
    `evidence` holds opaque signal tags such as `daily:2025-10-12` or
    `fee_rate:stripe`.
    """
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "id": "anomaly_2025-10-12",
                "category": "anomalies",
                "title": "Profit anomaly detected",
                "message": "-€1,240 profit on 2025-10-12 (z=-2.3) triggers urgent variance review.",
                "severity": "warning",
                "metric": "actual_profit",
                "value": -1240.0,
                "delta": -1795.5,
                "period": {"from": "2025-10-01", "to": "2025-10-31"},
                "confidence": 0.9,
                "evidence": ["daily:2025-10-12"],
                "actions": ["Audit orders and expenses for that date to confirm accuracy."]
            }
        }
    )

    id: str = Field(
        ...,
        description="Stable insight identifier"
    )
    category: InsightCategory = Field(
        ...,
        description="Insight category"
    )
    title: str = Field(
        ...,
        description="Short headline"
    )
    message: str = Field(
        ...,
        description="Rendered message including computed numbers"
    )
    severity: InsightSeverity = Field(
        ...,
        description="Visual severity"
    )
    metric: InsightMetric = Field(
        ...,
        description="Financial quantity the insight refers to"
    )
    value: float = Field(
        ...,
        description="Primary signal value"
    )
    delta: Optional[float] = Field(
        default=None,
        description="Signed change versus baseline"
    )
    period: InsightPeriod = Field(
        ...,
        description="Reporting window"
    )
    confidence: float = Field(
        ...,
        ge=0.0,
        le=1.0,
        description="Confidence in the observation"
    )
    evidence: List[str] = Field(
        default_factory=list,
        description="Signal tags backing the insight"
    )
    actions: Optional[List[str]] = Field(
        default=None,
        description="Suggested remediations"
    )


# =============================================================================
# Upstream Financial API DTOs
# =============================================================================


class ChannelDto(BaseModel):
    """Sales channel as served by the upstream API."""

    id: int
    name: Optional[str] = None


class FinancialRecordDto(BaseModel):
    """Income or expense data point as served by the upstream API."""

    date: datetime
    value: float
    channelId: int
    channelName: Optional[str] = None


class InsightPeriodDto(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_: Optional[str] = Field(default=None, alias="from")
    to: Optional[str] = None


class InsightDto(BaseModel):
    """Insight as served by the upstream API; every text field may be null."""

    id: Optional[str] = None
    category: Optional[str] = None
    title: Optional[str] = None
    message: Optional[str] = None
    severity: Optional[str] = None
    metric: Optional[str] = None
    value: float = 0.0
    delta: Optional[float] = None
    period: InsightPeriodDto = Field(default_factory=InsightPeriodDto)
    confidence: float = 0.0
    evidence: Optional[List[str]] = None
    actions: Optional[List[str]] = None


class InsightResponseDto(BaseModel):
    insights: Optional[List[InsightDto]] = None


# =============================================================================
# API Envelopes
# =============================================================================


class DashboardQuery(BaseModel):
    """
    Request body for dashboard computations.

    Records are supplied inline; an empty `platforms` list selects all
    platforms.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "payouts": [],
                "expenses": [],
                "dateRange": {
                    "startDate": "2025-10-01T00:00:00Z",
                    "endDate": "2025-10-31T23:59:59Z"
                },
                "platforms": ["amazon"],
                "interval": "daily"
            }
        }
    )

    payouts: List[Payout] = Field(
        default_factory=list,
        description="Payout records"
    )
    expenses: List[Expense] = Field(
        default_factory=list,
        description="Expense records"
    )
    dateRange: DateRange = Field(
        ...,
        description="Current reporting window"
    )
    platforms: List[Platform] = Field(
        default_factory=list,
        description="Platform filter; empty means all"
    )
    interval: ChartInterval = Field(
        default=ChartInterval.DAILY,
        description="Chart bucket width"
    )


class KPIResponse(BaseModel):
    dateRange: DateRange
    previousPeriod: DateRange
    kpis: KPIData


class ChartDataResponse(BaseModel):
    interval: ChartInterval
    points: List[ChartDataPoint]


class InsightsResponse(BaseModel):
    period: InsightPeriod
    insights: List[Insight]


class DashboardResponse(BaseModel):
    """Everything a dashboard render needs in one payload."""

    kpis: KPIData
    chart: List[ChartDataPoint]
    insights: List[Insight]
    usedFallbackData: bool = Field(
        default=False,
        description="True when records came from the mock fallback"
    )


class DayTransactionsQuery(BaseModel):
    """Request body for the single-day transaction drill-down."""

    payouts: List[Payout] = Field(default_factory=list)
    expenses: List[Expense] = Field(default_factory=list)
    day: datetime = Field(
        ...,
        description="Any instant on the UTC calendar day to inspect"
    )
    platforms: List[Platform] = Field(
        default_factory=list,
        description="Platform filter; empty means all"
    )


class DayTransactionsResponse(BaseModel):
    """
    Records behind one chart bucket.

    `expected` is the unweighted net amount of pending and processing
    payouts, as listed line by line in a detail panel.
    """

    day: str
    payouts: List[Payout]
    expenses: List[Expense]
    received: float
    expected: float
    expensesTotal: float
