"""
Mapping from upstream financial API DTOs to domain models.

Channel names map to platforms case-insensitively; unknown names fall back to
Shopify with a warning. Upstream financial records carry a single value, so
mapped payouts derive fees from the configured `mapped_fee_rate`.
"""

import logging
from typing import Dict, List, Optional, Sequence

from payout_insights.core.config import get_settings
from payout_insights.models import (
    Expense,
    FinancialRecordDto,
    Insight,
    InsightCategory,
    InsightDto,
    InsightMetric,
    InsightPeriod,
    InsightSeverity,
    Payout,
    PayoutStatus,
    Platform,
)

logger = logging.getLogger(__name__)

_CHANNEL_PLATFORMS: Dict[str, Platform] = {platform.value: platform for platform in Platform}

# Keyword fragments matched against a normalised category string, first hit wins
_CATEGORY_KEYWORDS = [
    (("anomal",), InsightCategory.ANOMALIES),
    (("platform", "performance"), InsightCategory.PLATFORM_PERFORMANCE),
    (("fee", "refund"), InsightCategory.FEES_REFUNDS),
    (("forecast", "whatif"), InsightCategory.FORECAST_WHATIFS),
    (("timing", "reliab"), InsightCategory.TIMING_RELIABILITY),
    (("trend", "momentum"), InsightCategory.TREND_MOMENTUM),
]

_METRIC_KEYWORDS = [
    (("income", "potential"), InsightMetric.POTENTIAL_INCOME),
    (("loss",), InsightMetric.POTENTIAL_LOSS),
    (("profit", "actual"), InsightMetric.ACTUAL_PROFIT),
]

_SEVERITY_ALIASES: Dict[str, InsightSeverity] = {
    "danger": InsightSeverity.DANGER,
    "error": InsightSeverity.DANGER,
    "warning": InsightSeverity.WARNING,
    "warn": InsightSeverity.WARNING,
    "success": InsightSeverity.SUCCESS,
}


def _normalise(value: str) -> str:
    return value.lower().replace("_", "").replace(" ", "")


# =============================================================================
# Channels
# =============================================================================


def map_channel_to_platform(channel_name: str) -> Platform:
    """
    Resolve a channel name to a Platform.

    Matching is case-insensitive and ignores surrounding whitespace.
    Unknown names resolve to Shopify.
    """
    platform = _CHANNEL_PLATFORMS.get(channel_name.strip().lower())
    if platform is None:
        logger.warning(f"Unknown channel name: {channel_name}, defaulting to Shopify")
        return Platform.SHOPIFY
    return platform


# =============================================================================
# Financial Records
# =============================================================================


def map_financial_record_to_payout(
    record: FinancialRecordDto,
    status: PayoutStatus = PayoutStatus.RECEIVED,
    fee_rate: Optional[float] = None,
    index: int = 0,
) -> Payout:
    """
    Build a Payout from an upstream income record.

    Args:
        record: Upstream record; its value is taken as the gross amount
        status: Settlement state of the endpoint the record came from
        fee_rate: Fee share of the gross amount (default: `mapped_fee_rate`)
        index: Position of the record in its response; keeps ids unique when
            a channel reports several records with the same timestamp

    Returns:
        Payout with net = gross - fees. Pending payouts get the configured
        `mapped_pending_probability`; other statuses keep the default.
    """
    settings = get_settings()
    if fee_rate is None:
        fee_rate = settings.mapped_fee_rate

    platform = map_channel_to_platform(record.channelName) if record.channelName else Platform.SHOPIFY
    gross = abs(record.value)
    fees = gross * fee_rate
    stamp = record.date.isoformat()

    return Payout(
        id=f"payout-{status.value}-{record.channelId}-{stamp}-{index}",
        platform=platform,
        grossAmount=gross,
        fees=fees,
        netAmount=gross - fees,
        date=record.date,
        status=status,
        probability=settings.mapped_pending_probability if status == PayoutStatus.PENDING else None,
        transactionId=f"TXN-{record.channelId}-{int(record.date.timestamp() * 1000)}",
        description=f"{record.channelName or 'Unknown'} payout",
    )


def map_financial_record_to_expense(
    record: FinancialRecordDto,
    category: str = "Platform Fees",
    index: int = 0,
) -> Expense:
    platform = map_channel_to_platform(record.channelName) if record.channelName else None
    return Expense(
        id=f"expense-{record.channelId}-{record.date.isoformat()}-{index}",
        amount=abs(record.value),
        date=record.date,
        category=category,
        description=f"{category} - {record.channelName or 'Unknown'}",
        platform=platform,
    )


def map_financial_records_to_payouts(
    records: Sequence[FinancialRecordDto],
    status: PayoutStatus = PayoutStatus.RECEIVED,
) -> List[Payout]:
    return [
        map_financial_record_to_payout(record, status, index=index)
        for index, record in enumerate(records)
    ]


def map_financial_records_to_expenses(
    records: Sequence[FinancialRecordDto],
    category: str = "Platform Fees",
) -> List[Expense]:
    return [
        map_financial_record_to_expense(record, category, index=index)
        for index, record in enumerate(records)
    ]


# =============================================================================
# Insights
# =============================================================================


def map_insight_category(category: Optional[str]) -> InsightCategory:
    """Fuzzy category match; anything unrecognised is an anomaly insight."""
    if not category:
        return InsightCategory.ANOMALIES
    normalised = _normalise(category)
    for keywords, mapped in _CATEGORY_KEYWORDS:
        if any(keyword in normalised for keyword in keywords):
            return mapped
    return InsightCategory.ANOMALIES


def map_insight_severity(severity: Optional[str]) -> InsightSeverity:
    if not severity:
        return InsightSeverity.INFO
    return _SEVERITY_ALIASES.get(severity.lower(), InsightSeverity.INFO)


def map_insight_metric(metric: Optional[str]) -> InsightMetric:
    if not metric:
        return InsightMetric.MIXED
    normalised = _normalise(metric)
    for keywords, mapped in _METRIC_KEYWORDS:
        if any(keyword in normalised for keyword in keywords):
            return mapped
    return InsightMetric.MIXED


def map_insight_dto(dto: InsightDto, index: int = 0) -> Insight:
    """
    Convert an upstream insight into the domain model.

    Missing ids become `insight-<index>` so repeated mappings of the same
    payload produce the same ids. Confidence is clamped into [0, 1].
    """
    return Insight(
        id=dto.id or f"insight-{index}",
        category=map_insight_category(dto.category),
        title=dto.title or "Insight",
        message=dto.message or "",
        severity=map_insight_severity(dto.severity),
        metric=map_insight_metric(dto.metric),
        value=dto.value,
        delta=dto.delta,
        period=InsightPeriod(**{"from": dto.period.from_ or "", "to": dto.period.to or ""}),
        confidence=min(1.0, max(0.0, dto.confidence)),
        evidence=list(dto.evidence or []),
        actions=list(dto.actions) if dto.actions else None,
    )


def map_insight_dtos(dtos: Sequence[InsightDto]) -> List[Insight]:
    return [map_insight_dto(dto, index) for index, dto in enumerate(dtos)]
