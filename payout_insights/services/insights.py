"""
Insight Scoring & Selection - exactly six ranked insights per period.

Pipeline:
1. SIGNALS - services.signals extracts every signal family for the window
2. CANDIDATES - each signal is rendered into a categorized Insight with a
   message that already embeds the computed numbers
3. SCORING - score = impactWeight × recencyWeight × confidence
   - recencyWeight is a constant 1.2 (configurable)
4. SELECTION
   - One insight per required category (Anomalies, Platform Performance,
     Fees & Refunds, Forecast & What-ifs), in that order: the best scoring
     candidate, or a low-confidence learning placeholder
   - Remaining slots: candidates from the other categories by descending
     score, ties kept in generation order
   - Padding: learning placeholders until the limit is reached

Output is deterministic for identical inputs.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

from payout_insights.core.config import get_settings
from payout_insights.models import (
    REQUIRED_CATEGORIES,
    DateRange,
    Expense,
    Insight,
    InsightCategory,
    InsightMetric,
    InsightPeriod,
    InsightSeverity,
    KPIData,
    Payout,
)
from payout_insights.services.formatting import (
    format_currency,
    format_percent,
    format_signed_percent,
    platform_label,
)
from payout_insights.services.signals import (
    AnomalySignal,
    CompletionSignal,
    FeeSignal,
    ForecastSignal,
    MomentumSignal,
    SHARE_SHIFT_THRESHOLD,
    PlatformSignal,
    SignalSet,
    extract_signals,
)

logger = logging.getLogger(__name__)

LEARNING_CONFIDENCE = 0.3
LEARNING_TITLE = "Learning insight"
LEARNING_MESSAGE = "Not enough signal; continue collecting data this period."


@dataclass(frozen=True)
class Candidate:
    """A rendered insight competing for a slot."""

    category: InsightCategory
    insight: Insight
    score: float


def score_candidate(
    impact_weight: float,
    confidence: float,
    recency_weight: Optional[float] = None,
) -> float:
    """score = impactWeight × recencyWeight × confidence"""
    if recency_weight is None:
        recency_weight = get_settings().recency_weight
    return impact_weight * recency_weight * confidence


def learning_insight(
    insight_id: str,
    category: InsightCategory,
    period: InsightPeriod,
) -> Insight:
    """Placeholder for a slot that has no qualifying signal."""
    return Insight(
        id=insight_id,
        category=category,
        title=LEARNING_TITLE,
        message=LEARNING_MESSAGE,
        severity=InsightSeverity.INFO,
        metric=InsightMetric.MIXED,
        value=0.0,
        delta=None,
        period=period,
        confidence=LEARNING_CONFIDENCE,
        evidence=[],
    )


# =============================================================================
# Candidate Rendering
# =============================================================================


def _anomaly_insight(signal: AnomalySignal, period: InsightPeriod, currency: str) -> Insight:
    return Insight(
        id=f"anomaly_{signal.day}",
        category=InsightCategory.ANOMALIES,
        title="Profit anomaly detected",
        message=(
            f"{format_currency(signal.profit, currency)} profit on {signal.day} "
            f"(z={signal.z_score:.1f}) triggers urgent variance review."
        ),
        severity=signal.severity,
        metric=InsightMetric.ACTUAL_PROFIT,
        value=signal.profit,
        delta=signal.profit - signal.mean,
        period=period,
        confidence=signal.confidence,
        evidence=[f"daily:{signal.day}"],
        actions=(
            ["Audit orders and expenses for that date to confirm accuracy."]
            if signal.profit < 0
            else None
        ),
    )


def _platform_insight(signal: PlatformSignal, period: InsightPeriod, currency: str) -> Insight:
    stat = signal.stat
    label = platform_label(stat.platform)
    share_delta = stat.share_delta

    actions: Optional[List[str]] = None
    if share_delta >= SHARE_SHIFT_THRESHOLD:
        actions = [f"Allocate inventory to {label} to keep momentum."]
    elif share_delta <= -SHARE_SHIFT_THRESHOLD:
        actions = [f"Review campaigns on {label} to stabilise share."]

    return Insight(
        id=f"platform_{stat.platform.value}",
        category=InsightCategory.PLATFORM_PERFORMANCE,
        title=f"{label} share",
        message=(
            f"{label} holds {format_percent(stat.share)} income share, "
            f"shift {share_delta * 100:.1f}pp vs prior."
        ),
        severity=signal.severity,
        metric=InsightMetric.POTENTIAL_INCOME,
        value=stat.share,
        delta=share_delta,
        period=period,
        confidence=signal.confidence,
        evidence=[f"platform:{stat.platform.value}"],
        actions=actions,
    )


def _fee_insight(signal: FeeSignal, period: InsightPeriod, currency: str) -> Insight:
    stat = signal.stat
    label = platform_label(stat.platform)

    if signal.is_fallback:
        return Insight(
            id=f"fees_learning_{stat.platform.value}",
            category=InsightCategory.FEES_REFUNDS,
            title="Fee learning insight",
            message=f"Fee data limited; keep monitoring {label} processing rate.",
            severity=signal.severity,
            metric=InsightMetric.POTENTIAL_LOSS,
            value=stat.fee_rate,
            delta=None,
            period=period,
            confidence=signal.confidence,
            evidence=[f"fee_rate:{stat.platform.value}"],
        )

    return Insight(
        id=f"fees_{stat.platform.value}",
        category=InsightCategory.FEES_REFUNDS,
        title=f"{label} fee shift",
        message=(
            f"{label} fee rate {format_percent(stat.fee_rate, decimals=2)} "
            f"({signal.delta * 100:.2f}pp vs prior) needs cost review."
        ),
        severity=signal.severity,
        metric=InsightMetric.POTENTIAL_LOSS,
        value=stat.fee_rate,
        delta=signal.delta,
        period=period,
        confidence=signal.confidence,
        evidence=[f"fee_rate:{stat.platform.value}"],
        actions=(
            [f"Consider routing {label} payments to lower-cost processors."]
            if stat.fee_rate > 0.04
            else None
        ),
    )


def _forecast_insight(signal: ForecastSignal, period: InsightPeriod, currency: str) -> Insight:
    if signal.kind == "shortfall":
        return Insight(
            id="forecast_shortfall",
            category=InsightCategory.FORECAST_WHATIFS,
            title="Cash shortfall risk",
            message=(
                f"{format_currency(abs(signal.expected_net), currency)} shortfall "
                f"expected unless discretionary spend is delayed."
            ),
            severity=signal.severity,
            metric=InsightMetric.MIXED,
            value=signal.expected_net,
            delta=signal.delta,
            period=period,
            confidence=signal.confidence,
            evidence=["scenario:expected", "kpis.actual_profit"],
            actions=["Delay discretionary spend until major deposits clear."],
        )

    return Insight(
        id="forecast_pending",
        category=InsightCategory.FORECAST_WHATIFS,
        title="Pending payout reliance",
        message=(
            f"{format_currency(signal.expected, currency)} still pending this period, "
            f"{format_percent(signal.expected_ratio)} of projected income."
        ),
        severity=signal.severity,
        metric=InsightMetric.POTENTIAL_INCOME,
        value=signal.expected,
        delta=signal.delta,
        period=period,
        confidence=signal.confidence,
        evidence=["scenario:expected"],
        actions=(
            ["Sequence outbound payments once the largest deposits settle."]
            if signal.expected_ratio > 0.6
            else None
        ),
    )


def _completion_insight(signal: CompletionSignal, period: InsightPeriod, currency: str) -> Insight:
    return Insight(
        id="timing_completion",
        category=InsightCategory.TIMING_RELIABILITY,
        title="Payout completion",
        message=(
            f"{format_percent(signal.completion_rate)} payouts cleared; "
            f"{signal.pending_count} pending need scheduling follow-up."
        ),
        severity=signal.severity,
        metric=InsightMetric.MIXED,
        value=signal.completion_rate,
        delta=None,
        period=period,
        confidence=signal.confidence,
        evidence=["timing:completion_rate"],
        actions=(
            ["Follow up with platforms to confirm pending payout ETAs."]
            if signal.completion_rate < 0.75
            else None
        ),
    )


def _momentum_insight(signal: MomentumSignal, period: InsightPeriod, currency: str) -> Insight:
    return Insight(
        id="trend_profit",
        category=InsightCategory.TREND_MOMENTUM,
        title="Profit momentum",
        message=(
            f"Profit {format_signed_percent(signal.profit_growth)} vs prior period; "
            f"sustain disciplined reinvestment."
        ),
        severity=signal.severity,
        metric=InsightMetric.ACTUAL_PROFIT,
        value=signal.actual_profit,
        delta=signal.actual_profit - signal.previous_profit,
        period=period,
        confidence=signal.confidence,
        evidence=["kpis.actual_profit"],
    )


_RENDERERS: Dict[type, Callable[..., Insight]] = {
    AnomalySignal: _anomaly_insight,
    PlatformSignal: _platform_insight,
    FeeSignal: _fee_insight,
    ForecastSignal: _forecast_insight,
    CompletionSignal: _completion_insight,
    MomentumSignal: _momentum_insight,
}


def build_candidates(
    signals: SignalSet,
    period: InsightPeriod,
    currency_symbol: Optional[str] = None,
    recency_weight: Optional[float] = None,
) -> List[Candidate]:
    """
    Render every extracted signal into a scored candidate.

    Args:
        signals: Extracted signals
        period: Reporting window stamped on every insight
        currency_symbol: Symbol for rendered amounts (default: setting)
        recency_weight: Scoring recency weight (default: setting)

    Returns:
        Candidates in generation order: anomaly, platform, fees, forecast,
        timing, trend
    """
    settings = get_settings()
    if currency_symbol is None:
        currency_symbol = settings.currency_symbol
    if recency_weight is None:
        recency_weight = settings.recency_weight

    candidates: List[Candidate] = []
    for signal in signals.ordered():
        insight = _RENDERERS[type(signal)](signal, period, currency_symbol)
        candidates.append(
            Candidate(
                category=insight.category,
                insight=insight,
                score=score_candidate(signal.impact_weight, signal.confidence, recency_weight),
            )
        )
    return candidates


# =============================================================================
# Selection
# =============================================================================


def select_insights(
    candidates: Sequence[Candidate],
    period: InsightPeriod,
    limit: Optional[int] = None,
) -> List[Insight]:
    """
    Pick exactly `limit` insights (default 6) from scored candidates.

    Args:
        candidates: Scored candidates in generation order
        period: Reporting window for any placeholders
        limit: Number of insights to return

    Returns:
        Required categories first (in fixed order), then the best remaining
        candidates, then learning placeholders
    """
    if limit is None:
        limit = get_settings().insight_count

    selected: List[Insight] = []
    for category in REQUIRED_CATEGORIES:
        pool = [c for c in candidates if c.category == category]
        if pool:
            # max() keeps the earliest candidate on ties
            best = max(pool, key=lambda c: c.score)
            selected.append(best.insight)
        else:
            selected.append(learning_insight(f"learning_{category.value}", category, period))

    required = set(REQUIRED_CATEGORIES)
    remaining = sorted(
        (c for c in candidates if c.category not in required),
        key=lambda c: c.score,
        reverse=True,
    )
    for candidate in remaining:
        if len(selected) >= limit:
            break
        selected.append(candidate.insight)

    while len(selected) < limit:
        selected.append(
            learning_insight(
                f"learning_fill_{len(selected)}",
                InsightCategory.TREND_MOMENTUM,
                period,
            )
        )

    return selected[:limit]


# =============================================================================
# Main Entry Point
# =============================================================================


def generate_insights(
    payouts: Sequence[Payout],
    expenses: Sequence[Expense],
    date_range: DateRange,
    kpi_data: Optional[KPIData] = None,
) -> List[Insight]:
    """
    Generate the ranked insight list for a reporting window.

    Args:
        payouts: All payout records
        expenses: All expense records
        date_range: Current reporting window
        kpi_data: Precomputed KPIs; accepted for call-site compatibility,
            insights are always derived from the raw records

    Returns:
        Exactly `insight_count` (6) insights
    """
    period = date_range.period()
    signals = extract_signals(payouts, expenses, date_range)
    candidates = build_candidates(signals, period)
    insights = select_insights(candidates, period)

    placeholders = sum(1 for insight in insights if insight.id.startswith("learning_"))
    logger.info(
        f"Generated {len(insights)} insights for {period.from_}..{period.to} "
        f"from {len(candidates)} candidates ({placeholders} placeholders)"
    )
    return insights
