"""
Signal Extraction Engine - statistical features behind every insight.

Each signal family feeds exactly one insight category:

1. ANOMALIES - Daily profit z-scores
   - Daily profit = Σ netAmount(day) - Σ expense amount(day), UTC calendar days
   - Population mean/std over days with any activity
   - The lowest z-score day is flagged when z <= -1.5
2. PLATFORM PERFORMANCE - Income share and share growth per platform
3. FEES & REFUNDS - Fee-rate shift per platform versus the previous period
4. FORECAST & WHAT-IFS - Shortfall risk or reliance on pending payouts
5. TIMING & RELIABILITY - Payout completion rate
6. TREND & MOMENTUM - Profit growth versus the previous period

Every signal carries an impact weight and a confidence; the insight scorer
turns them into `impact x recency x confidence`. Confidences are clamped
sample-size ratios: clamp(x, lo, hi) = min(hi, max(lo, x)).

Current period records are filtered inclusively; the previous period is the
same duration ending at startDate, end bound excluded (see services.kpi).

All functions are pure and deterministic.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from payout_insights.core.config import get_settings
from payout_insights.models import (
    DateRange,
    Expense,
    InsightSeverity,
    Payout,
    Platform,
    format_day,
)
from payout_insights.services.aggregation import (
    calculate_expected,
    calculate_fees,
    calculate_gross,
    calculate_received,
    is_expected,
)
from payout_insights.services.kpi import (
    PeriodSummary,
    summarize_period,
    summarize_previous_period,
)

logger = logging.getLogger(__name__)

# Standard deviations below this are treated as a flat series
STD_EPSILON = 1e-9

# Income share shift that counts as a real gain or loss of share
SHARE_SHIFT_THRESHOLD = 0.05


# =============================================================================
# Statistical Helper Functions
# =============================================================================


def mean(values: Sequence[float]) -> float:
    """
    Arithmetic mean.

    Args:
        values: Numeric values

    Returns:
        Mean, or 0.0 for an empty sequence
    """
    if len(values) == 0:
        return 0.0
    return float(np.mean(np.asarray(values, dtype=np.float64)))


def std_dev(values: Sequence[float]) -> float:
    """
    Population standard deviation (ddof=0).

    Returns:
        Standard deviation, or 0.0 for fewer than 2 values
    """
    if len(values) < 2:
        return 0.0
    return float(np.std(np.asarray(values, dtype=np.float64)))


def z_score(value: float, avg: float, std: float) -> float:
    """Z-score of `value`; 0.0 when the standard deviation is (numerically) 0."""
    if std <= STD_EPSILON:
        return 0.0
    return (value - avg) / std


def clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))


# =============================================================================
# Signal Types
# =============================================================================


@dataclass(frozen=True)
class DailyProfit:
    day: str
    profit: float
    z_score: float


@dataclass(frozen=True)
class DailyProfitSeries:
    """Chronological daily profits with their population statistics."""

    entries: List[DailyProfit]
    mean: float
    std_dev: float


@dataclass(frozen=True)
class AnomalySignal:
    day: str
    profit: float
    z_score: float
    mean: float
    std_dev: float
    severity: InsightSeverity
    impact_weight: float
    confidence: float


@dataclass(frozen=True)
class PlatformStat:
    platform: Platform
    income: float
    share: float
    previous_share: float
    growth: float

    @property
    def share_delta(self) -> float:
        return self.share - self.previous_share


@dataclass(frozen=True)
class PlatformSignal:
    stat: PlatformStat
    severity: InsightSeverity
    impact_weight: float
    confidence: float


@dataclass(frozen=True)
class FeeStat:
    platform: Platform
    fee_amount: float
    fee_rate: float
    sample_size: int


@dataclass(frozen=True)
class FeeSignal:
    """
    Fee-rate shift for one platform.

    `is_fallback` marks the low-confidence learning signal emitted when no
    platform shows a meaningful shift.
    """

    stat: FeeStat
    previous_fee_rate: float
    severity: InsightSeverity
    impact_weight: float
    confidence: float
    is_fallback: bool = False

    @property
    def delta(self) -> float:
        return self.stat.fee_rate - self.previous_fee_rate


@dataclass(frozen=True)
class ForecastSignal:
    """
    Forward-looking cash position.

    kind is "shortfall" when received + expected - expenses is negative,
    otherwise "pending" (only emitted while expected income is outstanding).
    """

    kind: str
    expected_net: float
    expected: float
    expected_ratio: float
    delta: float
    severity: InsightSeverity
    impact_weight: float
    confidence: float


@dataclass(frozen=True)
class CompletionSignal:
    completion_rate: float
    pending_count: int
    total_count: int
    severity: InsightSeverity
    impact_weight: float
    confidence: float


@dataclass(frozen=True)
class MomentumSignal:
    profit_growth: float
    actual_profit: float
    previous_profit: float
    severity: InsightSeverity
    impact_weight: float
    confidence: float


@dataclass(frozen=True)
class SignalSet:
    """All signals extracted for one reporting window."""

    current: PeriodSummary
    previous: PeriodSummary
    daily_profit: DailyProfitSeries
    anomaly: Optional[AnomalySignal] = None
    platform: Optional[PlatformSignal] = None
    fees: List[FeeSignal] = field(default_factory=list)
    forecast: Optional[ForecastSignal] = None
    completion: Optional[CompletionSignal] = None
    momentum: Optional[MomentumSignal] = None

    def ordered(self) -> list:
        """Emitted signals in generation order (ties in score keep this order)."""
        signals: list = []
        if self.anomaly is not None:
            signals.append(self.anomaly)
        if self.platform is not None:
            signals.append(self.platform)
        signals.extend(self.fees)
        if self.forecast is not None:
            signals.append(self.forecast)
        if self.completion is not None:
            signals.append(self.completion)
        if self.momentum is not None:
            signals.append(self.momentum)
        return signals


# =============================================================================
# Daily Profit / Anomalies
# =============================================================================


def build_daily_profit_series(
    payouts: Sequence[Payout],
    expenses: Sequence[Expense],
) -> DailyProfitSeries:
    """
    Group records by UTC calendar day and compute daily profit statistics.

    Payout net amounts count regardless of status; expenses are subtracted.
    Only days with at least one record appear in the series.

    Args:
        payouts: Current-period payouts
        expenses: Current-period expenses

    Returns:
        DailyProfitSeries in chronological order, with z-scores filled in
    """
    rows = [(format_day(p.date), p.netAmount) for p in payouts]
    rows.extend((format_day(e.date), -e.amount) for e in expenses)
    if not rows:
        return DailyProfitSeries(entries=[], mean=0.0, std_dev=0.0)

    frame = pd.DataFrame(rows, columns=["day", "amount"])
    daily = frame.groupby("day", sort=True)["amount"].sum()

    profits = daily.to_numpy(dtype=np.float64)
    avg = mean(profits)
    std = std_dev(profits)

    entries = [
        DailyProfit(day=str(day), profit=float(profit), z_score=z_score(float(profit), avg, std))
        for day, profit in daily.items()
    ]
    return DailyProfitSeries(entries=entries, mean=avg, std_dev=std)


def extract_anomaly_signal(
    series: DailyProfitSeries,
    payout_count: int,
    z_threshold: Optional[float] = None,
) -> Optional[AnomalySignal]:
    """
    Flag the day with the lowest daily-profit z-score.

    Args:
        series: Daily profit series for the current period
        payout_count: Number of current-period payouts (drives confidence)
        z_threshold: Flag only at or below this z-score (default: setting,
            -1.5)

    Returns:
        AnomalySignal, or None when no day is low enough. A flat series
        (std 0) never triggers.
    """
    if z_threshold is None:
        z_threshold = get_settings().anomaly_z_threshold
    if not series.entries:
        return None

    # min() keeps the earliest day on ties
    lowest = min(series.entries, key=lambda entry: entry.z_score)
    if lowest.z_score > z_threshold:
        return None

    extreme = abs(lowest.z_score) >= 3
    return AnomalySignal(
        day=lowest.day,
        profit=lowest.profit,
        z_score=lowest.z_score,
        mean=series.mean,
        std_dev=series.std_dev,
        severity=InsightSeverity.DANGER if extreme else InsightSeverity.WARNING,
        impact_weight=5 if extreme else 4,
        confidence=clamp(payout_count / 50, 0.4, 0.9),
    )


# =============================================================================
# Platform Performance
# =============================================================================


def _platform_income(payouts: Sequence[Payout], platform: Platform) -> float:
    platform_payouts = [p for p in payouts if p.platform == platform]
    return calculate_received(platform_payouts) + calculate_expected(platform_payouts)


def extract_platform_stats(
    current: PeriodSummary,
    previous: PeriodSummary,
) -> List[PlatformStat]:
    """
    Income share and share growth for every platform, in enum order.

    share        = platform income / total income (0 when total is 0)
    growth       = (share - prev) / prev x 100 when prev > 0,
                   else 100 if share > 0, else 0
    """
    total_income = current.total_income
    previous_total = previous.total_income

    stats: List[PlatformStat] = []
    for platform in Platform:
        income = _platform_income(current.payouts, platform)
        share = income / total_income if total_income > 0 else 0.0

        previous_income = _platform_income(previous.payouts, platform)
        previous_share = previous_income / previous_total if previous_total > 0 else 0.0

        if previous_share > 0:
            growth = (share - previous_share) / previous_share * 100
        elif share > 0:
            growth = 100.0
        else:
            growth = 0.0

        stats.append(
            PlatformStat(
                platform=platform,
                income=income,
                share=share,
                previous_share=previous_share,
                growth=growth,
            )
        )
    return stats


def extract_platform_signal(
    stats: Sequence[PlatformStat],
    payout_count: int,
) -> Optional[PlatformSignal]:
    """Leading platform by income share, if it has any share at all."""
    if not stats:
        return None

    # max() keeps the first platform (enum order) on ties
    leading = max(stats, key=lambda stat: stat.share)
    if leading.share <= 0:
        return None

    share_delta = leading.share_delta
    if share_delta >= SHARE_SHIFT_THRESHOLD:
        severity = InsightSeverity.SUCCESS
    elif share_delta <= -SHARE_SHIFT_THRESHOLD:
        severity = InsightSeverity.WARNING
    else:
        severity = InsightSeverity.INFO

    return PlatformSignal(
        stat=leading,
        severity=severity,
        impact_weight=2 if abs(share_delta) >= SHARE_SHIFT_THRESHOLD or leading.growth >= 20 else 1,
        confidence=clamp(payout_count / 60, 0.5, 0.9),
    )


# =============================================================================
# Fees
# =============================================================================


def extract_fee_stats(payouts: Sequence[Payout]) -> List[FeeStat]:
    """Fee amount, fee rate (Σfees / Σgross, 0 without gross) and sample size per platform."""
    stats: List[FeeStat] = []
    for platform in Platform:
        platform_payouts = [p for p in payouts if p.platform == platform]
        total_fees = calculate_fees(platform_payouts)
        total_gross = calculate_gross(platform_payouts)
        stats.append(
            FeeStat(
                platform=platform,
                fee_amount=total_fees,
                fee_rate=total_fees / total_gross if total_gross > 0 else 0.0,
                sample_size=len(platform_payouts),
            )
        )
    return stats


def extract_fee_signals(
    current: PeriodSummary,
    previous: PeriodSummary,
    delta_threshold: Optional[float] = None,
    min_sample_size: Optional[int] = None,
) -> List[FeeSignal]:
    """
    Fee-rate shifts per platform versus the previous period.

    A platform qualifies when |feeRate - previousFeeRate| >= 0.003 and it has
    at least 3 payouts. A platform without previous payouts has a previous
    fee rate of 0.

    When nothing qualifies, a single fallback signal (confidence 0.3) is
    returned for the active platform with the highest fee rate. With no
    current payouts at all there is nothing to learn from and the list is
    empty.
    """
    settings = get_settings()
    if delta_threshold is None:
        delta_threshold = settings.fee_delta_threshold
    if min_sample_size is None:
        min_sample_size = settings.fee_min_sample_size

    current_stats = extract_fee_stats(current.payouts)
    previous_rates = {stat.platform: stat.fee_rate for stat in extract_fee_stats(previous.payouts)}

    signals: List[FeeSignal] = []
    for stat in current_stats:
        previous_rate = previous_rates.get(stat.platform, 0.0)
        delta = stat.fee_rate - previous_rate
        if abs(delta) >= delta_threshold and stat.sample_size >= min_sample_size:
            signals.append(
                FeeSignal(
                    stat=stat,
                    previous_fee_rate=previous_rate,
                    severity=InsightSeverity.WARNING if stat.fee_rate > 0.04 else InsightSeverity.INFO,
                    impact_weight=3,
                    confidence=clamp(stat.sample_size / 20, 0.5, 0.9),
                )
            )

    if signals:
        return signals

    active = [stat for stat in current_stats if stat.sample_size > 0]
    if not active:
        return []

    highest = max(active, key=lambda stat: stat.fee_rate)
    return [
        FeeSignal(
            stat=highest,
            previous_fee_rate=previous_rates.get(highest.platform, 0.0),
            severity=InsightSeverity.INFO,
            impact_weight=1,
            confidence=0.3,
            is_fallback=True,
        )
    ]


# =============================================================================
# Forecast
# =============================================================================


def extract_forecast_signal(
    current: PeriodSummary,
    previous: PeriodSummary,
) -> Optional[ForecastSignal]:
    """
    Shortfall risk, or reliance on still-pending income.

    expectedNet = received + expected - expenses
    - expectedNet < 0: shortfall, danger, impact 5
    - else expected > 0: pending reliance with
      ratio = expected / (received + expected); impact 2 and warning above 0.6
    """
    expected_net = current.expected_net

    if expected_net < 0:
        return ForecastSignal(
            kind="shortfall",
            expected_net=expected_net,
            expected=current.expected,
            expected_ratio=current.expected / current.total_income if current.total_income > 0 else 0.0,
            delta=expected_net - previous.expected_net,
            severity=InsightSeverity.DANGER,
            impact_weight=5,
            confidence=clamp((current.payout_count + current.expense_count) / 80, 0.5, 0.85),
        )

    if current.expected > 0:
        ratio = current.expected / current.total_income if current.total_income > 0 else 0.0
        reliant = ratio > 0.6
        return ForecastSignal(
            kind="pending",
            expected_net=expected_net,
            expected=current.expected,
            expected_ratio=ratio,
            delta=current.expected - previous.expected,
            severity=InsightSeverity.WARNING if reliant else InsightSeverity.INFO,
            impact_weight=2 if reliant else 1,
            confidence=clamp(current.payout_count / 70, 0.4, 0.8),
        )

    return None


# =============================================================================
# Timing / Completion
# =============================================================================


def extract_completion_signal(current: PeriodSummary) -> Optional[CompletionSignal]:
    """
    Share of payouts no longer pending or processing.

    Skipped entirely when the period has no payouts.
    """
    total = current.payout_count
    if total == 0:
        return None

    pending = sum(1 for p in current.payouts if is_expected(p))
    rate = (total - pending) / total

    if rate < 0.75:
        impact = 4
    elif rate < 0.85:
        impact = 3
    else:
        impact = 1

    return CompletionSignal(
        completion_rate=rate,
        pending_count=pending,
        total_count=total,
        severity=InsightSeverity.WARNING if rate < 0.75 else InsightSeverity.INFO,
        impact_weight=impact,
        confidence=clamp(total / 40, 0.4, 0.85),
    )


# =============================================================================
# Trend / Momentum
# =============================================================================


def extract_momentum_signal(
    current: PeriodSummary,
    previous: PeriodSummary,
) -> Optional[MomentumSignal]:
    """
    Actual-profit growth versus the previous period.

    Only emitted when the previous profit is non-zero:
    growth = (profit - previousProfit) / |previousProfit|
    """
    previous_profit = previous.actual_profit
    if previous_profit == 0:
        return None

    actual_profit = current.actual_profit
    growth = (actual_profit - previous_profit) / abs(previous_profit)

    if growth >= 0.2:
        severity = InsightSeverity.SUCCESS
    elif growth <= -0.2:
        severity = InsightSeverity.DANGER
    else:
        severity = InsightSeverity.INFO

    return MomentumSignal(
        profit_growth=growth,
        actual_profit=actual_profit,
        previous_profit=previous_profit,
        severity=severity,
        impact_weight=4 if growth <= -0.2 else 1,
        confidence=clamp((current.payout_count + current.expense_count) / 100, 0.4, 0.8),
    )


# =============================================================================
# Main Entry Point
# =============================================================================


def extract_signals(
    payouts: Sequence[Payout],
    expenses: Sequence[Expense],
    date_range: DateRange,
) -> SignalSet:
    """
    Extract every signal family for a reporting window.

    Args:
        payouts: All payout records (filtered here to the current and
            previous periods)
        expenses: All expense records
        date_range: Current reporting window

    Returns:
        SignalSet; absent signals are None (or an empty fee list)
    """
    current = summarize_period(payouts, expenses, date_range)
    previous = summarize_previous_period(payouts, expenses, date_range)

    daily_profit = build_daily_profit_series(current.payouts, current.expenses)
    platform_stats = extract_platform_stats(current, previous)

    signals = SignalSet(
        current=current,
        previous=previous,
        daily_profit=daily_profit,
        anomaly=extract_anomaly_signal(daily_profit, current.payout_count),
        platform=extract_platform_signal(platform_stats, current.payout_count),
        fees=extract_fee_signals(current, previous),
        forecast=extract_forecast_signal(current, previous),
        completion=extract_completion_signal(current),
        momentum=extract_momentum_signal(current, previous),
    )

    logger.debug(
        "Extracted %d signals from %d payouts and %d expenses over %d active days",
        len(signals.ordered()),
        current.payout_count,
        current.expense_count,
        len(daily_profit.entries),
    )
    return signals
