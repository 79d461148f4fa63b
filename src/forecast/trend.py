"""Trend estimation, baseline selection and historical payout statistics."""

from datetime import date, timedelta
from typing import Dict, Iterable, Optional, Tuple

import pandas as pd

from src.forecast.defaults import DEFAULTS, ForecastDefaults
from src.forecast.types import HistoricalPayout, HistoricalStats, RiskLevel
from src.logging_config import get_logger

logger = get_logger(__name__, tag="MATH-FORECAST")


def clamp(value: float, bounds: Tuple[float, float]) -> float:
    low, high = bounds
    return min(max(value, low), high)


def median_trend(
    daily_eligible: Dict[date, float],
    as_of: date,
    window_days: int = DEFAULTS.trend_window_days,
) -> float:
    """Ratio of the second-half median to the first-half median of observed daily eligible cash.

    The window is the window_days calendar days ending at the latest unlock
    date on or before as_of. Days without unlocks are not observations.
    The trend is 1.0 when either half has no observations or the first-half
    median is not positive.

    Args:
        daily_eligible (Dict[date, float]): Unlock date -> net amount sum.
        as_of (date): Forecast reference date; later unlock dates are ignored.
        window_days (int): Calendar days in the window.

    Returns:
        float: Unclamped trend ratio.
    """
    observed = pd.Series({day: amount for day, amount in daily_eligible.items() if day <= as_of})
    if observed.empty:
        return 1.0

    end = max(observed.index)
    start = end - timedelta(days=window_days - 1)
    midpoint = start + timedelta(days=window_days // 2)
    first_half = observed[[start <= day < midpoint for day in observed.index]]
    second_half = observed[[midpoint <= day <= end for day in observed.index]]
    if first_half.empty or second_half.empty:
        return 1.0

    first_median = float(first_half.median())
    if first_median <= 0:
        return 1.0
    return float(second_half.median()) / first_median


def historical_stats(
    payouts: Iterable[HistoricalPayout],
    as_of: date,
    recent_window_days: int = DEFAULTS.recent_payout_window_days,
) -> HistoricalStats:
    """Summarise confirmed payouts into max, mean and recent mean.

    Args:
        payouts (Iterable[HistoricalPayout]): Confirmed payouts of the account.
        as_of (date): Forecast reference date.
        recent_window_days (int): Days before as_of counted as recent.

    Returns:
        HistoricalStats: Statistics, with None fields when there is no data.
    """
    df = pd.DataFrame(
        [(p.payout_date, float(p.total_amount)) for p in payouts],
        columns=["payout_date", "total_amount"],
    )
    if df.empty:
        return HistoricalStats()

    recent_start = as_of - timedelta(days=recent_window_days)
    recent = df[[recent_start <= day <= as_of for day in df["payout_date"]]]
    return HistoricalStats(
        max_payout=float(df["total_amount"].max()),
        avg_payout=float(df["total_amount"].mean()),
        recent_avg_payout=float(recent["total_amount"].mean()) if not recent.empty else None,
    )


def baseline_daily_eligible(stats: HistoricalStats, defaults: ForecastDefaults = DEFAULTS) -> float:
    """Daily eligible cash to assume when transactions provide none.

    Prefers the recent average payout, then the overall average payout, each
    spread over a settlement period, then a constant.
    """
    period = defaults.settlement_period_days
    if stats.recent_avg_payout:
        return stats.recent_avg_payout / period
    if stats.avg_payout:
        return stats.avg_payout / period
    return defaults.baseline_daily_eligible


def average_daily_eligible(
    daily_eligible: Dict[date, float],
    stats: HistoricalStats,
    defaults: ForecastDefaults = DEFAULTS,
) -> float:
    """Mean eligible cash per unlock day, or the historical baseline when that is not positive."""
    total = sum(daily_eligible.values())
    if daily_eligible and total > 0:
        return total / len(daily_eligible)
    baseline = baseline_daily_eligible(stats, defaults)
    logger.info(f"No transaction-derived daily average, using baseline {baseline:.2f}")
    return baseline


def project_period_eligible(
    avg_daily_eligible: float,
    trend: float,
    period_index: int,
    defaults: ForecastDefaults = DEFAULTS,
) -> float:
    """Project eligible cash for a settlement period without observed unlocks.

    The period base (avg_daily_eligible x settlement_period_days) grows
    linearly with the trend, 1 + (trend - 1) x (period_index + 1), and the
    projection is kept within projection_bounds of the base.
    """
    base = avg_daily_eligible * defaults.settlement_period_days
    multiplier = 1 + (trend - 1) * (period_index + 1)
    low, high = defaults.projection_bounds
    projected = base * multiplier
    return min(max(projected, base * low), base * high) if base >= 0 else projected


def payout_cap(
    stats: HistoricalStats,
    risk_level: RiskLevel,
    defaults: ForecastDefaults = DEFAULTS,
) -> Optional[float]:
    """Upper bound for a bi-weekly payout from the historical maximum, or None without history."""
    if not stats.max_payout or stats.max_payout <= 0:
        return None
    return stats.max_payout * defaults.cap_multiplier(risk_level.value)
