"""Daily-release settlement forecaster.

The current settlement window is distributed day by day with the account's
distribution strategy. Later windows out to the daily horizon reuse the
current daily increment scaled by a compounding, clamped trend factor.
"""

from datetime import date, timedelta
from typing import List, Optional

from src.forecast.defaults import DEFAULTS, ForecastDefaults
from src.forecast.distribution import (
    DistributionStrategy,
    VolumeWeight,
    select_distribution,
)
from src.forecast.eligible import EligibleCash, eligible_between, reserve_for_settlement
from src.forecast.trend import (
    average_daily_eligible,
    clamp,
    median_trend,
    project_period_eligible,
)
from src.forecast.types import AccountPolicy, ForecastRecord, HistoricalStats, PayoutModel
from src.logging_config import get_logger

logger = get_logger(__name__, tag="MATH-FORECAST")

PROJECTED_METHOD = "daily_distribution_projected"


def _daily_record(
    policy: AccountPolicy,
    day: date,
    cycle_settlement: date,
    daily_unlock: float,
    cumulative: float,
    days_accumulated: int,
    is_settlement_day: bool,
    cycle_total: float,
    reserve_per_day: float,
    eligible_per_day: float,
    transaction_count: int,
    modeling_method: str,
    as_of: date,
    defaults: ForecastDefaults,
) -> ForecastRecord:
    orders_total = eligible_per_day / defaults.orders_net_ratio
    return ForecastRecord(
        user_id=policy.user_id,
        account_id=policy.account_id,
        amazon_account_id=policy.amazon_account_id,
        settlement_id=f"forecast_{policy.amazon_account_id}_{day.isoformat()}",
        settlement_group=f"settlement-{policy.amazon_account_id}-{cycle_settlement.isoformat()}",
        payout_date=day,
        total_amount=daily_unlock,
        # Only the settlement day carries the cycle total; other days carry 0.
        eligible_in_period=cycle_total if is_settlement_day else 0.0,
        reserve_amount=reserve_per_day,
        orders_total=orders_total,
        fees_total=orders_total * defaults.fees_of_orders_rate,
        payout_type=PayoutModel.DAILY.value,
        modeling_method=modeling_method,
        marketplace_name=policy.marketplace_name,
        transaction_count=transaction_count,
        is_settlement_day=is_settlement_day,
        available_for_daily_transfer=cumulative,
        days_accumulated=days_accumulated,
        last_draw_calculation_date=as_of,
    )


def forecast_daily(
    eligible: EligibleCash,
    policy: AccountPolicy,
    stats: HistoricalStats,
    as_of: date,
    defaults: ForecastDefaults = DEFAULTS,
    strategy: Optional[DistributionStrategy] = None,
) -> List[ForecastRecord]:
    """Forecast daily unlocks for the current settlement window and projected later windows.

    Args:
        eligible (EligibleCash): Derived eligible cash of the account.
        policy (AccountPolicy): Account policy.
        stats (HistoricalStats): Confirmed payout statistics.
        as_of (date): Forecast reference date; the first forecast day is the day after.
        defaults (ForecastDefaults): Business constants.
        strategy (DistributionStrategy, optional): Overrides the strategy selected by the policy.

    Returns:
        List[ForecastRecord]: One record per forecast day.
    """
    period = defaults.settlement_period_days
    strategy = strategy or select_distribution(policy)

    raw_trend = median_trend(eligible.daily_eligible, as_of, defaults.trend_window_days)
    period_trend = clamp(raw_trend, defaults.biweekly_trend_bounds)
    avg_daily = average_daily_eligible(eligible.daily_eligible, stats, defaults)

    settlement_date = as_of + timedelta(days=period)
    total_eligible = eligible_between(eligible.daily_eligible, as_of, settlement_date)
    if total_eligible == 0:
        total_eligible = project_period_eligible(avg_daily, period_trend, 0, defaults)

    settlement_reserve = reserve_for_settlement(
        eligible.transactions, settlement_date, policy, total_eligible, defaults
    )
    effective_reserve = max(settlement_reserve, policy.min_reserve_floor)
    adjusted_lump_sum = max(0.0, total_eligible - effective_reserve) * policy.risk_multiplier
    logger.info(
        f"Daily forecast for {policy.amazon_account_id}: eligible={total_eligible:.2f}, "
        f"reserve={effective_reserve:.2f}, lump_sum={adjusted_lump_sum:.2f}, "
        f"strategy={strategy.modeling_method}"
    )

    weights = [
        VolumeWeight(day, amount)
        for day, amount in eligible.daily_eligible.items()
        if as_of < day <= settlement_date
    ]
    series = strategy.distribute(
        as_of + timedelta(days=1), settlement_date, adjusted_lump_sum, 0.0, weights
    )

    reserve_per_day = effective_reserve / period
    transaction_count = round(len(eligible.transactions) / period)
    cycle_total = sum(d.daily_unlock for d in series)
    records = [
        _daily_record(
            policy,
            d.date,
            settlement_date,
            d.daily_unlock,
            d.cumulative_available,
            d.days_accumulated,
            d.date == settlement_date,
            cycle_total,
            reserve_per_day,
            total_eligible / period,
            transaction_count,
            strategy.modeling_method,
            as_of,
            defaults,
        )
        for d in series
    ]

    daily_increment = adjusted_lump_sum / period
    additional_cycles = (defaults.daily_horizon_days - period) // period
    for cycle in range(1, additional_cycles + 1):
        factor = clamp(raw_trend ** (cycle + 1), defaults.daily_trend_bounds)
        increment = daily_increment * factor
        cycle_settlement = as_of + timedelta(days=period * (cycle + 1))
        cumulative = 0.0
        for offset in range(1, period + 1):
            day = as_of + timedelta(days=period * cycle + offset)
            cumulative += increment
            records.append(
                _daily_record(
                    policy,
                    day,
                    cycle_settlement,
                    increment,
                    cumulative,
                    offset,
                    day == cycle_settlement,
                    increment * period,
                    reserve_per_day,
                    total_eligible * factor / period,
                    transaction_count,
                    PROJECTED_METHOD,
                    as_of,
                    defaults,
                )
            )
    return records
