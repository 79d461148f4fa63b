"""Bi-weekly (14-day lump-sum) settlement forecaster."""

from datetime import date, timedelta
from typing import List

from src.forecast.defaults import DEFAULTS, ForecastDefaults
from src.forecast.eligible import (
    EligibleCash,
    eligible_between,
    reserve_for_settlement,
    unlocking_count,
)
from src.forecast.trend import (
    average_daily_eligible,
    clamp,
    median_trend,
    payout_cap,
    project_period_eligible,
)
from src.forecast.types import AccountPolicy, ForecastRecord, HistoricalStats, PayoutModel
from src.logging_config import get_logger

logger = get_logger(__name__, tag="MATH-FORECAST")


def forecast_biweekly(
    eligible: EligibleCash,
    policy: AccountPolicy,
    stats: HistoricalStats,
    as_of: date,
    defaults: ForecastDefaults = DEFAULTS,
) -> List[ForecastRecord]:
    """Forecast successive lump-sum settlements spaced one settlement period apart.

    For each period the eligible cash is the sum of unlocks between the
    previous and current settlement date, or a trend projection when the
    period has no unlocks. The reserve is subtracted, the risk adjustment
    applied, and the payout capped relative to the historical maximum.

    Args:
        eligible (EligibleCash): Derived eligible cash of the account.
        policy (AccountPolicy): Account policy.
        stats (HistoricalStats): Confirmed payout statistics.
        as_of (date): Forecast reference date.
        defaults (ForecastDefaults): Business constants.

    Returns:
        List[ForecastRecord]: One record per settlement period.
    """
    period = defaults.settlement_period_days
    trend = clamp(
        median_trend(eligible.daily_eligible, as_of, defaults.trend_window_days),
        defaults.biweekly_trend_bounds,
    )
    avg_daily = average_daily_eligible(eligible.daily_eligible, stats, defaults)
    cap = payout_cap(stats, policy.risk_level, defaults)
    logger.info(
        f"Bi-weekly forecast for {policy.amazon_account_id}: trend={trend:.3f}, "
        f"avg_daily={avg_daily:.2f}, cap={cap}, risk={policy.risk_adjustment}%"
    )

    records = []
    for i in range(defaults.biweekly_periods):
        previous_settlement = as_of + timedelta(days=i * period)
        settlement_date = as_of + timedelta(days=(i + 1) * period)

        eligible_in_period = eligible_between(
            eligible.daily_eligible, previous_settlement, settlement_date
        )
        if eligible_in_period == 0:
            eligible_in_period = project_period_eligible(avg_daily, trend, i, defaults)

        reserve_amount = reserve_for_settlement(
            eligible.transactions, settlement_date, policy, eligible_in_period, defaults
        )
        payout = max(0.0, eligible_in_period - reserve_amount) * policy.risk_multiplier
        if cap is not None:
            payout = min(payout, cap)

        orders_total = eligible_in_period / defaults.orders_net_ratio
        records.append(
            ForecastRecord(
                user_id=policy.user_id,
                account_id=policy.account_id,
                amazon_account_id=policy.amazon_account_id,
                settlement_id=f"forecast_{policy.amazon_account_id}_{i}",
                settlement_group=f"settlement-{policy.amazon_account_id}-{settlement_date.isoformat()}",
                payout_date=settlement_date,
                total_amount=payout,
                eligible_in_period=eligible_in_period,
                reserve_amount=reserve_amount,
                orders_total=orders_total,
                fees_total=orders_total * defaults.fees_of_orders_rate,
                payout_type=PayoutModel.BI_WEEKLY.value,
                modeling_method="mathematical_biweekly",
                marketplace_name=policy.marketplace_name,
                transaction_count=unlocking_count(
                    eligible.transactions, previous_settlement, settlement_date
                ),
                is_settlement_day=True,
                days_accumulated=period,
            )
        )
    return records
