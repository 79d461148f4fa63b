"""Business-policy constants for the payout forecast calculation.

Each constant is a tunable assumption about how the marketplace settles
funds. They are collected in ForecastDefaults so a run can be computed with
an alternative set of assumptions without touching the calculation modules.
"""

from dataclasses import dataclass
from typing import Dict

# Transaction derivation
FEE_ESTIMATE_RATE = 0.15
DEFAULT_RETURN_RATE = 0.02
DEFAULT_CHARGEBACK_RATE = 0.005
DEFAULT_DELIVERY_DAYS = 3
QUALIFYING_TRANSACTION_TYPES = ("Order", "Sale")

# Data sufficiency
TRANSACTION_WINDOW_DAYS = 60
MIN_WINDOW_TRANSACTIONS = 30
MIN_LIFETIME_TRANSACTIONS = 50

# Account policy defaults
DEFAULT_RESERVE_LAG_DAYS = 7
DEFAULT_RESERVE_MULTIPLIER = 1.0
DEFAULT_RISK_ADJUSTMENT = 8
DEFAULT_MIN_RESERVE_FLOOR = 1000.0

# Horizon
SETTLEMENT_PERIOD_DAYS = 14
BIWEEKLY_PERIODS = 6
DAILY_HORIZON_DAYS = 90

# Trend and projection bounds
TREND_WINDOW_DAYS = 60
BIWEEKLY_TREND_BOUNDS = (0.90, 1.10)
DAILY_TREND_BOUNDS = (0.80, 1.20)
PROJECTION_BOUNDS = (0.7, 1.5)

# Reserve and baseline
RESERVE_ESTIMATE_RATE = 0.15
BASELINE_DAILY_ELIGIBLE = 50.0
RECENT_PAYOUT_WINDOW_DAYS = 90

# Payout cap relative to the historical maximum, by risk level
CAP_MULTIPLIERS: Dict[str, float] = {
    "conservative": 0.85,
    "moderate": 1.0,
    "aggressive": 1.15,
}

# Display back-derivation of order totals from eligible cash
ORDERS_NET_RATIO = 0.85
FEES_OF_ORDERS_RATE = 0.15


@dataclass(frozen=True)
class ForecastDefaults:
    """Record of every business constant used by the calculator.

    Instances are immutable; use dataclasses.replace to derive a variant.
    """

    fee_estimate_rate: float = FEE_ESTIMATE_RATE
    default_return_rate: float = DEFAULT_RETURN_RATE
    default_chargeback_rate: float = DEFAULT_CHARGEBACK_RATE
    default_delivery_days: int = DEFAULT_DELIVERY_DAYS
    qualifying_transaction_types: tuple = QUALIFYING_TRANSACTION_TYPES
    transaction_window_days: int = TRANSACTION_WINDOW_DAYS
    min_window_transactions: int = MIN_WINDOW_TRANSACTIONS
    min_lifetime_transactions: int = MIN_LIFETIME_TRANSACTIONS
    settlement_period_days: int = SETTLEMENT_PERIOD_DAYS
    biweekly_periods: int = BIWEEKLY_PERIODS
    daily_horizon_days: int = DAILY_HORIZON_DAYS
    trend_window_days: int = TREND_WINDOW_DAYS
    biweekly_trend_bounds: tuple = BIWEEKLY_TREND_BOUNDS
    daily_trend_bounds: tuple = DAILY_TREND_BOUNDS
    projection_bounds: tuple = PROJECTION_BOUNDS
    reserve_estimate_rate: float = RESERVE_ESTIMATE_RATE
    baseline_daily_eligible: float = BASELINE_DAILY_ELIGIBLE
    recent_payout_window_days: int = RECENT_PAYOUT_WINDOW_DAYS
    orders_net_ratio: float = ORDERS_NET_RATIO
    fees_of_orders_rate: float = FEES_OF_ORDERS_RATE

    def cap_multiplier(self, risk_level: str) -> float:
        return CAP_MULTIPLIERS[risk_level]


DEFAULTS = ForecastDefaults()
