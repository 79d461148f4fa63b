"""Value types exchanged between the forecast calculation modules."""

from dataclasses import dataclass, field, asdict
from datetime import date
from enum import Enum
from typing import List, Optional

from src.forecast import defaults


class PayoutModel(str, Enum):
    """Settlement cadence of an account."""

    BI_WEEKLY = "bi-weekly"
    DAILY = "daily"


class RiskLevel(str, Enum):
    """Named safety-net levels behind the risk adjustment percentage."""

    AGGRESSIVE = "aggressive"
    MODERATE = "moderate"
    CONSERVATIVE = "conservative"

    @classmethod
    def from_adjustment(cls, risk_adjustment: float) -> "RiskLevel":
        """Map a risk adjustment percentage (3, 8, 15) to its level."""
        if risk_adjustment <= 3:
            return cls.AGGRESSIVE
        if risk_adjustment <= 8:
            return cls.MODERATE
        return cls.CONSERVATIVE


@dataclass(frozen=True)
class Transaction:
    """One marketplace order/sale event as read from the transaction store.

    Attributes:
        id (str): Transaction identifier.
        transaction_date (date): Date of the sale.
        gross_amount (float): Gross order amount.
        fee_amount (float): Fees, stored as a signed deduction (usually negative).
        delivery_date (date, optional): Delivery date, if known.
        shipping_cost (float): Shipping cost.
        ads_cost (float): Advertising cost.
        return_rate (float, optional): Return-rate estimate in [0, 1].
        chargeback_rate (float, optional): Chargeback-rate estimate in [0, 1].
        transaction_type (str): 'Order', 'Sale', 'Refund', ...
    """

    id: str
    transaction_date: date
    gross_amount: float
    fee_amount: float = 0.0
    delivery_date: Optional[date] = None
    shipping_cost: float = 0.0
    ads_cost: float = 0.0
    return_rate: Optional[float] = None
    chargeback_rate: Optional[float] = None
    transaction_type: str = "Order"


@dataclass(frozen=True)
class ProcessedTransaction:
    """A transaction with its derived delivery date, unlock date and net amount."""

    id: str
    transaction_date: date
    delivery_date: date
    unlock_date: date
    net_amount: float


@dataclass(frozen=True)
class HistoricalPayout:
    """A past confirmed settlement."""

    payout_date: date
    total_amount: float


@dataclass(frozen=True)
class HistoricalStats:
    """Statistics over confirmed payouts that bound and calibrate a forecast.

    All fields are None when the account has no confirmed payouts.
    """

    max_payout: Optional[float] = None
    avg_payout: Optional[float] = None
    recent_avg_payout: Optional[float] = None


@dataclass(frozen=True)
class AccountPolicy:
    """Per-account forecast parameters, passed explicitly into the calculator.

    Raises:
        ValueError: If a parameter is outside its valid range.
    """

    amazon_account_id: str
    account_id: str = ""
    user_id: str = ""
    marketplace_name: Optional[str] = None
    payout_model: PayoutModel = PayoutModel.BI_WEEKLY
    reserve_lag_days: int = defaults.DEFAULT_RESERVE_LAG_DAYS
    reserve_multiplier: float = defaults.DEFAULT_RESERVE_MULTIPLIER
    min_reserve_floor: float = defaults.DEFAULT_MIN_RESERVE_FLOOR
    risk_adjustment: float = defaults.DEFAULT_RISK_ADJUSTMENT
    advanced_modeling_enabled: bool = False

    def __post_init__(self):
        if self.reserve_lag_days < 0:
            raise ValueError(f"reserve_lag_days must be non-negative, got {self.reserve_lag_days}")
        if self.reserve_multiplier < 0:
            raise ValueError(f"reserve_multiplier must be non-negative, got {self.reserve_multiplier}")
        if self.min_reserve_floor < 0:
            raise ValueError(f"min_reserve_floor must be non-negative, got {self.min_reserve_floor}")
        if not 0 <= self.risk_adjustment < 100:
            raise ValueError(f"risk_adjustment must be in [0, 100), got {self.risk_adjustment}")
        # Accept the raw string stored on the account row.
        object.__setattr__(self, "payout_model", PayoutModel(self.payout_model))

    @property
    def risk_level(self) -> RiskLevel:
        return RiskLevel.from_adjustment(self.risk_adjustment)

    @property
    def risk_multiplier(self) -> float:
        return 1 - self.risk_adjustment / 100


@dataclass
class ForecastRecord:
    """One projected payout event, ready to be written to the payout store."""

    user_id: str
    account_id: str
    amazon_account_id: str
    settlement_id: str
    settlement_group: str
    payout_date: date
    total_amount: float
    eligible_in_period: float
    reserve_amount: float
    orders_total: float
    fees_total: float
    payout_type: str
    modeling_method: str
    marketplace_name: Optional[str] = None
    transaction_count: int = 0
    is_settlement_day: bool = False
    available_for_daily_transfer: Optional[float] = None
    days_accumulated: Optional[int] = None
    last_draw_calculation_date: Optional[date] = None
    status: str = field(default="forecasted", init=False)
    currency_code: str = "USD"
    adjustments: float = 0.0
    refunds_total: float = 0.0
    other_total: float = 0.0
    total_daily_draws: float = 0.0

    def to_row(self) -> dict:
        """Return the record as a column mapping for the amazon_payouts table."""
        return asdict(self)


ForecastRecords = List[ForecastRecord]
