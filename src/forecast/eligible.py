"""Eligible-cash derivation: raw transactions -> net amounts, unlock dates and daily eligible cash."""

from dataclasses import asdict, dataclass
from datetime import date, timedelta
from typing import Dict, Iterable, List

import pandas as pd

from src.forecast.defaults import DEFAULTS, ForecastDefaults
from src.forecast.exceptions import InsufficientHistoryError
from src.forecast.types import AccountPolicy, ProcessedTransaction, Transaction
from src.logging_config import get_logger

logger = get_logger(__name__, tag="MATH-FORECAST")


@dataclass(frozen=True)
class EligibleCash:
    """Processed transactions and the daily eligible map derived from them.

    Attributes:
        transactions (List[ProcessedTransaction]): Qualifying transactions with derived fields.
        daily_eligible (Dict[date, float]): Unlock date -> summed net amount, sorted by date.
    """

    transactions: List[ProcessedTransaction]
    daily_eligible: Dict[date, float]


def _numeric(series: pd.Series, fill: float) -> pd.Series:
    return pd.to_numeric(series, errors="coerce").astype(float).fillna(fill)


def process_transactions(
    transactions: Iterable[Transaction],
    reserve_lag_days: int,
    as_of: date,
    defaults: ForecastDefaults = DEFAULTS,
) -> List[ProcessedTransaction]:
    """Filter transactions to the qualifying window and attach delivery date, unlock date and net amount.

    Only Order/Sale transactions dated within the last transaction_window_days
    (inclusive of as_of) qualify. A missing delivery date is assumed to be
    default_delivery_days after the transaction date.

    Net amount is (gross - fees - shipping - ads) x (1 - return_rate) x
    (1 - chargeback_rate). Zero fees are estimated as fee_estimate_rate of
    gross; missing rates take the default return and chargeback rates.

    Args:
        transactions (Iterable[Transaction]): Raw transactions.
        reserve_lag_days (int): Days between delivery and unlock.
        as_of (date): Forecast reference date.
        defaults (ForecastDefaults): Business constants.

    Returns:
        List[ProcessedTransaction]: Qualifying transactions ordered by transaction date and id.
    """
    df = pd.DataFrame([asdict(t) for t in transactions])
    if df.empty:
        return []

    df["transaction_date"] = pd.to_datetime(df["transaction_date"])
    window_start = pd.Timestamp(as_of - timedelta(days=defaults.transaction_window_days))
    df = df[
        df["transaction_type"].isin(defaults.qualifying_transaction_types)
        & (df["transaction_date"] >= window_start)
        & (df["transaction_date"] <= pd.Timestamp(as_of))
    ].copy()
    if df.empty:
        return []

    df = df.sort_values(["transaction_date", "id"], kind="mergesort")

    delivery = pd.to_datetime(df["delivery_date"])
    df["delivery_date"] = delivery.fillna(
        df["transaction_date"] + pd.Timedelta(days=defaults.default_delivery_days)
    )
    df["unlock_date"] = df["delivery_date"] + pd.Timedelta(days=reserve_lag_days)

    gross = _numeric(df["gross_amount"], 0.0)
    fees = _numeric(df["fee_amount"], 0.0).abs()
    fees = fees.where(fees != 0, gross * defaults.fee_estimate_rate)
    return_rate = _numeric(df["return_rate"], defaults.default_return_rate)
    chargeback_rate = _numeric(df["chargeback_rate"], defaults.default_chargeback_rate)
    df["net_amount"] = (
        (gross - fees - _numeric(df["shipping_cost"], 0.0) - _numeric(df["ads_cost"], 0.0))
        * (1 - return_rate)
        * (1 - chargeback_rate)
    )

    return [
        ProcessedTransaction(
            id=str(row.id),
            transaction_date=row.transaction_date.date(),
            delivery_date=row.delivery_date.date(),
            unlock_date=row.unlock_date.date(),
            net_amount=float(row.net_amount),
        )
        for row in df.itertuples(index=False)
    ]


def build_daily_eligible_map(transactions: List[ProcessedTransaction]) -> Dict[date, float]:
    """Sum net amounts by unlock date.

    Args:
        transactions (List[ProcessedTransaction]): Processed transactions.

    Returns:
        Dict[date, float]: Unlock date -> net amount sum, in ascending date order.
    """
    if not transactions:
        return {}
    df = pd.DataFrame(
        {
            "unlock_date": [t.unlock_date for t in transactions],
            "net_amount": [t.net_amount for t in transactions],
        }
    )
    grouped = df.groupby("unlock_date", sort=True)["net_amount"].sum()
    return {day: float(amount) for day, amount in grouped.items()}


def derive_eligible_cash(
    transactions: Iterable[Transaction],
    policy: AccountPolicy,
    as_of: date,
    defaults: ForecastDefaults = DEFAULTS,
) -> EligibleCash:
    """Derive the processed transaction list and daily eligible map for one account.

    Args:
        transactions (Iterable[Transaction]): Raw transactions of the account.
        policy (AccountPolicy): Account policy, supplies the reserve lag.
        as_of (date): Forecast reference date.
        defaults (ForecastDefaults): Business constants.

    Returns:
        EligibleCash: Processed transactions and daily eligible map.

    Raises:
        InsufficientHistoryError: If fewer than min_window_transactions qualify.
    """
    processed = process_transactions(transactions, policy.reserve_lag_days, as_of, defaults)
    if len(processed) < defaults.min_window_transactions:
        raise InsufficientHistoryError(
            policy.amazon_account_id, len(processed), defaults.min_window_transactions
        )
    daily_eligible = build_daily_eligible_map(processed)
    logger.info(
        f"Processed {len(processed)} orders into {len(daily_eligible)} unlock days "
        f"for account {policy.amazon_account_id}"
    )
    return EligibleCash(transactions=processed, daily_eligible=daily_eligible)


def eligible_between(daily_eligible: Dict[date, float], start: date, end: date) -> float:
    """Sum daily eligible cash with start < date <= end."""
    return sum(amount for day, amount in daily_eligible.items() if start < day <= end)


def unlocking_count(transactions: List[ProcessedTransaction], start: date, end: date) -> int:
    """Count transactions with start < unlock_date <= end."""
    return sum(1 for t in transactions if start < t.unlock_date <= end)


def reserve_for_settlement(
    transactions: List[ProcessedTransaction],
    settlement_date: date,
    policy: AccountPolicy,
    eligible_in_period: float,
    defaults: ForecastDefaults = DEFAULTS,
) -> float:
    """Estimate the reserve withheld at a settlement date.

    The reserve is the absolute net amount of orders delivered within the
    reserve lag before the settlement date. When no order falls in that
    window it is estimated as reserve_estimate_rate of the period's eligible
    cash. The result is scaled by the account's reserve multiplier.

    Args:
        transactions (List[ProcessedTransaction]): Processed transactions.
        settlement_date (date): Settlement date.
        policy (AccountPolicy): Supplies reserve lag and multiplier.
        eligible_in_period (float): Eligible cash of the settlement period.
        defaults (ForecastDefaults): Business constants.

    Returns:
        float: Non-negative reserve amount.
    """
    cutoff = settlement_date - timedelta(days=policy.reserve_lag_days)
    reserve = sum(
        abs(t.net_amount) for t in transactions if cutoff < t.delivery_date <= settlement_date
    )
    if reserve == 0:
        reserve = max(eligible_in_period, 0.0) * defaults.reserve_estimate_rate
    return reserve * policy.reserve_multiplier
