"""Daily distribution strategies for the daily payout model.

A strategy spreads a settlement lump sum over the days of the settlement
window and reports, per day, the amount unlocked and the cumulative amount
available for transfer.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from datetime import date, timedelta
from typing import Iterable, List, Optional

import pandas as pd

from src.forecast.types import AccountPolicy
from src.logging_config import get_logger

logger = get_logger(__name__, tag="DAILY-DIST")


@dataclass(frozen=True)
class DailyDistribution:
    """One day of a settlement window.

    Attributes:
        date (date): Calendar day.
        daily_unlock (float): Amount unlocked on the day.
        cumulative_available (float): Total unlocked from the window start through the day.
        days_accumulated (int): 1-based day index within the window.
    """

    date: date
    daily_unlock: float
    cumulative_available: float
    days_accumulated: int


@dataclass(frozen=True)
class VolumeWeight:
    """Net transaction volume on a day, used to weight the distribution."""

    date: date
    net_amount: float


def _days(start: date, end: date) -> List[date]:
    return [start + timedelta(days=i) for i in range((end - start).days + 1)]


class DistributionStrategy(ABC):
    """Spreads a lump sum over a settlement window."""

    modeling_method = "daily_distribution"

    @abstractmethod
    def distribute(
        self,
        start: date,
        end: date,
        total_amount: float,
        already_drawn: float = 0.0,
        volume_weights: Optional[Iterable[VolumeWeight]] = None,
    ) -> List[DailyDistribution]:
        """Return one DailyDistribution per day from start to end inclusive.

        Args:
            start (date): First day of the window.
            end (date): Last day of the window (the settlement day).
            total_amount (float): Lump sum to distribute.
            already_drawn (float): Amount the seller has already drawn against the lump sum.
            volume_weights (Iterable[VolumeWeight], optional): Per-day transaction volume.

        Returns:
            List[DailyDistribution]: Per-day series; empty when end is before start.
        """


class EvenDistribution(DistributionStrategy):
    """Flat daily increments: the lump sum divided by the number of days."""

    modeling_method = "daily_distribution"

    def distribute(self, start, end, total_amount, already_drawn=0.0, volume_weights=None):
        days = _days(start, end)
        if not days:
            return []
        increment = max(0.0, total_amount - already_drawn) / len(days)
        distributions = []
        cumulative = 0.0
        for i, day in enumerate(days):
            cumulative += increment
            distributions.append(DailyDistribution(day, increment, cumulative, i + 1))
        return distributions


class VolumeWeightedDistribution(DistributionStrategy):
    """Daily unlocks proportional to per-day transaction volume within the window.

    Amounts are rounded to cents through the cumulative series, so daily
    unlocks are never negative and the last cumulative value equals the net
    available amount to the cent. Without volume in the window the lump sum
    is spread evenly.
    """

    modeling_method = "daily_distribution_weighted"

    def distribute(self, start, end, total_amount, already_drawn=0.0, volume_weights=None):
        days = _days(start, end)
        if not days:
            logger.info("Invalid date range")
            return []

        net_available = max(0.0, total_amount - already_drawn)
        if net_available <= 0:
            logger.info("No funds available after draws")
            return [DailyDistribution(day, 0.0, 0.0, i + 1) for i, day in enumerate(days)]

        volume = pd.Series(0.0, index=range(len(days)))
        for weight in volume_weights or []:
            offset = (weight.date - start).days
            if 0 <= offset < len(days):
                volume.iloc[offset] += abs(weight.net_amount)
        total_volume = float(volume.sum())
        if total_volume > 0:
            shares = volume / total_volume
            logger.info(
                f"Using volume weights from {int((volume > 0).sum())} days, "
                f"total volume: ${total_volume:.2f}"
            )
        else:
            shares = pd.Series(1.0 / len(days), index=range(len(days)))

        exact_cumulative = (shares * net_available).cumsum()
        distributions = []
        previous = 0.0
        for i, day in enumerate(days):
            cumulative = round(float(exact_cumulative.iloc[i]), 2)
            distributions.append(
                DailyDistribution(day, round(cumulative - previous, 2), cumulative, i + 1)
            )
            previous = cumulative

        logger.info(
            f"Generated {len(distributions)} daily distributions, total: ${net_available:.2f}"
        )
        return distributions


def select_distribution(policy: AccountPolicy) -> DistributionStrategy:
    """Pick the distribution strategy configured for the account."""
    if policy.advanced_modeling_enabled:
        return VolumeWeightedDistribution()
    return EvenDistribution()


def recalculate_after_draw(
    distributions: List[DailyDistribution],
    draw_amount: float,
    draw_date: date,
) -> List[DailyDistribution]:
    """Reduce cumulative availability from the draw date onward by the drawn amount.

    Days before the draw are unchanged and availability is floored at zero.
    An unknown draw date leaves the series unchanged.

    Args:
        distributions (List[DailyDistribution]): Series to update.
        draw_amount (float): Amount drawn.
        draw_date (date): Day of the draw.

    Returns:
        List[DailyDistribution]: Updated series.
    """
    if not any(d.date == draw_date for d in distributions):
        logger.error(f"Draw date {draw_date} not found in distributions")
        return list(distributions)

    logger.info(f"Recalculated after ${draw_amount:.2f} draw on {draw_date}")
    return [
        d if d.date < draw_date
        else replace(d, cumulative_available=max(0.0, d.cumulative_available - draw_amount))
        for d in distributions
    ]
