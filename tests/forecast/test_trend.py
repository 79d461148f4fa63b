"""Unit tests for trend estimation and historical statistics."""

import math
import unittest
from datetime import timedelta

from conftest import AS_OF
from src.forecast.trend import (
    average_daily_eligible,
    baseline_daily_eligible,
    clamp,
    historical_stats,
    median_trend,
    payout_cap,
    project_period_eligible,
)
from src.forecast.types import HistoricalPayout, HistoricalStats, RiskLevel


def _series(first_value, second_value, end=AS_OF):
    """Sixty consecutive days ending at end: first half first_value, second half second_value."""
    return {
        end - timedelta(days=59 - i): (first_value if i < 30 else second_value)
        for i in range(60)
    }


class TestMedianTrend(unittest.TestCase):
    """Test cases for median_trend."""

    def test_rising_series(self):
        self.assertAlmostEqual(median_trend(_series(100.0, 120.0), AS_OF), 1.2)

    def test_median_resists_outliers(self):
        daily = _series(100.0, 100.0)
        daily[AS_OF - timedelta(days=59)] = 100000.0
        daily[AS_OF] = -50000.0
        self.assertAlmostEqual(median_trend(daily, AS_OF), 1.0)

    def test_future_unlocks_ignored(self):
        daily = _series(100.0, 80.0)
        daily[AS_OF + timedelta(days=3)] = 1000000.0
        self.assertAlmostEqual(median_trend(daily, AS_OF), 0.8)

    def test_zero_first_half_median(self):
        self.assertEqual(median_trend(_series(0.0, 500.0), AS_OF), 1.0)

    def test_no_observations(self):
        self.assertEqual(median_trend({}, AS_OF), 1.0)
        self.assertEqual(median_trend({AS_OF + timedelta(days=1): 10.0}, AS_OF), 1.0)

    def test_single_half_observed(self):
        daily = {AS_OF - timedelta(days=i): 100.0 for i in range(10)}
        self.assertEqual(median_trend(daily, AS_OF), 1.0)


class TestHistoricalStats(unittest.TestCase):
    """Test cases for historical_stats and the baseline."""

    def test_empty_history(self):
        stats = historical_stats([], AS_OF)
        self.assertEqual(stats, HistoricalStats())
        self.assertEqual(baseline_daily_eligible(stats), 50.0)

    def test_stats_and_recent_average(self):
        payouts = [
            HistoricalPayout(AS_OF - timedelta(days=200), 4000.0),
            HistoricalPayout(AS_OF - timedelta(days=30), 1000.0),
            HistoricalPayout(AS_OF - timedelta(days=16), 2000.0),
        ]
        stats = historical_stats(payouts, AS_OF)
        self.assertEqual(stats.max_payout, 4000.0)
        self.assertAlmostEqual(stats.avg_payout, 7000.0 / 3)
        self.assertEqual(stats.recent_avg_payout, 1500.0)
        self.assertAlmostEqual(baseline_daily_eligible(stats), 1500.0 / 14)

    def test_baseline_falls_back_to_overall_average(self):
        stats = historical_stats([HistoricalPayout(AS_OF - timedelta(days=300), 2800.0)], AS_OF)
        self.assertIsNone(stats.recent_avg_payout)
        self.assertAlmostEqual(baseline_daily_eligible(stats), 200.0)


class TestProjection(unittest.TestCase):
    """Test cases for averages, projection and caps."""

    def test_average_daily_eligible(self):
        daily = {AS_OF: 100.0, AS_OF + timedelta(days=1): 300.0}
        self.assertEqual(average_daily_eligible(daily, HistoricalStats()), 200.0)

    def test_average_falls_back_to_baseline(self):
        self.assertEqual(average_daily_eligible({}, HistoricalStats()), 50.0)
        stats = HistoricalStats(max_payout=1400.0, avg_payout=1400.0, recent_avg_payout=1400.0)
        self.assertEqual(average_daily_eligible({AS_OF: -10.0}, stats), 100.0)

    def test_linear_trend_multiplier(self):
        self.assertAlmostEqual(project_period_eligible(100.0, 1.05, 0), 1400.0 * 1.05)
        self.assertAlmostEqual(project_period_eligible(100.0, 1.05, 3), 1400.0 * 1.2)

    def test_projection_is_bounded(self):
        self.assertAlmostEqual(project_period_eligible(100.0, 1.1, 5), 1400.0 * 1.5)
        self.assertAlmostEqual(project_period_eligible(100.0, 0.9, 5), 1400.0 * 0.7)

    def test_projection_without_data_is_finite(self):
        value = project_period_eligible(average_daily_eligible({}, HistoricalStats()), 1.0, 2)
        self.assertFalse(math.isnan(value))
        self.assertEqual(value, 700.0)

    def test_payout_cap(self):
        stats = HistoricalStats(max_payout=1000.0, avg_payout=800.0)
        self.assertAlmostEqual(payout_cap(stats, RiskLevel.CONSERVATIVE), 850.0)
        self.assertAlmostEqual(payout_cap(stats, RiskLevel.MODERATE), 1000.0)
        self.assertAlmostEqual(payout_cap(stats, RiskLevel.AGGRESSIVE), 1150.0)
        self.assertIsNone(payout_cap(HistoricalStats(), RiskLevel.MODERATE))

    def test_clamp(self):
        self.assertEqual(clamp(2.0, (0.8, 1.2)), 1.2)
        self.assertEqual(clamp(0.1, (0.8, 1.2)), 0.8)
        self.assertEqual(clamp(1.0, (0.8, 1.2)), 1.0)

    def test_risk_levels(self):
        self.assertIs(RiskLevel.from_adjustment(3), RiskLevel.AGGRESSIVE)
        self.assertIs(RiskLevel.from_adjustment(8), RiskLevel.MODERATE)
        self.assertIs(RiskLevel.from_adjustment(15), RiskLevel.CONSERVATIVE)


if __name__ == "__main__":
    unittest.main()
