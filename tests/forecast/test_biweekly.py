"""Unit tests for the bi-weekly forecaster."""

import math
import unittest
from datetime import timedelta

from conftest import AS_OF, make_transactions
from src.forecast.biweekly import forecast_biweekly
from src.forecast.eligible import EligibleCash, derive_eligible_cash
from src.forecast.types import AccountPolicy, HistoricalStats, ProcessedTransaction


def _day(offset):
    return AS_OF + timedelta(days=offset)


class TestBiWeeklyForecast(unittest.TestCase):
    """Test cases for forecast_biweekly."""

    def setUp(self):
        """Eligible cash of 10,000 unlocking in the first period and 1,500 delivered in its reserve window."""
        self.policy = AccountPolicy(
            amazon_account_id="acc-1", account_id="seller-1", user_id="user-1", risk_adjustment=8
        )
        self.eligible = EligibleCash(
            transactions=[
                ProcessedTransaction("r1", _day(7), _day(10), _day(17), 1000.0),
                ProcessedTransaction("r2", _day(8), _day(11), _day(18), -500.0),
            ],
            daily_eligible={_day(3): 4000.0, _day(10): 6000.0},
        )

    def test_period_dates_and_identifiers(self):
        records = forecast_biweekly(self.eligible, self.policy, HistoricalStats(), AS_OF)

        self.assertEqual(len(records), 6)
        self.assertEqual([r.payout_date for r in records], [_day(14 * (i + 1)) for i in range(6)])
        self.assertEqual(len({r.settlement_id for r in records}), 6)
        self.assertTrue(all(r.status == "forecasted" for r in records))
        self.assertTrue(all(r.payout_type == "bi-weekly" for r in records))
        self.assertEqual(records[0].settlement_group, f"settlement-acc-1-{_day(14).isoformat()}")

    def test_first_period_example(self):
        first = forecast_biweekly(self.eligible, self.policy, HistoricalStats(), AS_OF)[0]

        self.assertAlmostEqual(first.eligible_in_period, 10000.0)
        self.assertAlmostEqual(first.reserve_amount, 1500.0)
        self.assertAlmostEqual(first.total_amount, 7820.0)
        self.assertAlmostEqual(first.orders_total, 10000.0 / 0.85)
        self.assertAlmostEqual(first.fees_total, 10000.0 / 0.85 * 0.15)

    def test_conservation(self):
        for record in forecast_biweekly(self.eligible, self.policy, HistoricalStats(), AS_OF):
            expected = max(0.0, record.eligible_in_period - record.reserve_amount) * 0.92
            self.assertAlmostEqual(record.total_amount, expected)

    def test_reserve_multiplier(self):
        policy = AccountPolicy(amazon_account_id="acc-1", reserve_multiplier=2.0, risk_adjustment=8)
        first = forecast_biweekly(self.eligible, policy, HistoricalStats(), AS_OF)[0]
        self.assertAlmostEqual(first.reserve_amount, 3000.0)
        self.assertAlmostEqual(first.total_amount, 7000.0 * 0.92)

    def test_historical_cap(self):
        stats = HistoricalStats(max_payout=5000.0, avg_payout=4000.0, recent_avg_payout=4000.0)
        for risk, cap in ((8, 5000.0), (15, 4250.0), (3, 5750.0)):
            policy = AccountPolicy(amazon_account_id="acc-1", risk_adjustment=risk)
            records = forecast_biweekly(self.eligible, policy, stats, AS_OF)
            self.assertTrue(all(r.total_amount <= cap + 1e-9 for r in records))
            self.assertAlmostEqual(records[0].total_amount, cap)

    def test_reserve_exceeding_eligible_yields_zero(self):
        eligible = EligibleCash(
            transactions=[ProcessedTransaction("big", _day(7), _day(10), _day(17), 50000.0)],
            daily_eligible={_day(3): 1000.0},
        )
        first = forecast_biweekly(eligible, self.policy, HistoricalStats(), AS_OF)[0]
        self.assertEqual(first.total_amount, 0.0)
        self.assertGreaterEqual(first.reserve_amount, 0.0)

    def test_projected_periods_from_history(self):
        """Past unlocks only: every period is projected from the daily average."""
        eligible = derive_eligible_cash(make_transactions(40, start_days_ago=50), self.policy, AS_OF)
        records = forecast_biweekly(eligible, self.policy, HistoricalStats(), AS_OF)

        for record in records:
            self.assertAlmostEqual(record.eligible_in_period, 85.0 * 14)
            self.assertAlmostEqual(record.reserve_amount, 85.0 * 14 * 0.15)
            self.assertAlmostEqual(record.total_amount, 85.0 * 14 * 0.85 * 0.92)

    def test_trend_clamped_for_projection(self):
        """Past unlocks of 100/day then 300/day (and the reverse) project at the 1.10 and 0.90 bounds."""
        for first_half, second_half, bound in ((100.0, 300.0, 1.1), (300.0, 100.0, 0.9)):
            daily = {_day(-59 + i): first_half for i in range(30)}
            daily.update({_day(-29 + i): second_half for i in range(30)})
            eligible = EligibleCash(transactions=[], daily_eligible=daily)

            records = forecast_biweekly(eligible, self.policy, HistoricalStats(), AS_OF)

            self.assertAlmostEqual(records[0].eligible_in_period, 200.0 * 14 * bound)
            self.assertAlmostEqual(records[1].eligible_in_period, 200.0 * 14 * (1 + (bound - 1) * 2))

    def test_projection_without_any_data(self):
        eligible = EligibleCash(transactions=[], daily_eligible={})
        records = forecast_biweekly(eligible, self.policy, HistoricalStats(), AS_OF)

        for record in records:
            self.assertFalse(math.isnan(record.total_amount))
            self.assertAlmostEqual(record.eligible_in_period, 700.0)
            self.assertGreater(record.total_amount, 0)

    def test_deterministic(self):
        eligible = derive_eligible_cash(make_transactions(45, start_days_ago=50), self.policy, AS_OF)
        first = forecast_biweekly(eligible, self.policy, HistoricalStats(), AS_OF)
        second = forecast_biweekly(eligible, self.policy, HistoricalStats(), AS_OF)
        self.assertEqual([r.to_row() for r in first], [r.to_row() for r in second])


if __name__ == "__main__":
    unittest.main()
