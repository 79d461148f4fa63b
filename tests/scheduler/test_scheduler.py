"""Unit tests for the forecast scheduler."""

import unittest
from unittest.mock import patch

from src.scheduler.scheduler import build_scheduler, regenerate_job


class TestScheduler(unittest.TestCase):
    """Test cases for the scheduler module."""

    @patch("src.scheduler.scheduler.regenerate_all_forecasts")
    def test_regenerate_job_returns_summary(self, mock_regenerate):
        mock_regenerate.return_value = {"users": 3, "failed": 1, "forecasts": 12}

        result = regenerate_job()

        mock_regenerate.assert_called_once_with()
        self.assertEqual(result, {"users": 3, "failed": 1, "forecasts": 12})

    @patch("src.scheduler.scheduler.regenerate_all_forecasts")
    def test_regenerate_job_logs_failures(self, mock_regenerate):
        mock_regenerate.side_effect = RuntimeError("database unavailable")

        with self.assertLogs("src.scheduler.scheduler", level="ERROR") as logs:
            result = regenerate_job()

        self.assertIsNone(result)
        self.assertIn("[FORECAST-SCHEDULER]", logs.output[0])

    def test_build_scheduler_registers_nightly_job(self):
        scheduler = build_scheduler(hour=3)

        job = scheduler.get_job("regenerate_forecasts")
        self.assertIsNotNone(job)
        self.assertIs(job.func, regenerate_job)
        self.assertIn("hour='3'", str(job.trigger))


if __name__ == "__main__":
    unittest.main()
