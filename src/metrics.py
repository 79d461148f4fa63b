"""Prometheus metrics definitions and duration measurement decorator.

This module defines the Histogram and Counter metrics for the payout forecast
engine and a decorator to measure function execution durations.
"""

import functools

from prometheus_client import Counter, Histogram

forecast_duration_seconds = Histogram(
    "forecast_duration_seconds", "Duration of a forecast run for one user"
)
forecast_account_duration_seconds = Histogram(
    "forecast_account_duration_seconds", "Duration of the forecast calculation for one account"
)
regenerate_duration_seconds = Histogram(
    "regenerate_duration_seconds", "Duration of the scheduled forecast regeneration"
)
forecast_records_total = Counter(
    "forecast_records_total", "Forecast rows written", ["payout_model"]
)
forecast_accounts_skipped_total = Counter(
    "forecast_accounts_skipped_total", "Accounts skipped during a forecast run", ["reason"]
)


def measure_duration(metric):
    """Decorator to measure execution duration of a function using the provided Prometheus Histogram metric.

    Args:
        metric (Histogram): Prometheus Histogram to record execution time.

    Returns:
        Callable: A decorator that wraps a function to measure and record its execution duration.
    """

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            with metric.time():
                return func(*args, **kwargs)

        return wrapper

    return decorator
