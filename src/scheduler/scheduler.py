"""Scheduler using APScheduler to regenerate payout forecasts nightly."""

import time

from apscheduler.schedulers.background import BackgroundScheduler
from prometheus_client import start_http_server

from src.config import get_settings
from src.logging_config import get_logger
from src.forecast.forecast import regenerate_all_forecasts

logger = get_logger(__name__, tag="FORECAST-SCHEDULER")


def regenerate_job():
    """Job that regenerates forecasts for every user with a ready Amazon account.

    Returns:
        dict | None: Regeneration summary, or None if the run failed.
    """
    try:
        summary = regenerate_all_forecasts()
    except Exception as e:
        logger.exception(f"Forecast regeneration failed: {e}")
        return None
    logger.info(
        f"Regeneration completed: users={summary['users']}, failed={summary['failed']}, "
        f"forecasts={summary['forecasts']}"
    )
    return summary


def build_scheduler(hour: int) -> BackgroundScheduler:
    """Create a scheduler with regenerate_job registered daily at hour:00 UTC."""
    scheduler = BackgroundScheduler(timezone="UTC")
    scheduler.add_job(regenerate_job, "cron", hour=hour, minute=0, id="regenerate_forecasts")
    return scheduler


def start_scheduler():
    """Start the APScheduler to run regenerate_job every night.

    Schedules regenerate_job at FORECAST_CRON_HOUR UTC, starts the scheduler
    process, and keeps the application alive.

    Returns:
        None
    """
    scheduler = build_scheduler(get_settings().forecast_cron_hour)
    scheduler.start()
    logger.info(f"Scheduler started. Next runs: {scheduler.get_jobs()}")
    try:
        # Keep the scheduler alive
        while True:
            time.sleep(60)
    except (KeyboardInterrupt, SystemExit):
        scheduler.shutdown()
        logger.info("Scheduler stopped.")


if __name__ == "__main__":
    start_http_server(get_settings().metrics_port)
    start_scheduler()
