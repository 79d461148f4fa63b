"""Process settings read from environment variables."""

import os
from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the API and scheduler processes.

    Attributes:
        database_url (str): SQLAlchemy database URL.
        metrics_port (int): Port for the scheduler's Prometheus endpoint.
        forecast_cron_hour (int): UTC hour at which nightly regeneration runs.
        cors_origins (List[str]): Origins allowed to call the HTTP entry point.
    """

    database_url: str
    metrics_port: int
    forecast_cron_hour: int
    cors_origins: List[str]


def get_settings() -> Settings:
    """Build Settings from the current environment.

    Returns:
        Settings: Settings with defaults applied for unset variables.
    """
    origins = os.getenv("FORECAST_CORS_ORIGINS", "*")
    return Settings(
        database_url=os.getenv("DATABASE_URL", "sqlite:///./data.db"),
        metrics_port=int(os.getenv("METRICS_PORT", "8000")),
        forecast_cron_hour=int(os.getenv("FORECAST_CRON_HOUR", "2")),
        cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
    )
