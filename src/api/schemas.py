"""Response bodies of the forecast HTTP entry point."""

from pydantic import BaseModel, ConfigDict, Field


class ForecastRunResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    forecast_count: int = Field(alias="forecastCount")


class ErrorResponse(BaseModel):
    error: str


__all__ = ["ForecastRunResponse", "ErrorResponse"]
