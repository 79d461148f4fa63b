"""FastAPI entry point for the mathematical payout forecast.

POST /forecast-amazon-payouts-math regenerates the caller's forecasts. The
caller is resolved from the bearer token; every failure is reported as
HTTP 500 with an {"error": message} body.
"""

from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, FastAPI, Header, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app
from sqlalchemy import select
from sqlalchemy.orm import Session

from src.api.schemas import ErrorResponse, ForecastRunResponse
from src.config import get_settings
from src.db.models import AuthToken
from src.db.session import get_db
from src.forecast.exceptions import AuthenticationError, ForecastError
from src.forecast.forecast import run_forecast
from src.logging_config import get_logger

logger = get_logger(__name__, tag="MATH-FORECAST")

settings = get_settings()
app = FastAPI(title="Amazon Payout Forecast", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["POST", "OPTIONS"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)
app.mount("/metrics", make_asgi_app())


def _error_response(message: str) -> JSONResponse:
    return JSONResponse(status_code=500, content=ErrorResponse(error=message).model_dump())


@app.exception_handler(ForecastError)
async def forecast_error_handler(request: Request, exc: ForecastError) -> JSONResponse:
    logger.error(f"Error: {exc}")
    return _error_response(str(exc))


def get_current_user_id(
    authorization: Optional[str] = Header(default=None),
    db: Session = Depends(get_db),
) -> str:
    """Resolve the caller's user id from an active, unexpired bearer token."""
    if not authorization:
        raise AuthenticationError("No authorization header")
    if not authorization.lower().startswith("bearer "):
        raise AuthenticationError("Invalid or expired token")
    token_value = authorization.split(" ", 1)[1].strip()
    now = datetime.now(timezone.utc)
    auth_token = db.execute(
        select(AuthToken).where(
            AuthToken.token == token_value,
            AuthToken.is_active.is_(True),
            AuthToken.expires_at > now,
        )
    ).scalar_one_or_none()
    if auth_token is None:
        raise AuthenticationError("Invalid or expired token")
    return auth_token.user_id


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.post("/forecast-amazon-payouts-math", response_model=ForecastRunResponse)
def forecast_amazon_payouts(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    logger.info(f"Starting mathematical forecast for user: {user_id}")
    try:
        count = run_forecast(db, user_id)
    except ForecastError:
        raise
    except Exception as e:
        logger.exception(f"Error: {e}")
        return _error_response(str(e) or "Unknown error")
    return ForecastRunResponse(forecast_count=count)
