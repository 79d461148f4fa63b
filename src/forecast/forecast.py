"""Mathematical Amazon payout forecasting: per-account calculation and forecast replacement."""

from datetime import date, timedelta
from typing import Iterable, List, Optional

from sqlalchemy import insert
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.db.models import AmazonAccount, AmazonPayout, AmazonTransaction, Profile, UserSettings
from src.db.session import get_db_session
from src.forecast import defaults as policy_defaults
from src.forecast.biweekly import forecast_biweekly
from src.forecast.daily import forecast_daily
from src.forecast.defaults import DEFAULTS, ForecastDefaults
from src.forecast.eligible import derive_eligible_cash
from src.forecast.exceptions import (
    AuthenticationError,
    ForecastError,
    ForecastStoreError,
    InsufficientHistoryError,
    NoEligibleAccountsError,
)
from src.forecast.trend import historical_stats
from src.forecast.types import (
    AccountPolicy,
    ForecastRecord,
    HistoricalPayout,
    PayoutModel,
    Transaction,
)
from src.logging_config import get_logger
from src.metrics import (
    forecast_account_duration_seconds,
    forecast_accounts_skipped_total,
    forecast_duration_seconds,
    forecast_records_total,
    measure_duration,
    regenerate_duration_seconds,
)

logger = get_logger(__name__, tag="MATH-FORECAST")

FORECASTED = "forecasted"
CONFIRMED = "confirmed"
UPSERT_KEY = ("amazon_account_id", "settlement_id")


@measure_duration(forecast_account_duration_seconds)
def calculate_account_forecast(
    transactions: Iterable[Transaction],
    policy: AccountPolicy,
    history: Iterable[HistoricalPayout],
    as_of: date,
    defaults: ForecastDefaults = DEFAULTS,
) -> List[ForecastRecord]:
    """Compute the forecast records for one account without touching the store.

    Args:
        transactions (Iterable[Transaction]): Transaction history of the account.
        policy (AccountPolicy): Account policy.
        history (Iterable[HistoricalPayout]): Confirmed payouts of the account.
        as_of (date): Forecast reference date.
        defaults (ForecastDefaults): Business constants.

    Returns:
        List[ForecastRecord]: Records for the account's payout model.

    Raises:
        InsufficientHistoryError: If the recent window has too few qualifying transactions.
    """
    eligible = derive_eligible_cash(transactions, policy, as_of, defaults)
    stats = historical_stats(history, as_of, defaults.recent_payout_window_days)
    if policy.payout_model is PayoutModel.BI_WEEKLY:
        return forecast_biweekly(eligible, policy, stats, as_of, defaults)
    return forecast_daily(eligible, policy, stats, as_of, defaults)


def _or_default(value, default):
    return default if value is None else value


def build_policy(account: AmazonAccount, settings: Optional[UserSettings]) -> AccountPolicy:
    """Combine the user's forecast settings with the account's own overrides.

    Args:
        account (AmazonAccount): Account row.
        settings (UserSettings, optional): User settings row, if any.

    Returns:
        AccountPolicy: Explicit policy for the calculator.
    """
    risk_adjustment = default_lag = min_floor = None
    advanced = False
    if settings is not None:
        risk_adjustment = settings.forecast_confidence_threshold
        default_lag = settings.default_reserve_lag_days
        min_floor = settings.min_reserve_floor
        advanced = bool(settings.advanced_modeling_enabled)

    return AccountPolicy(
        amazon_account_id=account.id,
        account_id=account.account_id,
        user_id=account.user_id,
        marketplace_name=account.marketplace_name,
        payout_model=account.payout_model or PayoutModel.BI_WEEKLY.value,
        reserve_lag_days=int(
            account.reserve_lag_days
            or _or_default(default_lag, policy_defaults.DEFAULT_RESERVE_LAG_DAYS)
        ),
        reserve_multiplier=float(
            account.reserve_multiplier or policy_defaults.DEFAULT_RESERVE_MULTIPLIER
        ),
        min_reserve_floor=float(_or_default(min_floor, policy_defaults.DEFAULT_MIN_RESERVE_FLOOR)),
        risk_adjustment=float(
            _or_default(risk_adjustment, policy_defaults.DEFAULT_RISK_ADJUSTMENT)
        ),
        advanced_modeling_enabled=advanced,
    )


def is_account_ready(account: AmazonAccount, defaults: ForecastDefaults = DEFAULTS) -> bool:
    """Whether the account finished its initial sync and has enough lifetime transactions."""
    return bool(account.initial_sync_complete) and (
        (account.transaction_count or 0) >= defaults.min_lifetime_transactions
    )


def load_transactions(db: Session, amazon_account_id: str, since: date) -> List[Transaction]:
    """Load the account's transactions dated on or after since.

    Args:
        db (Session): SQLAlchemy Session object.
        amazon_account_id (str): Account identifier.
        since (date): Earliest transaction date.

    Returns:
        List[Transaction]: Transactions ordered by date.
    """
    rows = (
        db.query(AmazonTransaction)
        .filter(
            AmazonTransaction.amazon_account_id == amazon_account_id,
            AmazonTransaction.transaction_date >= since,
        )
        .order_by(AmazonTransaction.transaction_date, AmazonTransaction.id)
        .all()
    )
    return [
        Transaction(
            id=row.id,
            transaction_date=row.transaction_date,
            gross_amount=float(row.gross_amount or 0),
            fee_amount=float(row.amount or 0),
            delivery_date=row.delivery_date,
            shipping_cost=float(row.shipping_cost or 0),
            ads_cost=float(row.ads_cost or 0),
            return_rate=None if row.return_rate is None else float(row.return_rate),
            chargeback_rate=None if row.chargeback_rate is None else float(row.chargeback_rate),
            transaction_type=row.transaction_type,
        )
        for row in rows
    ]


def load_historical_payouts(db: Session, amazon_account_id: str) -> List[HistoricalPayout]:
    """Load the account's confirmed payouts."""
    rows = (
        db.query(AmazonPayout.payout_date, AmazonPayout.total_amount)
        .filter(
            AmazonPayout.amazon_account_id == amazon_account_id,
            AmazonPayout.status == CONFIRMED,
        )
        .order_by(AmazonPayout.payout_date)
        .all()
    )
    return [HistoricalPayout(payout_date=d, total_amount=float(a)) for d, a in rows]


def _upsert_statement(db: Session, rows: List[dict]):
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        stmt = postgresql.insert(AmazonPayout).values(rows)
    elif dialect == "sqlite":
        stmt = sqlite.insert(AmazonPayout).values(rows)
    else:
        return insert(AmazonPayout).values(rows)
    updates = {key: stmt.excluded[key] for key in rows[0] if key not in UPSERT_KEY}
    return stmt.on_conflict_do_update(index_elements=list(UPSERT_KEY), set_=updates)


def replace_forecasts(db: Session, amazon_account_id: str, records: List[ForecastRecord]) -> int:
    """Replace the account's forecasted rows with records and commit.

    Prior rows with status 'forecasted' are deleted, then the records are
    upserted on (amazon_account_id, settlement_id).

    Args:
        db (Session): SQLAlchemy Session object.
        amazon_account_id (str): Account whose forecasts are replaced.
        records (List[ForecastRecord]): New forecast records.

    Returns:
        int: Number of rows written.

    Raises:
        ForecastStoreError: If the delete or upsert fails.
    """
    try:
        deleted = (
            db.query(AmazonPayout)
            .filter(
                AmazonPayout.amazon_account_id == amazon_account_id,
                AmazonPayout.status == FORECASTED,
            )
            .delete(synchronize_session=False)
        )
        rows = [record.to_row() for record in records]
        if rows:
            db.execute(_upsert_statement(db, rows))
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"Failed to store forecasts for account {amazon_account_id}: {e}")
        raise ForecastStoreError(str(e)) from e

    logger.info(f"Replaced {deleted} forecasted rows with {len(rows)} for account {amazon_account_id}")
    return len(rows)


@measure_duration(forecast_duration_seconds)
def run_forecast(db: Session, user_id: str, as_of: Optional[date] = None) -> int:
    """Regenerate forecasts for every ready Amazon account of the user.

    Accounts are processed sequentially. An account with too little recent
    history or invalid forecast settings is skipped and keeps its previous
    forecasts; each processed
    account's forecasts are replaced and committed independently.

    Args:
        db (Session): SQLAlchemy Session object.
        user_id (str): Authenticated user.
        as_of (date, optional): Forecast reference date (default: today).

    Returns:
        int: Number of forecast rows written.

    Raises:
        AuthenticationError: If the user has no profile.
        NoEligibleAccountsError: If no active account is ready for forecasting.
        ForecastStoreError: If writing forecasts fails.
    """
    as_of = as_of or date.today()
    profile = db.get(Profile, user_id)
    if profile is None:
        raise AuthenticationError("User profile not found")

    settings = db.get(UserSettings, user_id)
    accounts = (
        db.query(AmazonAccount)
        .filter(AmazonAccount.account_id == profile.account_id, AmazonAccount.is_active.is_(True))
        .order_by(AmazonAccount.id)
        .all()
    )
    if not accounts:
        raise NoEligibleAccountsError("No active Amazon accounts found")

    ready = []
    for account in accounts:
        if is_account_ready(account):
            ready.append(account)
        else:
            logger.info(
                f"Skipping {account.account_name}: initial sync complete="
                f"{bool(account.initial_sync_complete)}, transactions={account.transaction_count or 0}"
            )
            forecast_accounts_skipped_total.labels(reason="not_ready").inc()
    if not ready:
        raise NoEligibleAccountsError(
            "No Amazon accounts are ready for forecasting. Sync more data: forecasts need the "
            f"initial sync to complete and at least {DEFAULTS.min_lifetime_transactions} transactions"
        )

    since = as_of - timedelta(days=DEFAULTS.transaction_window_days)
    written = 0
    for account in ready:
        try:
            policy = build_policy(account, settings)
        except ValueError as e:
            logger.error(f"Skipping {account.account_name}: invalid forecast settings: {e}")
            forecast_accounts_skipped_total.labels(reason="invalid_policy").inc()
            continue

        logger.info(f"Processing {account.account_name} ({policy.payout_model.value} model)")
        try:
            records = calculate_account_forecast(
                load_transactions(db, account.id, since),
                policy,
                load_historical_payouts(db, account.id),
                as_of,
            )
        except InsufficientHistoryError as e:
            logger.info(f"Skipping {account.account_name}: {e}")
            forecast_accounts_skipped_total.labels(reason="insufficient_history").inc()
            continue

        count = replace_forecasts(db, account.id, records)
        forecast_records_total.labels(payout_model=policy.payout_model.value).inc(count)
        written += count

    logger.info(f"Generated {written} forecasts for user {user_id}")
    return written


@measure_duration(regenerate_duration_seconds)
def regenerate_all_forecasts(as_of: Optional[date] = None) -> dict:
    """Regenerate forecasts for every user owning at least one ready account.

    A failure for one user is logged and counted; the remaining users are
    still processed.

    Args:
        as_of (date, optional): Forecast reference date (default: today).

    Returns:
        dict: Summary with keys 'users', 'failed' and 'forecasts'.
    """
    with get_db_session() as db:
        user_ids = [
            user_id
            for (user_id,) in db.query(AmazonAccount.user_id)
            .filter(
                AmazonAccount.is_active.is_(True),
                AmazonAccount.initial_sync_complete.is_(True),
                AmazonAccount.transaction_count >= DEFAULTS.min_lifetime_transactions,
            )
            .distinct()
            .order_by(AmazonAccount.user_id)
            .all()
        ]

        failed = 0
        forecasts = 0
        for user_id in user_ids:
            try:
                forecasts += run_forecast(db, user_id, as_of)
            except (ForecastError, ValueError) as e:
                failed += 1
                logger.error(f"Forecast regeneration failed for user {user_id}: {e}")

    logger.info(
        f"Regenerated forecasts for {len(user_ids) - failed}/{len(user_ids)} users, "
        f"{forecasts} rows"
    )
    return {"users": len(user_ids), "failed": failed, "forecasts": forecasts}
