"""Database ORM models for the Amazon payout forecast service.

This module defines the SQLAlchemy models:
Profile, AuthToken, UserSettings, AmazonAccount, AmazonTransaction and AmazonPayout.
"""

from sqlalchemy import (
    Column,
    Integer,
    String,
    Enum,
    Date,
    DateTime,
    Numeric,
    Boolean,
    ForeignKey,
    UniqueConstraint,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Profile(Base):
    """ORM model for profiles table, linking a user to a seller account.

    Attributes:
        user_id (str): Primary key, the authenticated user identifier.
        account_id (str): Seller account the user belongs to.
    """

    __tablename__ = "profiles"
    user_id = Column(String, primary_key=True)
    account_id = Column(String, nullable=False, index=True)


class AuthToken(Base):
    """ORM model for auth_tokens table, holding bearer tokens.

    Attributes:
        token (str): Primary key, the opaque bearer token.
        user_id (str): Foreign key referencing profiles.user_id.
        is_active (bool): Whether the token may still be used.
        expires_at (datetime): Expiry timestamp (UTC).
    """

    __tablename__ = "auth_tokens"
    token = Column(String, primary_key=True)
    user_id = Column(String, ForeignKey("profiles.user_id"), nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)


class UserSettings(Base):
    """ORM model for user_settings table, the forecast configuration per user.

    Attributes:
        user_id (str): Primary key, foreign key referencing profiles.user_id.
        forecast_confidence_threshold (int): Risk adjustment percentage (3, 8 or 15).
        default_reserve_lag_days (int): Reserve lag used when the account has none.
        min_reserve_floor (Decimal): Minimum reserve for the daily payout model.
        advanced_modeling_enabled (bool): Use volume-weighted daily distribution.
    """

    __tablename__ = "user_settings"
    user_id = Column(String, ForeignKey("profiles.user_id"), primary_key=True)
    forecast_confidence_threshold = Column(Integer)
    default_reserve_lag_days = Column(Integer)
    min_reserve_floor = Column(Numeric)
    advanced_modeling_enabled = Column(Boolean, default=False, nullable=False)


class AmazonAccount(Base):
    """ORM model for amazon_accounts table.

    Attributes:
        id (str): Primary key.
        user_id (str): Owning user.
        account_id (str): Seller account.
        account_name (str): Display name.
        marketplace_name (str): Marketplace the account sells in.
        payout_model (str): 'bi-weekly' or 'daily'.
        reserve_lag_days (int): Account-specific reserve lag, overrides the user default.
        reserve_multiplier (Decimal): Scale applied to the computed reserve.
        is_active (bool): Inactive accounts are never forecast.
        initial_sync_complete (bool): Whether the first data sync finished.
        transaction_count (int): Lifetime synced transaction count.
    """

    __tablename__ = "amazon_accounts"
    id = Column(String, primary_key=True)
    user_id = Column(String, ForeignKey("profiles.user_id"), nullable=False, index=True)
    account_id = Column(String, nullable=False, index=True)
    account_name = Column(String, nullable=False)
    marketplace_name = Column(String)
    payout_model = Column(
        Enum("bi-weekly", "daily", name="payout_model"), nullable=False, default="bi-weekly"
    )
    reserve_lag_days = Column(Integer)
    reserve_multiplier = Column(Numeric)
    is_active = Column(Boolean, default=True, nullable=False)
    initial_sync_complete = Column(Boolean, default=False, nullable=False)
    transaction_count = Column(Integer, default=0, nullable=False)


class AmazonTransaction(Base):
    """ORM model for amazon_transactions table, one marketplace order event.

    Attributes:
        id (str): Primary key.
        amazon_account_id (str): Foreign key referencing amazon_accounts.id.
        transaction_type (str): 'Order', 'Sale', 'Refund', ...
        transaction_date (date): Date of the sale.
        delivery_date (date): Delivery date, if known.
        gross_amount (Decimal): Gross order amount.
        amount (Decimal): Fee amount, stored as a signed deduction.
        shipping_cost (Decimal): Shipping cost.
        ads_cost (Decimal): Advertising cost.
        return_rate (Decimal): Return-rate estimate (0-1).
        chargeback_rate (Decimal): Chargeback-rate estimate (0-1).
    """

    __tablename__ = "amazon_transactions"
    id = Column(String, primary_key=True)
    amazon_account_id = Column(
        String, ForeignKey("amazon_accounts.id"), nullable=False, index=True
    )
    transaction_type = Column(String, nullable=False)
    transaction_date = Column(Date, nullable=False, index=True)
    delivery_date = Column(Date)
    gross_amount = Column(Numeric)
    amount = Column(Numeric)
    shipping_cost = Column(Numeric)
    ads_cost = Column(Numeric)
    return_rate = Column(Numeric)
    chargeback_rate = Column(Numeric)


class AmazonPayout(Base):
    """ORM model for amazon_payouts table, holding confirmed and forecasted payouts.

    Attributes:
        id (int): Primary key.
        user_id (str): Owning user.
        account_id (str): Seller account.
        amazon_account_id (str): Foreign key referencing amazon_accounts.id.
        settlement_id (str): Unique per account; upsert key together with amazon_account_id.
        settlement_group (str): Settlement cycle the row belongs to.
        payout_date (date): Date of the (projected) payout.
        total_amount (Decimal): Payout amount, or daily unlock for daily rows.
        eligible_in_period (Decimal): Eligible cash for the period.
        reserve_amount (Decimal): Reserve withheld.
        status (str): 'confirmed' or 'forecasted'.
        payout_type (str): Cadence tag, 'bi-weekly' or 'daily'.
        modeling_method (str): Calculation that produced the row.
    """

    __tablename__ = "amazon_payouts"
    __table_args__ = (
        UniqueConstraint("amazon_account_id", "settlement_id", name="uq_payout_settlement"),
    )
    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, nullable=False, index=True)
    account_id = Column(String, nullable=False)
    amazon_account_id = Column(
        String, ForeignKey("amazon_accounts.id"), nullable=False, index=True
    )
    settlement_id = Column(String, nullable=False)
    settlement_group = Column(String)
    payout_date = Column(Date, nullable=False)
    total_amount = Column(Numeric, nullable=False)
    eligible_in_period = Column(Numeric)
    reserve_amount = Column(Numeric)
    adjustments = Column(Numeric, default=0)
    orders_total = Column(Numeric)
    fees_total = Column(Numeric)
    refunds_total = Column(Numeric, default=0)
    other_total = Column(Numeric, default=0)
    status = Column(String, nullable=False, index=True)
    payout_type = Column(String, nullable=False)
    marketplace_name = Column(String)
    transaction_count = Column(Integer, default=0)
    currency_code = Column(String, default="USD")
    modeling_method = Column(String)
    is_settlement_day = Column(Boolean, default=False)
    available_for_daily_transfer = Column(Numeric)
    days_accumulated = Column(Integer)
    total_daily_draws = Column(Numeric, default=0)
    last_draw_calculation_date = Column(Date)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
