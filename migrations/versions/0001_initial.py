"""Initial migration

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 09:00:00
"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "profiles",
        sa.Column("user_id", sa.String(), primary_key=True),
        sa.Column("account_id", sa.String(), nullable=False, index=True),
    )
    op.create_table(
        "auth_tokens",
        sa.Column("token", sa.String(), primary_key=True),
        sa.Column(
            "user_id",
            sa.String(),
            sa.ForeignKey("profiles.user_id"),
            nullable=False,
            index=True,
        ),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_table(
        "user_settings",
        sa.Column("user_id", sa.String(), sa.ForeignKey("profiles.user_id"), primary_key=True),
        sa.Column("forecast_confidence_threshold", sa.Integer()),
        sa.Column("default_reserve_lag_days", sa.Integer()),
        sa.Column("min_reserve_floor", sa.Numeric()),
        sa.Column(
            "advanced_modeling_enabled",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("false"),
        ),
    )
    op.create_table(
        "amazon_accounts",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column(
            "user_id",
            sa.String(),
            sa.ForeignKey("profiles.user_id"),
            nullable=False,
            index=True,
        ),
        sa.Column("account_id", sa.String(), nullable=False, index=True),
        sa.Column("account_name", sa.String(), nullable=False),
        sa.Column("marketplace_name", sa.String()),
        sa.Column(
            "payout_model",
            sa.Enum("bi-weekly", "daily", name="payout_model"),
            nullable=False,
        ),
        sa.Column("reserve_lag_days", sa.Integer()),
        sa.Column("reserve_multiplier", sa.Numeric()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column(
            "initial_sync_complete", sa.Boolean(), nullable=False, server_default=sa.text("false")
        ),
        sa.Column("transaction_count", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_table(
        "amazon_transactions",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column(
            "amazon_account_id",
            sa.String(),
            sa.ForeignKey("amazon_accounts.id"),
            nullable=False,
            index=True,
        ),
        sa.Column("transaction_type", sa.String(), nullable=False),
        sa.Column("transaction_date", sa.Date(), nullable=False, index=True),
        sa.Column("delivery_date", sa.Date()),
        sa.Column("gross_amount", sa.Numeric()),
        sa.Column("amount", sa.Numeric()),
        sa.Column("shipping_cost", sa.Numeric()),
        sa.Column("ads_cost", sa.Numeric()),
        sa.Column("return_rate", sa.Numeric()),
        sa.Column("chargeback_rate", sa.Numeric()),
    )
    op.create_table(
        "amazon_payouts",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(), nullable=False, index=True),
        sa.Column("account_id", sa.String(), nullable=False),
        sa.Column(
            "amazon_account_id",
            sa.String(),
            sa.ForeignKey("amazon_accounts.id"),
            nullable=False,
            index=True,
        ),
        sa.Column("settlement_id", sa.String(), nullable=False),
        sa.Column("settlement_group", sa.String()),
        sa.Column("payout_date", sa.Date(), nullable=False),
        sa.Column("total_amount", sa.Numeric(), nullable=False),
        sa.Column("eligible_in_period", sa.Numeric()),
        sa.Column("reserve_amount", sa.Numeric()),
        sa.Column("adjustments", sa.Numeric()),
        sa.Column("orders_total", sa.Numeric()),
        sa.Column("fees_total", sa.Numeric()),
        sa.Column("refunds_total", sa.Numeric()),
        sa.Column("other_total", sa.Numeric()),
        sa.Column("status", sa.String(), nullable=False, index=True),
        sa.Column("payout_type", sa.String(), nullable=False),
        sa.Column("marketplace_name", sa.String()),
        sa.Column("transaction_count", sa.Integer()),
        sa.Column("currency_code", sa.String()),
        sa.Column("modeling_method", sa.String()),
        sa.Column("is_settlement_day", sa.Boolean()),
        sa.Column("available_for_daily_transfer", sa.Numeric()),
        sa.Column("days_accumulated", sa.Integer()),
        sa.Column("total_daily_draws", sa.Numeric()),
        sa.Column("last_draw_calculation_date", sa.Date()),
        sa.Column(
            "created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False
        ),
        sa.UniqueConstraint("amazon_account_id", "settlement_id", name="uq_payout_settlement"),
    )


def downgrade():
    op.drop_table("amazon_payouts")
    op.drop_table("amazon_transactions")
    op.drop_table("amazon_accounts")
    op.drop_table("user_settings")
    op.drop_table("auth_tokens")
    op.drop_table("profiles")
    # Drop enum type for Postgres
    op.execute("DROP TYPE IF EXISTS payout_model;")
