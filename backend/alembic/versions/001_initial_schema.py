"""Initial schema — catalog, quotes, transfers, events, payouts, rate limits, audit log.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "assets",
        sa.Column("id", UUID(as_uuid=True), nullable=False),
        sa.Column("code", sa.String(10), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("symbol", sa.String(10), nullable=True),
        sa.Column("decimals", sa.Integer, nullable=False, server_default="2"),
        sa.Column("kind", sa.String(10), nullable=False, server_default="FIAT"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="true"),
        sa.PrimaryKeyConstraint("id", name="pk_assets"),
        sa.UniqueConstraint("code", name="uq_assets_code"),
    )

    op.create_table(
        "corridors",
        sa.Column("id", UUID(as_uuid=True), nullable=False),
        sa.Column("from_asset_id", UUID(as_uuid=True), nullable=False),
        sa.Column("to_asset_id", UUID(as_uuid=True), nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="true"),
        sa.PrimaryKeyConstraint("id", name="pk_corridors"),
        sa.ForeignKeyConstraint(
            ["from_asset_id"], ["assets.id"],
            name="fk_corridors_from_asset_id_assets",
        ),
        sa.ForeignKeyConstraint(
            ["to_asset_id"], ["assets.id"],
            name="fk_corridors_to_asset_id_assets",
        ),
        sa.UniqueConstraint(
            "from_asset_id", "to_asset_id", name="uq_corridors_from_asset_id",
        ),
    )

    op.create_table(
        "routes",
        sa.Column("id", UUID(as_uuid=True), nullable=False),
        sa.Column("corridor_id", UUID(as_uuid=True), nullable=False),
        sa.Column("rail", sa.String(20), nullable=False),
        sa.Column("provider", sa.String(100), nullable=False),
        sa.Column("fee_fixed", sa.Float, nullable=False),
        sa.Column("fee_pct", sa.Float, nullable=False),
        sa.Column("fx_margin_pct", sa.Float, nullable=False),
        sa.Column("eta_min_minutes", sa.Integer, nullable=False),
        sa.Column("eta_max_minutes", sa.Integer, nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="true"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_routes"),
        sa.ForeignKeyConstraint(
            ["corridor_id"], ["corridors.id"],
            name="fk_routes_corridor_id_corridors",
        ),
    )

    op.create_table(
        "quotes",
        sa.Column("id", UUID(as_uuid=True), nullable=False),
        sa.Column("from_asset", sa.String(10), nullable=False),
        sa.Column("to_asset", sa.String(10), nullable=False),
        sa.Column("rail", sa.String(20), nullable=False),
        sa.Column("send_amount", sa.Float, nullable=False),
        sa.Column("market_rate", sa.Float, nullable=False),
        sa.Column("rate_source", sa.String(100), nullable=False),
        sa.Column("rate_timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("fx_margin_pct", sa.Float, nullable=False),
        sa.Column("fee_fixed", sa.Float, nullable=False),
        sa.Column("fee_pct", sa.Float, nullable=False),
        sa.Column("total_fee", sa.Float, nullable=False),
        sa.Column("applied_rate", sa.Float, nullable=False),
        sa.Column("recipient_gets", sa.Float, nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_quotes"),
    )

    op.create_table(
        "transfers",
        sa.Column("id", UUID(as_uuid=True), nullable=False),
        sa.Column("quote_id", UUID(as_uuid=True), nullable=False),
        sa.Column("reference_code", sa.String(20), nullable=False),
        sa.Column("idempotency_key", sa.String(255), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="READY"),
        sa.Column("payout_rail", sa.String(20), nullable=False),
        sa.Column("user_id", sa.String(255), nullable=True),
        sa.Column("user_email", sa.String(320), nullable=True),
        sa.Column("recipient_name", sa.String(200), nullable=False),
        sa.Column("recipient_country", sa.String(2), nullable=False),
        sa.Column("recipient_phone", sa.String(50), nullable=True),
        sa.Column("recipient_bank_name", sa.String(200), nullable=True),
        sa.Column("recipient_bank_account", sa.String(100), nullable=True),
        sa.Column("recipient_mobile_money_provider", sa.String(100), nullable=True),
        sa.Column("recipient_mobile_money_number", sa.String(50), nullable=True),
        sa.Column("memo", sa.Text, nullable=True),
        sa.Column("receipt_send_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("receipt_last_sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_transfers"),
        sa.ForeignKeyConstraint(
            ["quote_id"], ["quotes.id"], name="fk_transfers_quote_id_quotes",
        ),
        sa.UniqueConstraint("quote_id", name="uq_transfers_quote_id"),
        sa.UniqueConstraint("reference_code", name="uq_transfers_reference_code"),
        sa.UniqueConstraint("idempotency_key", name="uq_transfers_idempotency_key"),
    )

    op.create_table(
        "transfer_events",
        sa.Column("id", sa.Integer, autoincrement=True, nullable=False),
        sa.Column("transfer_id", UUID(as_uuid=True), nullable=False),
        sa.Column("type", sa.String(30), nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_transfer_events"),
        sa.ForeignKeyConstraint(
            ["transfer_id"], ["transfers.id"],
            name="fk_transfer_events_transfer_id_transfers",
        ),
    )
    op.create_index(
        "ix_transfer_events_transfer_id", "transfer_events", ["transfer_id"],
    )

    op.create_table(
        "crypto_payouts",
        sa.Column("id", UUID(as_uuid=True), nullable=False),
        sa.Column("transfer_id", UUID(as_uuid=True), nullable=False),
        sa.Column("network", sa.String(20), nullable=False),
        sa.Column("invoice", sa.Text, nullable=True),
        sa.Column("payment_hash", sa.String(64), nullable=True),
        sa.Column("address", sa.String(200), nullable=True),
        sa.Column("amount_sats", sa.BigInteger, nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="CREATED"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_crypto_payouts"),
        sa.ForeignKeyConstraint(
            ["transfer_id"], ["transfers.id"],
            name="fk_crypto_payouts_transfer_id_transfers",
        ),
        sa.UniqueConstraint("transfer_id", name="uq_crypto_payouts_transfer_id"),
    )

    op.create_table(
        "rate_limit_buckets",
        sa.Column("key", sa.String(255), nullable=False),
        sa.Column("count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("reset_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("key", name="pk_rate_limit_buckets"),
    )

    op.create_table(
        "audit_log",
        sa.Column("id", UUID(as_uuid=True), nullable=False),
        sa.Column("actor", sa.String(255), nullable=False),
        sa.Column("action", sa.String(50), nullable=False),
        sa.Column("entity_type", sa.String(50), nullable=False),
        sa.Column("entity_id", sa.String(64), nullable=False),
        sa.Column("metadata", sa.JSON, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_audit_log"),
    )
    op.create_index("ix_audit_log_entity_id", "audit_log", ["entity_id"])


def downgrade() -> None:
    op.drop_index("ix_audit_log_entity_id", table_name="audit_log")
    op.drop_table("audit_log")
    op.drop_table("rate_limit_buckets")
    op.drop_table("crypto_payouts")
    op.drop_index("ix_transfer_events_transfer_id", table_name="transfer_events")
    op.drop_table("transfer_events")
    op.drop_table("transfers")
    op.drop_table("quotes")
    op.drop_table("routes")
    op.drop_table("corridors")
    op.drop_table("assets")
