"""Transfer request hash and payout claim columns.

Revision ID: 002_request_hash_payout_claim
Revises: 001_initial
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "002_request_hash_payout_claim"
down_revision: Union[str, None] = "001_initial"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column("transfers", sa.Column("request_hash", sa.String(64), nullable=True))
    op.add_column(
        "transfers",
        sa.Column("payout_started_at", sa.DateTime(timezone=True), nullable=True),
    )


def downgrade() -> None:
    op.drop_column("transfers", "payout_started_at")
    op.drop_column("transfers", "request_hash")
