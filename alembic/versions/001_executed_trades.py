"""Add executed_trades table for plan comparison.

Revision ID: 001_executed_trades
Revises:
Create Date: 2025-09-01 00:00:00.000000
"""
from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001_executed_trades"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "executed_trades",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),

        # Identity of an execution
        sa.Column("date", sa.String(10), nullable=False),
        sa.Column("symbol", sa.String(128), nullable=False),
        sa.Column("entry", sa.Float, nullable=False),
        sa.Column("trade_type", sa.String(4), nullable=False),
        sa.Column("quantity", sa.Integer, nullable=False),

        # Outcome, when the export carries it
        sa.Column("exit", sa.Float, nullable=True),
        sa.Column("pnl", sa.Float, nullable=True),

        # Instrument metadata
        sa.Column("expiry", sa.String(32), nullable=True),
        sa.Column("option_type", sa.String(8), nullable=True),
        sa.Column("strike_price", sa.String(32), nullable=True),
        sa.Column("underlying_symbol", sa.String(64), nullable=True),

        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint(
            "date", "symbol", "entry", "trade_type", "quantity",
            name="uq_executed_trades_key",
        ),
    )
    op.create_index("ix_executed_trades_date", "executed_trades", ["date"])


def downgrade() -> None:
    op.drop_index("ix_executed_trades_date", table_name="executed_trades")
    op.drop_table("executed_trades")
