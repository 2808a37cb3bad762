"""
Initial schema: energy_readings and the single-row sessions table.

Creates energy_readings with a UNIQUE (gateway_id, ts) constraint used as
the conflict target for skip/replace inserts, a secondary index on ts for
range scans, and the sessions table constrained to a single row (id = 1).

Revision ID: 001
Revises: None
Create Date: 2026-10-03

CHANGELOG:
- 2026-10-04: Add sessions table (STORY-004)
- 2026-10-03: Initial creation (STORY-005)

TODO:
- None
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

from geostar.models import METRIC_FIELDS

# Revision identifiers used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create energy_readings, its ts index, and sessions."""
    op.create_table(
        "energy_readings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("gateway_id", sa.Text(), nullable=False),
        sa.Column("ts", sa.BigInteger(), nullable=False),
        *[
            sa.Column(name, sa.Double(), nullable=False, server_default=sa.text("0"))
            for name in METRIC_FIELDS
        ],
        sa.UniqueConstraint("gateway_id", "ts", name="uq_energy_readings_gateway_ts"),
    )
    op.create_index("idx_energy_ts", "energy_readings", ["ts"])

    op.create_table(
        "sessions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("session_id", sa.Text(), nullable=False),
        sa.Column("user_key", sa.Text(), nullable=False),
        sa.Column("created_at", sa.BigInteger(), nullable=False),
        sa.CheckConstraint("id = 1", name="ck_sessions_single_row"),
    )


def downgrade() -> None:
    """Drop sessions and energy_readings."""
    op.drop_table("sessions")
    op.drop_index("idx_energy_ts", table_name="energy_readings")
    op.drop_table("energy_readings")
