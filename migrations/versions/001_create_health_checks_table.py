"""Create health_checks table.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "health_checks",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("service_name", sa.String(100), nullable=False),
        sa.Column("status", sa.String(50), nullable=False),
        sa.Column("checked_at", sa.DateTime, server_default=sa.func.now(), nullable=False),
    )
    op.create_index("idx_health_checks_checked_at", "health_checks", ["checked_at"])


def downgrade() -> None:
    op.drop_index("idx_health_checks_checked_at", table_name="health_checks")
    op.drop_table("health_checks")
