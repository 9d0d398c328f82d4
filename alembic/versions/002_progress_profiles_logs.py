"""Per-user progress, profiles and the audit log.

Progress tables are keyed by (user_id, item id) so the API can upsert
a whole cascade in one statement.

Revision ID: 002_progress_profiles_logs
Revises: 001_catalog_tables
Create Date: 2026-09-28
"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

revision: str = "002_progress_profiles_logs"
down_revision: str | None = "001_catalog_tables"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

_UUID = postgresql.UUID(as_uuid=False)

# table -> (item column, referenced catalog table)
_PROGRESS = {
    "user_weapon_camo_progress": ("weapon_camo_id", "weapon_camos"),
    "user_weapon_prestige_progress": ("weapon_prestige_camo_id", "weapon_prestige_camos"),
    "user_optic_reticle_progress": ("optic_reticle_id", "optic_reticles"),
}


def upgrade() -> None:
    """Create progress, profile and log tables."""
    for table, (column, target) in _PROGRESS.items():
        op.create_table(
            table,
            sa.Column("user_id", _UUID, primary_key=True),
            sa.Column(column, _UUID, sa.ForeignKey(f"{target}.id", ondelete="CASCADE"), primary_key=True),
            sa.Column("status", sa.Boolean(), server_default="false", nullable=False),
            sa.Column("unlocked_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        )

    op.create_table(
        "profiles",
        sa.Column("id", _UUID, primary_key=True),
        sa.Column("username", sa.String(64), nullable=True, unique=True),
        sa.Column("display_name", sa.String(64), nullable=True),
        sa.Column("email", sa.String(320), nullable=True),
        sa.Column("account_level", sa.Integer(), nullable=True),
        sa.Column("prestige", sa.Integer(), nullable=True),
        sa.Column("activision_id", sa.String(64), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.execute("CREATE UNIQUE INDEX IF NOT EXISTS ix_profiles_username_lower ON profiles (lower(username))")
    op.execute(
        "ALTER TABLE profiles ADD CONSTRAINT ck_profiles_prestige "
        "CHECK (prestige IS NULL OR prestige BETWEEN 0 AND 11)"
    )

    op.create_table(
        "logs",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("user_id", _UUID, nullable=True),
        sa.Column("level", sa.String(8), server_default="info", nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("context", postgresql.JSONB(), server_default="{}", nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_logs_user_created", "logs", ["user_id", "created_at"])


def downgrade() -> None:
    """Drop progress, profile and log tables."""
    op.drop_table("logs")
    op.drop_table("profiles")
    for table in _PROGRESS:
        op.drop_table(table)
