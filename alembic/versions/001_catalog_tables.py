"""Catalog tables: weapons, camos, prestige camos, optics and reticles.

Revision ID: 001_catalog_tables
Revises:
Create Date: 2026-09-28
"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

revision: str = "001_catalog_tables"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

_UUID = postgresql.UUID(as_uuid=False)


def _id() -> sa.Column:
    return sa.Column("id", _UUID, primary_key=True, server_default=sa.text("gen_random_uuid()"))


def _created_at() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)


def upgrade() -> None:
    """Create the admin-seeded catalog."""
    # --- Weapons ---
    op.create_table(
        "weapon_classes",
        _id(),
        sa.Column("slug", sa.String(64), nullable=False, unique=True),
        sa.Column("label", sa.String(128), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=True),
    )
    op.create_table(
        "weapons",
        _id(),
        sa.Column("class_id", _UUID, sa.ForeignKey("weapon_classes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("display_name", sa.String(128), nullable=False),
        sa.Column("slug", sa.String(128), nullable=False, unique=True),
        sa.Column("release_season", sa.String(64), nullable=True),
        _created_at(),
    )
    op.create_index("ix_weapons_class_id", "weapons", ["class_id"])

    # --- Camos ---
    op.create_table(
        "camo_templates",
        _id(),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("slug", sa.String(128), nullable=False),
        sa.Column("camo_kind", sa.String(16), nullable=True),
        sa.Column("unlock_count", sa.Integer(), nullable=True),
        sa.Column("unlock_type", sa.String(64), nullable=True),
        sa.Column("challenge", sa.Text(), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=True),
        sa.Column("gamemode", sa.String(4), nullable=True),
    )
    op.execute(
        "ALTER TABLE camo_templates ADD CONSTRAINT ck_camo_templates_kind "
        "CHECK (camo_kind IS NULL OR lower(camo_kind) IN ('base', 'special', 'mastery'))"
    )
    op.create_index("ix_camo_templates_gamemode", "camo_templates", ["gamemode"])
    op.create_table(
        "weapon_camos",
        _id(),
        sa.Column("weapon_id", _UUID, sa.ForeignKey("weapons.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "camo_template_id", _UUID, sa.ForeignKey("camo_templates.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("challenge", sa.Text(), nullable=True),
        sa.Column("unlock_count", sa.Integer(), nullable=True),
        sa.Column("unlock_type", sa.String(64), nullable=True),
        _created_at(),
    )
    op.create_index("ix_weapon_camos_weapon_id", "weapon_camos", ["weapon_id"])

    # --- Prestige camos ---
    op.create_table(
        "prestige_camo_templates",
        _id(),
        sa.Column("slug", sa.String(128), nullable=False),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("tier", sa.String(32), nullable=False),
        sa.Column("unlock_requirement", sa.Text(), nullable=True),
        sa.Column("is_global", sa.Boolean(), server_default="false", nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=True),
    )
    op.create_table(
        "weapon_prestige_camos",
        _id(),
        sa.Column("weapon_id", _UUID, sa.ForeignKey("weapons.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "prestige_camo_template_id",
            _UUID,
            sa.ForeignKey("prestige_camo_templates.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name_override", sa.String(128), nullable=True),
        sa.Column("unlock_requirement_override", sa.Text(), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=True),
    )
    op.create_index("ix_weapon_prestige_camos_weapon_id", "weapon_prestige_camos", ["weapon_id"])

    # --- Optics ---
    op.create_table(
        "optics",
        _id(),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("slug", sa.String(128), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("range_category", sa.String(8), nullable=True),
    )
    op.create_table(
        "reticle_templates",
        _id(),
        sa.Column("name", sa.String(128), nullable=True),
        sa.Column("slug", sa.String(128), nullable=True),
        sa.Column("gamemode", sa.String(4), nullable=True),
        sa.Column("flag", sa.String(32), nullable=True),
        sa.Column("base_challenge", sa.Text(), nullable=True),
        sa.Column("unlock_type", sa.String(64), nullable=True),
        sa.Column("unlock_count", sa.Integer(), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=True),
    )
    op.create_table(
        "optic_reticles",
        _id(),
        sa.Column("optic_id", _UUID, sa.ForeignKey("optics.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "reticle_template_id", _UUID, sa.ForeignKey("reticle_templates.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("gamemode", sa.String(4), nullable=False),
        sa.Column("unlock_order", sa.Integer(), nullable=True),
        sa.Column("challenge_override", sa.Text(), nullable=True),
        sa.Column("unlock_type_override", sa.String(64), nullable=True),
        sa.Column("unlock_count_override", sa.Integer(), nullable=True),
        _created_at(),
    )
    op.create_index("ix_optic_reticles_optic_gamemode", "optic_reticles", ["optic_id", "gamemode"])


def downgrade() -> None:
    """Drop the catalog."""
    for table in (
        "optic_reticles",
        "reticle_templates",
        "optics",
        "weapon_prestige_camos",
        "prestige_camo_templates",
        "weapon_camos",
        "camo_templates",
        "weapons",
        "weapon_classes",
    ):
        op.drop_table(table)
