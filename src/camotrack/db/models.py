"""ORM models for the catalog, per-user progress, profiles and audit logs.

Catalog tables are seeded by administrators and are read-only to the API.
Progress tables hold one row per (user, unlock item); rows are upserted and
never deleted.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from camotrack.db.base import Base


def _uuid() -> str:
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# Weapons
# ---------------------------------------------------------------------------


class WeaponClass(Base):
    """Category grouping weapons (assault rifles, SMGs, ...)."""

    __tablename__ = "weapon_classes"

    id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True, default=_uuid)
    slug: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    label: Mapped[str] = mapped_column(String(128), nullable=False)
    sort_order: Mapped[int | None] = mapped_column(Integer, nullable=True)

    weapons: Mapped[list[Weapon]] = relationship("Weapon", back_populates="weapon_class")


class Weapon(Base):
    """Maps to the 'weapons' table."""

    __tablename__ = "weapons"

    id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True, default=_uuid)
    class_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), ForeignKey("weapon_classes.id", ondelete="CASCADE"), nullable=False
    )
    display_name: Mapped[str] = mapped_column(String(128), nullable=False)
    slug: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    release_season: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    weapon_class: Mapped[WeaponClass] = relationship("WeaponClass", back_populates="weapons")


# ---------------------------------------------------------------------------
# Camos
# ---------------------------------------------------------------------------


class CamoTemplate(Base):
    """Reusable camo definition; kind is one of base / special / mastery."""

    __tablename__ = "camo_templates"

    id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    slug: Mapped[str] = mapped_column(String(128), nullable=False)
    camo_kind: Mapped[str | None] = mapped_column(String(16), nullable=True)
    unlock_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    unlock_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    challenge: Mapped[str | None] = mapped_column(Text, nullable=True)
    sort_order: Mapped[int | None] = mapped_column(Integer, nullable=True)
    gamemode: Mapped[str | None] = mapped_column(String(4), nullable=True)


class WeaponCamo(Base):
    """A camo template applied to one weapon, with optional overrides."""

    __tablename__ = "weapon_camos"

    id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True, default=_uuid)
    weapon_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), ForeignKey("weapons.id", ondelete="CASCADE"), nullable=False
    )
    camo_template_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), ForeignKey("camo_templates.id", ondelete="CASCADE"), nullable=False
    )
    challenge: Mapped[str | None] = mapped_column(Text, nullable=True)
    unlock_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    unlock_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class PrestigeCamoTemplate(Base):
    """Prestige-tier camo definition (prestige1 ... legend250)."""

    __tablename__ = "prestige_camo_templates"

    id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True, default=_uuid)
    slug: Mapped[str] = mapped_column(String(128), nullable=False)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    tier: Mapped[str] = mapped_column(String(32), nullable=False)
    unlock_requirement: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_global: Mapped[bool] = mapped_column(Boolean, default=False, server_default="false")
    sort_order: Mapped[int | None] = mapped_column(Integer, nullable=True)


class WeaponPrestigeCamo(Base):
    """A prestige camo template applied to one weapon."""

    __tablename__ = "weapon_prestige_camos"

    id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True, default=_uuid)
    weapon_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), ForeignKey("weapons.id", ondelete="CASCADE"), nullable=False
    )
    prestige_camo_template_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), ForeignKey("prestige_camo_templates.id", ondelete="CASCADE"), nullable=False
    )
    name_override: Mapped[str | None] = mapped_column(String(128), nullable=True)
    unlock_requirement_override: Mapped[str | None] = mapped_column(Text, nullable=True)
    sort_order: Mapped[int | None] = mapped_column(Integer, nullable=True)


# ---------------------------------------------------------------------------
# Optics and reticles
# ---------------------------------------------------------------------------


class Optic(Base):
    """Sight attachment; range_category is short / medium / long."""

    __tablename__ = "optics"

    id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    slug: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    range_category: Mapped[str | None] = mapped_column(String(8), nullable=True)


class ReticleTemplate(Base):
    """Maps to the 'reticle_templates' table."""

    __tablename__ = "reticle_templates"

    id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True, default=_uuid)
    name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    slug: Mapped[str | None] = mapped_column(String(128), nullable=True)
    gamemode: Mapped[str | None] = mapped_column(String(4), nullable=True)
    flag: Mapped[str | None] = mapped_column(String(32), nullable=True)
    base_challenge: Mapped[str | None] = mapped_column(Text, nullable=True)
    unlock_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    unlock_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    sort_order: Mapped[int | None] = mapped_column(Integer, nullable=True)


class OpticReticle(Base):
    """A reticle template available on one optic in one game mode."""

    __tablename__ = "optic_reticles"

    id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True, default=_uuid)
    optic_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), ForeignKey("optics.id", ondelete="CASCADE"), nullable=False
    )
    reticle_template_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), ForeignKey("reticle_templates.id", ondelete="CASCADE"), nullable=False
    )
    gamemode: Mapped[str] = mapped_column(String(4), nullable=False)
    unlock_order: Mapped[int | None] = mapped_column(Integer, nullable=True)
    challenge_override: Mapped[str | None] = mapped_column(Text, nullable=True)
    unlock_type_override: Mapped[str | None] = mapped_column(String(64), nullable=True)
    unlock_count_override: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


# ---------------------------------------------------------------------------
# Progress
# ---------------------------------------------------------------------------


class UserWeaponCamoProgress(Base):
    """Camo completion per (user, weapon camo)."""

    __tablename__ = "user_weapon_camo_progress"

    user_id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True)
    weapon_camo_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), ForeignKey("weapon_camos.id", ondelete="CASCADE"), primary_key=True
    )
    status: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    unlocked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class UserWeaponPrestigeProgress(Base):
    """Prestige camo completion per (user, weapon prestige camo)."""

    __tablename__ = "user_weapon_prestige_progress"

    user_id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True)
    weapon_prestige_camo_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), ForeignKey("weapon_prestige_camos.id", ondelete="CASCADE"), primary_key=True
    )
    status: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    unlocked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class UserOpticReticleProgress(Base):
    """Reticle completion per (user, optic reticle)."""

    __tablename__ = "user_optic_reticle_progress"

    user_id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True)
    optic_reticle_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), ForeignKey("optic_reticles.id", ondelete="CASCADE"), primary_key=True
    )
    status: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    unlocked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


# ---------------------------------------------------------------------------
# Profiles and logs
# ---------------------------------------------------------------------------


class Profile(Base):
    """Per-user record keyed by the auth provider's user id.

    ``prestige`` is 0-10, or 11 for Master Prestige.
    ``activision_id`` is ``name#1234567`` or NULL.
    """

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True)
    username: Mapped[str | None] = mapped_column(String(64), nullable=True, unique=True)
    display_name: Mapped[str | None] = mapped_column(String(64), nullable=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    account_level: Mapped[int | None] = mapped_column(Integer, nullable=True)
    prestige: Mapped[int | None] = mapped_column(Integer, nullable=True)
    activision_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class LogEntry(Base):
    """Audit log row written by the fire-and-forget log sink."""

    __tablename__ = "logs"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    user_id: Mapped[str | None] = mapped_column(UUID(as_uuid=False), nullable=True)
    level: Mapped[str] = mapped_column(String(8), nullable=False, server_default="info")
    message: Mapped[str] = mapped_column(Text, nullable=False)
    context: Mapped[dict[str, Any]] = mapped_column(JSONB, default=dict, server_default="{}")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
