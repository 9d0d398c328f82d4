"""Catalog and progress persistence for the unlock families."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Protocol

import structlog
from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import SQLAlchemyError

from camotrack.db.models import (
    CamoTemplate,
    Optic,
    OpticReticle,
    PrestigeCamoTemplate,
    ReticleTemplate,
    UserOpticReticleProgress,
    UserWeaponCamoProgress,
    UserWeaponPrestigeProgress,
    Weapon,
    WeaponCamo,
    WeaponClass,
    WeaponPrestigeCamo,
)
from camotrack.unlocks.errors import PersistenceError
from camotrack.unlocks.rules import UnlockItem

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

# family -> (progress model, item id column)
PROGRESS_TABLES: dict[str, tuple[type, str]] = {
    "camo": (UserWeaponCamoProgress, "weapon_camo_id"),
    "prestige": (UserWeaponPrestigeProgress, "weapon_prestige_camo_id"),
    "reticle": (UserOpticReticleProgress, "optic_reticle_id"),
}

FAMILY_NOUNS: dict[str, str] = {
    "camo": "camo",
    "prestige": "prestige camo",
    "reticle": "reticle",
}


class UnlockStore(Protocol):
    """Read catalog items and read/write per-user progress for a family."""

    async def fetch_items(self, family: str, gamemode: str) -> list[UnlockItem]: ...

    async def fetch_progress(self, family: str, user_id: str) -> dict[str, bool]: ...

    async def upsert_progress(
        self,
        family: str,
        user_id: str,
        item_ids: Iterable[str],
        status: bool,
    ) -> None: ...


def build_progress_rows(
    family: str,
    user_id: str,
    item_ids: Iterable[str],
    status: bool,
    now: datetime | None = None,
) -> list[dict[str, Any]]:
    """Rows for one batch upsert. ``unlocked_at`` is cleared when unchecking."""
    _, column = PROGRESS_TABLES[family]
    now = now or datetime.now(timezone.utc)
    return [
        {
            "user_id": user_id,
            column: item_id,
            "status": status,
            "unlocked_at": now if status else None,
            "updated_at": now,
        }
        for item_id in sorted(item_ids)
    ]


def _camo_item(camo: WeaponCamo, template: CamoTemplate) -> UnlockItem:
    return UnlockItem(
        id=camo.id,
        parent_id=camo.weapon_id,
        name=template.name,
        slug=template.slug,
        kind=(template.camo_kind or "").lower() or None,
        sort_order=template.sort_order,
        unlock_count=camo.unlock_count if camo.unlock_count is not None else template.unlock_count,
        unlock_type=camo.unlock_type or template.unlock_type,
        challenge=camo.challenge or template.challenge,
        gamemode=template.gamemode,
    )


def _prestige_item(camo: WeaponPrestigeCamo, template: PrestigeCamoTemplate) -> UnlockItem:
    return UnlockItem(
        id=camo.id,
        parent_id=camo.weapon_id,
        name=camo.name_override or template.name,
        slug=template.slug,
        kind=(template.tier or "").lower() or None,
        sort_order=camo.sort_order if camo.sort_order is not None else template.sort_order,
        challenge=camo.unlock_requirement_override or template.unlock_requirement,
    )


def _reticle_item(reticle: OpticReticle, template: ReticleTemplate | None) -> UnlockItem:
    return UnlockItem(
        id=reticle.id,
        parent_id=reticle.optic_id,
        name=(template.name if template else None) or "",
        slug=(template.slug if template else None) or "",
        sort_order=template.sort_order if template else None,
        unlock_order=reticle.unlock_order,
        unlock_count=(
            reticle.unlock_count_override
            if reticle.unlock_count_override is not None
            else (template.unlock_count if template else None)
        ),
        unlock_type=reticle.unlock_type_override or (template.unlock_type if template else None),
        challenge=reticle.challenge_override or (template.base_challenge if template else None),
        gamemode=reticle.gamemode,
    )


class SqlUnlockStore:
    """UnlockStore backed by the hosted Postgres database.

    Concurrent cascades share the request session, so each batch holds
    ``_write_lock`` from execute through commit or rollback.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self._write_lock = asyncio.Lock()

    async def fetch_items(self, family: str, gamemode: str) -> list[UnlockItem]:
        """Catalog items of ``family`` for ``gamemode``.

        Prestige camos are not partitioned by game mode; every mode sees the
        same chain.
        """
        if family == "camo":
            result = await self.db.execute(
                select(WeaponCamo, CamoTemplate)
                .join(CamoTemplate, WeaponCamo.camo_template_id == CamoTemplate.id)
                .where(CamoTemplate.gamemode == gamemode)
                .order_by(WeaponCamo.created_at)
            )
            return [_camo_item(row.WeaponCamo, row.CamoTemplate) for row in result]

        if family == "prestige":
            result = await self.db.execute(
                select(WeaponPrestigeCamo, PrestigeCamoTemplate)
                .join(
                    PrestigeCamoTemplate,
                    WeaponPrestigeCamo.prestige_camo_template_id == PrestigeCamoTemplate.id,
                )
                .order_by(WeaponPrestigeCamo.sort_order)
            )
            return [_prestige_item(row.WeaponPrestigeCamo, row.PrestigeCamoTemplate) for row in result]

        if family == "reticle":
            result = await self.db.execute(
                select(OpticReticle, ReticleTemplate)
                .outerjoin(ReticleTemplate, OpticReticle.reticle_template_id == ReticleTemplate.id)
                .where(OpticReticle.gamemode == gamemode)
                .order_by(OpticReticle.unlock_order, OpticReticle.created_at)
            )
            return [_reticle_item(row.OpticReticle, row.ReticleTemplate) for row in result]

        msg = f"Unknown unlock family: {family}"
        raise ValueError(msg)

    async def fetch_progress(self, family: str, user_id: str) -> dict[str, bool]:
        """Map of item id -> status for every progress row of the user."""
        model, column = PROGRESS_TABLES[family]
        item_col = getattr(model, column)
        result = await self.db.execute(
            select(item_col, model.status).where(model.user_id == user_id)
        )
        return {str(item_id): bool(status) for item_id, status in result}

    async def upsert_progress(
        self,
        family: str,
        user_id: str,
        item_ids: Iterable[str],
        status: bool,
    ) -> None:
        """Write one batch of progress rows in a single statement.

        Raises:
            PersistenceError: If the upsert or commit fails. The session is
                rolled back first, before any other batch may write.
        """
        rows = build_progress_rows(family, user_id, item_ids, status)
        if not rows:
            return

        model, column = PROGRESS_TABLES[family]
        stmt = pg_insert(model).values(rows)
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", column],
            set_={
                "status": stmt.excluded.status,
                "unlocked_at": stmt.excluded.unlocked_at,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        async with self._write_lock:
            try:
                await self.db.execute(stmt)
                await self.db.commit()
            except SQLAlchemyError as e:
                await self.db.rollback()
                logger.warning("progress_upsert_failed", family=family, user_id=user_id, error=str(e))
                msg = f"Failed to update {FAMILY_NOUNS[family]} status."
                raise PersistenceError(msg) from e


# ---------------------------------------------------------------------------
# Parents (weapons, optics)
# ---------------------------------------------------------------------------


async def list_weapon_classes(db: AsyncSession) -> list[WeaponClass]:
    """All weapon classes ordered by sort order, then label."""
    result = await db.execute(
        select(WeaponClass).order_by(WeaponClass.sort_order.asc().nulls_last(), WeaponClass.label)
    )
    return list(result.scalars().all())


async def list_weapons(db: AsyncSession) -> list[Weapon]:
    """All weapons ordered by display name."""
    result = await db.execute(select(Weapon).order_by(Weapon.display_name))
    return list(result.scalars().all())


async def list_optics(db: AsyncSession) -> list[Optic]:
    """All optics ordered by name."""
    result = await db.execute(select(Optic).order_by(Optic.name))
    return list(result.scalars().all())


async def list_optic_ids_with_reticles(db: AsyncSession, gamemode: str) -> set[str]:
    """Ids of optics that have at least one reticle in ``gamemode``."""
    result = await db.execute(
        select(OpticReticle.optic_id).where(OpticReticle.gamemode == gamemode).distinct()
    )
    return {str(optic_id) for optic_id in result.scalars()}
