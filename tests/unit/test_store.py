"""SQL store row mapping and batch upsert handling, with a mocked session."""

import asyncio
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError

from camotrack.db.models import (
    CamoTemplate,
    OpticReticle,
    PrestigeCamoTemplate,
    ReticleTemplate,
    WeaponCamo,
    WeaponPrestigeCamo,
)
from camotrack.unlocks.errors import PersistenceError
from camotrack.unlocks.store import SqlUnlockStore, build_progress_rows
from tests.factories import USER_ID

NOW = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)


class TestProgressRows:
    def test_checked_rows(self):
        rows = build_progress_rows("camo", USER_ID, ["b2", "b1"], True, now=NOW)
        assert rows == [
            {"user_id": USER_ID, "weapon_camo_id": "b1", "status": True, "unlocked_at": NOW, "updated_at": NOW},
            {"user_id": USER_ID, "weapon_camo_id": "b2", "status": True, "unlocked_at": NOW, "updated_at": NOW},
        ]

    def test_unchecking_clears_unlock_time(self):
        (row,) = build_progress_rows("reticle", USER_ID, ["r1"], False, now=NOW)
        assert row["optic_reticle_id"] == "r1"
        assert row["unlocked_at"] is None
        assert row["updated_at"] == NOW

    def test_prestige_column(self):
        (row,) = build_progress_rows("prestige", USER_ID, ["p1"], True, now=NOW)
        assert row["weapon_prestige_camo_id"] == "p1"


def _db(rows=None) -> AsyncMock:
    db = AsyncMock()
    db.execute = AsyncMock(return_value=rows or [])
    return db


class TestFetchItems:
    @pytest.mark.asyncio
    async def test_camo_overrides_template(self):
        template = CamoTemplate(
            id="t1", name="Tempest", slug="tempest", camo_kind="Mastery", unlock_count=5, sort_order=22, gamemode="mp"
        )
        weapon_camo = WeaponCamo(id="wc1", weapon_id="w1", camo_template_id="t1", challenge="Get 10 kills")
        store = SqlUnlockStore(_db([SimpleNamespace(WeaponCamo=weapon_camo, CamoTemplate=template)]))

        (item,) = await store.fetch_items("camo", "mp")

        assert item.id == "wc1"
        assert item.parent_id == "w1"
        assert item.kind == "mastery"
        assert item.unlock_count == 5
        assert item.challenge == "Get 10 kills"
        assert item.gamemode == "mp"

    @pytest.mark.asyncio
    async def test_prestige_per_weapon_values_win(self):
        template = PrestigeCamoTemplate(id="t", slug="legend", name="Legend", tier="legend250", sort_order=6)
        weapon_prestige = WeaponPrestigeCamo(
            id="wp1", weapon_id="w1", prestige_camo_template_id="t", name_override="Legend (AK)", sort_order=9
        )
        store = SqlUnlockStore(_db([SimpleNamespace(WeaponPrestigeCamo=weapon_prestige, PrestigeCamoTemplate=template)]))

        (item,) = await store.fetch_items("prestige", "zm")

        assert item.name == "Legend (AK)"
        assert item.sort_order == 9
        assert item.kind == "legend250"

    @pytest.mark.asyncio
    async def test_reticle_without_template(self):
        optic_reticle = OpticReticle(id="or1", optic_id="o1", reticle_template_id="t", gamemode="mp", unlock_order=2)
        store = SqlUnlockStore(_db([SimpleNamespace(OpticReticle=optic_reticle, ReticleTemplate=None)]))

        (item,) = await store.fetch_items("reticle", "mp")

        assert item.label == "or1"
        assert item.unlock_order == 2
        assert item.sort_order is None

    @pytest.mark.asyncio
    async def test_reticle_template_fallbacks(self):
        template = ReticleTemplate(id="t", name="Dot", slug="dot", unlock_count=10, base_challenge="Base", sort_order=1)
        optic_reticle = OpticReticle(
            id="or1", optic_id="o1", reticle_template_id="t", gamemode="mp", unlock_count_override=0
        )
        store = SqlUnlockStore(_db([SimpleNamespace(OpticReticle=optic_reticle, ReticleTemplate=template)]))

        (item,) = await store.fetch_items("reticle", "mp")

        assert item.unlock_count == 0
        assert item.challenge == "Base"

    @pytest.mark.asyncio
    async def test_unknown_family(self):
        with pytest.raises(ValueError, match="Unknown unlock family"):
            await SqlUnlockStore(_db()).fetch_items("badges", "mp")


class TestUpsert:
    @pytest.mark.asyncio
    async def test_single_statement_then_commit(self):
        db = _db()
        await SqlUnlockStore(db).upsert_progress("camo", USER_ID, ["b1", "b2"], True)
        db.execute.assert_awaited_once()
        db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_empty_batch_skipped(self):
        db = _db()
        await SqlUnlockStore(db).upsert_progress("camo", USER_ID, [], True)
        db.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failure_rolls_back_and_raises(self):
        db = _db()
        db.execute.side_effect = OperationalError("INSERT", {}, Exception("connection reset"))

        with pytest.raises(PersistenceError, match="Failed to update reticle status."):
            await SqlUnlockStore(db).upsert_progress("reticle", USER_ID, ["r1"], True)

        db.rollback.assert_awaited_once()
        db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_concurrent_batches_do_not_interleave(self):
        """Each batch commits before the next one executes on the shared session."""
        calls: list[str] = []

        async def execute(stmt):
            calls.append("execute")
            await asyncio.sleep(0)

        async def commit():
            calls.append("commit")
            await asyncio.sleep(0)

        db = _db()
        db.execute.side_effect = execute
        db.commit.side_effect = commit
        store = SqlUnlockStore(db)

        await asyncio.gather(*(store.upsert_progress("camo", USER_ID, [f"b{i}"], True) for i in range(4)))

        assert calls == ["execute", "commit"] * 4

    @pytest.mark.asyncio
    async def test_failed_batch_rolls_back_before_next_executes(self):
        calls: list[str] = []

        async def execute(stmt):
            calls.append("execute")
            await asyncio.sleep(0)
            if len(calls) == 1:
                raise OperationalError("INSERT", {}, Exception("connection reset"))

        async def commit():
            calls.append("commit")

        async def rollback():
            calls.append("rollback")

        db = _db()
        db.execute.side_effect = execute
        db.commit.side_effect = commit
        db.rollback.side_effect = rollback
        store = SqlUnlockStore(db)

        results = await asyncio.gather(
            store.upsert_progress("camo", USER_ID, ["b1"], True),
            store.upsert_progress("camo", USER_ID, ["b2"], True),
            return_exceptions=True,
        )

        assert isinstance(results[0], PersistenceError)
        assert results[1] is None
        assert calls == ["execute", "rollback", "execute", "commit"]
