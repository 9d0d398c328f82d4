"""Catalog builders and an in-memory unlock store for tests."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable

from camotrack.unlocks.catalog import Catalog
from camotrack.unlocks.errors import PersistenceError
from camotrack.unlocks.rules import UnlockItem
from camotrack.unlocks.store import FAMILY_NOUNS

USER_ID = "6f1c1f5e-2a57-4d6b-9d0a-0c6f9b1f0a11"


def camo(
    item_id: str,
    kind: str,
    sort_order: int | None,
    name: str | None = None,
    parent_id: str = "w1",
    unlock_count: int | None = None,
    slug: str | None = None,
    gamemode: str = "mp",
) -> UnlockItem:
    return UnlockItem(
        id=item_id,
        parent_id=parent_id,
        name=name or item_id,
        slug=slug or item_id,
        kind=kind,
        sort_order=sort_order,
        unlock_count=unlock_count,
        gamemode=gamemode,
    )


def prestige(item_id: str, tier: str, sort_order: int | None, parent_id: str = "w1") -> UnlockItem:
    return UnlockItem(id=item_id, parent_id=parent_id, name=item_id, slug=item_id, kind=tier, sort_order=sort_order)


def reticle(
    item_id: str,
    unlock_order: int | None,
    parent_id: str = "o1",
    gamemode: str = "mp",
    sort_order: int | None = None,
) -> UnlockItem:
    return UnlockItem(
        id=item_id,
        parent_id=parent_id,
        name=item_id,
        slug=item_id,
        unlock_order=unlock_order,
        sort_order=sort_order,
        gamemode=gamemode,
    )


def weapon_camos() -> list[UnlockItem]:
    """One weapon with three base, two special and four mastery camos; a second weapon with one base camo."""
    return [
        camo("b3", "base", 3),
        camo("b1", "base", 1),
        camo("b2", "base", 2),
        camo("s1", "special", 10),
        camo("s2", "special", 11),
        camo("gold", "mastery", 20, name="Shattered Gold", slug="shattered-gold"),
        camo("arclight", "mastery", 21, name="Arclight", slug="arclight"),
        camo("tempest", "mastery", 22, name="Tempest", slug="tempest"),
        camo("mystery", "mastery", 23, name="Mystery", slug="mystery"),
        camo("c1", "base", 1, parent_id="w2"),
        camo("zb1", "base", 1, parent_id="w1", gamemode="zm"),
    ]


def prestige_chain() -> list[UnlockItem]:
    return [
        prestige("p1", "prestige1", 1),
        prestige("p2", "prestige2", 2),
        prestige("m100", "master100", 3),
        prestige("m150", "master150", 4),
        prestige("m200", "master200", 5),
        prestige("legend", "legend250", 6),
    ]


def optic_reticles() -> list[UnlockItem]:
    return [
        reticle("r2", 2),
        reticle("r1", 1),
        reticle("r3", 3),
        reticle("z1", 1, gamemode="zm"),
        reticle("q1", 1, parent_id="o2"),
    ]


class FakeUnlockStore:
    """In-memory UnlockStore recording every batch it is asked to write."""

    def __init__(
        self,
        items: dict[str, list[UnlockItem]] | None = None,
        progress: dict[str, dict[str, bool]] | None = None,
    ) -> None:
        self.items = items or {}
        self.progress = progress or {}
        self.batches: list[tuple[str, str, list[str], bool]] = []
        self.fail = False
        self.fail_ids: set[str] = set()
        self.gate: asyncio.Event | None = None

    async def fetch_items(self, family: str, gamemode: str) -> list[UnlockItem]:
        return [i for i in self.items.get(family, []) if i.gamemode in (None, gamemode)]

    async def fetch_progress(self, family: str, user_id: str) -> dict[str, bool]:
        return dict(self.progress.get(family, {}))

    async def upsert_progress(self, family: str, user_id: str, item_ids: Iterable[str], status: bool) -> None:
        ids = sorted(item_ids)
        self.batches.append((family, user_id, ids, status))
        if self.gate is not None:
            await self.gate.wait()
        if self.fail or self.fail_ids.intersection(ids):
            msg = f"Failed to update {FAMILY_NOUNS[family]} status."
            raise PersistenceError(msg)
        stored = self.progress.setdefault(family, {})
        for item_id in ids:
            stored[item_id] = status


def mp_catalog(family: str, items: list[UnlockItem]) -> Catalog:
    """Catalog of the multiplayer items, as the store would load it."""
    return Catalog.build(family, "mp", [i for i in items if i.gamemode in (None, "mp")])
