"""Per-family ordering and classification rules for the unlock cascade.

Three unlock families share one engine:

  camo      weapon camos, classified by kind (base / special / mastery)
  prestige  weapon prestige camos, classified by tier (prestige1 ... legend250)
  reticle   optic reticles, unlocked strictly in sequence per optic and mode

Each family has exactly one ordering, used both for display and for cascade
prefixes:

  camo      (sort_order, unlock_count, name)
  prestige  (sort_order, name)
  reticle   (unlock_order, sort_order, name)

Missing sort values rank last (``MISSING_ORDER``); a missing unlock count
ranks first.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Literal

Family = Literal["camo", "prestige", "reticle"]
GameMode = Literal["mp", "zm", "wz", "eg"]

FAMILIES: tuple[str, ...] = ("camo", "prestige", "reticle")
GAMEMODES: dict[str, str] = {
    "mp": "Multiplayer",
    "zm": "Zombies",
    "wz": "Warzone",
    "eg": "Endgame",
}

MISSING_ORDER = 9999

CAMO_KINDS: tuple[str, ...] = ("base", "special", "mastery")

MASTERY_TIERS: tuple[str, ...] = ("gold", "bloodstone", "doomsteel")

DEFAULT_MASTERY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "gold": ("gold", "golden", "dragon", "shattered"),
    "bloodstone": ("bloodstone", "arclight"),
    "doomsteel": ("doomsteel", "tempest"),
}

PRESTIGE_TIERS: tuple[str, ...] = (
    "prestige1",
    "prestige2",
    "master100",
    "master150",
    "master200",
    "legend250",
)

PRESTIGE_TIER_LABELS: dict[str, str] = {
    "prestige1": "Prestige 1",
    "prestige2": "Prestige 2",
    "master100": "Prestige Master Levels",
    "master150": "Prestige Master Levels",
    "master200": "Prestige Master Levels",
    "legend250": "Prestige Legend",
}

# Badge label per game mode for each mastery tier.
MASTERY_BADGES: dict[str, dict[str, dict[str, str]]] = {
    "mp": {
        "gold": {"label": "Shattered Gold", "color": "#D3AF42"},
        "bloodstone": {"label": "Arclight", "color": "#C2C2C2"},
        "doomsteel": {"label": "Tempest", "color": "#3271B5"},
    },
    "zm": {
        "gold": {"label": "Golden Dragon", "color": "#C7922F"},
        "bloodstone": {"label": "Bloodstone", "color": "#C20047"},
        "doomsteel": {"label": "Doomsteel", "color": "#32CB9D"},
    },
    "wz": {
        "gold": {"label": "Shattered Gold", "color": "#D3AF42"},
        "bloodstone": {"label": "Arclight", "color": "#C2C2C2"},
        "doomsteel": {"label": "Tempest", "color": "#3271B5"},
    },
    "eg": {
        "gold": {"label": "Shattered Gold", "color": "#D3AF42"},
        "bloodstone": {"label": "Arclight", "color": "#C2C2C2"},
        "doomsteel": {"label": "Tempest", "color": "#3271B5"},
    },
    "default": {
        "gold": {"label": "Gold", "color": "#D3AF42"},
        "bloodstone": {"label": "Bloodstone", "color": "#C20047"},
        "doomsteel": {"label": "Doomsteel", "color": "#3271B5"},
    },
}


@dataclass(frozen=True)
class UnlockItem:
    """One checkable unlock (a weapon camo, weapon prestige camo or optic reticle).

    ``kind`` is the camo kind for camos and the tier for prestige camos,
    lower-cased. Template values are already merged with per-parent overrides.
    """

    id: str
    parent_id: str
    name: str
    slug: str = ""
    kind: str | None = None
    sort_order: int | None = None
    unlock_count: int | None = None
    unlock_order: int | None = None
    unlock_type: str | None = None
    challenge: str | None = None
    gamemode: str | None = None

    @property
    def label(self) -> str:
        return self.name or self.slug or self.id


def _order(value: int | None) -> int:
    return MISSING_ORDER if value is None else value


def camo_sort_key(item: UnlockItem) -> tuple[int, int, str]:
    return (_order(item.sort_order), item.unlock_count or 0, item.label.casefold())


def prestige_sort_key(item: UnlockItem) -> tuple[int, str]:
    return (_order(item.sort_order), item.label.casefold())


def reticle_sort_key(item: UnlockItem) -> tuple[int, int, str]:
    return (_order(item.unlock_order), _order(item.sort_order), item.label.casefold())


SORT_KEYS: dict[str, Callable[[UnlockItem], tuple]] = {
    "camo": camo_sort_key,
    "prestige": prestige_sort_key,
    "reticle": reticle_sort_key,
}


def sort_items(family: str, items: Sequence[UnlockItem]) -> list[UnlockItem]:
    """Return ``items`` in the family's canonical order."""
    return sorted(items, key=SORT_KEYS[family])


def camo_kind(item: UnlockItem) -> str:
    return (item.kind or "").lower()


def classify_mastery_tier(
    item: UnlockItem,
    keywords: Mapping[str, Sequence[str]] | None = None,
) -> str | None:
    """Derive the mastery tier of a camo from its slug and name.

    Only mastery-kind camos have a tier. Higher tiers are matched first, so a
    name mentioning both "gold" and "tempest" is doomsteel. A mastery camo that
    matches no keyword has no tier and is left out of mastery cascades.
    """
    if camo_kind(item) != "mastery":
        return None
    table = keywords if keywords is not None else DEFAULT_MASTERY_KEYWORDS
    text = f"{item.slug or ''} {item.name or ''}".lower()
    for tier in reversed(MASTERY_TIERS):
        if any(k.lower() in text for k in table.get(tier, ())):
            return tier
    return None


def mastery_rank(tier: str | None) -> int:
    """0-based rank of a mastery tier, -1 for no tier."""
    if tier is None:
        return -1
    return MASTERY_TIERS.index(tier)


def is_legend_tier(item: UnlockItem) -> bool:
    return "legend" in (item.kind or "").lower()
