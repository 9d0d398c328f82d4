"""Read-side summaries: mastery status, completion counts, grouping of parents."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any

from camotrack.unlocks.catalog import Catalog
from camotrack.unlocks.rules import (
    MASTERY_BADGES,
    MASTERY_TIERS,
    MISSING_ORDER,
    camo_kind,
    classify_mastery_tier,
    mastery_rank,
)

_SEASON_RE = re.compile(r"season\s*(\d+)")

RANGE_SECTIONS: tuple[tuple[str, str], ...] = (
    ("short", "Short Range"),
    ("medium", "Medium Range"),
    ("long", "Long Range"),
)


def mastery_status_by_parent(
    catalog: Catalog,
    progress: Mapping[str, bool],
    keywords: Mapping[str, Sequence[str]] | None = None,
) -> dict[str, str | None]:
    """Highest checked mastery tier per weapon (None when no tier is checked)."""
    status: dict[str, str | None] = {}
    for parent_id, items in catalog.by_parent.items():
        best: str | None = None
        for item in items:
            if camo_kind(item) != "mastery" or not progress.get(item.id):
                continue
            tier = classify_mastery_tier(item, keywords)
            if tier is not None and mastery_rank(tier) > mastery_rank(best):
                best = tier
        status[parent_id] = best
    return status


def mastery_progress(weapon_ids: Sequence[str], status: Mapping[str, str | None]) -> dict[str, int]:
    """Count weapons at or above each tier.

    A doomsteel weapon counts toward bloodstone and gold as well.
    ``total_weapons`` is never 0 so it can be used as a divisor.
    """
    counts = {tier: 0 for tier in MASTERY_TIERS}
    for weapon_id in weapon_ids:
        rank = mastery_rank(status.get(weapon_id))
        for tier in MASTERY_TIERS[: rank + 1]:
            counts[tier] += 1
    counts["total_weapons"] = len(weapon_ids) or 1
    return counts


def mastery_badges(gamemode: str | None) -> dict[str, dict[str, str]]:
    return MASTERY_BADGES.get(gamemode or "default", MASTERY_BADGES["default"])


def parent_completion(catalog: Catalog, progress: Mapping[str, bool]) -> dict[str, dict[str, Any]]:
    """``{total, checked, complete}`` per weapon/optic."""
    completion: dict[str, dict[str, Any]] = {}
    for parent_id, items in catalog.by_parent.items():
        total = len(items)
        checked = sum(1 for item in items if progress.get(item.id))
        completion[parent_id] = {"total": total, "checked": checked, "complete": total > 0 and checked == total}
    return completion


def season_order_value(season: str | None) -> int:
    """``launch`` -> 0, ``Season N`` -> N, anything else last."""
    if not season:
        return MISSING_ORDER
    lower = season.lower().strip()
    if lower == "launch":
        return 0
    match = _SEASON_RE.search(lower)
    if match:
        return int(match.group(1)) or MISSING_ORDER
    return MISSING_ORDER


def group_by_season(weapons: Sequence[Any]) -> list[dict[str, Any]]:
    """Group weapons by release season in chronological order.

    Weapons need ``release_season`` and ``display_name`` attributes.
    """
    ordered = sorted(
        weapons,
        key=lambda w: (
            season_order_value(w.release_season),
            (w.release_season or "").casefold(),
            w.display_name.casefold(),
        ),
    )
    groups: list[dict[str, Any]] = []
    index: dict[str, dict[str, Any]] = {}
    for weapon in ordered:
        key = weapon.release_season or "Unreleased"
        if key not in index:
            index[key] = {"season": key, "items": []}
            groups.append(index[key])
        index[key]["items"].append(weapon)
    return groups


def group_by_range(optics: Sequence[Any], with_items: set[str] | None = None) -> list[dict[str, Any]]:
    """Bucket optics into short/medium/long; unknown ranges go to medium.

    Optics within a range are listed by slug, descending.

    When ``with_items`` is given only optics whose id is in it are kept.
    """
    sections = [{"key": key, "label": label, "items": []} for key, label in RANGE_SECTIONS]
    bucket = {s["key"]: s["items"] for s in sections}
    for optic in optics:
        if with_items is not None and optic.id not in with_items:
            continue
        bucket.get(optic.range_category or "medium", bucket["medium"]).append(optic)
    for section in sections:
        section["items"].sort(key=lambda o: o.slug, reverse=True)
    return sections
