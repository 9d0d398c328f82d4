"""Dependency resolver: which items change together when one item is toggled.

Checking an item also checks its prerequisites; unchecking only ever touches
the target. Rules per family:

  camo/base      the target and every base camo ordered before it
  camo/special   the target and every base camo
  camo/mastery   the target, every base and special camo, and every mastery
                 camo whose tier is at or below the target's tier
                 (gold < bloodstone < doomsteel)
  prestige       the target and every prestige camo ordered before it;
                 a legend tier takes the whole chain
  reticle        the target and every reticle ordered before it on the same
                 optic and game mode
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from camotrack.unlocks.catalog import Catalog
from camotrack.unlocks.errors import StaleReferenceError
from camotrack.unlocks.rules import (
    UnlockItem,
    camo_kind,
    classify_mastery_tier,
    is_legend_tier,
    mastery_rank,
)

logger = logging.getLogger(__name__)


def _prefix_through(items: Sequence[UnlockItem], target_id: str) -> list[UnlockItem]:
    for idx, item in enumerate(items):
        if item.id == target_id:
            return list(items[: idx + 1])
    return []


def _camo_cascade(
    target: UnlockItem,
    siblings: list[UnlockItem],
    keywords: Mapping[str, Sequence[str]] | None,
) -> set[str]:
    kind = camo_kind(target)
    base = [c for c in siblings if camo_kind(c) == "base"]

    if kind == "base":
        return {c.id for c in _prefix_through(base, target.id)}

    if kind == "special":
        return {c.id for c in base}

    if kind == "mastery":
        special = [c for c in siblings if camo_kind(c) == "special"]
        affected = {c.id for c in base} | {c.id for c in special}
        tier = classify_mastery_tier(target, keywords)
        if tier is None:
            logger.warning("Mastery camo %s matches no tier keyword", target.slug or target.id)
        else:
            rank = mastery_rank(tier)
            for camo in siblings:
                other = classify_mastery_tier(camo, keywords)
                if other is not None and mastery_rank(other) <= rank:
                    affected.add(camo.id)
        return affected

    return set()


def _prestige_cascade(target: UnlockItem, siblings: list[UnlockItem]) -> set[str]:
    if is_legend_tier(target):
        return {c.id for c in siblings}
    return {c.id for c in _prefix_through(siblings, target.id)}


def _reticle_cascade(target: UnlockItem, siblings: list[UnlockItem]) -> set[str]:
    same_mode = [r for r in siblings if target.gamemode is None or r.gamemode in (None, target.gamemode)]
    return {r.id for r in _prefix_through(same_mode, target.id)}


def resolve_cascade(
    target_id: str,
    checked: bool,
    catalog: Catalog,
    keywords: Mapping[str, Sequence[str]] | None = None,
) -> set[str]:
    """Compute the ids that must take the ``checked`` state along with ``target_id``.

    The result always contains the target. Siblings missing from the catalog's
    id index are skipped.

    Raises:
        StaleReferenceError: If ``target_id`` is not in the catalog.
    """
    target = catalog.get(target_id)
    if target is None:
        raise StaleReferenceError(target_id)

    if not checked:
        return {target_id}

    siblings = catalog.siblings(target)
    if catalog.family == "camo":
        affected = _camo_cascade(target, siblings, keywords)
    elif catalog.family == "prestige":
        affected = _prestige_cascade(target, siblings)
    elif catalog.family == "reticle":
        affected = _reticle_cascade(target, siblings)
    else:
        msg = f"Unknown unlock family: {catalog.family}"
        raise ValueError(msg)

    affected.add(target_id)
    return affected


def pending_writes(affected: set[str], checked: bool, progress: Mapping[str, bool]) -> set[str]:
    """Subset of ``affected`` whose current status differs from ``checked``.

    A missing progress entry counts as not unlocked.
    """
    return {item_id for item_id in affected if bool(progress.get(item_id, False)) != checked}
