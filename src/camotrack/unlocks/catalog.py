"""In-memory catalog indices for one unlock family and game mode."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from camotrack.unlocks.rules import UnlockItem, sort_items


@dataclass
class Catalog:
    """Catalog of one family for one game mode.

    ``by_parent`` maps a weapon/optic id to its items in canonical order.
    ``by_id`` maps an item id to its record.
    """

    family: str
    gamemode: str
    by_id: dict[str, UnlockItem] = field(default_factory=dict)
    by_parent: dict[str, list[UnlockItem]] = field(default_factory=dict)

    @classmethod
    def build(cls, family: str, gamemode: str, items: Iterable[UnlockItem]) -> Catalog:
        """Index ``items``. A repeated id keeps the last record."""
        by_id: dict[str, UnlockItem] = {}
        for item in items:
            by_id[item.id] = item

        grouped: dict[str, list[UnlockItem]] = {}
        for item in by_id.values():
            grouped.setdefault(item.parent_id, []).append(item)

        by_parent = {parent_id: sort_items(family, group) for parent_id, group in grouped.items()}
        return cls(family=family, gamemode=gamemode, by_id=by_id, by_parent=by_parent)

    @classmethod
    def empty(cls, family: str, gamemode: str) -> Catalog:
        return cls(family=family, gamemode=gamemode)

    def get(self, item_id: str) -> UnlockItem | None:
        return self.by_id.get(item_id)

    def siblings(self, item: UnlockItem) -> list[UnlockItem]:
        """Items sharing ``item``'s parent, in order, limited to indexed ids."""
        return [s for s in self.by_parent.get(item.parent_id, []) if s.id in self.by_id]

    def __contains__(self, item_id: object) -> bool:
        return item_id in self.by_id

    def __len__(self) -> int:
        return len(self.by_id)
