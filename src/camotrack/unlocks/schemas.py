"""Pydantic request/response models for the catalog and unlock endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field

from camotrack.unlocks.rules import GameMode


# --- Catalog parents ---


class WeaponClassResponse(BaseModel):
    id: str
    slug: str
    label: str
    sort_order: int | None = None


class WeaponResponse(BaseModel):
    id: str
    class_id: str
    display_name: str
    slug: str
    release_season: str | None = None


class WeaponSeasonGroup(BaseModel):
    season: str
    weapons: list[WeaponResponse]


class WeaponClassGroup(BaseModel):
    id: str
    slug: str
    label: str
    seasons: list[WeaponSeasonGroup]


class WeaponsResponse(BaseModel):
    classes: list[WeaponClassGroup]


class OpticResponse(BaseModel):
    id: str
    name: str
    slug: str
    description: str | None = None
    range_category: str | None = None


class OpticRangeGroup(BaseModel):
    key: str
    label: str
    optics: list[OpticResponse]


class OpticsResponse(BaseModel):
    gamemode: str | None = None
    ranges: list[OpticRangeGroup]


# --- Unlock checklists ---


class UnlockItemResponse(BaseModel):
    id: str
    name: str
    slug: str = ""
    kind: str | None = None
    tier: str | None = None
    sort_order: int | None = None
    unlock_count: int | None = None
    unlock_order: int | None = None
    unlock_type: str | None = None
    challenge: str | None = None
    gamemode: str | None = None
    checked: bool = False


class ParentUnlocksResponse(BaseModel):
    parent_id: str
    items: list[UnlockItemResponse]
    total: int
    checked: int
    complete: bool


class UnlocksResponse(BaseModel):
    family: str
    gamemode: str
    sign_in_required: bool
    parents: list[ParentUnlocksResponse]


class ToggleRequest(BaseModel):
    checked: bool
    gamemode: GameMode | None = None


class CascadeResultResponse(BaseModel):
    item_id: str
    status: bool
    affected: list[str] = []
    written: list[str] = []
    ok: bool = True
    error: str | None = None


class CheckAllRequest(BaseModel):
    item_ids: list[str] = Field(default_factory=list)
    gamemode: GameMode | None = None


class CheckAllResponse(BaseModel):
    results: list[CascadeResultResponse]
    succeeded: int
    failed: int


# --- Mastery ---


class MasteryBadge(BaseModel):
    label: str
    color: str


class MasteryProgress(BaseModel):
    gold: int
    bloodstone: int
    doomsteel: int
    total_weapons: int


class MasterySummaryResponse(BaseModel):
    gamemode: str
    sign_in_required: bool
    weapons: dict[str, str | None]
    progress: MasteryProgress
    badges: dict[str, MasteryBadge]
