"""Catalog and unlock checklist endpoints."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from camotrack.auth.dependencies import get_optional_user_id
from camotrack.config import get_settings
from camotrack.database import get_session
from camotrack.dependencies import get_audit_sink, get_unlock_store
from camotrack.unlocks.errors import (
    NotAuthenticatedError,
    PersistenceError,
    StaleReferenceError,
    UnlockError,
)
from camotrack.unlocks.rules import Family, GameMode, classify_mastery_tier
from camotrack.unlocks.schemas import (
    CascadeResultResponse,
    CheckAllRequest,
    CheckAllResponse,
    MasterySummaryResponse,
    OpticRangeGroup,
    OpticResponse,
    OpticsResponse,
    ParentUnlocksResponse,
    ToggleRequest,
    UnlockItemResponse,
    UnlocksResponse,
    WeaponClassGroup,
    WeaponClassResponse,
    WeaponResponse,
    WeaponSeasonGroup,
    WeaponsResponse,
)
from camotrack.unlocks.store import (
    FAMILY_NOUNS,
    UnlockStore,
    list_optic_ids_with_reticles,
    list_optics,
    list_weapon_classes,
    list_weapons,
)
from camotrack.unlocks.summary import (
    group_by_range,
    group_by_season,
    mastery_badges,
    mastery_progress,
    mastery_status_by_parent,
    parent_completion,
)
from camotrack.unlocks.tracker import AuditSink, CascadeResult, UnlockTracker

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1", tags=["Unlocks"])


async def _load_tracker(
    family: str,
    gamemode: str | None,
    store: UnlockStore,
    user_id: str | None,
    audit: AuditSink | None = None,
) -> UnlockTracker:
    settings = get_settings()
    tracker = UnlockTracker(
        store,
        family,
        user_id=user_id,
        audit=audit,
        keywords=settings.mastery_keywords,
    )
    await tracker.load(gamemode or settings.default_gamemode)
    return tracker


def _http_error(exc: UnlockError) -> HTTPException:
    """Map an unlock failure onto its HTTP status."""
    if isinstance(exc, NotAuthenticatedError):
        return HTTPException(status_code=401, detail=str(exc))
    if isinstance(exc, StaleReferenceError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, PersistenceError):
        return HTTPException(status_code=502, detail=str(exc))
    return HTTPException(status_code=400, detail=str(exc))


def _result_response(result: CascadeResult) -> CascadeResultResponse:
    return CascadeResultResponse(
        item_id=result.item_id,
        status=result.status,
        affected=result.affected,
        written=result.written,
        ok=result.ok,
        error=result.error,
    )


# ── Catalog parents ──


@router.get("/weapon-classes", response_model=list[WeaponClassResponse])
async def get_weapon_classes(db: AsyncSession = Depends(get_session)):
    """All weapon classes in display order."""
    classes = await list_weapon_classes(db)
    return [
        WeaponClassResponse(id=c.id, slug=c.slug, label=c.label, sort_order=c.sort_order)
        for c in classes
    ]


@router.get("/weapons", response_model=WeaponsResponse)
async def get_weapons(db: AsyncSession = Depends(get_session)):
    """Weapons grouped by class, then by release season."""
    classes = await list_weapon_classes(db)
    weapons = await list_weapons(db)

    by_class: dict[str, list] = {}
    for weapon in weapons:
        by_class.setdefault(weapon.class_id, []).append(weapon)

    groups = []
    for weapon_class in classes:
        members = by_class.get(weapon_class.id)
        if not members:
            continue
        seasons = [
            WeaponSeasonGroup(
                season=group["season"],
                weapons=[
                    WeaponResponse(
                        id=w.id,
                        class_id=w.class_id,
                        display_name=w.display_name,
                        slug=w.slug,
                        release_season=w.release_season,
                    )
                    for w in group["items"]
                ],
            )
            for group in group_by_season(members)
        ]
        groups.append(
            WeaponClassGroup(id=weapon_class.id, slug=weapon_class.slug, label=weapon_class.label, seasons=seasons)
        )
    return WeaponsResponse(classes=groups)


@router.get("/optics", response_model=OpticsResponse)
async def get_optics(
    gamemode: GameMode | None = Query(None),
    db: AsyncSession = Depends(get_session),
):
    """Optics bucketed by range.

    With ``gamemode`` only optics that have a reticle in that mode are listed.
    """
    optics = await list_optics(db)
    with_items = await list_optic_ids_with_reticles(db, gamemode) if gamemode else None
    ranges = [
        OpticRangeGroup(
            key=section["key"],
            label=section["label"],
            optics=[
                OpticResponse(
                    id=o.id,
                    name=o.name,
                    slug=o.slug,
                    description=o.description,
                    range_category=o.range_category,
                )
                for o in section["items"]
            ],
        )
        for section in group_by_range(optics, with_items)
    ]
    return OpticsResponse(gamemode=gamemode, ranges=ranges)


# ── Mastery ──


@router.get("/unlocks/camo/mastery", response_model=MasterySummaryResponse)
async def get_mastery_summary(
    gamemode: GameMode | None = Query(None),
    store: UnlockStore = Depends(get_unlock_store),
    user_id: str | None = Depends(get_optional_user_id),
):
    """Highest mastery tier per weapon plus per-tier weapon counts."""
    tracker = await _load_tracker("camo", gamemode, store, user_id)
    keywords = get_settings().mastery_keywords
    status = mastery_status_by_parent(tracker.catalog, tracker.progress, keywords)
    return MasterySummaryResponse(
        gamemode=tracker.catalog.gamemode,
        sign_in_required=tracker.sign_in_required,
        weapons=status,
        progress=mastery_progress(list(status), status),
        badges=mastery_badges(tracker.catalog.gamemode),
    )


# ── Checklists ──


@router.get("/unlocks/{family}", response_model=UnlocksResponse)
async def get_unlocks(
    family: Family,
    gamemode: GameMode | None = Query(None),
    store: UnlockStore = Depends(get_unlock_store),
    user_id: str | None = Depends(get_optional_user_id),
):
    """Catalog of one family with the caller's progress, grouped per parent."""
    tracker = await _load_tracker(family, gamemode, store, user_id)
    keywords = get_settings().mastery_keywords
    completion = parent_completion(tracker.catalog, tracker.progress)

    parents = []
    for parent_id, items in tracker.catalog.by_parent.items():
        counts = completion[parent_id]
        parents.append(
            ParentUnlocksResponse(
                parent_id=parent_id,
                items=[
                    UnlockItemResponse(
                        id=item.id,
                        name=item.label,
                        slug=item.slug,
                        kind=item.kind,
                        tier=classify_mastery_tier(item, keywords) if family == "camo" else None,
                        sort_order=item.sort_order,
                        unlock_count=item.unlock_count,
                        unlock_order=item.unlock_order,
                        unlock_type=item.unlock_type,
                        challenge=item.challenge,
                        gamemode=item.gamemode,
                        checked=tracker.is_checked(item.id),
                    )
                    for item in items
                ],
                total=counts["total"],
                checked=counts["checked"],
                complete=counts["complete"],
            )
        )

    return UnlocksResponse(
        family=family,
        gamemode=tracker.catalog.gamemode,
        sign_in_required=tracker.sign_in_required,
        parents=parents,
    )


@router.post("/unlocks/{family}/check-all", response_model=CheckAllResponse)
async def check_all_unlocks(
    family: Family,
    body: CheckAllRequest,
    background: BackgroundTasks,
    store: UnlockStore = Depends(get_unlock_store),
    user_id: str | None = Depends(get_optional_user_id),
    audit: AuditSink = Depends(get_audit_sink),
):
    """Check every listed item that is not already checked."""
    if user_id is None:
        raise HTTPException(status_code=401, detail=f"You must sign in to track {FAMILY_NOUNS[family]} progress.")

    tracker = await _load_tracker(family, body.gamemode, store, user_id, audit)
    try:
        results = await tracker.check_all(body.item_ids)
    except UnlockError as e:
        raise _http_error(e) from e
    background.add_task(tracker.drain_audit)

    failed = sum(1 for r in results if not r.ok)
    if failed:
        logger.warning("check_all_partial_failure", family=family, failed=failed, total=len(results))
    return CheckAllResponse(
        results=[_result_response(r) for r in results],
        succeeded=len(results) - failed,
        failed=failed,
    )


@router.post("/unlocks/{family}/{item_id}/toggle", response_model=CascadeResultResponse)
async def toggle_unlock(
    family: Family,
    item_id: str,
    body: ToggleRequest,
    background: BackgroundTasks,
    store: UnlockStore = Depends(get_unlock_store),
    user_id: str | None = Depends(get_optional_user_id),
    audit: AuditSink = Depends(get_audit_sink),
):
    """Check or uncheck one item together with its cascade."""
    if user_id is None:
        raise HTTPException(status_code=401, detail=f"Log in to track {FAMILY_NOUNS[family]} progress.")

    tracker = await _load_tracker(family, body.gamemode, store, user_id, audit)
    try:
        result = await tracker.toggle(item_id, body.checked)
    except UnlockError as e:
        raise _http_error(e) from e
    background.add_task(tracker.drain_audit)
    return _result_response(result)
