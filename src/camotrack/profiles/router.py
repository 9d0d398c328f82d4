"""Profile router — /api/v1/profiles/* endpoints."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from camotrack.auth.dependencies import get_current_user_id
from camotrack.database import get_session
from camotrack.db.models import Profile
from camotrack.dependencies import get_audit_sink
from camotrack.profiles.prestige import form_prestige, prestige_visual
from camotrack.profiles.schemas import (
    PrestigeBadgeResponse,
    ProfileCreateRequest,
    ProfileResponse,
    ProfileUpdateRequest,
)
from camotrack.profiles.service import create_profile, get_profile, update_profile
from camotrack.profiles.validation import ProfileValidationError, split_activision_id
from camotrack.unlocks.tracker import AuditSink

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/profiles", tags=["Profiles"])


def _profile_response(profile: Profile) -> ProfileResponse:
    """Build a ProfileResponse from a Profile model."""
    prestige, master = form_prestige(profile.prestige)
    name, tag = split_activision_id(profile.activision_id)
    return ProfileResponse(
        id=profile.id,
        username=profile.username,
        display_name=profile.display_name,
        email=profile.email,
        account_level=profile.account_level,
        prestige=prestige,
        is_master=master,
        activision_id=profile.activision_id,
        activision_name=name,
        activision_tag=tag,
        badge=PrestigeBadgeResponse(**prestige_visual(profile.prestige)),
        created_at=profile.created_at,
    )


@router.post("", response_model=ProfileResponse, status_code=201)
async def create_my_profile(
    body: ProfileCreateRequest,
    background: BackgroundTasks,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
    audit: AuditSink = Depends(get_audit_sink),
) -> ProfileResponse:
    """Create the caller's profile after sign-up."""
    try:
        profile = await create_profile(db, user_id, body.username, body.email)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    await db.commit()

    background.add_task(
        audit, user_id, "info", "User signed up", {"email": body.email, "username": body.username}
    )
    return _profile_response(profile)


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
) -> ProfileResponse:
    """Get own profile."""
    profile = await get_profile(db, user_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return _profile_response(profile)


@router.put("/me", response_model=ProfileResponse)
async def update_my_profile(
    body: ProfileUpdateRequest,
    background: BackgroundTasks,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
    audit: AuditSink = Depends(get_audit_sink),
) -> ProfileResponse:
    """Save account level, prestige and Activision ID."""
    try:
        profile = await update_profile(
            db,
            user_id,
            account_level=body.account_level,
            prestige=body.prestige,
            is_master=body.is_master,
            activision_name=body.activision_name,
            activision_tag=body.activision_tag,
        )
    except ProfileValidationError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    await db.commit()

    background.add_task(
        audit,
        user_id,
        "info",
        "Account profile updated",
        {
            "account_level": profile.account_level,
            "prestige": profile.prestige,
            "isMaster": body.is_master,
            "activision_id": profile.activision_id,
        },
    )
    return _profile_response(profile)
