"""Username lookup endpoints used by the sign-up and log-in screens."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from camotrack.auth.schemas import (
    CheckUsernameRequest,
    CheckUsernameResponse,
    ResolveUsernameRequest,
    ResolveUsernameResponse,
)
from camotrack.database import get_session
from camotrack.profiles.service import is_username_available, resolve_username_email

logger = structlog.get_logger()

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post("/check-username", response_model=CheckUsernameResponse)
async def check_username(
    body: CheckUsernameRequest,
    db: AsyncSession = Depends(get_session),
) -> CheckUsernameResponse:
    """Case-insensitive username availability."""
    username = (body.username or "").strip()
    if not username:
        raise HTTPException(status_code=400, detail="Missing username")

    try:
        available = await is_username_available(db, username, exclude_user_id=body.exclude_user_id)
    except SQLAlchemyError as e:
        logger.error("check_username_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Lookup failed") from e
    return CheckUsernameResponse(available=available)


@router.post("/resolve-username", response_model=ResolveUsernameResponse)
async def resolve_username(
    body: ResolveUsernameRequest,
    db: AsyncSession = Depends(get_session),
) -> ResolveUsernameResponse:
    """Return the email behind a username."""
    identifier = (body.identifier or "").strip()
    if not identifier:
        raise HTTPException(status_code=400, detail="Missing identifier")

    try:
        email = await resolve_username_email(db, identifier)
    except SQLAlchemyError as e:
        logger.error("resolve_username_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Lookup failed") from e
    if not email:
        raise HTTPException(status_code=404, detail="Not found")
    return ResolveUsernameResponse(email=email)
