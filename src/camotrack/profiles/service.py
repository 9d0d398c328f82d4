"""Profile business logic."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import func, select

from camotrack.db.models import Profile
from camotrack.profiles.validation import build_activision_id, normalize_prestige, validate_account_level

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


async def get_profile(db: AsyncSession, user_id: str) -> Profile | None:
    """Fetch a profile by the auth provider's user id."""
    result = await db.execute(select(Profile).where(Profile.id == user_id))
    return result.scalar_one_or_none()


async def is_username_available(
    db: AsyncSession,
    username: str,
    exclude_user_id: str | None = None,
) -> bool:
    """Case-insensitive availability check, optionally ignoring one user."""
    query = select(Profile.id).where(func.lower(Profile.username) == username.strip().lower())
    if exclude_user_id:
        query = query.where(Profile.id != exclude_user_id)
    result = await db.execute(query.limit(1))
    return result.first() is None


async def resolve_username_email(db: AsyncSession, identifier: str) -> str | None:
    """Map a username to the email of its account, if any."""
    result = await db.execute(
        select(Profile.email).where(func.lower(Profile.username) == identifier.strip().lower()).limit(1)
    )
    return result.scalar_one_or_none()


async def create_profile(
    db: AsyncSession,
    user_id: str,
    username: str,
    email: str,
) -> Profile:
    """
    Create the profile row for a newly signed-up user.

    Raises:
        ValueError: If the username is taken or the profile already exists.
    """
    if not await is_username_available(db, username, exclude_user_id=user_id):
        msg = "Username already taken"
        raise ValueError(msg)
    if await get_profile(db, user_id) is not None:
        msg = "Profile already exists"
        raise ValueError(msg)

    profile = Profile(
        id=user_id,
        username=username,
        display_name=username,
        email=email,
        created_at=datetime.now(timezone.utc),
    )
    db.add(profile)
    await db.flush()
    logger.info("profile_created", user_id=user_id, username=username)
    return profile


async def update_profile(
    db: AsyncSession,
    user_id: str,
    account_level: int | None = None,
    prestige: int | None = None,
    is_master: bool = False,
    activision_name: str | None = None,
    activision_tag: str | None = None,
) -> Profile:
    """
    Save the account form, creating the profile row if it does not exist yet.

    Raises:
        ProfileValidationError: If any field is out of range or malformed.
    """
    level = validate_account_level(account_level)
    prestige_value = normalize_prestige(prestige, is_master)
    activision_id = build_activision_id(activision_name, activision_tag)

    profile = await get_profile(db, user_id)
    now = datetime.now(timezone.utc)
    if profile is None:
        profile = Profile(id=user_id, created_at=now)
        db.add(profile)

    profile.account_level = level
    profile.prestige = prestige_value
    profile.activision_id = activision_id
    profile.updated_at = now
    await db.flush()

    logger.info(
        "profile_updated",
        user_id=user_id,
        account_level=level,
        prestige=prestige_value,
        activision_id=activision_id,
    )
    return profile
