"""Profile field validation.

Runs before any database access; a failure rejects the whole submission.
"""

from __future__ import annotations

import re

from camotrack.config import get_settings

USERNAME_RE = re.compile(r"^[A-Za-z0-9_.\-]+$")
ACTIVISION_TAG_RE = re.compile(r"^\d{7}$")

MAX_PRESTIGE = 10
MASTER_PRESTIGE = 11


class ProfileValidationError(ValueError):
    """Raised when a profile field fails a format or range check."""


def validate_username(username: str) -> str:
    """Return the trimmed username or raise ProfileValidationError.

    Requirements:
    - Between the configured min and max length after trimming
    - Letters, digits, underscore, dot and hyphen only
    """
    settings = get_settings()
    trimmed = (username or "").strip()
    if not trimmed:
        msg = "Username cannot be empty"
        raise ProfileValidationError(msg)
    if len(trimmed) < settings.username_min_length:
        msg = f"Username must be at least {settings.username_min_length} characters"
        raise ProfileValidationError(msg)
    if len(trimmed) > settings.username_max_length:
        msg = f"Username must not exceed {settings.username_max_length} characters"
        raise ProfileValidationError(msg)
    if not USERNAME_RE.match(trimmed):
        msg = "Username may only contain letters, digits, '_', '.' and '-'"
        raise ProfileValidationError(msg)
    return trimmed


def validate_account_level(level: int | None) -> int | None:
    if level is None:
        return None
    settings = get_settings()
    if not settings.account_level_min <= level <= settings.account_level_max:
        msg = f"Account level must be between {settings.account_level_min} and {settings.account_level_max}"
        raise ProfileValidationError(msg)
    return level


def normalize_prestige(prestige: int | None, is_master: bool = False) -> int | None:
    """Stored prestige value: 0-10, 11 for Master Prestige, or None."""
    if is_master:
        return MASTER_PRESTIGE
    if prestige is None:
        return None
    if prestige == MASTER_PRESTIGE or 0 <= prestige <= MAX_PRESTIGE:
        return prestige
    msg = "Prestige must be between 0 and 10, or Master"
    raise ProfileValidationError(msg)


def build_activision_id(name: str | None, tag: str | None) -> str | None:
    """Combine name and 7-digit tag into ``name#tag``; both blank gives None."""
    settings = get_settings()
    trimmed_name = (name or "").strip()
    trimmed_tag = (tag or "").strip()

    if trimmed_name and len(trimmed_name) < settings.activision_name_min_length:
        msg = f"Activision ID name must be at least {settings.activision_name_min_length} characters."
        raise ProfileValidationError(msg)
    if "#" in trimmed_name:
        msg = "Activision ID name must not contain '#'."
        raise ProfileValidationError(msg)
    if trimmed_tag and not ACTIVISION_TAG_RE.match(trimmed_tag):
        msg = "Activision ID tag must be exactly 7 digits."
        raise ProfileValidationError(msg)
    if bool(trimmed_name) != bool(trimmed_tag):
        msg = "Provide both Activision ID name and 7-digit tag, or leave both blank."
        raise ProfileValidationError(msg)

    if not trimmed_name:
        return None
    return f"{trimmed_name}#{trimmed_tag}"


def split_activision_id(value: str | None) -> tuple[str | None, str | None]:
    """Split a stored ``name#tag``; the tag is kept only if it is 7 digits."""
    if not value:
        return None, None
    name, _, tag = value.partition("#")
    return (name or None), (tag if ACTIVISION_TAG_RE.match(tag) else None)
