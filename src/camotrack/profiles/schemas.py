"""Request/response schemas for profile endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, EmailStr, field_validator, model_validator

from camotrack.profiles.validation import (
    build_activision_id,
    normalize_prestige,
    validate_account_level,
    validate_username,
)


class ProfileCreateRequest(BaseModel):
    """Profile created right after sign-up."""

    username: str
    email: EmailStr

    @field_validator("username")
    @classmethod
    def check_username(cls, v: str) -> str:
        return validate_username(v)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Normalize email to lowercase."""
        return v.lower().strip()


class ProfileUpdateRequest(BaseModel):
    """Account settings form."""

    account_level: int | None = None
    prestige: int | None = None
    is_master: bool = False
    activision_name: str | None = None
    activision_tag: str | None = None

    @field_validator("account_level")
    @classmethod
    def check_level(cls, v: int | None) -> int | None:
        return validate_account_level(v)

    @model_validator(mode="after")
    def check_prestige_and_activision(self) -> ProfileUpdateRequest:
        normalize_prestige(self.prestige, self.is_master)
        build_activision_id(self.activision_name, self.activision_tag)
        return self


class PrestigeBadgeResponse(BaseModel):
    label: str
    asset: str | None = None
    master: bool = False


class ProfileResponse(BaseModel):
    """Own profile, with prestige split back into form values."""

    id: str
    username: str | None = None
    display_name: str | None = None
    email: str | None = None
    account_level: int | None = None
    prestige: int = 0
    is_master: bool = False
    activision_id: str | None = None
    activision_name: str | None = None
    activision_tag: str | None = None
    badge: PrestigeBadgeResponse
    created_at: datetime | None = None
