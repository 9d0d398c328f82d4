"""Request/response schemas for the username lookup endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field


class CheckUsernameRequest(BaseModel):
    """Availability check during sign-up or username change."""

    username: str | None = None
    exclude_user_id: str | None = Field(None, alias="excludeUserId")

    model_config = {"populate_by_name": True}


class CheckUsernameResponse(BaseModel):
    available: bool


class ResolveUsernameRequest(BaseModel):
    """Log in by username: resolve it to the account email."""

    identifier: str | None = None


class ResolveUsernameResponse(BaseModel):
    email: str
