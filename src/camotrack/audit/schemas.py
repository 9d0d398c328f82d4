"""Request/response schemas for the audit log endpoint."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class LogRequest(BaseModel):
    """A client-side event to record. ``message`` is checked in the route."""

    user_id: str | None = Field(None, alias="userId")
    level: str = "info"
    message: str | None = None
    context: dict[str, Any] = Field(default_factory=dict)

    model_config = {"populate_by_name": True}


class LogResponse(BaseModel):
    ok: bool = True
