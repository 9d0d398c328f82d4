"""Audit log sink: persisted log rows for profile changes and cascade writes."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import structlog

from camotrack.database import get_session_factory
from camotrack.db.models import LogEntry

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

ALLOWED_LEVELS = ("debug", "info", "warn", "error")


def normalize_level(level: str | None) -> str:
    """Unknown or missing levels are recorded as ``info``."""
    return level if level in ALLOWED_LEVELS else "info"


async def record_log(
    db: AsyncSession,
    user_id: str | None,
    level: str | None,
    message: str,
    context: dict[str, Any] | None = None,
) -> LogEntry:
    """Insert one log row and echo it to the application log."""
    log_level = normalize_level(level)
    context = context or {}
    logger.info(
        "audit_log",
        audit_level=log_level,
        audit_message=message,
        user_id=user_id,
        email=context.get("email"),
    )
    entry = LogEntry(
        user_id=user_id,
        level=log_level,
        message=message,
        context=context,
        created_at=datetime.now(timezone.utc),
    )
    db.add(entry)
    await db.flush()
    return entry


async def write_audit_event(
    user_id: str | None,
    level: str,
    message: str,
    context: dict[str, Any],
) -> None:
    """Record an audit event in its own session.

    Used as the tracker's fire-and-forget sink, so it must not depend on the
    request's session still being open.
    """
    async with get_session_factory()() as db:
        await record_log(db, user_id, level, message, context)
        await db.commit()


async def emit_audit_event(
    user_id: str | None,
    level: str,
    message: str,
    context: dict[str, Any],
) -> None:
    """Best-effort variant of ``write_audit_event`` that never raises."""
    try:
        await write_audit_event(user_id, level, message, context)
    except Exception:
        logger.warning("audit_log_failed", audit_message=message, user_id=user_id, exc_info=True)
