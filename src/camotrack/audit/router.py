"""Audit log endpoint — POST /api/logs."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from camotrack.audit.schemas import LogRequest, LogResponse
from camotrack.audit.service import record_log
from camotrack.database import get_session

logger = structlog.get_logger()

router = APIRouter(prefix="/api", tags=["Logs"])


@router.post("/logs", response_model=LogResponse)
async def create_log(
    body: LogRequest,
    db: AsyncSession = Depends(get_session),
) -> LogResponse:
    """Record a client event (level coerced to debug/info/warn/error)."""
    if not body.message:
        raise HTTPException(status_code=400, detail="Missing message")

    try:
        await record_log(db, body.user_id, body.level, body.message, body.context)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("audit_log_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to record log") from e
    return LogResponse(ok=True)
