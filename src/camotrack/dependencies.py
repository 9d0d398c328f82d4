"""Shared FastAPI dependencies."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from camotrack.audit.service import emit_audit_event
from camotrack.database import get_session as _get_session
from camotrack.unlocks.store import SqlUnlockStore, UnlockStore
from camotrack.unlocks.tracker import AuditSink


async def get_unlock_store(db: AsyncSession = Depends(_get_session)) -> UnlockStore:
    """Progress/catalog store bound to the request's session."""
    return SqlUnlockStore(db)


async def get_audit_sink() -> AuditSink:
    """Fire-and-forget audit sink writing to the logs table."""
    return emit_audit_event
