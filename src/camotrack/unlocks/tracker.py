"""Unlock tracker: catalog loading plus the optimistic cascade writer.

One tracker holds the state of one checklist page (family + game mode):
the catalog indices, the user's progress, which items are saving, and the
last surfaced error. A toggle resolves its cascade, applies it optimistically,
persists it as one batch and rolls the batch back if the write fails.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from camotrack.unlocks.catalog import Catalog
from camotrack.unlocks.errors import NotAuthenticatedError, PersistenceError, UnlockError
from camotrack.unlocks.resolver import pending_writes, resolve_cascade
from camotrack.unlocks.store import FAMILY_NOUNS, PROGRESS_TABLES, UnlockStore

logger = logging.getLogger(__name__)

# (user_id, level, message, context)
AuditSink = Callable[[str | None, str, str, dict[str, Any]], Awaitable[None]]


@dataclass
class CascadeResult:
    """Outcome of one toggle."""

    item_id: str
    status: bool
    affected: list[str] = field(default_factory=list)
    written: list[str] = field(default_factory=list)
    ok: bool = True
    error: str | None = None


class UnlockTracker:
    """Checklist state for one unlock family of one user."""

    def __init__(
        self,
        store: UnlockStore,
        family: str,
        *,
        user_id: str | None = None,
        audit: AuditSink | None = None,
        keywords: Mapping[str, Sequence[str]] | None = None,
    ) -> None:
        if family not in PROGRESS_TABLES:
            msg = f"Unknown unlock family: {family}"
            raise ValueError(msg)
        self.store = store
        self.family = family
        self.user_id = user_id
        self.audit = audit
        self.keywords = keywords
        self.gamemode: str | None = None
        self.catalog = Catalog.empty(family, "")
        self.progress: dict[str, bool] = {}
        self.error: str | None = None
        self._inflight: dict[str, int] = {}
        self._audit_tasks: set[asyncio.Task[None]] = set()

    @property
    def noun(self) -> str:
        return FAMILY_NOUNS[self.family]

    @property
    def sign_in_required(self) -> bool:
        """True when there is no session; progress is empty and writes are disabled."""
        return self.user_id is None

    @property
    def saving(self) -> dict[str, bool]:
        """Items with a write in flight."""
        return {item_id: True for item_id, count in self._inflight.items() if count > 0}

    def is_checked(self, item_id: str) -> bool:
        return bool(self.progress.get(item_id, False))

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load(self, gamemode: str) -> Catalog:
        """Fetch the catalog and progress for ``gamemode``, replacing prior state.

        Progress rows outside the loaded catalog are dropped.
        """
        self.error = None
        items = await self.store.fetch_items(self.family, gamemode)
        catalog = Catalog.build(self.family, gamemode, items)

        progress: dict[str, bool] = {}
        if self.user_id is not None:
            rows = await self.store.fetch_progress(self.family, self.user_id)
            progress = {item_id: status for item_id, status in rows.items() if item_id in catalog}

        self.gamemode = gamemode
        self.catalog = catalog
        self.progress = progress
        self._inflight = {}
        return catalog

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    async def toggle(self, item_id: str, checked: bool) -> CascadeResult:
        """Set ``item_id`` to ``checked`` together with its cascade.

        Items already in the requested state are not rewritten unless another
        write on them is still in flight.

        Raises:
            NotAuthenticatedError: No session; nothing is mutated.
            StaleReferenceError: ``item_id`` is not in the loaded catalog.
            PersistenceError: The batch write failed and was rolled back.
        """
        if self.user_id is None:
            self.error = f"Log in to track {self.noun} progress."
            raise NotAuthenticatedError(self.error)

        try:
            affected = resolve_cascade(item_id, checked, self.catalog, self.keywords)
        except UnlockError as e:
            self.error = str(e)
            raise

        to_write = pending_writes(affected, checked, self.progress)
        to_write |= {i for i in affected if self._inflight.get(i)}
        result = CascadeResult(item_id=item_id, status=checked, affected=sorted(affected))
        if not to_write:
            return result

        previous = {i: self.progress.get(i) for i in to_write}
        for i in to_write:
            self._inflight[i] = self._inflight.get(i, 0) + 1
            self.progress[i] = checked

        try:
            await self.store.upsert_progress(self.family, self.user_id, to_write, checked)
        except PersistenceError as e:
            for i, prev in previous.items():
                if prev is None:
                    self.progress.pop(i, None)
                else:
                    self.progress[i] = prev
            self.error = str(e)
            logger.warning(
                "cascade_rolled_back family=%s item=%s items=%d", self.family, item_id, len(to_write)
            )
            raise
        finally:
            for i in to_write:
                remaining = self._inflight.get(i, 1) - 1
                if remaining > 0:
                    self._inflight[i] = remaining
                else:
                    self._inflight.pop(i, None)

        result.written = sorted(to_write)
        logger.info(
            "cascade_written family=%s item=%s items=%d status=%s", self.family, item_id, len(to_write), checked
        )
        self._schedule_audit(result)
        return result

    async def _toggle_quietly(self, item_id: str, checked: bool) -> CascadeResult:
        try:
            return await self.toggle(item_id, checked)
        except UnlockError as e:
            return CascadeResult(item_id=item_id, status=checked, ok=False, error=str(e))

    def toggle_in_background(self, item_id: str, checked: bool) -> asyncio.Task[CascadeResult]:
        """Start a toggle without waiting for it; failures land in ``error``."""
        return asyncio.create_task(self._toggle_quietly(item_id, checked))

    async def check_all(self, item_ids: Iterable[str]) -> list[CascadeResult]:
        """Check every listed item that is not already checked.

        Each item runs its own cascade and is persisted and rolled back
        independently; all of them run concurrently and are awaited together.

        Raises:
            NotAuthenticatedError: No session.
        """
        if self.user_id is None:
            self.error = f"You must sign in to track {self.noun} progress."
            raise NotAuthenticatedError(self.error)

        targets = [i for i in dict.fromkeys(item_ids) if not self.is_checked(i)]
        if not targets:
            return []
        return list(await asyncio.gather(*(self._toggle_quietly(i, True) for i in targets)))

    # ------------------------------------------------------------------
    # Audit
    # ------------------------------------------------------------------

    def _schedule_audit(self, result: CascadeResult) -> None:
        if self.audit is None:
            return
        _, column = PROGRESS_TABLES[self.family]
        message = f"{self.noun.capitalize()} status updated"
        context = {f"{column}s": result.written, "status": result.status}
        task = asyncio.create_task(self._send_audit(message, context))
        self._audit_tasks.add(task)
        task.add_done_callback(self._audit_tasks.discard)

    async def _send_audit(self, message: str, context: dict[str, Any]) -> None:
        try:
            await self.audit(self.user_id, "info", message, context)  # type: ignore[misc]
        except Exception:
            logger.warning("Failed to record audit log for %s", message, exc_info=True)

    async def drain_audit(self) -> None:
        """Wait for pending audit events. Never raises."""
        if self._audit_tasks:
            await asyncio.gather(*list(self._audit_tasks), return_exceptions=True)
