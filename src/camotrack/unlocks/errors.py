"""Unlock cascade errors.

Every failure is scoped to one user interaction; none of them leave persisted
progress in a partial state.
"""

from __future__ import annotations


class UnlockError(Exception):
    """Base class for cascade failures. ``str(exc)`` is the user-facing message."""


class NotAuthenticatedError(UnlockError):
    """A write was attempted without an active session."""


class StaleReferenceError(UnlockError):
    """The target item is not part of the loaded catalog."""

    def __init__(self, item_id: str, message: str | None = None) -> None:
        self.item_id = item_id
        super().__init__(message or f"Item {item_id} not found.")


class PersistenceError(UnlockError):
    """The batch upsert was rejected by the store."""
