"""Prestige badge display rules."""

from __future__ import annotations

from camotrack.profiles.validation import MASTER_PRESTIGE, MAX_PRESTIGE


def is_master(prestige: int | None) -> bool:
    return prestige is not None and prestige >= MASTER_PRESTIGE


def form_prestige(stored: int | None) -> tuple[int, bool]:
    """Values for the account form: Master shows as prestige 10 with the flag set."""
    value = stored or 0
    if is_master(value):
        return MAX_PRESTIGE, True
    return value, False


def prestige_visual(prestige: int | None, master: bool = False) -> dict[str, str | bool | None]:
    """Label and icon asset for a prestige badge."""
    if master or is_master(prestige):
        return {"label": "Prestige Master", "asset": "prestige/prestigemaster.png", "master": True}
    if prestige is None:
        return {"label": "Prestige not set", "asset": None, "master": False}

    clamped = min(MAX_PRESTIGE, max(0, prestige))
    return {
        "label": f"Prestige {clamped}",
        "asset": f"prestige/prestige{clamped}.png" if clamped > 0 else None,
        "master": False,
    }
