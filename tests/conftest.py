"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from camotrack.auth.jwt import create_access_token
from camotrack.config import get_settings
from camotrack.database import get_session
from camotrack.dependencies import get_audit_sink, get_unlock_store
from camotrack.main import create_app
from tests.factories import USER_ID, FakeUnlockStore, optic_reticles, prestige_chain, weapon_camos


@pytest.fixture
def store() -> FakeUnlockStore:
    return FakeUnlockStore(
        items={
            "camo": weapon_camos(),
            "prestige": prestige_chain(),
            "reticle": optic_reticles(),
        }
    )


@pytest.fixture
def audit_sink() -> AsyncMock:
    return AsyncMock(return_value=None)


@pytest.fixture
def db_mock() -> AsyncMock:
    """Stand-in AsyncSession for routes that are exercised without a database."""
    session = AsyncMock()
    session.execute = AsyncMock(return_value=MagicMock())
    session.add = MagicMock()
    return session


@pytest_asyncio.fixture
async def client(
    store: FakeUnlockStore,
    audit_sink: AsyncMock,
    db_mock: AsyncMock,
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client over the app with the store, audit sink and session replaced."""
    get_settings.cache_clear()
    app = create_app()

    async def _session() -> AsyncGenerator[Any, None]:
        yield db_mock

    app.dependency_overrides[get_session] = _session
    app.dependency_overrides[get_unlock_store] = lambda: store
    app.dependency_overrides[get_audit_sink] = lambda: audit_sink

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(USER_ID, 'player@example.com')}"}
