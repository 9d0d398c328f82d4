"""Profile endpoints: sign-up, account settings."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient

from camotrack.db.models import Profile
from tests.factories import USER_ID

CREATED = datetime(2026, 9, 1, tzinfo=timezone.utc)


def _profile(**kwargs) -> Profile:
    values = {"id": USER_ID, "username": "player1", "email": "player@example.com", "created_at": CREATED}
    values.update(kwargs)
    return Profile(**values)


class TestGetProfile:
    @pytest.mark.asyncio
    async def test_requires_token(self, client: AsyncClient):
        response = await client.get("/api/v1/profiles/me")
        assert response.status_code in (401, 403)

    @pytest.mark.asyncio
    async def test_invalid_token(self, client: AsyncClient):
        response = await client.get("/api/v1/profiles/me", headers={"Authorization": "Bearer garbage"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_master_prestige_form_values(self, client: AsyncClient, auth_headers, monkeypatch):
        profile = _profile(account_level=155, prestige=11, activision_id="Ghost#1234567")
        monkeypatch.setattr("camotrack.profiles.router.get_profile", AsyncMock(return_value=profile))

        response = await client.get("/api/v1/profiles/me", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["prestige"] == 10
        assert data["is_master"] is True
        assert data["badge"] == {"label": "Prestige Master", "asset": "prestige/prestigemaster.png", "master": True}
        assert (data["activision_name"], data["activision_tag"]) == ("Ghost", "1234567")

    @pytest.mark.asyncio
    async def test_not_found(self, client: AsyncClient, auth_headers, monkeypatch):
        monkeypatch.setattr("camotrack.profiles.router.get_profile", AsyncMock(return_value=None))
        response = await client.get("/api/v1/profiles/me", headers=auth_headers)
        assert response.status_code == 404
        assert response.json()["detail"] == "Profile not found"


class TestUpdateProfile:
    @pytest.mark.parametrize(
        "body",
        [
            {"account_level": 0},
            {"account_level": 1001},
            {"prestige": 12},
            {"activision_name": "Ghost", "activision_tag": "123"},
            {"activision_name": "Ghost"},
        ],
    )
    @pytest.mark.asyncio
    async def test_validation_blocks_submission(self, client: AsyncClient, auth_headers, monkeypatch, body):
        update = AsyncMock()
        monkeypatch.setattr("camotrack.profiles.router.update_profile", update)

        response = await client.put("/api/v1/profiles/me", json=body, headers=auth_headers)

        assert response.status_code == 422
        update.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_saved_and_audited(self, client: AsyncClient, auth_headers, monkeypatch, db_mock, audit_sink):
        saved = _profile(account_level=80, prestige=11, activision_id="Ghost#1234567")
        update = AsyncMock(return_value=saved)
        monkeypatch.setattr("camotrack.profiles.router.update_profile", update)
        body = {
            "account_level": 80,
            "prestige": 10,
            "is_master": True,
            "activision_name": "Ghost",
            "activision_tag": "1234567",
        }

        response = await client.put("/api/v1/profiles/me", json=body, headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["is_master"] is True
        update.assert_awaited_once()
        assert update.await_args.args[1] == USER_ID
        db_mock.commit.assert_awaited()
        audit_sink.assert_awaited_once()
        user_id, level, message, context = audit_sink.await_args.args
        assert (user_id, level, message) == (USER_ID, "info", "Account profile updated")
        assert context["prestige"] == 11
        assert context["activision_id"] == "Ghost#1234567"


class TestCreateProfile:
    @pytest.mark.asyncio
    async def test_created(self, client: AsyncClient, auth_headers, monkeypatch, audit_sink):
        create = AsyncMock(return_value=_profile())
        monkeypatch.setattr("camotrack.profiles.router.create_profile", create)

        response = await client.post(
            "/api/v1/profiles", json={"username": "player1", "email": "Player@Example.com"}, headers=auth_headers
        )

        assert response.status_code == 201
        assert response.json()["badge"]["label"] == "Prestige not set"
        create.assert_awaited_once()
        assert create.await_args.args[1:] == (USER_ID, "player1", "player@example.com")
        audit_sink.assert_awaited_once_with(
            USER_ID, "info", "User signed up", {"email": "player@example.com", "username": "player1"}
        )

    @pytest.mark.asyncio
    async def test_username_taken(self, client: AsyncClient, auth_headers, monkeypatch):
        monkeypatch.setattr(
            "camotrack.profiles.router.create_profile", AsyncMock(side_effect=ValueError("Username already taken"))
        )
        response = await client.post(
            "/api/v1/profiles", json={"username": "player1", "email": "p@example.com"}, headers=auth_headers
        )
        assert response.status_code == 409
        assert response.json()["detail"] == "Username already taken"

    @pytest.mark.asyncio
    async def test_invalid_username(self, client: AsyncClient, auth_headers):
        response = await client.post(
            "/api/v1/profiles", json={"username": "no spaces", "email": "p@example.com"}, headers=auth_headers
        )
        assert response.status_code == 422
