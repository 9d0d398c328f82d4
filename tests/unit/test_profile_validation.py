"""Profile field validation and prestige badges."""

import pytest
from pydantic import ValidationError

from camotrack.profiles.prestige import form_prestige, prestige_visual
from camotrack.profiles.schemas import ProfileCreateRequest, ProfileUpdateRequest
from camotrack.profiles.validation import (
    ProfileValidationError,
    build_activision_id,
    normalize_prestige,
    split_activision_id,
    validate_account_level,
    validate_username,
)


class TestUsername:
    def test_trimmed(self):
        assert validate_username("  player_1 ") == "player_1"

    @pytest.mark.parametrize("username", ["", "   ", "ab", "a" * 25, "bad name", "nope!", "émile"])
    def test_rejected(self, username):
        with pytest.raises(ProfileValidationError):
            validate_username(username)

    @pytest.mark.parametrize("username", ["abc", "a" * 24, "Ghost.Rider-7"])
    def test_accepted(self, username):
        assert validate_username(username) == username


class TestAccountLevel:
    @pytest.mark.parametrize("level", [1, 55, 1000, None])
    def test_in_range(self, level):
        assert validate_account_level(level) == level

    @pytest.mark.parametrize("level", [0, -3, 1001])
    def test_out_of_range(self, level):
        with pytest.raises(ProfileValidationError, match="between 1 and 1000"):
            validate_account_level(level)


class TestPrestige:
    def test_master_flag_wins(self):
        assert normalize_prestige(4, is_master=True) == 11

    @pytest.mark.parametrize("value", [0, 10, 11, None])
    def test_valid(self, value):
        assert normalize_prestige(value) == value

    @pytest.mark.parametrize("value", [-1, 12])
    def test_invalid(self, value):
        with pytest.raises(ProfileValidationError):
            normalize_prestige(value)

    def test_master_loads_as_ten_with_flag(self):
        assert form_prestige(11) == (10, True)
        assert form_prestige(7) == (7, False)
        assert form_prestige(None) == (0, False)


class TestPrestigeVisual:
    def test_master(self):
        assert prestige_visual(11) == {"label": "Prestige Master", "asset": "prestige/prestigemaster.png", "master": True}
        assert prestige_visual(3, master=True)["label"] == "Prestige Master"

    def test_not_set(self):
        assert prestige_visual(None)["label"] == "Prestige not set"

    def test_numbered(self):
        assert prestige_visual(4) == {"label": "Prestige 4", "asset": "prestige/prestige4.png", "master": False}

    def test_clamped(self):
        assert prestige_visual(-2)["label"] == "Prestige 0"


class TestActivisionId:
    def test_combined(self):
        assert build_activision_id(" Ghost ", "1234567") == "Ghost#1234567"

    def test_both_blank(self):
        assert build_activision_id("", "  ") is None
        assert build_activision_id(None, None) is None

    @pytest.mark.parametrize(
        ("name", "tag", "message"),
        [
            ("Gh", "1234567", "at least 3"),
            ("Gh#ost", "1234567", "must not contain"),
            ("Ghost", "123456", "exactly 7 digits"),
            ("Ghost", "12345a7", "exactly 7 digits"),
            ("Ghost", "", "Provide both"),
            ("", "1234567", "Provide both"),
        ],
    )
    def test_rejected(self, name, tag, message):
        with pytest.raises(ProfileValidationError, match=message):
            build_activision_id(name, tag)

    def test_split(self):
        assert split_activision_id("Ghost#1234567") == ("Ghost", "1234567")
        assert split_activision_id("Ghost#12") == ("Ghost", None)
        assert split_activision_id(None) == (None, None)


class TestSchemas:
    def test_create_normalizes(self):
        req = ProfileCreateRequest(username=" player1 ", email="Player@Example.com")
        assert req.username == "player1"
        assert req.email == "player@example.com"

    def test_create_rejects_bad_username(self):
        with pytest.raises(ValidationError):
            ProfileCreateRequest(username="x", email="a@example.com")

    def test_update_rejects_half_activision_id(self):
        with pytest.raises(ValidationError):
            ProfileUpdateRequest(activision_name="Ghost")

    def test_update_accepts_master(self):
        req = ProfileUpdateRequest(account_level=150, prestige=10, is_master=True)
        assert req.is_master
