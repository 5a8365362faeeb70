"""
Unit Tests for Profile Schemas.

Tests role handling in the owner and user profile schemas.
"""

from datetime import datetime

import pytest

from personal_notes.backend.core.authorization import Role
from personal_notes.backend.schemas.note import OwnerProfile
from personal_notes.backend.schemas.user import UserProfileResponse


class TestStoredRole:
    """Roles read from users rows always validate."""

    @pytest.mark.parametrize("stored,expected", [
        ("admin", Role.ADMIN),
        ("member", Role.USER),
        ("superuser", Role.USER),
        (Role.MODERATOR, Role.MODERATOR),
    ])
    def test_owner_profile_role(self, stored, expected):
        profile = OwnerProfile.model_validate({"id": "carol", "role": stored})

        assert profile.role is expected

    def test_user_profile_unknown_role(self):
        profile = UserProfileResponse.model_validate({
            "id": "carol",
            "role": "typo",
            "created_at": datetime(2024, 1, 1),
        })

        assert profile.role is Role.USER
        assert profile.model_dump(mode="json")["role"] == "user"
