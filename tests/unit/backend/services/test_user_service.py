"""
Unit Tests for User Service.

Tests directory registration and role assignment with mocked repositories.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from personal_notes.backend.core.authorization import Role
from personal_notes.backend.core.exceptions import NotFoundError
from personal_notes.backend.core.security import Identity
from personal_notes.backend.services.user import UserService


@pytest.fixture
def service(mock_db_session):
    return UserService(mock_db_session)


def _user(**fields) -> MagicMock:
    user = MagicMock()
    user.id = fields.get("id", "user-a")
    user.name = fields.get("name", "Ada")
    user.email = fields.get("email", "ada@example.com")
    user.image = fields.get("image")
    user.role = fields.get("role", "user")
    return user


class TestEnsureUser:
    """Tests for ensure_user."""

    @pytest.mark.asyncio
    async def test_first_sight_creates_regular_user(self, service):
        identity = Identity(user_id="user-a", name="Ada", email="ada@example.com")

        with patch.object(service.repo, "get_by_id_or_none", AsyncMock(return_value=None)), \
             patch.object(service.repo, "create", AsyncMock(return_value=_user())) as mock_create:
            await service.ensure_user(identity)

        mock_create.assert_called_once_with(
            id="user-a",
            name="Ada",
            email="ada@example.com",
            image=None,
            role="user",
        )

    @pytest.mark.asyncio
    async def test_known_user_unchanged(self, service):
        existing = _user()

        with patch.object(service.repo, "get_by_id_or_none", AsyncMock(return_value=existing)), \
             patch.object(service.repo, "update", AsyncMock()) as mock_update:
            result = await service.ensure_user(Identity(user_id="user-a", name="Ada"))

        mock_update.assert_not_called()
        assert result is existing

    @pytest.mark.asyncio
    async def test_profile_refreshed_but_role_untouched(self, service):
        existing = _user(role="admin")

        with patch.object(service.repo, "get_by_id_or_none", AsyncMock(return_value=existing)), \
             patch.object(service.repo, "update", AsyncMock(return_value=existing)) as mock_update:
            await service.ensure_user(Identity(user_id="user-a", name="Ada L."))

        mock_update.assert_called_once_with(existing, name="Ada L.")


class TestAssignRole:
    """Tests for assign_role."""

    @pytest.mark.asyncio
    async def test_assigns_role(self, service):
        admin = _user(role="admin")

        with patch.object(service.repo, "set_role", AsyncMock(return_value=True)) as mock_set, \
             patch.object(service.repo, "get_by_id_or_none", AsyncMock(return_value=admin)):
            result = await service.assign_role("user-a", Role.ADMIN)

        mock_set.assert_called_once_with("user-a", Role.ADMIN)
        assert result is admin

    @pytest.mark.asyncio
    async def test_unknown_user(self, service):
        with patch.object(service.repo, "set_role", AsyncMock(return_value=False)):
            with pytest.raises(NotFoundError, match="User not found"):
                await service.assign_role("ghost", Role.ADMIN)
