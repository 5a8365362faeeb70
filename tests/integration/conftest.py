"""
Integration Test Fixtures.

Fixtures for integration tests - uses real database and services.
These fixtures build on the root conftest.py database fixtures.
"""

from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import datetime
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from personal_notes.backend.core.authorization import Role
from personal_notes.backend.core.database import get_db_session
from personal_notes.backend.models.note import Note
from personal_notes.backend.models.user import User


# =============================================================================
# Mock Settings Helper
# =============================================================================


def _create_mock_settings(values: dict[str, Any]) -> Any:
    """Create a mock secrets object for testing."""
    settings = MagicMock()
    settings.db_password = values["db_password"]
    settings.jwt_secret = values["jwt_secret"]
    return settings


@pytest.fixture
def patched_settings(test_settings: dict[str, Any]):
    """
    Patch secrets lookups so no config/.env is needed.

    Token minting and verification both read the patched secret.
    """
    mock_settings = _create_mock_settings(test_settings)
    with patch("personal_notes.backend.core.config.get_settings") as mock_config_settings, \
         patch("personal_notes.backend.core.security.get_settings") as mock_security_settings:
        mock_config_settings.return_value = mock_settings
        mock_security_settings.return_value = mock_settings
        yield mock_settings


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
async def client(
    db_session: AsyncSession,
    patched_settings: Any,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create a test client with database session override.

    The client uses the test database session, so data seeded through
    ``db_session`` is visible to requests and everything is rolled back
    after the test.

    Usage:
        async def test_health_endpoint(client: AsyncClient):
            response = await client.get("/health")
            assert response.status_code == 200
    """
    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    from personal_notes.backend.main import create_app

    app = create_app()
    app.dependency_overrides[get_db_session] = override_get_db_session

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# =============================================================================
# Authentication Fixtures
# =============================================================================


@pytest.fixture
def auth_headers(patched_settings: Any) -> Callable[..., dict[str, str]]:
    """
    Build bearer headers for a given user ID.

    Usage:
        async def test_protected(client, auth_headers):
            response = await client.get("/api/v1/users/me", headers=auth_headers("user-a"))
    """
    from personal_notes.backend.core.security import create_access_token

    def _headers(user_id: str, **claims: Any) -> dict[str, str]:
        token = create_access_token(data={"sub": user_id, **claims})
        return {"Authorization": f"Bearer {token}"}

    return _headers


# =============================================================================
# Data Fixtures
# =============================================================================


@pytest.fixture
def make_user(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    """Insert a user directory entry with the given role."""

    async def _make_user(
        user_id: str,
        role: Role = Role.USER,
        name: str | None = None,
        email: str | None = None,
    ) -> User:
        user = User(
            id=user_id,
            name=name or user_id,
            email=email or f"{user_id}@example.com",
            role=role.value,
        )
        db_session.add(user)
        await db_session.flush()
        return user

    return _make_user


@pytest.fixture
def make_note(db_session: AsyncSession) -> Callable[..., Awaitable[Note]]:
    """Insert a note directly, bypassing the service layer."""

    async def _make_note(
        owner_id: str,
        title: str = "Title",
        content: str = "Body",
        is_public: bool = False,
        created_at: datetime | None = None,
    ) -> Note:
        fields: dict[str, Any] = {
            "owner_id": owner_id,
            "title": title,
            "content": content,
            "is_public": is_public,
        }
        if created_at is not None:
            fields["created_at"] = created_at
        note = Note(**fields)
        db_session.add(note)
        await db_session.flush()
        return note

    return _make_note


# =============================================================================
# API Response Assertion Helpers
# =============================================================================


class ApiAssertions:
    """Helper class for API response assertions."""

    @staticmethod
    def assert_success(response: Any, expected_status: int = 200) -> dict[str, Any]:
        """
        Assert API response is successful.

        Returns:
            Response JSON data
        """
        assert response.status_code == expected_status, (
            f"Expected status {expected_status}, got {response.status_code}: "
            f"{response.text}"
        )
        data = response.json()
        assert data.get("success") is True, f"Response not successful: {data}"
        return data

    @staticmethod
    def assert_error(
        response: Any,
        expected_status: int,
        expected_code: str | None = None,
    ) -> dict[str, Any]:
        """
        Assert API response is an error.

        Returns:
            Response JSON data
        """
        assert response.status_code == expected_status, (
            f"Expected status {expected_status}, got {response.status_code}: "
            f"{response.text}"
        )
        data = response.json()
        assert data.get("success") is False, f"Response should be error: {data}"
        assert data.get("error") is not None, f"Missing error details: {data}"

        if expected_code:
            actual_code = data["error"].get("code")
            assert actual_code == expected_code, (
                f"Expected error code {expected_code}, got {actual_code}"
            )

        return data

    @staticmethod
    def assert_validation_error(
        response: Any,
        field: str | None = None,
    ) -> dict[str, Any]:
        """Assert API response is a request validation error (422)."""
        data = ApiAssertions.assert_error(response, 422, "VAL_REQUEST_INVALID")

        if field:
            errors = data["error"].get("details", {}).get("validation_errors", [])
            fields = [e.get("field", "") for e in errors]
            assert any(field in f for f in fields), (
                f"Expected validation error for field '{field}', "
                f"got errors for: {fields}"
            )

        return data


@pytest.fixture
def api() -> ApiAssertions:
    """Provide API assertion helpers."""
    return ApiAssertions()
