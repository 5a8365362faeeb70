"""
Unit Test Fixtures.

Fixtures for unit tests - all external dependencies are mocked.
Unit tests should be fast and isolated, never touching real databases.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest


# =============================================================================
# Database Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_db_session() -> AsyncMock:
    """
    Mock database session for unit tests.

    Usage:
        def test_service(mock_db_session: AsyncMock):
            service = NoteService(mock_db_session)
    """
    session = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.execute = AsyncMock()
    session.add = MagicMock()
    session.delete = AsyncMock()
    return session


# =============================================================================
# Settings Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_settings() -> MagicMock:
    """
    Mock secrets.

    Usage:
        def test_with_settings(mock_settings):
            with patch("module.get_settings", return_value=mock_settings):
                ...
    """
    settings = MagicMock()
    settings.db_password = "test_pass"
    settings.jwt_secret = "test-secret-key-for-testing-only-0123456789"
    return settings


# =============================================================================
# Model Mock Fixtures
# =============================================================================


@pytest.fixture
def note_factory():
    """Factory for note stand-ins with the attributes services read."""
    return _make_note


def _make_note(
    note_id: str = "note-1",
    owner_id: str = "user-a",
    is_public: bool = False,
    title: str = "Title",
    content: str = "Body",
) -> MagicMock:
    note = MagicMock()
    note.id = note_id
    note.owner_id = owner_id
    note.is_public = is_public
    note.title = title
    note.content = content
    return note
