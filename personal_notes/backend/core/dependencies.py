"""
FastAPI Dependencies.

Shared dependencies for request handling: database session, request ID,
and the authenticated actor.
"""

import uuid
from typing import Annotated

from fastapi import Depends, Header
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from personal_notes.backend.core.database import get_db_session
from personal_notes.backend.core.exceptions import AuthenticationError
from personal_notes.backend.core.logging import get_logger
from personal_notes.backend.core.security import Identity, identity_from_token
from personal_notes.backend.models.user import User
from personal_notes.backend.services.user import UserService

logger = get_logger(__name__)

DbSession = Annotated[AsyncSession, Depends(get_db_session)]

_bearer = HTTPBearer(auto_error=False)


async def get_request_id(x_request_id: str | None = Header(None)) -> str:
    """Extract or generate request ID from headers."""
    return x_request_id or str(uuid.uuid4())


RequestId = Annotated[str, Depends(get_request_id)]


async def get_current_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> Identity:
    """
    Verify the bearer token and return the caller's identity.

    Raises:
        AuthenticationError: No token, or the token does not verify
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Not authenticated")
    return identity_from_token(credentials.credentials)


async def get_current_user(
    db: DbSession,
    identity: Identity = Depends(get_current_identity),
) -> User:
    """
    Resolve the authenticated caller to a user directory entry.

    The user is created on first successful authentication. The role on
    the returned object is informational; services re-read it per call.
    """
    return await UserService(db).ensure_user(identity)


CurrentUser = Annotated[User, Depends(get_current_user)]
