"""
Security Utilities.

Verification of access tokens issued by the identity provider.
The service never logs users in itself; it only trusts a signed JWT
whose ``sub`` claim is the stable user identifier.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Any

from jose import JWTError, jwt

from personal_notes.backend.core.config import get_app_config, get_settings
from personal_notes.backend.core.exceptions import AuthenticationError
from personal_notes.backend.core.logging import get_logger
from personal_notes.backend.core.utils import utc_now

logger = get_logger(__name__)


@dataclass(frozen=True)
class Identity:
    """Authenticated identity taken from a verified access token."""

    user_id: str
    name: str | None = None
    email: str | None = None
    image: str | None = None


def create_access_token(data: dict[str, Any], expires_delta: timedelta | None = None) -> str:
    """
    Create a JWT access token.

    Production tokens come from the identity provider; this is used by
    the development CLI and by tests.

    Args:
        data: Payload data to encode (must include ``sub``)
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token
    """
    settings = get_settings()
    jwt_config = get_app_config().security.jwt
    to_encode = data.copy()

    if expires_delta:
        expire = utc_now() + expires_delta
    else:
        expire = utc_now() + timedelta(minutes=jwt_config.access_token_expire_minutes)

    to_encode.update({"exp": expire, "type": "access", "aud": jwt_config.audience})
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=jwt_config.algorithm)


def decode_token(token: str) -> dict[str, Any]:
    """
    Decode and validate a JWT token.

    Raises:
        AuthenticationError: If token is invalid or expired
    """
    settings = get_settings()
    jwt_config = get_app_config().security.jwt
    try:
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[jwt_config.algorithm],
            audience=jwt_config.audience,
        )
    except JWTError as e:
        logger.warning("Token decode failed", extra={"error": str(e)})
        raise AuthenticationError("Invalid or expired token")


def identity_from_token(token: str) -> Identity:
    """
    Verify an access token and extract the caller's identity.

    Raises:
        AuthenticationError: If the token is invalid, is not an access
            token, or has no subject
    """
    payload = decode_token(token)

    if payload.get("type") != "access":
        raise AuthenticationError("Invalid token type")

    subject = payload.get("sub")
    if not subject:
        raise AuthenticationError("Token has no subject")

    return Identity(
        user_id=str(subject),
        name=payload.get("name"),
        email=payload.get("email"),
        image=payload.get("picture"),
    )
