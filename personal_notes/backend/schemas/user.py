"""
User Schemas.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from personal_notes.backend.schemas.base import StoredRole


class UserProfileResponse(BaseModel):
    """The caller's own profile, including their current role."""

    id: str
    name: str | None = None
    email: str | None = None
    image: str | None = None
    role: StoredRole
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
