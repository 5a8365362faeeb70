"""
Note Schemas.

Pydantic schemas for note API request/response validation.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from personal_notes.backend.schemas.base import StoredRole
from personal_notes.backend.models.note import TITLE_MAX_LENGTH


class NoteCreate(BaseModel):
    """
    Schema for creating a new note.

    There is deliberately no owner field; unknown fields such as
    ``owner_id`` are ignored and the owner is always the caller.
    """

    title: str = Field(
        ...,
        min_length=1,
        max_length=TITLE_MAX_LENGTH,
        description="Note title",
        examples=["Public Post"],
    )
    content: str = Field(
        ...,
        min_length=1,
        description="Note content",
        examples=["hi"],
    )
    is_public: bool = Field(
        default=False,
        description="Whether other users can read the note",
    )


class NoteUpdate(BaseModel):
    """Schema for updating an existing note. Only provided fields change."""

    title: str | None = Field(
        default=None,
        min_length=1,
        max_length=TITLE_MAX_LENGTH,
        description="Note title",
    )
    content: str | None = Field(
        default=None,
        min_length=1,
        description="Note content",
    )
    is_public: bool | None = Field(
        default=None,
        description="Visibility to other users",
    )


class OwnerProfile(BaseModel):
    """Public profile of a note's owner. Never includes the email address."""

    id: str
    name: str | None = None
    role: StoredRole
    image: str | None = None

    model_config = ConfigDict(from_attributes=True)


class NoteResponse(BaseModel):
    """Schema for note in API responses."""

    id: str = Field(description="Note unique identifier")
    title: str = Field(description="Note title")
    content: str = Field(description="Note content")
    owner_id: str = Field(description="ID of the owning user")
    is_public: bool = Field(description="Whether other users can read the note")
    created_at: datetime = Field(description="Creation timestamp")
    updated_at: datetime = Field(description="Last update timestamp")

    model_config = ConfigDict(from_attributes=True)


class NoteWithOwnerResponse(NoteResponse):
    """Note with its owner's public profile attached."""

    owner: OwnerProfile
