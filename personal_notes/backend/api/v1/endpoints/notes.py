"""
Notes API Endpoints.

REST API endpoints for personal notes. Every route requires an
authenticated caller; authorization happens in NoteService.
"""

from fastapi import APIRouter

from personal_notes.backend.core.dependencies import CurrentUser, DbSession, RequestId
from personal_notes.backend.schemas.base import ApiResponse, ResponseMetadata
from personal_notes.backend.schemas.note import (
    NoteCreate,
    NoteResponse,
    NoteUpdate,
    NoteWithOwnerResponse,
)
from personal_notes.backend.services.note import NoteService

router = APIRouter()


@router.post(
    "",
    response_model=ApiResponse[NoteResponse],
    status_code=201,
    summary="Create a note",
    description="Create a note owned by the caller. Private unless is_public is set.",
)
async def create_note(
    data: NoteCreate,
    db: DbSession,
    user: CurrentUser,
    request_id: RequestId,
) -> ApiResponse[NoteResponse]:
    """Create a new note."""
    service = NoteService(db)
    note = await service.create_note(
        user.id,
        title=data.title,
        content=data.content,
        is_public=data.is_public,
    )
    return ApiResponse(
        data=NoteResponse.model_validate(note),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.get(
    "",
    response_model=ApiResponse[list[NoteWithOwnerResponse]],
    summary="List visible notes",
    description="The caller's own notes plus all public notes, newest first.",
)
async def list_notes(
    db: DbSession,
    user: CurrentUser,
    request_id: RequestId,
) -> ApiResponse[list[NoteWithOwnerResponse]]:
    """List own and public notes."""
    notes = await NoteService(db).list_notes(user.id)
    return ApiResponse(
        data=[NoteWithOwnerResponse.model_validate(note) for note in notes],
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.get(
    "/mine",
    response_model=ApiResponse[list[NoteResponse]],
    summary="List my notes",
    description="Only the caller's own notes, newest first.",
)
async def list_my_notes(
    db: DbSession,
    user: CurrentUser,
    request_id: RequestId,
) -> ApiResponse[list[NoteResponse]]:
    """List the caller's notes."""
    notes = await NoteService(db).list_own_notes(user.id)
    return ApiResponse(
        data=[NoteResponse.model_validate(note) for note in notes],
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.get(
    "/admin",
    response_model=ApiResponse[list[NoteWithOwnerResponse]],
    summary="List all notes (admin)",
    description="Every note including private ones, with owner profile. Admin role required.",
)
async def admin_list_notes(
    db: DbSession,
    user: CurrentUser,
    request_id: RequestId,
) -> ApiResponse[list[NoteWithOwnerResponse]]:
    """List every note."""
    notes = await NoteService(db).admin_list_notes(user.id)
    return ApiResponse(
        data=[NoteWithOwnerResponse.model_validate(note) for note in notes],
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.delete(
    "/admin/{note_id}",
    status_code=204,
    summary="Delete any note (admin)",
    description="Delete a note regardless of owner. Admin role required.",
)
async def admin_delete_note(
    note_id: str,
    db: DbSession,
    user: CurrentUser,
) -> None:
    """Delete any note."""
    await NoteService(db).admin_delete_note(user.id, note_id)


@router.get(
    "/{note_id}",
    response_model=ApiResponse[NoteWithOwnerResponse],
    summary="Get a note",
    description="Get a note the caller owns or that is public. Private notes of others are reported as not found.",
)
async def get_note(
    note_id: str,
    db: DbSession,
    user: CurrentUser,
    request_id: RequestId,
) -> ApiResponse[NoteWithOwnerResponse]:
    """Get a note by ID."""
    note = await NoteService(db).get_note(user.id, note_id)
    return ApiResponse(
        data=NoteWithOwnerResponse.model_validate(note),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.patch(
    "/{note_id}",
    response_model=ApiResponse[NoteResponse],
    summary="Update a note",
    description="Update the caller's own note. Only provided fields are updated.",
)
async def update_note(
    note_id: str,
    data: NoteUpdate,
    db: DbSession,
    user: CurrentUser,
    request_id: RequestId,
) -> ApiResponse[NoteResponse]:
    """Update a note."""
    note = await NoteService(db).update_note(
        user.id,
        note_id,
        data.model_dump(exclude_unset=True),
    )
    return ApiResponse(
        data=NoteResponse.model_validate(note),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.delete(
    "/{note_id}",
    status_code=204,
    summary="Delete a note",
    description="Permanently delete the caller's own note.",
)
async def delete_note(
    note_id: str,
    db: DbSession,
    user: CurrentUser,
) -> None:
    """Delete a note."""
    await NoteService(db).delete_note(user.id, note_id)
