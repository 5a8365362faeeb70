"""
Users API Endpoints.

Read-only view of the caller's directory entry. Roles cannot be changed
through the API.
"""

from fastapi import APIRouter

from personal_notes.backend.core.dependencies import CurrentUser, DbSession, RequestId
from personal_notes.backend.schemas.base import ApiResponse, ResponseMetadata
from personal_notes.backend.schemas.user import UserProfileResponse
from personal_notes.backend.services.user import UserService

router = APIRouter()


@router.get(
    "/me",
    response_model=ApiResponse[UserProfileResponse],
    summary="Current user",
    description="The caller's profile and current role.",
)
async def get_me(
    db: DbSession,
    user: CurrentUser,
    request_id: RequestId,
) -> ApiResponse[UserProfileResponse]:
    """Get the caller's profile."""
    profile = await UserService(db).get_profile(user.id)
    return ApiResponse(
        data=UserProfileResponse.model_validate(profile),
        metadata=ResponseMetadata(request_id=request_id),
    )
