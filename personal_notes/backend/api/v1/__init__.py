"""
API Version 1 Router.

Aggregates all v1 endpoint routers.
"""

from fastapi import APIRouter

from personal_notes.backend.api.v1.endpoints import notes, users

router = APIRouter()

router.include_router(notes.router, prefix="/notes", tags=["notes"])
router.include_router(users.router, prefix="/users", tags=["users"])
