from personal_notes.backend.services.note import NoteService
from personal_notes.backend.services.user import UserService

__all__ = ["NoteService", "UserService"]
