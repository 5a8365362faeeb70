from personal_notes.backend.repositories.note import NoteRepository
from personal_notes.backend.repositories.user import UserRepository

__all__ = ["NoteRepository", "UserRepository"]
