# Import all models so relationships resolve and metadata is complete
from personal_notes.backend.models.base import Base
from personal_notes.backend.models.note import Note
from personal_notes.backend.models.user import User

__all__ = ["Base", "Note", "User"]
