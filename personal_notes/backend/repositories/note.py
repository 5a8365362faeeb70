"""
Note Repository.

Data access layer for notes. Visibility filters live here as SQL
predicates; the decision of which filter applies belongs to the service.
"""

from sqlalchemy import or_, select
from sqlalchemy.orm import selectinload

from personal_notes.backend.models.note import Note
from personal_notes.backend.repositories.base import BaseRepository


class NoteRepository(BaseRepository[Note]):
    """
    Repository for Note model.

    All listing queries order by creation time, newest first.
    """

    model = Note

    async def get_with_owner(self, id: str) -> Note | None:
        """Get a note with its owner loaded, or None if absent."""
        result = await self.session.execute(
            select(Note)
            .options(selectinload(Note.owner))
            .where(Note.id == str(id))
        )
        return result.scalar_one_or_none()

    async def list_visible_to(self, user_id: str) -> list[Note]:
        """
        Get notes owned by the user plus every public note.

        Args:
            user_id: ID of the reading user

        Returns:
            Notes with owners loaded, newest first
        """
        result = await self.session.execute(
            select(Note)
            .options(selectinload(Note.owner))
            .where(or_(Note.owner_id == user_id, Note.is_public.is_(True)))
            .order_by(Note.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_owned_by(self, user_id: str) -> list[Note]:
        """Get notes owned by the user, newest first."""
        result = await self.session.execute(
            select(Note)
            .where(Note.owner_id == user_id)
            .order_by(Note.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_all(self) -> list[Note]:
        """Get every note from every owner, private ones included."""
        result = await self.session.execute(
            select(Note)
            .options(selectinload(Note.owner))
            .order_by(Note.created_at.desc())
        )
        return list(result.scalars().all())
