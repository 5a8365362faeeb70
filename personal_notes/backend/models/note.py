"""
Note Model.

Database model for personal notes. Every note has exactly one owner;
deleting the owner deletes their notes.
"""

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, String, Text, false
from sqlalchemy.orm import Mapped, mapped_column, relationship

from personal_notes.backend.models.base import Base, TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from personal_notes.backend.models.user import User

TITLE_MAX_LENGTH = 256


class Note(UUIDMixin, TimestampMixin, Base):
    """
    Note database model.

    ``is_public`` controls read access by other users only; it never
    grants write access.
    """

    __tablename__ = "notes"

    title: Mapped[str] = mapped_column(
        String(TITLE_MAX_LENGTH),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    owner_id: Mapped[str] = mapped_column(
        String(255),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    is_public: Mapped[bool] = mapped_column(
        default=False,
        server_default=false(),
        nullable=False,
        index=True,
    )

    owner: Mapped["User"] = relationship(back_populates="notes")

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, title={self.title!r}, owner_id={self.owner_id})>"
