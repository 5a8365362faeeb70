"""
User Model.

The user directory: one row per identity-provider subject, carrying the
role used for authorization decisions.
"""

from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from personal_notes.backend.core.authorization import STORED_ROLE_VALUES, Role
from personal_notes.backend.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from personal_notes.backend.models.note import Note


class User(TimestampMixin, Base):
    """
    User database model.

    The primary key is the identity provider's subject, not a generated id.
    ``role`` is only changed out of band (CLI or direct data store edit).
    """

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            "role IN (" + ", ".join(f"'{value}'" for value in STORED_ROLE_VALUES) + ")",
            name="ck_users_role",
        ),
    )

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    image: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    role: Mapped[str] = mapped_column(
        String(32),
        default=Role.USER.value,
        server_default=Role.USER.value,
        nullable=False,
    )

    notes: Mapped[list["Note"]] = relationship(
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, role={self.role!r})>"
