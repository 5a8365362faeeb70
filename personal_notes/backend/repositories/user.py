"""
User Repository.

Data access for the user directory.
"""

from sqlalchemy import select, update

from personal_notes.backend.core.authorization import Role
from personal_notes.backend.models.user import User
from personal_notes.backend.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for User model."""

    model = User

    async def get_role(self, user_id: str) -> Role | None:
        """
        Read the user's role straight from the database.

        Selects the column rather than the entity so the value never comes
        from the session's identity map.

        Returns:
            The user's role, or None if the user is unknown. A stored value
            outside the known roles resolves to Role.USER.
        """
        result = await self.session.execute(
            select(User.role).where(User.id == user_id)
        )
        value = result.scalar_one_or_none()
        if value is None:
            return None
        return Role.from_stored(value)

    async def set_role(self, user_id: str, role: Role) -> bool:
        """
        Store a new role for the user.

        Returns:
            True if a user row was updated
        """
        result = await self.session.execute(
            update(User)
            .where(User.id == user_id)
            .values(role=role.value)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount > 0
