"""
User Service.

The user directory: records identities on first authentication and holds
the role the authorization policy reads. Roles are only assigned out of
band (CLI), never through the HTTP API.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from personal_notes.backend.core.authorization import Role
from personal_notes.backend.core.exceptions import NotFoundError
from personal_notes.backend.core.security import Identity
from personal_notes.backend.models.user import User
from personal_notes.backend.repositories.user import UserRepository
from personal_notes.backend.services.base import BaseService


class UserService(BaseService):
    """Service for the user directory."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = UserRepository(session)

    async def ensure_user(self, identity: Identity) -> User:
        """
        Return the directory entry for an authenticated identity.

        Creates it with the default role on first sight; afterwards only
        refreshes profile fields from the token. The role is never touched.
        """
        user = await self.repo.get_by_id_or_none(identity.user_id)

        if user is None:
            self._log_operation("Registering user", user_id=identity.user_id)
            return await self._execute_db_operation(
                "create_user",
                self.repo.create(
                    id=identity.user_id,
                    name=identity.name,
                    email=identity.email,
                    image=identity.image,
                    role=Role.USER.value,
                ),
            )

        changes = {
            field: value
            for field, value in (
                ("name", identity.name),
                ("email", identity.email),
                ("image", identity.image),
            )
            if value is not None and getattr(user, field) != value
        }
        if changes:
            self._log_debug("Refreshing user profile", user_id=user.id, fields=sorted(changes))
            user = await self._execute_db_operation(
                "refresh_user_profile",
                self.repo.update(user, **changes),
            )
        return user

    async def get_profile(self, user_id: str) -> User:
        """
        Get a user's directory entry.

        Raises:
            NotFoundError: If the user is unknown
        """
        user = await self.repo.get_by_id_or_none(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def assign_role(self, user_id: str, role: Role) -> User:
        """
        Change a user's role. Out-of-band administrative action only.

        Raises:
            NotFoundError: If the user is unknown
        """
        updated = await self._execute_db_operation(
            "assign_role",
            self.repo.set_role(user_id, role),
        )
        if not updated:
            raise NotFoundError("User not found")

        self._log_operation("Role assigned", user_id=user_id, role=role.value)
        return await self.get_profile(user_id)
