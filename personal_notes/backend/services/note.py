"""
Note Service.

Business logic layer for notes. Every operation resolves the actor's role
from the user directory, asks the authorization policy, and only then
touches the note store.
"""

from collections.abc import Mapping
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from personal_notes.backend.core.authorization import (
    Actor,
    NoteAction,
    NoteRef,
    enforce,
)
from personal_notes.backend.core.exceptions import (
    AuthorizationError,
    NotFoundError,
    ValidationError,
)
from personal_notes.backend.core.utils import utc_now
from personal_notes.backend.models.note import TITLE_MAX_LENGTH, Note
from personal_notes.backend.repositories.note import NoteRepository
from personal_notes.backend.repositories.user import UserRepository
from personal_notes.backend.services.base import BaseService

UPDATABLE_FIELDS = frozenset({"title", "content", "is_public"})


class NoteService(BaseService):
    """
    Service for note business logic.

    The actor's role is looked up on every call and never cached on the
    service, so a role change takes effect on the next call.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = NoteRepository(session)
        self.users = UserRepository(session)

    async def _resolve_actor(self, actor_id: str) -> Actor:
        """
        Build the actor from a fresh directory lookup.

        Raises:
            AuthorizationError: If the actor is not in the user directory
        """
        role = await self.users.get_role(actor_id)
        if role is None:
            self._logger.warning("Unknown actor", extra={"actor_id": actor_id})
            raise AuthorizationError("Unknown user")
        return Actor(id=actor_id, role=role)

    async def _load_note(self, note_id: str) -> Note:
        note = await self.repo.get_by_id_or_none(note_id)
        if note is None:
            raise NotFoundError("Note not found")
        return note

    def _validate_title(self, title: Any) -> None:
        if not isinstance(title, str):
            raise ValidationError("title must be a string", details={"title": "Expected a string"})
        self._validate_required({"title": title}, ["title"])
        self._validate_string_length(title, "title", max_length=TITLE_MAX_LENGTH)

    def _validate_content(self, content: Any) -> None:
        if not isinstance(content, str):
            raise ValidationError("content must be a string", details={"content": "Expected a string"})
        self._validate_required({"content": content}, ["content"])

    def _clean_update_fields(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        """
        Check a partial update and return only the fields to apply.

        Raises:
            ValidationError: Unknown field, null value, or invalid title/content
        """
        unknown = sorted(set(fields) - UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(
                "Unknown fields in update",
                details={"unknown_fields": unknown},
            )

        nulls = sorted(name for name, value in fields.items() if value is None)
        if nulls:
            raise ValidationError(
                "Fields cannot be null",
                details={"null_fields": nulls},
            )

        if "title" in fields:
            self._validate_title(fields["title"])
        if "content" in fields:
            self._validate_content(fields["content"])
        if "is_public" in fields and not isinstance(fields["is_public"], bool):
            raise ValidationError(
                "is_public must be a boolean",
                details={"is_public": "Expected a boolean"},
            )

        return dict(fields)

    async def create_note(
        self,
        actor_id: str,
        title: str,
        content: str,
        is_public: bool = False,
    ) -> Note:
        """
        Create a note owned by the actor.

        The owner is always the actor; callers cannot choose it.

        Raises:
            ValidationError: Empty title, title over 256 characters, or empty content
            AuthorizationError: Actor not in the user directory
        """
        self._validate_title(title)
        self._validate_content(content)

        actor = await self._resolve_actor(actor_id)
        enforce(NoteAction.CREATE, actor)

        self._log_operation("Creating note", actor_id=actor.id, is_public=is_public)

        note = await self._execute_db_operation(
            "create_note",
            self.repo.create(
                title=title,
                content=content,
                is_public=is_public,
                owner_id=actor.id,
            ),
        )

        self._log_debug("Note created", note_id=note.id)
        return note

    async def update_note(
        self,
        actor_id: str,
        note_id: str,
        fields: Mapping[str, Any],
    ) -> Note:
        """
        Update the actor's own note.

        Args:
            actor_id: Authenticated user ID
            note_id: Note to update
            fields: Only the fields being changed (title, content, is_public)

        Raises:
            NotFoundError: Note does not exist
            AuthorizationError: Actor does not own the note (admins included)
            ValidationError: Invalid or unknown fields
        """
        actor = await self._resolve_actor(actor_id)
        note = await self._load_note(note_id)
        enforce(NoteAction.UPDATE, actor, NoteRef.of(note))

        changes = self._clean_update_fields(fields)
        if not changes:
            return note

        self._log_operation(
            "Updating note",
            note_id=note_id,
            fields=sorted(changes),
        )

        return await self._execute_db_operation(
            "update_note",
            self.repo.update(note, updated_at=utc_now(), **changes),
        )

    async def delete_note(self, actor_id: str, note_id: str) -> None:
        """
        Delete the actor's own note.

        Raises:
            NotFoundError: Note does not exist
            AuthorizationError: Actor does not own the note
        """
        actor = await self._resolve_actor(actor_id)
        note = await self._load_note(note_id)
        enforce(NoteAction.DELETE, actor, NoteRef.of(note))

        self._log_operation("Deleting note", note_id=note_id)

        await self._execute_db_operation("delete_note", self.repo.delete(note))

    async def list_notes(self, actor_id: str) -> list[Note]:
        """Notes owned by the actor plus every public note, newest first."""
        actor = await self._resolve_actor(actor_id)
        enforce(NoteAction.LIST, actor)
        return await self.repo.list_visible_to(actor.id)

    async def list_own_notes(self, actor_id: str) -> list[Note]:
        """Notes owned by the actor, newest first."""
        actor = await self._resolve_actor(actor_id)
        enforce(NoteAction.LIST_OWN, actor)
        return await self.repo.list_owned_by(actor.id)

    async def get_note(self, actor_id: str, note_id: str) -> Note:
        """
        Get a note the actor may read, with its owner loaded.

        Raises:
            NotFoundError: Note does not exist, or is private and not the actor's
        """
        actor = await self._resolve_actor(actor_id)
        note = await self.repo.get_with_owner(note_id)
        if note is None:
            raise NotFoundError("Note not found")
        enforce(NoteAction.READ, actor, NoteRef.of(note))
        return note

    async def admin_list_notes(self, actor_id: str) -> list[Note]:
        """
        Every note from every owner, private ones included.

        Raises:
            AuthorizationError: Actor's current role is not admin
        """
        actor = await self._resolve_actor(actor_id)
        enforce(NoteAction.ADMIN_LIST, actor)

        self._log_operation("Admin listing all notes", actor_id=actor.id)
        return await self.repo.list_all()

    async def admin_delete_note(self, actor_id: str, note_id: str) -> None:
        """
        Delete any note regardless of owner.

        The role is checked before the lookup so non-admins cannot
        probe which note IDs exist.

        Raises:
            AuthorizationError: Actor's current role is not admin
            NotFoundError: Note does not exist
        """
        actor = await self._resolve_actor(actor_id)
        enforce(NoteAction.ADMIN_DELETE, actor)

        note = await self._load_note(note_id)

        self._log_operation(
            "Admin deleting note",
            actor_id=actor.id,
            note_id=note_id,
            owner_id=note.owner_id,
        )

        await self._execute_db_operation("admin_delete_note", self.repo.delete(note))
