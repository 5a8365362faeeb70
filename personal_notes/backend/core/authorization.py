"""
Note Authorization Policy.

Pure decision logic for note access. Given an actor, a requested action and
(optionally) the target note, decide whether the action is allowed.
No database access happens here: callers resolve the actor's role with a
fresh directory lookup and pass it in.

Rules:
    LIST, LIST_OWN, CREATE   always allowed for an authenticated actor
    READ                     owner or public note, otherwise NOT_FOUND
    UPDATE, DELETE           owner only, otherwise FORBIDDEN (no role bypass)
    ADMIN_LIST, ADMIN_DELETE privileged role only, otherwise FORBIDDEN

Usage:
    from personal_notes.backend.core.authorization import (
        Actor, NoteAction, NoteRef, Role, enforce,
    )

    actor = Actor(id=user_id, role=await users.get_role(user_id))
    enforce(NoteAction.UPDATE, actor, NoteRef.of(note))
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, assert_never

from personal_notes.backend.core.exceptions import AuthorizationError, NotFoundError
from personal_notes.backend.core.logging import get_logger

logger = get_logger(__name__)


# Legacy spellings accepted from the data store.
ROLE_ALIASES = {"member": "user"}


class Role(str, Enum):
    """Closed set of user roles. Stored as the string value."""

    USER = "user"
    ADMIN = "admin"
    MODERATOR = "moderator"

    @classmethod
    def parse(cls, value: str) -> "Role":
        """
        Convert a stored role string to a Role.

        Accepts the legacy aliases in ROLE_ALIASES.

        Raises:
            ValueError: If the value is not a known role or alias
        """
        normalized = value.strip().lower()
        return cls(ROLE_ALIASES.get(normalized, normalized))

    @classmethod
    def from_stored(cls, value: str) -> "Role":
        """
        Convert a stored role string to a Role, failing closed.

        Values that are not a known role or alias map to USER.
        """
        try:
            return cls.parse(value)
        except ValueError:
            logger.warning(
                "Unknown stored role, treating as user",
                extra={"stored_role": value},
            )
            return cls.USER


STORED_ROLE_VALUES = tuple(role.value for role in Role) + tuple(ROLE_ALIASES)


class NoteAction(str, Enum):
    """Operations the policy can decide on."""

    LIST = "list"
    LIST_OWN = "list_own"
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    ADMIN_LIST = "admin_list"
    ADMIN_DELETE = "admin_delete"


class Decision(Enum):
    """Outcome of a policy check."""

    ALLOW = "allow"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class Actor:
    """The authenticated identity making a request, with its current role."""

    id: str
    role: Role


@dataclass(frozen=True)
class NoteRef:
    """The parts of a note the policy looks at."""

    owner_id: str
    is_public: bool

    @classmethod
    def of(cls, note: Any) -> "NoteRef":
        """Build a NoteRef from any object with owner_id and is_public."""
        return cls(owner_id=note.owner_id, is_public=bool(note.is_public))


_NOTE_REQUIRED = frozenset({
    NoteAction.READ,
    NoteAction.UPDATE,
    NoteAction.DELETE,
})


def is_privileged(role: Role) -> bool:
    """Whether the role grants the admin-only note operations."""
    match role:
        case Role.ADMIN:
            return True
        case Role.USER:
            return False
        case Role.MODERATOR:
            # Reserved; grants nothing beyond a regular user yet.
            return False
        case _:
            assert_never(role)


def is_owner(actor_id: str, note: NoteRef) -> bool:
    """Whether the actor owns the note."""
    return note.owner_id == actor_id


def can_read(actor_id: str, note: NoteRef) -> bool:
    """Owners read their own notes; everyone reads public notes."""
    return is_owner(actor_id, note) or note.is_public


def decide(action: NoteAction, actor: Actor, note: NoteRef | None = None) -> Decision:
    """
    Decide whether the actor may perform the action.

    Args:
        action: Requested operation
        actor: Authenticated actor with a freshly resolved role
        note: Target note, required for READ, UPDATE and DELETE

    Returns:
        Decision.ALLOW, Decision.FORBIDDEN, or Decision.NOT_FOUND

    Raises:
        ValueError: If the action needs a note and none was given
    """
    if action in _NOTE_REQUIRED and note is None:
        raise ValueError(f"Action {action.value} requires a target note")

    match action:
        case NoteAction.LIST | NoteAction.LIST_OWN | NoteAction.CREATE:
            return Decision.ALLOW
        case NoteAction.READ:
            if can_read(actor.id, note):
                return Decision.ALLOW
            # Private notes are hidden from non-owners, not refused.
            return Decision.NOT_FOUND
        case NoteAction.UPDATE | NoteAction.DELETE:
            if is_owner(actor.id, note):
                return Decision.ALLOW
            return Decision.FORBIDDEN
        case NoteAction.ADMIN_LIST | NoteAction.ADMIN_DELETE:
            if is_privileged(actor.role):
                return Decision.ALLOW
            return Decision.FORBIDDEN
        case _:
            assert_never(action)


_DENIAL_MESSAGES: dict[NoteAction, str] = {
    NoteAction.UPDATE: "You can only update your own notes",
    NoteAction.DELETE: "You can only delete your own notes",
    NoteAction.ADMIN_LIST: "You do not have permission to perform this action",
    NoteAction.ADMIN_DELETE: "You do not have permission to perform this action",
}


def enforce(action: NoteAction, actor: Actor, note: NoteRef | None = None) -> None:
    """
    Raise unless the actor may perform the action.

    Raises:
        AuthorizationError: Decision is FORBIDDEN
        NotFoundError: Decision is NOT_FOUND
    """
    decision = decide(action, actor, note)
    if decision is Decision.ALLOW:
        return

    logger.warning(
        "Note access denied",
        extra={
            "action": action.value,
            "actor_id": actor.id,
            "role": actor.role.value,
            "decision": decision.value,
        },
    )

    if decision is Decision.NOT_FOUND:
        raise NotFoundError("Note not found")
    raise AuthorizationError(_DENIAL_MESSAGES.get(action, "Permission denied"))
