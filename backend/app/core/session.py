"""
Explicit session context passed into trip and memoir operations.
"""
from dataclasses import dataclass
from app.models.trip import CollaboratorRole

EDIT_ROLES = (CollaboratorRole.OWNER, CollaboratorRole.EDITOR)


@dataclass(frozen=True)
class SessionContext:
    """Current user and their role on one trip."""
    user_id: int
    username: str
    trip_id: int
    role: CollaboratorRole

    @property
    def can_edit(self) -> bool:
        return self.role in EDIT_ROLES

    @property
    def is_owner(self) -> bool:
        return self.role == CollaboratorRole.OWNER
