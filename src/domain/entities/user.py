"""User domain entity (read-only view of the external users table)."""

from dataclasses import dataclass
from uuid import UUID

MEMBER_FALLBACK_NAME = "Membre"
REQUESTER_FALLBACK_NAME = "Utilisateur"


@dataclass
class User:
    """Public profile of an app user."""

    id: UUID
    username: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    avatar_url: str | None = None
    email: str | None = None

    def display_name(self, fallback: str = MEMBER_FALLBACK_NAME) -> str:
        """Full name when both parts are known, otherwise the username."""
        if self.first_name and self.last_name:
            return f"{self.first_name} {self.last_name}"
        return self.username or fallback
