"""User repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.user import User


class IUserRepository(Protocol):
    """Read-only access to user profiles."""

    async def get_many(self, ids: list[UUID]) -> dict[UUID, User]:
        """Get profiles by ID, keyed by user ID. Unknown IDs are left out."""
        ...
