"""Group repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.group import Group


class IGroupRepository(Protocol):
    """Repository interface for Group entities."""

    async def get(self, id: UUID) -> Group | None:
        """Get a group by ID."""
        ...

    async def get_many(self, ids: list[UUID]) -> list[Group]:
        """Get groups by ID, newest first."""
        ...

    async def find(
        self,
        limit: int | None = 50,
        offset: int = 0,
        location: str | None = None,
        search: str | None = None,
        exclude_ids: list[UUID] | None = None,
    ) -> list[Group]:
        """List groups newest first with optional filters."""
        ...

    async def create(self, group: Group) -> Group:
        """Create a new group."""
        ...

    async def update(self, group: Group) -> Group:
        """Update an existing group."""
        ...

    async def delete(self, id: UUID) -> bool:
        """Delete a group."""
        ...
