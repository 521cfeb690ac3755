"""Membership repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.group import GroupMember


class IMembershipRepository(Protocol):
    """Repository interface for GroupMember rows, keyed by (group_id, user_id)."""

    async def get(self, group_id: UUID, user_id: UUID) -> GroupMember | None:
        """Get a membership regardless of its status."""
        ...

    async def get_active(self, group_id: UUID) -> list[GroupMember]:
        """Get active memberships of a group, oldest first."""
        ...

    async def get_active_for_groups(self, group_ids: list[UUID]) -> list[GroupMember]:
        """Get active memberships of several groups."""
        ...

    async def get_active_group_ids(self, user_id: UUID) -> list[UUID]:
        """Get IDs of the groups a user is an active member of."""
        ...

    async def add(self, member: GroupMember) -> GroupMember:
        """Insert a new membership."""
        ...

    async def save(self, member: GroupMember) -> GroupMember:
        """Persist role, status and joined_at of an existing membership."""
        ...

    async def upsert(self, member: GroupMember) -> GroupMember:
        """Insert the membership or overwrite the existing row for the same key."""
        ...
