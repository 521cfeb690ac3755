"""Join request repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.join_request import JoinRequest, JoinRequestStatus


class IJoinRequestRepository(Protocol):
    """Repository interface for JoinRequest entities."""

    async def get(self, id: UUID) -> JoinRequest | None:
        """Get a join request by ID."""
        ...

    async def get_for_user(self, group_id: UUID, user_id: UUID) -> JoinRequest | None:
        """Get the request a user made for a group, whatever its status."""
        ...

    async def get_pending_for_group(self, group_id: UUID) -> list[JoinRequest]:
        """Get pending requests of a group, newest first."""
        ...

    async def get_pending_group_ids(self, user_id: UUID) -> list[UUID]:
        """Get IDs of the groups a user has a pending request for."""
        ...

    async def create(self, request: JoinRequest) -> JoinRequest:
        """Create a new join request."""
        ...

    async def update_status(self, id: UUID, status: JoinRequestStatus) -> JoinRequest:
        """Update the status of a join request."""
        ...

    async def delete(self, id: UUID) -> bool:
        """Delete a join request."""
        ...
