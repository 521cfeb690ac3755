"""SQLAlchemy implementation of JoinRequest repository."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.join_request import JoinRequest, JoinRequestStatus
from infrastructure.database.models import GroupJoinRequestModel


class SQLAlchemyJoinRequestRepository:
    """SQLAlchemy implementation of IJoinRequestRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: UUID) -> JoinRequest | None:
        """Get a join request by ID."""
        model = await self._get_model(id)
        return self._to_entity(model) if model else None

    async def get_for_user(self, group_id: UUID, user_id: UUID) -> JoinRequest | None:
        """Get the request a user made for a group, whatever its status."""
        stmt = select(GroupJoinRequestModel).where(
            GroupJoinRequestModel.group_id == group_id,
            GroupJoinRequestModel.user_id == user_id,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def get_pending_for_group(self, group_id: UUID) -> list[JoinRequest]:
        """Get pending requests of a group, newest first."""
        stmt = (
            select(GroupJoinRequestModel)
            .where(
                GroupJoinRequestModel.group_id == group_id,
                GroupJoinRequestModel.status == JoinRequestStatus.PENDING.value,
            )
            .order_by(GroupJoinRequestModel.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def get_pending_group_ids(self, user_id: UUID) -> list[UUID]:
        """Get IDs of the groups a user has a pending request for."""
        stmt = select(GroupJoinRequestModel.group_id).where(
            GroupJoinRequestModel.user_id == user_id,
            GroupJoinRequestModel.status == JoinRequestStatus.PENDING.value,
        )
        result = await self._session.execute(stmt)
        return list(result.scalars())

    async def create(self, request: JoinRequest) -> JoinRequest:
        """Create a new join request."""
        model = self._to_model(request)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def update_status(self, id: UUID, status: JoinRequestStatus) -> JoinRequest:
        """Update the status of a join request."""
        model = await self._get_model(id)

        if not model:
            raise ValueError(f"Join request {id} not found")

        model.status = status.value
        await self._session.flush()
        return self._to_entity(model)

    async def delete(self, id: UUID) -> bool:
        """Delete a join request.

        Flushed right away so a replacement row for the same group and user
        can be inserted in the same transaction.
        """
        model = await self._get_model(id)

        if not model:
            return False

        await self._session.delete(model)
        await self._session.flush()
        return True

    async def _get_model(self, id: UUID) -> GroupJoinRequestModel | None:
        stmt = select(GroupJoinRequestModel).where(GroupJoinRequestModel.id == id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    def _to_entity(self, model: GroupJoinRequestModel) -> JoinRequest:
        """Convert ORM model to domain entity."""
        return JoinRequest(
            id=model.id,
            group_id=model.group_id,
            user_id=model.user_id,
            message=model.message,
            status=JoinRequestStatus(model.status),
            created_at=model.created_at,
        )

    def _to_model(self, entity: JoinRequest) -> GroupJoinRequestModel:
        """Convert domain entity to ORM model."""
        return GroupJoinRequestModel(
            id=entity.id,
            group_id=entity.group_id,
            user_id=entity.user_id,
            message=entity.message,
            status=entity.status.value,
            created_at=entity.created_at,
        )
