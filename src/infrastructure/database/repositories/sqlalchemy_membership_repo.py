"""SQLAlchemy implementation of Membership repository."""

from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.group import GroupMember, MemberRole, MembershipStatus
from infrastructure.database.models import GroupMemberModel


class SQLAlchemyMembershipRepository:
    """SQLAlchemy implementation of IMembershipRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, group_id: UUID, user_id: UUID) -> GroupMember | None:
        """Get a membership regardless of its status."""
        model = await self._get_model(group_id, user_id)
        return self._to_entity(model) if model else None

    async def get_active(self, group_id: UUID) -> list[GroupMember]:
        """Get active memberships of a group, oldest first."""
        stmt = (
            select(GroupMemberModel)
            .where(
                GroupMemberModel.group_id == group_id,
                GroupMemberModel.status == MembershipStatus.ACTIVE.value,
            )
            .order_by(GroupMemberModel.joined_at)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def get_active_for_groups(self, group_ids: list[UUID]) -> list[GroupMember]:
        """Get active memberships of several groups."""
        if not group_ids:
            return []
        stmt = (
            select(GroupMemberModel)
            .where(
                GroupMemberModel.group_id.in_(group_ids),
                GroupMemberModel.status == MembershipStatus.ACTIVE.value,
            )
            .order_by(GroupMemberModel.joined_at)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def get_active_group_ids(self, user_id: UUID) -> list[UUID]:
        """Get IDs of the groups a user is an active member of."""
        stmt = select(GroupMemberModel.group_id).where(
            GroupMemberModel.user_id == user_id,
            GroupMemberModel.status == MembershipStatus.ACTIVE.value,
        )
        result = await self._session.execute(stmt)
        return list(result.scalars())

    async def add(self, member: GroupMember) -> GroupMember:
        """Insert a new membership."""
        model = GroupMemberModel(
            group_id=member.group_id,
            user_id=member.user_id,
            role=member.role.value,
            status=member.status.value,
            joined_at=member.joined_at,
        )
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def save(self, member: GroupMember) -> GroupMember:
        """Persist role, status and joined_at of an existing membership."""
        model = await self._get_model(member.group_id, member.user_id)

        if not model:
            raise ValueError("Group member not found")

        model.role = member.role.value
        model.status = member.status.value
        model.joined_at = member.joined_at
        await self._session.flush()
        return self._to_entity(model)

    async def upsert(self, member: GroupMember) -> GroupMember:
        """Insert the membership or overwrite the row with the same key.

        Runs as a single INSERT ... ON CONFLICT DO UPDATE, so overlapping
        calls for the same pair never collide on the primary key.
        """
        values = {
            "group_id": member.group_id,
            "user_id": member.user_id,
            "role": member.role.value,
            "status": member.status.value,
            "joined_at": member.joined_at,
        }
        stmt = self._insert().values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=["group_id", "user_id"],
            set_={
                "role": stmt.excluded.role,
                "status": stmt.excluded.status,
                "joined_at": stmt.excluded.joined_at,
            },
        )
        await self._session.execute(stmt)

        # The statement bypasses the identity map
        reread = (
            select(GroupMemberModel)
            .where(
                GroupMemberModel.group_id == member.group_id,
                GroupMemberModel.user_id == member.user_id,
            )
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(reread)
        return self._to_entity(result.scalar_one())

    def _insert(self) -> Any:
        """Dialect INSERT that supports ON CONFLICT (PostgreSQL or SQLite)."""
        if self._session.get_bind().dialect.name == "sqlite":
            return sqlite_insert(GroupMemberModel)
        return pg_insert(GroupMemberModel)

    async def _get_model(self, group_id: UUID, user_id: UUID) -> GroupMemberModel | None:
        stmt = select(GroupMemberModel).where(
            GroupMemberModel.group_id == group_id,
            GroupMemberModel.user_id == user_id,
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    def _to_entity(self, model: GroupMemberModel) -> GroupMember:
        """Convert ORM model to domain entity."""
        return GroupMember(
            group_id=model.group_id,
            user_id=model.user_id,
            role=MemberRole(model.role),
            status=MembershipStatus(model.status),
            joined_at=model.joined_at,
        )
