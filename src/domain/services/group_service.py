"""Group service layer with business logic."""

from collections.abc import Callable
from typing import Optional, cast
from uuid import UUID

import structlog

from core.exceptions import InvalidGroupDataError
from domain.entities.group import (
    Group,
    GroupMember,
    GroupOverview,
    GroupStats,
    MemberProfile,
    MemberRole,
    MembershipStatus,
    count_members,
)
from domain.entities.join_request import JoinRequestStatus
from domain.entities.user import MEMBER_FALLBACK_NAME
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.membership_service import MembershipService
from domain.services.permissions import require_creator, require_group, require_manager

logger = structlog.get_logger()


class GroupService:
    """Service layer for ride groups."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        membership_service: MembershipService,
    ) -> None:
        self._uow_factory = uow_factory
        self._membership = membership_service

    async def create_group(
        self,
        creator_id: UUID,
        name: str,
        description: Optional[str] = None,
        location: Optional[str] = None,
        avatar_url: Optional[str] = None,
        is_private: bool = False,
    ) -> GroupOverview:
        """Create a group with its creator as the active owner.

        The group row and the owner membership are committed together.
        """
        name = _clean_name(name)

        async with self._uow_factory() as uow:
            group = Group(
                name=name,
                description=description,
                location=location,
                avatar_url=avatar_url,
                is_private=is_private,
                created_by=creator_id,
            )
            created = await uow.groups.create(group)

            owner = await uow.members.add(
                GroupMember(
                    group_id=created.id,
                    user_id=creator_id,
                    role=MemberRole.OWNER,
                    status=MembershipStatus.ACTIVE,
                    joined_at=created.created_at,
                )
            )
            users = await uow.users.get_many([creator_id])

            await uow.commit()

        logger.info("group_created", group_id=str(created.id), created_by=str(creator_id))

        user = users.get(creator_id)
        profile = MemberProfile(
            user_id=creator_id,
            name=user.display_name(MEMBER_FALLBACK_NAME) if user else MEMBER_FALLBACK_NAME,
            role=owner.role,
            joined_at=owner.joined_at,
            avatar_url=user.avatar_url if user else None,
        )
        return GroupOverview(group=created, members=[profile], member_count=1)

    async def get_group_by_id(self, group_id: UUID) -> GroupOverview:
        """Get a group with its members, repairing a missing creator row."""
        async with self._uow_factory() as uow:
            group = await require_group(uow, group_id)

        members = await self._membership.get_group_members(
            group_id,
            creator_id=group.created_by,
            creator_joined_at=group.created_at,
        )
        return GroupOverview(
            group=group,
            members=members,
            member_count=count_members(members, group.created_by),
        )

    async def update_group(
        self,
        group_id: UUID,
        actor_id: UUID,
        name: Optional[str] = None,
        description: object = ...,  # Sentinel: None clears the field
        location: object = ...,
        avatar_url: object = ...,
        is_private: Optional[bool] = None,
    ) -> Group:
        """Update a group. Requires owner or admin.

        ``description``, ``location`` and ``avatar_url`` are left alone when
        omitted and cleared when passed as None.
        """
        async with self._uow_factory() as uow:
            group = await require_group(uow, group_id)
            await require_manager(uow, group, actor_id)

            if name is not None:
                group.name = _clean_name(name)
            if description is not ...:
                group.description = cast(Optional[str], description)
            if location is not ...:
                group.location = cast(Optional[str], location)
            if avatar_url is not ...:
                group.avatar_url = cast(Optional[str], avatar_url)
            if is_private is not None:
                group.is_private = is_private

            updated = await uow.groups.update(group)
            await uow.commit()
            return updated

    async def delete_group(self, group_id: UUID, actor_id: UUID) -> bool:
        """Delete a group with its memberships and join requests. Creator only."""
        async with self._uow_factory() as uow:
            group = await require_group(uow, group_id)
            require_creator(group, actor_id)

            deleted = await uow.groups.delete(group_id)
            await uow.commit()

        logger.info("group_deleted", group_id=str(group_id), actor_id=str(actor_id))
        return deleted

    async def get_suggested_groups(
        self, user_id: UUID, location: Optional[str] = None
    ) -> list[GroupOverview]:
        """Groups the user is not an active member of, newest first.

        Each one carries ``request_status = "pending"`` when the user has a
        pending join request for it.
        """
        async with self._uow_factory() as uow:
            joined = await uow.members.get_active_group_ids(user_id)
            groups = await uow.groups.find(limit=None, location=location, exclude_ids=joined)
            pending = set(await uow.join_requests.get_pending_group_ids(user_id))
            overviews = await self._overviews(uow, groups)

        for overview in overviews:
            if overview.group.id in pending:
                overview.request_status = JoinRequestStatus.PENDING.value
        return overviews

    async def list_groups(
        self,
        limit: int = 50,
        offset: int = 0,
        location: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[GroupOverview]:
        """List groups newest first, optionally filtered by location or text."""
        async with self._uow_factory() as uow:
            groups = await uow.groups.find(
                limit=limit,
                offset=offset,
                location=location,
                search=search,
            )
            return await self._overviews(uow, groups)

    async def get_user_groups(self, user_id: UUID) -> list[GroupOverview]:
        """Groups where the user is an active member."""
        async with self._uow_factory() as uow:
            group_ids = await uow.members.get_active_group_ids(user_id)
            groups = await uow.groups.get_many(group_ids)
            return await self._overviews(uow, groups)

    async def get_group_stats(self, group_id: UUID) -> GroupStats:
        """Ride aggregates of a group."""
        async with self._uow_factory() as uow:
            group = await require_group(uow, group_id)

        return GroupStats(
            group_id=group.id,
            total_distance=group.total_distance,
            total_rides=group.total_rides,
            updated_at=group.updated_at,
        )

    # --- Internal helpers ---

    async def _overviews(self, uow: IUnitOfWork, groups: list[Group]) -> list[GroupOverview]:
        """Attach member counts to groups. List views never write repairs."""
        members = await uow.members.get_active_for_groups([g.id for g in groups])

        by_group: dict[UUID, set[UUID]] = {}
        for member in members:
            by_group.setdefault(member.group_id, set()).add(member.user_id)

        overviews = []
        for group in groups:
            user_ids = by_group.get(group.id, set())
            count = len(user_ids) + (0 if group.created_by in user_ids else 1)
            overviews.append(GroupOverview(group=group, member_count=count))
        return overviews


def _clean_name(name: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise InvalidGroupDataError("Group name is required")
    return cleaned
