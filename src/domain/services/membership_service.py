"""Membership service: the user-group relation and its lifecycle."""

from collections.abc import Callable
from datetime import datetime
from uuid import UUID

import structlog

from core.exceptions import (
    CreatorProtectedError,
    GroupMemberNotFoundError,
    InsufficientPermissionsError,
    JoinRequestRequiredError,
    NotAGroupMemberError,
    OwnerCannotLeaveError,
)
from domain.entities.group import GroupMember, MemberProfile, MemberRole
from domain.entities.user import MEMBER_FALLBACK_NAME
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.consistency import ConsistencyRepair
from domain.services.permissions import require_group, require_manager

logger = structlog.get_logger()


class MembershipService:
    """Service layer for group membership."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        repair: ConsistencyRepair | None = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._repair = repair or ConsistencyRepair(uow_factory)

    async def get_group_members(
        self,
        group_id: UUID,
        creator_id: UUID | None = None,
        creator_joined_at: datetime | None = None,
    ) -> list[MemberProfile]:
        """Get the active members of a group, oldest first.

        When ``creator_id`` is given and the creator has no active row, the
        row is repaired. If the repair cannot be written, an unpersisted
        placeholder for the creator is put at the front of the list.
        """
        async with self._uow_factory() as uow:
            members = await uow.members.get_active(group_id)

        repaired = True
        if creator_id is not None and ConsistencyRepair.is_missing(members, creator_id):
            fresh = await self._repair.repair(group_id, creator_id)
            if fresh is None:
                repaired = False
            else:
                members = fresh

        async with self._uow_factory() as uow:
            users = await uow.users.get_many([m.user_id for m in members])

        profiles = []
        for member in members:
            user = users.get(member.user_id)
            profiles.append(
                MemberProfile(
                    user_id=member.user_id,
                    name=user.display_name(MEMBER_FALLBACK_NAME) if user else MEMBER_FALLBACK_NAME,
                    role=member.role,
                    joined_at=member.joined_at,
                    avatar_url=user.avatar_url if user else None,
                )
            )

        if not repaired and creator_id is not None:
            profiles.insert(0, ConsistencyRepair.placeholder(creator_id, creator_joined_at))

        return profiles

    async def join_group(self, group_id: UUID, user_id: UUID) -> GroupMember:
        """Join a public group.

        Idempotent: an active membership is returned unchanged, an inactive
        one is reactivated with its previous role. Private groups can only
        be entered through an approved join request.
        """
        async with self._uow_factory() as uow:
            group = await require_group(uow, group_id)
            existing = await uow.members.get(group_id, user_id)

            if existing and existing.is_active:
                return existing

            if group.is_private:
                logger.info(
                    "join_rejected_private_group",
                    group_id=str(group_id),
                    user_id=str(user_id),
                )
                raise JoinRequestRequiredError(str(group_id))

            if existing:
                existing.reactivate()
                member = await uow.members.save(existing)
            else:
                member = await uow.members.upsert(
                    GroupMember(group_id=group_id, user_id=user_id, role=MemberRole.MEMBER)
                )

            await uow.commit()
            return member

    async def leave_group(self, group_id: UUID, user_id: UUID) -> GroupMember:
        """Leave a group. The owner has to transfer ownership first."""
        async with self._uow_factory() as uow:
            group = await require_group(uow, group_id)

            if group.created_by == user_id:
                raise OwnerCannotLeaveError()

            member = await uow.members.get(group_id, user_id)
            if not member or not member.is_active:
                raise NotAGroupMemberError(str(group_id))

            member.leave()
            updated = await uow.members.save(member)
            await uow.commit()
            return updated

    async def remove_member(
        self,
        group_id: UUID,
        user_id: UUID,
        acting_user_id: UUID,
    ) -> GroupMember:
        """Remove a member from a group.

        Owners and admins can remove members. Removing an admin takes the
        group's creator, and the creator can never be removed.
        """
        async with self._uow_factory() as uow:
            group = await require_group(uow, group_id)
            await require_manager(uow, group, acting_user_id)

            if user_id == group.created_by:
                raise CreatorProtectedError()

            target = await uow.members.get(group_id, user_id)
            if not target or not target.is_active:
                raise GroupMemberNotFoundError(str(user_id))

            if target.role != MemberRole.MEMBER and acting_user_id != group.created_by:
                raise InsufficientPermissionsError(MemberRole.OWNER.value)

            target.remove()
            updated = await uow.members.save(target)
            await uow.commit()

            logger.info(
                "group_member_removed",
                group_id=str(group_id),
                user_id=str(user_id),
                acting_user_id=str(acting_user_id),
            )
            return updated
