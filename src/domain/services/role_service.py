"""Role service: promotion, demotion and ownership transfer."""

from collections.abc import Callable
from uuid import UUID

import structlog

from core.exceptions import GroupMemberNotFoundError, InvalidRoleTransitionError
from domain.entities.group import (
    Group,
    GroupMember,
    MemberRole,
    MembershipStatus,
)
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.permissions import require_creator, require_group

logger = structlog.get_logger()


class RoleService:
    """Role changes, gated on the acting user being the group's creator."""

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def promote_to_admin(
        self, group_id: UUID, user_id: UUID, acting_user_id: UUID
    ) -> GroupMember:
        """Make a member an admin. Promoting an admin changes nothing."""
        return await self._change_role(group_id, user_id, acting_user_id, MemberRole.ADMIN)

    async def demote_from_admin(
        self, group_id: UUID, user_id: UUID, acting_user_id: UUID
    ) -> GroupMember:
        """Make an admin a plain member. Demoting a member changes nothing."""
        return await self._change_role(group_id, user_id, acting_user_id, MemberRole.MEMBER)

    async def transfer_ownership(
        self,
        group_id: UUID,
        new_owner_id: UUID,
        current_owner_id: UUID,
    ) -> Group:
        """Hand the group over to another active member.

        The group's creator reference, the new owner's role and the previous
        owner's step down to admin are committed together. The previous owner
        always ends up an active admin, even when their row had drifted.
        """
        async with self._uow_factory() as uow:
            group = await require_group(uow, group_id)
            require_creator(group, current_owner_id)

            if new_owner_id == current_owner_id:
                raise InvalidRoleTransitionError(MemberRole.OWNER.value, MemberRole.OWNER.value)

            new_owner = await uow.members.get(group_id, new_owner_id)
            if not new_owner or not new_owner.is_active:
                raise GroupMemberNotFoundError(str(new_owner_id))

            group.created_by = new_owner_id
            updated = await uow.groups.update(group)

            new_owner.take_ownership()
            await uow.members.save(new_owner)

            previous = await uow.members.get(group_id, current_owner_id)
            if previous is None:
                previous = GroupMember(
                    group_id=group_id,
                    user_id=current_owner_id,
                    status=MembershipStatus.ACTIVE,
                )
            elif not previous.is_active:
                previous.reactivate()
            previous.hand_over_ownership()
            await uow.members.upsert(previous)

            await uow.commit()

        logger.info(
            "group_ownership_transferred",
            group_id=str(group_id),
            from_user_id=str(current_owner_id),
            to_user_id=str(new_owner_id),
        )
        return updated

    async def _change_role(
        self,
        group_id: UUID,
        user_id: UUID,
        acting_user_id: UUID,
        target: MemberRole,
    ) -> GroupMember:
        async with self._uow_factory() as uow:
            # Authority comes from the group row, not from membership roles
            group = await require_group(uow, group_id)
            require_creator(group, acting_user_id)

            member = await uow.members.get(group_id, user_id)
            if not member or not member.is_active:
                raise GroupMemberNotFoundError(str(user_id))

            if member.role == target:
                return member

            member.change_role(target)
            updated = await uow.members.save(member)
            await uow.commit()

        logger.info(
            "group_member_role_changed",
            group_id=str(group_id),
            user_id=str(user_id),
            role=target.value,
        )
        return updated
