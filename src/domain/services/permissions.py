"""Membership checks shared by the group services."""

from uuid import UUID

from core.exceptions import (
    GroupNotFoundError,
    InsufficientPermissionsError,
    NotAGroupMemberError,
)
from domain.entities.group import Group, GroupMember, MemberRole, is_manager
from domain.repositories.unit_of_work import IUnitOfWork


async def require_group(uow: IUnitOfWork, group_id: UUID) -> Group:
    """Load a group or raise GroupNotFoundError."""
    group = await uow.groups.get(group_id)
    if not group:
        raise GroupNotFoundError(str(group_id))
    return group


async def require_active_member(
    uow: IUnitOfWork, group: Group, user_id: UUID
) -> GroupMember | None:
    """Verify the user is an active member of the group.

    The creator always counts as a member, even when their row is missing;
    in that case ``None`` is returned.
    """
    member = await uow.members.get(group.id, user_id)
    if member and member.is_active:
        return member
    if user_id == group.created_by:
        return None
    raise NotAGroupMemberError(str(group.id))


async def require_manager(uow: IUnitOfWork, group: Group, user_id: UUID) -> MemberRole:
    """Verify the user is an active owner or admin and return their role."""
    member = await require_active_member(uow, group, user_id)
    if member is None:
        return MemberRole.OWNER
    if not is_manager(member.role):
        raise InsufficientPermissionsError(MemberRole.ADMIN.value)
    return member.role


def require_creator(group: Group, user_id: UUID) -> None:
    """Verify the user is the group's creator (current owner)."""
    if group.created_by != user_id:
        raise InsufficientPermissionsError(MemberRole.OWNER.value)
