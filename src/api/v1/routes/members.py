"""Group membership API routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, Request, status

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_group_service, get_membership_service, get_role_service
from api.v1.routes.groups import build_group_detail, build_member_profile_response
from api.v1.schemas.group import GroupDetailResponse
from api.v1.schemas.member import (
    GroupMemberDetailResponse,
    GroupMemberResponse,
    MemberProfileListResponse,
    TransferOwnershipRequest,
)
from core.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from domain.entities.group import GroupMember
from domain.services.group_service import GroupService
from domain.services.membership_service import MembershipService
from domain.services.role_service import RoleService

router = APIRouter(prefix="/groups/{group_id}", tags=["members"])


@router.get(
    "/members",
    response_model=MemberProfileListResponse,
    summary="List group members",
    responses={
        200: {"description": "Active members, oldest first"},
        404: {"description": "Group not found"},
    },
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_group_members(
    request: Request,
    group_id: UUID,
    user: CurrentUser,
    service: GroupService = Depends(get_group_service),
) -> MemberProfileListResponse:
    """
    Get the active members of a group.

    The creator is always listed. `member_count` in meta counts the creator
    even if it had to be completed without a stored membership.
    """
    overview = await service.get_group_by_id(group_id)
    data = [build_member_profile_response(m) for m in overview.members]
    return MemberProfileListResponse(
        data=data,
        meta={"total": len(data), "member_count": overview.member_count},
    )


@router.post(
    "/join",
    response_model=GroupMemberDetailResponse,
    summary="Join a public group",
    responses={
        200: {"description": "Active membership"},
        403: {"description": "Private group, a join request is required"},
        404: {"description": "Group not found"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def join_group(
    request: Request,
    group_id: UUID,
    user: CurrentUser,
    service: MembershipService = Depends(get_membership_service),
) -> GroupMemberDetailResponse:
    """Join a public group. Joining twice returns the same membership."""
    member = await service.join_group(group_id, user.id)
    return GroupMemberDetailResponse(data=_build_member_response(member))


@router.post(
    "/leave",
    response_model=GroupMemberDetailResponse,
    summary="Leave a group",
    responses={
        200: {"description": "Membership marked as left"},
        400: {"description": "The owner must transfer ownership first"},
        403: {"description": "Not a member"},
        404: {"description": "Group not found"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def leave_group(
    request: Request,
    group_id: UUID,
    user: CurrentUser,
    service: MembershipService = Depends(get_membership_service),
) -> GroupMemberDetailResponse:
    """Leave a group."""
    member = await service.leave_group(group_id, user.id)
    return GroupMemberDetailResponse(data=_build_member_response(member))


@router.delete(
    "/members/{member_user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove group member",
    responses={
        204: {"description": "Member removed from group"},
        400: {"description": "The creator cannot be removed"},
        403: {"description": "Insufficient permissions"},
        404: {"description": "Group or member not found"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def remove_group_member(
    request: Request,
    group_id: UUID,
    member_user_id: UUID,
    user: CurrentUser,
    service: MembershipService = Depends(get_membership_service),
) -> None:
    """Remove a member. Requires owner or admin; removing an admin requires the owner."""
    await service.remove_member(group_id, member_user_id, acting_user_id=user.id)
    return None


@router.post(
    "/members/{member_user_id}/promote",
    response_model=GroupMemberDetailResponse,
    summary="Promote a member to admin",
    responses={
        200: {"description": "Member is now an admin"},
        400: {"description": "Role cannot be changed this way"},
        403: {"description": "Owner only"},
        404: {"description": "Group or member not found"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def promote_member(
    request: Request,
    group_id: UUID,
    member_user_id: UUID,
    user: CurrentUser,
    service: RoleService = Depends(get_role_service),
) -> GroupMemberDetailResponse:
    """Promote a member to admin. Owner only."""
    member = await service.promote_to_admin(group_id, member_user_id, acting_user_id=user.id)
    return GroupMemberDetailResponse(data=_build_member_response(member))


@router.post(
    "/members/{member_user_id}/demote",
    response_model=GroupMemberDetailResponse,
    summary="Demote an admin to member",
    responses={
        200: {"description": "Admin is now a member"},
        400: {"description": "Role cannot be changed this way"},
        403: {"description": "Owner only"},
        404: {"description": "Group or member not found"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def demote_member(
    request: Request,
    group_id: UUID,
    member_user_id: UUID,
    user: CurrentUser,
    service: RoleService = Depends(get_role_service),
) -> GroupMemberDetailResponse:
    """Demote an admin to member. Owner only."""
    member = await service.demote_from_admin(group_id, member_user_id, acting_user_id=user.id)
    return GroupMemberDetailResponse(data=_build_member_response(member))


@router.post(
    "/transfer-ownership",
    response_model=GroupDetailResponse,
    summary="Transfer group ownership",
    responses={
        200: {"description": "Ownership transferred, previous owner is now admin"},
        403: {"description": "Owner only"},
        404: {"description": "Group or new owner not found"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def transfer_ownership(
    request: Request,
    group_id: UUID,
    body: TransferOwnershipRequest,
    user: CurrentUser,
    role_service: RoleService = Depends(get_role_service),
    group_service: GroupService = Depends(get_group_service),
) -> GroupDetailResponse:
    """Hand the group over to another active member."""
    await role_service.transfer_ownership(
        group_id,
        new_owner_id=body.new_owner_id,
        current_owner_id=user.id,
    )
    overview = await group_service.get_group_by_id(group_id)
    return GroupDetailResponse(data=build_group_detail(overview))


def _build_member_response(member: GroupMember) -> GroupMemberResponse:
    """Convert domain entity to response schema."""
    return GroupMemberResponse(
        group_id=member.group_id,
        user_id=member.user_id,
        role=member.role.value,
        status=member.status.value,
        joined_at=member.joined_at,
    )
