"""Group API routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_group_service
from api.v1.schemas.group import (
    GroupCreate,
    GroupDetailResponse,
    GroupListResponse,
    GroupResponse,
    GroupStatsDetailResponse,
    GroupStatsResponse,
    GroupUpdate,
    GroupWithMembersResponse,
)
from api.v1.schemas.member import MemberProfileResponse
from core.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from domain.entities.group import Group, GroupOverview, MemberProfile
from domain.services.group_service import GroupService

router = APIRouter(prefix="/groups", tags=["groups"])


@router.get(
    "",
    response_model=GroupListResponse,
    summary="List groups",
    responses={
        200: {"description": "Groups, newest first"},
    },
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_groups(
    request: Request,
    user: CurrentUser,
    service: GroupService = Depends(get_group_service),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    location: str | None = Query(None, description="Case-insensitive location filter"),
    search: str | None = Query(None, description="Search in name and description"),
) -> GroupListResponse:
    """List groups, optionally filtered by location or free text."""
    overviews = await service.list_groups(
        limit=limit,
        offset=offset,
        location=location,
        search=search,
    )
    data = [_build_group_response(o) for o in overviews]
    return GroupListResponse(
        data=data,
        meta={"total": len(data), "limit": limit, "offset": offset},
    )


@router.post(
    "",
    response_model=GroupDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a group",
    responses={
        201: {"description": "Group created with the caller as owner"},
        400: {"description": "Invalid group data"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def create_group(
    request: Request,
    body: GroupCreate,
    user: CurrentUser,
    service: GroupService = Depends(get_group_service),
) -> GroupDetailResponse:
    """Create a new group. The caller becomes its owner."""
    overview = await service.create_group(
        creator_id=user.id,
        name=body.name,
        description=body.description,
        location=body.location,
        avatar_url=body.avatar_url,
        is_private=body.is_private,
    )
    return GroupDetailResponse(data=build_group_detail(overview))


@router.get(
    "/suggested",
    response_model=GroupListResponse,
    summary="Suggested groups",
    responses={
        200: {"description": "Groups the caller has not joined"},
    },
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_suggested_groups(
    request: Request,
    user: CurrentUser,
    service: GroupService = Depends(get_group_service),
    location: str | None = Query(None, description="Case-insensitive location filter"),
) -> GroupListResponse:
    """
    Groups the caller is not an active member of.

    `request_status` is `"pending"` for groups the caller already asked to join.
    """
    overviews = await service.get_suggested_groups(user.id, location=location)
    data = [_build_group_response(o) for o in overviews]
    return GroupListResponse(data=data, meta={"total": len(data)})


@router.get(
    "/mine",
    response_model=GroupListResponse,
    summary="My groups",
    responses={
        200: {"description": "Groups the caller is an active member of"},
    },
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_my_groups(
    request: Request,
    user: CurrentUser,
    service: GroupService = Depends(get_group_service),
) -> GroupListResponse:
    """Get the groups the caller belongs to."""
    overviews = await service.get_user_groups(user.id)
    data = [_build_group_response(o) for o in overviews]
    return GroupListResponse(data=data, meta={"total": len(data)})


@router.get(
    "/{group_id}",
    response_model=GroupDetailResponse,
    summary="Get a group",
    responses={
        200: {"description": "Group with its members"},
        404: {"description": "Group not found"},
    },
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_group(
    request: Request,
    group_id: UUID,
    user: CurrentUser,
    service: GroupService = Depends(get_group_service),
) -> GroupDetailResponse:
    """Get a group with its active members."""
    overview = await service.get_group_by_id(group_id)
    return GroupDetailResponse(data=build_group_detail(overview))


@router.patch(
    "/{group_id}",
    response_model=GroupDetailResponse,
    summary="Update a group",
    responses={
        200: {"description": "Group updated"},
        403: {"description": "Owner or admin only"},
        404: {"description": "Group not found"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def update_group(
    request: Request,
    group_id: UUID,
    body: GroupUpdate,
    user: CurrentUser,
    service: GroupService = Depends(get_group_service),
) -> GroupDetailResponse:
    """
    Update a group. Requires owner or admin. All fields are optional.

    Send `description`, `location` or `avatar_url` as `null` to clear it.
    """
    # Nullable fields are only passed when explicitly set in the request
    clearable = {
        field: getattr(body, field)
        for field in ("description", "location", "avatar_url")
        if field in body.model_fields_set
    }
    await service.update_group(
        group_id=group_id,
        actor_id=user.id,
        name=body.name,
        is_private=body.is_private,
        **clearable,
    )
    overview = await service.get_group_by_id(group_id)
    return GroupDetailResponse(data=build_group_detail(overview))


@router.delete(
    "/{group_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a group",
    responses={
        204: {"description": "Group deleted"},
        403: {"description": "Creator only"},
        404: {"description": "Group not found"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def delete_group(
    request: Request,
    group_id: UUID,
    user: CurrentUser,
    service: GroupService = Depends(get_group_service),
) -> None:
    """Delete a group with its memberships and join requests. Creator only."""
    await service.delete_group(group_id, user.id)
    return None


@router.get(
    "/{group_id}/stats",
    response_model=GroupStatsDetailResponse,
    summary="Group ride statistics",
    responses={
        200: {"description": "Distance and ride totals"},
        404: {"description": "Group not found"},
    },
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_group_stats(
    request: Request,
    group_id: UUID,
    user: CurrentUser,
    service: GroupService = Depends(get_group_service),
) -> GroupStatsDetailResponse:
    """Get the ride aggregates of a group."""
    stats = await service.get_group_stats(group_id)
    return GroupStatsDetailResponse(data=GroupStatsResponse.model_validate(stats))


def _group_fields(group: Group) -> dict:
    return {
        "id": group.id,
        "name": group.name,
        "description": group.description,
        "location": group.location,
        "avatar_url": group.avatar_url,
        "created_by": group.created_by,
        "is_private": group.is_private,
        "total_distance": group.total_distance,
        "total_rides": group.total_rides,
        "created_at": group.created_at,
        "updated_at": group.updated_at,
    }


def _build_group_response(overview: GroupOverview) -> GroupResponse:
    """Convert a group overview to the list item schema."""
    return GroupResponse(
        **_group_fields(overview.group),
        member_count=overview.member_count,
        request_status=overview.request_status,
    )


def build_group_detail(overview: GroupOverview) -> GroupWithMembersResponse:
    """Convert a group overview to the detail schema."""
    return GroupWithMembersResponse(
        **_group_fields(overview.group),
        member_count=overview.member_count,
        request_status=overview.request_status,
        members=[build_member_profile_response(m) for m in overview.members],
    )


def build_member_profile_response(member: MemberProfile) -> MemberProfileResponse:
    """Convert a member profile to response schema."""
    return MemberProfileResponse(
        user_id=member.user_id,
        name=member.name,
        role=member.role.value,
        joined_at=member.joined_at,
        avatar_url=member.avatar_url,
        is_placeholder=member.is_placeholder,
    )
