"""Join request API routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, Request, status

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_join_request_service
from api.v1.schemas.join_request import (
    JoinRequestCreate,
    JoinRequestDetailResponse,
    JoinRequestResponse,
    PendingJoinRequestListResponse,
    PendingJoinRequestResponse,
)
from api.v1.schemas.member import GroupMemberDetailResponse, GroupMemberResponse
from core.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from domain.entities.join_request import JoinRequest
from domain.services.join_request_service import JoinRequestService

# Group-scoped routes (create, cancel, list)
group_join_requests_router = APIRouter(
    prefix="/groups/{group_id}/join-requests",
    tags=["join-requests"],
)

# Request-scoped routes (approve, reject)
join_requests_router = APIRouter(
    prefix="/join-requests",
    tags=["join-requests"],
)


@group_join_requests_router.post(
    "",
    response_model=JoinRequestDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Ask to join a private group",
    responses={
        201: {"description": "Pending join request"},
        400: {"description": "Public group, join directly"},
        404: {"description": "Group not found"},
        409: {"description": "Already a member"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def create_join_request(
    request: Request,
    group_id: UUID,
    user: CurrentUser,
    body: JoinRequestCreate | None = None,
    service: JoinRequestService = Depends(get_join_request_service),
) -> JoinRequestDetailResponse:
    """Ask to join a private group. A pending request is returned as is."""
    join_request = await service.request_to_join(
        group_id,
        user.id,
        message=body.message if body else None,
    )
    return JoinRequestDetailResponse(data=_build_join_request_response(join_request))


@group_join_requests_router.get(
    "",
    response_model=PendingJoinRequestListResponse,
    summary="List pending join requests",
    responses={
        200: {"description": "Pending requests, newest first"},
        403: {"description": "Owner or admin only"},
        404: {"description": "Group not found"},
    },
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_join_requests(
    request: Request,
    group_id: UUID,
    user: CurrentUser,
    service: JoinRequestService = Depends(get_join_request_service),
) -> PendingJoinRequestListResponse:
    """Get the pending join requests of a group. Requires owner or admin."""
    pending = await service.get_join_requests(group_id, user.id)
    data = [
        PendingJoinRequestResponse(
            **_build_join_request_response(p.request).model_dump(),
            name=p.name,
            avatar_url=p.avatar_url,
        )
        for p in pending
    ]
    return PendingJoinRequestListResponse(data=data, meta={"total": len(data)})


@group_join_requests_router.delete(
    "/me",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Cancel my join request",
    responses={
        204: {"description": "Request withdrawn"},
        404: {"description": "No pending request"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def cancel_join_request(
    request: Request,
    group_id: UUID,
    user: CurrentUser,
    service: JoinRequestService = Depends(get_join_request_service),
) -> None:
    """Withdraw the caller's pending join request."""
    await service.cancel_join_request(group_id, user.id)
    return None


@join_requests_router.post(
    "/{request_id}/approve",
    response_model=GroupMemberDetailResponse,
    summary="Approve a join request",
    responses={
        200: {"description": "Requester is now a member"},
        403: {"description": "Owner or admin only"},
        404: {"description": "Join request not found"},
        409: {"description": "Request already resolved"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def approve_join_request(
    request: Request,
    request_id: UUID,
    user: CurrentUser,
    service: JoinRequestService = Depends(get_join_request_service),
) -> GroupMemberDetailResponse:
    """Approve a pending request. Requires owner or admin of its group."""
    member = await service.approve_join_request(request_id, user.id)
    return GroupMemberDetailResponse(
        data=GroupMemberResponse(
            group_id=member.group_id,
            user_id=member.user_id,
            role=member.role.value,
            status=member.status.value,
            joined_at=member.joined_at,
        )
    )


@join_requests_router.post(
    "/{request_id}/reject",
    response_model=JoinRequestDetailResponse,
    summary="Reject a join request",
    responses={
        200: {"description": "Request rejected"},
        403: {"description": "Owner or admin only"},
        404: {"description": "Join request not found"},
        409: {"description": "Request already resolved"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def reject_join_request(
    request: Request,
    request_id: UUID,
    user: CurrentUser,
    service: JoinRequestService = Depends(get_join_request_service),
) -> JoinRequestDetailResponse:
    """Reject a pending request. Requires owner or admin of its group."""
    join_request = await service.reject_join_request(request_id, user.id)
    return JoinRequestDetailResponse(data=_build_join_request_response(join_request))


def _build_join_request_response(join_request: JoinRequest) -> JoinRequestResponse:
    """Convert domain entity to response schema."""
    return JoinRequestResponse(
        id=join_request.id,
        group_id=join_request.group_id,
        user_id=join_request.user_id,
        message=join_request.message,
        status=join_request.status.value,
        created_at=join_request.created_at,
    )
