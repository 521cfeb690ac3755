"""Join request service: the way into private groups."""

from collections.abc import Callable
from datetime import datetime
from typing import Optional
from uuid import UUID

import structlog

from core.exceptions import (
    AlreadyAGroupMemberError,
    JoinRequestNotFoundError,
    JoinRequestNotRequiredError,
)
from domain.entities.group import GroupMember, MemberRole, MembershipStatus
from domain.entities.join_request import (
    JoinRequest,
    JoinRequestStatus,
    PendingJoinRequest,
)
from domain.entities.user import REQUESTER_FALLBACK_NAME
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.permissions import require_group, require_manager

logger = structlog.get_logger()


class JoinRequestService:
    """Service layer for requests to join private groups."""

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def request_to_join(
        self,
        group_id: UUID,
        user_id: UUID,
        message: Optional[str] = None,
    ) -> JoinRequest:
        """Ask to join a private group.

        A pending request is returned as is. An approved or rejected one is
        replaced by a fresh pending request.

        Raises:
            GroupNotFoundError: If the group does not exist.
            JoinRequestNotRequiredError: If the group is public.
            AlreadyAGroupMemberError: If the user is already an active member.
        """
        async with self._uow_factory() as uow:
            group = await require_group(uow, group_id)

            if not group.is_private:
                raise JoinRequestNotRequiredError(str(group_id))

            member = await uow.members.get(group_id, user_id)
            if (member and member.is_active) or group.created_by == user_id:
                raise AlreadyAGroupMemberError(str(user_id))

            existing = await uow.join_requests.get_for_user(group_id, user_id)
            if existing and existing.is_pending:
                return existing
            if existing:
                await uow.join_requests.delete(existing.id)

            created = await uow.join_requests.create(
                JoinRequest(group_id=group_id, user_id=user_id, message=message)
            )
            await uow.commit()

        logger.info(
            "join_request_created",
            group_id=str(group_id),
            user_id=str(user_id),
            request_id=str(created.id),
        )
        return created

    async def cancel_join_request(self, group_id: UUID, user_id: UUID) -> None:
        """Withdraw the user's pending request."""
        async with self._uow_factory() as uow:
            existing = await uow.join_requests.get_for_user(group_id, user_id)
            if not existing or not existing.is_pending:
                raise JoinRequestNotFoundError()

            await uow.join_requests.delete(existing.id)
            await uow.commit()

    async def approve_join_request(self, request_id: UUID, approver_id: UUID) -> GroupMember:
        """Approve a pending request and make the requester a member.

        The membership and the approved status are committed together.
        """
        async with self._uow_factory() as uow:
            request = await uow.join_requests.get(request_id)
            if not request:
                raise JoinRequestNotFoundError(str(request_id))

            group = await require_group(uow, request.group_id)
            await require_manager(uow, group, approver_id)

            request.approve()

            existing = await uow.members.get(request.group_id, request.user_id)
            if existing and existing.is_active:
                member = existing
            else:
                member = await uow.members.upsert(
                    GroupMember(
                        group_id=request.group_id,
                        user_id=request.user_id,
                        role=MemberRole.MEMBER,
                        status=MembershipStatus.ACTIVE,
                        joined_at=datetime.utcnow(),
                    )
                )

            await uow.join_requests.update_status(request.id, request.status)
            await uow.commit()

        logger.info(
            "join_request_approved",
            group_id=str(request.group_id),
            user_id=str(request.user_id),
            approver_id=str(approver_id),
        )
        return member

    async def reject_join_request(self, request_id: UUID, rejector_id: UUID) -> JoinRequest:
        """Reject a pending request."""
        async with self._uow_factory() as uow:
            request = await uow.join_requests.get(request_id)
            if not request:
                raise JoinRequestNotFoundError(str(request_id))

            group = await require_group(uow, request.group_id)
            await require_manager(uow, group, rejector_id)

            request.reject()
            updated = await uow.join_requests.update_status(request.id, request.status)
            await uow.commit()

        logger.info(
            "join_request_rejected",
            group_id=str(request.group_id),
            user_id=str(request.user_id),
            rejector_id=str(rejector_id),
        )
        return updated

    async def get_join_requests(
        self, group_id: UUID, actor_id: UUID
    ) -> list[PendingJoinRequest]:
        """Pending requests of a group, newest first. Owner or admin only."""
        async with self._uow_factory() as uow:
            group = await require_group(uow, group_id)
            await require_manager(uow, group, actor_id)

            requests = await uow.join_requests.get_pending_for_group(group_id)
            users = await uow.users.get_many([r.user_id for r in requests])

        result = []
        for request in requests:
            user = users.get(request.user_id)
            result.append(
                PendingJoinRequest(
                    request=request,
                    name=user.display_name(REQUESTER_FALLBACK_NAME) if user else REQUESTER_FALLBACK_NAME,
                    avatar_url=user.avatar_url if user else None,
                )
            )
        return result
