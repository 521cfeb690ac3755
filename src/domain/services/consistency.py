"""Read-time repair of the creator membership invariant.

A group's creator must always resolve to a member. Groups are created
together with the creator's membership, so a missing row only shows up on
legacy data or rows edited outside the service. When a read notices one,
the row is written back; if that is not possible the caller completes the
list in memory with a placeholder.
"""

from collections.abc import Callable
from datetime import datetime
from uuid import UUID

import structlog
from sqlalchemy.exc import SQLAlchemyError

from domain.entities.group import (
    CREATOR_PLACEHOLDER_NAME,
    GroupMember,
    MemberProfile,
    MemberRole,
    MembershipStatus,
)
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()


class ConsistencyRepair:
    """Detect and fix a missing creator membership."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        persist: bool = True,
    ) -> None:
        self._uow_factory = uow_factory
        self._persist = persist

    @staticmethod
    def is_missing(members: list[GroupMember], creator_id: UUID) -> bool:
        return all(m.user_id != creator_id for m in members)

    async def repair(self, group_id: UUID, creator_id: UUID) -> list[GroupMember] | None:
        """Write the creator back as an active owner and re-read the members.

        Runs in its own transaction. Returns the fresh active memberships,
        or ``None`` when the row could not be written.
        """
        logger.warning(
            "creator_membership_missing",
            group_id=str(group_id),
            creator_id=str(creator_id),
        )

        if not self._persist:
            logger.info("creator_membership_repair_skipped", group_id=str(group_id))
            return None

        try:
            async with self._uow_factory() as uow:
                await uow.members.upsert(
                    GroupMember(
                        group_id=group_id,
                        user_id=creator_id,
                        role=MemberRole.OWNER,
                        status=MembershipStatus.ACTIVE,
                    )
                )
                await uow.commit()
                members = await uow.members.get_active(group_id)
        except SQLAlchemyError as e:
            logger.error(
                "creator_membership_repair_failed",
                group_id=str(group_id),
                creator_id=str(creator_id),
                error=str(e),
            )
            return None

        logger.info(
            "creator_membership_repaired",
            group_id=str(group_id),
            creator_id=str(creator_id),
        )
        return members

    @staticmethod
    def placeholder(creator_id: UUID, joined_at: datetime | None = None) -> MemberProfile:
        """In-memory stand-in for a creator whose row could not be written."""
        return MemberProfile(
            user_id=creator_id,
            name=CREATOR_PLACEHOLDER_NAME,
            role=MemberRole.OWNER,
            joined_at=joined_at or datetime.utcnow(),
            avatar_url=None,
            is_placeholder=True,
        )
