"""Join request domain entity."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID, uuid4

from core.exceptions import JoinRequestAlreadyResolvedError


class JoinRequestStatus(StrEnum):
    """Status of a request to join a private group."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


@dataclass
class JoinRequest:
    """Domain entity for a request to join a private group."""

    group_id: UUID
    user_id: UUID
    id: UUID = field(default_factory=uuid4)
    message: str | None = None
    status: JoinRequestStatus = JoinRequestStatus.PENDING
    created_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def is_pending(self) -> bool:
        """Check if the request is still waiting for a decision."""
        return self.status == JoinRequestStatus.PENDING

    def approve(self) -> None:
        """Mark the request as approved."""
        self._resolve(JoinRequestStatus.APPROVED)

    def reject(self) -> None:
        """Mark the request as rejected."""
        self._resolve(JoinRequestStatus.REJECTED)

    def _resolve(self, status: JoinRequestStatus) -> None:
        if not self.is_pending:
            raise JoinRequestAlreadyResolvedError(self.status.value)
        self.status = status


@dataclass
class PendingJoinRequest:
    """A pending request together with the requester's public profile."""

    request: JoinRequest
    name: str
    avatar_url: str | None = None
