"""Group and membership domain entities."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID, uuid4

from core.exceptions import InvalidRoleTransitionError, InvalidStatusTransitionError

# Display name used when the creator's membership row is missing and
# the member list has to be completed in memory.
CREATOR_PLACEHOLDER_NAME = "Créateur"


class MemberRole(StrEnum):
    """Permission tier of a membership."""

    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


class MembershipStatus(StrEnum):
    """Lifecycle state of a membership."""

    ACTIVE = "active"
    LEFT = "left"
    REMOVED = "removed"


MANAGER_ROLES: frozenset[MemberRole] = frozenset({MemberRole.OWNER, MemberRole.ADMIN})


def is_manager(role: MemberRole) -> bool:
    """Owners and admins can moderate membership and join requests."""
    return role in MANAGER_ROLES


def next_status(current: MembershipStatus, target: MembershipStatus) -> MembershipStatus:
    """Validate a membership status transition and return the new status.

    active -> left | removed
    left | removed -> active
    """
    match current:
        case MembershipStatus.ACTIVE:
            allowed = {MembershipStatus.LEFT, MembershipStatus.REMOVED}
        case MembershipStatus.LEFT | MembershipStatus.REMOVED:
            allowed = {MembershipStatus.ACTIVE}
    if target not in allowed:
        raise InvalidStatusTransitionError(current.value, target.value)
    return target


def next_role(current: MemberRole, target: MemberRole) -> MemberRole:
    """Validate an admin-level role change (promote/demote) and return the new role.

    Only member <-> admin moves are possible here; the owner role changes
    hands through ownership transfer only. Same-role moves are no-ops.
    """
    if current == target:
        return current
    match current:
        case MemberRole.OWNER:
            allowed: set[MemberRole] = set()
        case MemberRole.ADMIN:
            allowed = {MemberRole.MEMBER}
        case MemberRole.MEMBER:
            allowed = {MemberRole.ADMIN}
    if target not in allowed:
        raise InvalidRoleTransitionError(current.value, target.value)
    return target


@dataclass
class Group:
    """Domain entity for a ride group."""

    name: str
    created_by: UUID
    id: UUID = field(default_factory=uuid4)
    description: str | None = None
    location: str | None = None
    avatar_url: str | None = None
    is_private: bool = False
    total_distance: float = 0.0
    total_rides: int = 0
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self) -> None:
        """Ensure updated_at is always at least as recent as created_at."""
        if self.updated_at < self.created_at:
            self.updated_at = self.created_at


@dataclass
class GroupMember:
    """Domain entity for a group membership."""

    group_id: UUID
    user_id: UUID
    role: MemberRole = MemberRole.MEMBER
    status: MembershipStatus = MembershipStatus.ACTIVE
    joined_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def is_active(self) -> bool:
        return self.status == MembershipStatus.ACTIVE

    def leave(self) -> None:
        self.status = next_status(self.status, MembershipStatus.LEFT)

    def remove(self) -> None:
        self.status = next_status(self.status, MembershipStatus.REMOVED)

    def reactivate(self) -> None:
        """Bring an inactive membership back. The role is kept."""
        self.status = next_status(self.status, MembershipStatus.ACTIVE)
        self.joined_at = datetime.utcnow()

    def change_role(self, target: MemberRole) -> None:
        self.role = next_role(self.role, target)

    def take_ownership(self) -> None:
        """Become the group owner. Only reachable through ownership transfer."""
        self.role = MemberRole.OWNER

    def hand_over_ownership(self) -> None:
        """Step down from owner to admin after a transfer."""
        self.role = MemberRole.ADMIN


@dataclass
class MemberProfile:
    """A membership resolved to what a client displays."""

    user_id: UUID
    name: str
    role: MemberRole
    joined_at: datetime
    avatar_url: str | None = None
    # True when the row does not exist in storage (creator completed in memory)
    is_placeholder: bool = False


@dataclass
class GroupOverview:
    """A group together with its computed membership data."""

    group: Group
    members: list[MemberProfile] = field(default_factory=list)
    member_count: int = 0
    request_status: str | None = None


def count_members(members: list[MemberProfile], creator_id: UUID | None) -> int:
    """Count members, counting the creator even when it is not listed."""
    if creator_id is None:
        return len(members)
    creator_listed = any(m.user_id == creator_id for m in members)
    return len(members) + (0 if creator_listed else 1)


@dataclass
class GroupStats:
    """Ride aggregates of a group (maintained by the rides pipeline)."""

    group_id: UUID
    total_distance: float
    total_rides: int
    updated_at: datetime
