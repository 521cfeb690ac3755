"""Shared fixtures for unit tests."""

from datetime import datetime, timedelta
from typing import Any
from unittest.mock import AsyncMock
from uuid import UUID, uuid4

import pytest

from domain.entities.group import Group, GroupMember, MemberRole, MembershipStatus


class FakeUnitOfWork:
    """Fake Unit of Work with the four repository mocks for unit testing."""

    def __init__(self) -> None:
        self.groups = AsyncMock()
        self.members = AsyncMock()
        self.join_requests = AsyncMock()
        self.users = AsyncMock()
        self.committed = False
        self.rolled_back = False

        # Empty reads unless a test says otherwise
        self.users.get_many.return_value = {}
        self.members.get_active.return_value = []
        self.members.get_active_for_groups.return_value = []
        self.members.get_active_group_ids.return_value = []
        self.join_requests.get_pending_group_ids.return_value = []

        # Writes echo what they were given
        self.groups.create.side_effect = lambda group: group
        self.groups.update.side_effect = lambda group: group
        self.members.add.side_effect = lambda member: member
        self.members.save.side_effect = lambda member: member
        self.members.upsert.side_effect = lambda member: member
        self.join_requests.create.side_effect = lambda request: request

    async def commit(self) -> None:
        self.committed = True

    async def rollback(self) -> None:
        self.rolled_back = True

    async def __aenter__(self) -> "FakeUnitOfWork":
        return self

    async def __aexit__(self, *args: Any) -> None:
        pass


def make_member(
    group_id: UUID,
    user_id: UUID,
    role: MemberRole = MemberRole.MEMBER,
    status: MembershipStatus = MembershipStatus.ACTIVE,
    joined_at: datetime | None = None,
) -> GroupMember:
    return GroupMember(
        group_id=group_id,
        user_id=user_id,
        role=role,
        status=status,
        joined_at=joined_at or datetime.utcnow() - timedelta(days=7),
    )


@pytest.fixture
def uow() -> FakeUnitOfWork:
    """Create a fresh FakeUnitOfWork."""
    return FakeUnitOfWork()


@pytest.fixture
def owner_id() -> UUID:
    """The group's creator."""
    return uuid4()


@pytest.fixture
def user_id() -> UUID:
    """A random user ID (distinct from owner_id)."""
    return uuid4()


@pytest.fixture
def group(owner_id: UUID) -> Group:
    return Group(name="Sunday Riders", created_by=owner_id, location="Lyon")


@pytest.fixture
def private_group(owner_id: UUID) -> Group:
    return Group(name="Night Convoy", created_by=owner_id, is_private=True)
