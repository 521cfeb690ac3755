"""Unit tests for JoinRequestService."""

from uuid import UUID, uuid4

import pytest

from core.exceptions import (
    AlreadyAGroupMemberError,
    InsufficientPermissionsError,
    JoinRequestAlreadyResolvedError,
    JoinRequestNotFoundError,
    JoinRequestNotRequiredError,
)
from domain.entities.group import Group, MemberRole, MembershipStatus
from domain.entities.join_request import JoinRequest, JoinRequestStatus
from domain.entities.user import User
from domain.services.join_request_service import JoinRequestService
from tests.unit.conftest import FakeUnitOfWork, make_member


@pytest.fixture
def service(uow: FakeUnitOfWork) -> JoinRequestService:
    return JoinRequestService(lambda: uow)


# --- request_to_join ---


class TestRequestToJoin:
    @pytest.mark.asyncio
    async def test_creates_pending_request(
        self, service: JoinRequestService, uow: FakeUnitOfWork, private_group: Group, user_id: UUID
    ):
        uow.groups.get.return_value = private_group
        uow.members.get.return_value = None
        uow.join_requests.get_for_user.return_value = None

        request = await service.request_to_join(private_group.id, user_id, message="hi")

        assert request.status == JoinRequestStatus.PENDING
        assert request.message == "hi"
        assert uow.committed

    @pytest.mark.asyncio
    async def test_returns_existing_pending(
        self, service: JoinRequestService, uow: FakeUnitOfWork, private_group: Group, user_id: UUID
    ):
        pending = JoinRequest(group_id=private_group.id, user_id=user_id)
        uow.groups.get.return_value = private_group
        uow.members.get.return_value = None
        uow.join_requests.get_for_user.return_value = pending

        assert await service.request_to_join(private_group.id, user_id) is pending
        uow.join_requests.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_replaces_rejected_request(
        self, service: JoinRequestService, uow: FakeUnitOfWork, private_group: Group, user_id: UUID
    ):
        rejected = JoinRequest(
            group_id=private_group.id, user_id=user_id, status=JoinRequestStatus.REJECTED
        )
        uow.groups.get.return_value = private_group
        uow.members.get.return_value = None
        uow.join_requests.get_for_user.return_value = rejected

        request = await service.request_to_join(private_group.id, user_id)

        uow.join_requests.delete.assert_awaited_once_with(rejected.id)
        assert request.id != rejected.id
        assert request.status == JoinRequestStatus.PENDING

    @pytest.mark.asyncio
    async def test_public_group_does_not_need_request(
        self, service: JoinRequestService, uow: FakeUnitOfWork, group: Group, user_id: UUID
    ):
        uow.groups.get.return_value = group

        with pytest.raises(JoinRequestNotRequiredError):
            await service.request_to_join(group.id, user_id)

    @pytest.mark.asyncio
    async def test_active_member_cannot_request(
        self, service: JoinRequestService, uow: FakeUnitOfWork, private_group: Group, user_id: UUID
    ):
        uow.groups.get.return_value = private_group
        uow.members.get.return_value = make_member(private_group.id, user_id)

        with pytest.raises(AlreadyAGroupMemberError):
            await service.request_to_join(private_group.id, user_id)

    @pytest.mark.asyncio
    async def test_former_member_can_request(
        self, service: JoinRequestService, uow: FakeUnitOfWork, private_group: Group, user_id: UUID
    ):
        uow.groups.get.return_value = private_group
        uow.members.get.return_value = make_member(
            private_group.id, user_id, status=MembershipStatus.REMOVED
        )
        uow.join_requests.get_for_user.return_value = None

        request = await service.request_to_join(private_group.id, user_id)

        assert request.is_pending


# --- cancel_join_request ---


class TestCancelJoinRequest:
    @pytest.mark.asyncio
    async def test_deletes_pending(
        self, service: JoinRequestService, uow: FakeUnitOfWork, private_group: Group, user_id: UUID
    ):
        pending = JoinRequest(group_id=private_group.id, user_id=user_id)
        uow.join_requests.get_for_user.return_value = pending

        await service.cancel_join_request(private_group.id, user_id)

        uow.join_requests.delete.assert_awaited_once_with(pending.id)
        assert uow.committed

    @pytest.mark.asyncio
    async def test_resolved_request_cannot_be_cancelled(
        self, service: JoinRequestService, uow: FakeUnitOfWork, private_group: Group, user_id: UUID
    ):
        uow.join_requests.get_for_user.return_value = JoinRequest(
            group_id=private_group.id, user_id=user_id, status=JoinRequestStatus.APPROVED
        )

        with pytest.raises(JoinRequestNotFoundError):
            await service.cancel_join_request(private_group.id, user_id)

        uow.join_requests.delete.assert_not_awaited()


# --- approve / reject ---


class TestApproveJoinRequest:
    @pytest.mark.asyncio
    async def test_owner_approves(
        self,
        service: JoinRequestService,
        uow: FakeUnitOfWork,
        private_group: Group,
        owner_id: UUID,
        user_id: UUID,
    ):
        request = JoinRequest(group_id=private_group.id, user_id=user_id, message="hi")
        uow.join_requests.get.return_value = request
        uow.groups.get.return_value = private_group
        by_user = {owner_id: make_member(private_group.id, owner_id, role=MemberRole.OWNER)}
        uow.members.get.side_effect = lambda group_id, uid: by_user.get(uid)

        member = await service.approve_join_request(request.id, owner_id)

        assert member.user_id == user_id
        assert member.role == MemberRole.MEMBER
        assert member.status == MembershipStatus.ACTIVE
        uow.join_requests.update_status.assert_awaited_once_with(
            request.id, JoinRequestStatus.APPROVED
        )
        assert uow.committed

    @pytest.mark.asyncio
    async def test_reactivates_removed_member_as_member(
        self,
        service: JoinRequestService,
        uow: FakeUnitOfWork,
        private_group: Group,
        owner_id: UUID,
        user_id: UUID,
    ):
        request = JoinRequest(group_id=private_group.id, user_id=user_id)
        uow.join_requests.get.return_value = request
        uow.groups.get.return_value = private_group
        by_user = {
            owner_id: make_member(private_group.id, owner_id, role=MemberRole.OWNER),
            user_id: make_member(
                private_group.id, user_id, role=MemberRole.ADMIN, status=MembershipStatus.REMOVED
            ),
        }
        uow.members.get.side_effect = lambda group_id, uid: by_user.get(uid)

        member = await service.approve_join_request(request.id, owner_id)

        assert member.role == MemberRole.MEMBER
        assert member.status == MembershipStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_plain_member_cannot_approve(
        self, service: JoinRequestService, uow: FakeUnitOfWork, private_group: Group, user_id: UUID
    ):
        approver = uuid4()
        request = JoinRequest(group_id=private_group.id, user_id=user_id)
        uow.join_requests.get.return_value = request
        uow.groups.get.return_value = private_group
        uow.members.get.return_value = make_member(private_group.id, approver)

        with pytest.raises(InsufficientPermissionsError):
            await service.approve_join_request(request.id, approver)

        uow.members.upsert.assert_not_awaited()
        assert not uow.committed

    @pytest.mark.asyncio
    async def test_resolved_request_cannot_be_approved(
        self, service: JoinRequestService, uow: FakeUnitOfWork, private_group: Group, owner_id: UUID
    ):
        request = JoinRequest(
            group_id=private_group.id, user_id=uuid4(), status=JoinRequestStatus.REJECTED
        )
        uow.join_requests.get.return_value = request
        uow.groups.get.return_value = private_group
        uow.members.get.return_value = make_member(private_group.id, owner_id, role=MemberRole.OWNER)

        with pytest.raises(JoinRequestAlreadyResolvedError):
            await service.approve_join_request(request.id, owner_id)

    @pytest.mark.asyncio
    async def test_unknown_request(self, service: JoinRequestService, uow: FakeUnitOfWork, owner_id: UUID):
        uow.join_requests.get.return_value = None

        with pytest.raises(JoinRequestNotFoundError):
            await service.approve_join_request(uuid4(), owner_id)


class TestRejectJoinRequest:
    @pytest.mark.asyncio
    async def test_admin_rejects(
        self, service: JoinRequestService, uow: FakeUnitOfWork, private_group: Group, user_id: UUID
    ):
        admin_id = uuid4()
        request = JoinRequest(group_id=private_group.id, user_id=user_id)
        uow.join_requests.get.return_value = request
        uow.groups.get.return_value = private_group
        uow.members.get.return_value = make_member(private_group.id, admin_id, role=MemberRole.ADMIN)
        uow.join_requests.update_status.return_value = request

        await service.reject_join_request(request.id, admin_id)

        uow.join_requests.update_status.assert_awaited_once_with(
            request.id, JoinRequestStatus.REJECTED
        )
        uow.members.upsert.assert_not_awaited()
        assert uow.committed


# --- get_join_requests ---


class TestGetJoinRequests:
    @pytest.mark.asyncio
    async def test_lists_pending_with_requester_names(
        self, service: JoinRequestService, uow: FakeUnitOfWork, private_group: Group, owner_id: UUID
    ):
        known, unknown = uuid4(), uuid4()
        uow.groups.get.return_value = private_group
        uow.members.get.return_value = make_member(private_group.id, owner_id, role=MemberRole.OWNER)
        uow.join_requests.get_pending_for_group.return_value = [
            JoinRequest(group_id=private_group.id, user_id=known),
            JoinRequest(group_id=private_group.id, user_id=unknown),
        ]
        uow.users.get_many.return_value = {
            known: User(id=known, username="rider42", avatar_url="r.png")
        }

        pending = await service.get_join_requests(private_group.id, owner_id)

        assert [p.name for p in pending] == ["rider42", "Utilisateur"]
        assert pending[0].avatar_url == "r.png"

    @pytest.mark.asyncio
    async def test_member_cannot_list(
        self, service: JoinRequestService, uow: FakeUnitOfWork, private_group: Group, user_id: UUID
    ):
        uow.groups.get.return_value = private_group
        uow.members.get.return_value = make_member(private_group.id, user_id)

        with pytest.raises(InsufficientPermissionsError):
            await service.get_join_requests(private_group.id, user_id)
