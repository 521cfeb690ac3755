"""Integration tests for the join request API."""

from uuid import uuid4

import pytest
from httpx import AsyncClient

from tests.conftest import ActingUser, Riders

GROUPS_URL = "/api/v1/groups"
REQUESTS_URL = "/api/v1/join-requests"


@pytest.fixture
async def private_group_id(group_client: AsyncClient, acting: ActingUser, riders: Riders) -> str:
    """A private group owned by riders.owner with riders.admin as admin."""
    response = await group_client.post(GROUPS_URL, json={"name": "Night Convoy"})
    gid = response.json()["data"]["id"]

    acting.user = riders.admin
    await group_client.post(f"{GROUPS_URL}/{gid}/join")
    acting.user = riders.owner
    await group_client.post(f"{GROUPS_URL}/{gid}/members/{riders.admin.id}/promote")
    await group_client.patch(f"{GROUPS_URL}/{gid}", json={"is_private": True})
    return gid


async def _request(client: AsyncClient, gid: str, message: str | None = None) -> dict:
    body = {"message": message} if message else None
    response = await client.post(f"{GROUPS_URL}/{gid}/join-requests", json=body)
    assert response.status_code == 201
    return response.json()["data"]


class TestRequestToJoin:
    @pytest.mark.asyncio
    async def test_creates_pending_request(
        self, group_client: AsyncClient, private_group_id: str, acting: ActingUser, riders: Riders
    ) -> None:
        acting.user = riders.outsider

        data = await _request(group_client, private_group_id, message="Can I ride along?")

        assert data["status"] == "pending"
        assert data["user_id"] == str(riders.outsider.id)
        assert data["message"] == "Can I ride along?"

    @pytest.mark.asyncio
    async def test_second_request_returns_pending(
        self, group_client: AsyncClient, private_group_id: str, acting: ActingUser, riders: Riders
    ) -> None:
        acting.user = riders.outsider

        first = await _request(group_client, private_group_id)
        second = await _request(group_client, private_group_id)

        assert first["id"] == second["id"]

    @pytest.mark.asyncio
    async def test_public_group_rejects_request(
        self, group_client: AsyncClient, acting: ActingUser, riders: Riders
    ) -> None:
        created = await group_client.post(GROUPS_URL, json={"name": "Open ride"})
        acting.user = riders.outsider

        response = await group_client.post(
            f"{GROUPS_URL}/{created.json()['data']['id']}/join-requests"
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "JOIN_REQUEST_NOT_REQUIRED"

    @pytest.mark.asyncio
    async def test_member_cannot_request(
        self, group_client: AsyncClient, private_group_id: str, acting: ActingUser, riders: Riders
    ) -> None:
        acting.user = riders.admin

        response = await group_client.post(f"{GROUPS_URL}/{private_group_id}/join-requests")

        assert response.status_code == 409
        assert response.json()["error_code"] == "ALREADY_A_GROUP_MEMBER"

    @pytest.mark.asyncio
    async def test_cancel(
        self, group_client: AsyncClient, private_group_id: str, acting: ActingUser, riders: Riders
    ) -> None:
        acting.user = riders.outsider
        await _request(group_client, private_group_id)

        response = await group_client.delete(f"{GROUPS_URL}/{private_group_id}/join-requests/me")
        again = await group_client.delete(f"{GROUPS_URL}/{private_group_id}/join-requests/me")

        assert response.status_code == 204
        assert again.status_code == 404


class TestListJoinRequests:
    @pytest.mark.asyncio
    async def test_admin_sees_requester_profiles(
        self, group_client: AsyncClient, private_group_id: str, acting: ActingUser, riders: Riders
    ) -> None:
        acting.user = riders.member
        await _request(group_client, private_group_id)
        acting.user = riders.admin

        response = await group_client.get(f"{GROUPS_URL}/{private_group_id}/join-requests")

        assert response.status_code == 200
        [pending] = response.json()["data"]
        assert pending["name"] == "Mia Member"
        assert pending["user_id"] == str(riders.member.id)

    @pytest.mark.asyncio
    async def test_requester_cannot_list(
        self, group_client: AsyncClient, private_group_id: str, acting: ActingUser, riders: Riders
    ) -> None:
        acting.user = riders.outsider
        await _request(group_client, private_group_id)

        response = await group_client.get(f"{GROUPS_URL}/{private_group_id}/join-requests")

        assert response.status_code == 403
        assert response.json()["error_code"] == "NOT_A_GROUP_MEMBER"


class TestResolveJoinRequest:
    @pytest.mark.asyncio
    async def test_approval_grants_membership(
        self, group_client: AsyncClient, private_group_id: str, acting: ActingUser, riders: Riders
    ) -> None:
        acting.user = riders.outsider
        request = await _request(group_client, private_group_id)
        acting.user = riders.admin

        response = await group_client.post(f"{REQUESTS_URL}/{request['id']}/approve")

        assert response.status_code == 200
        member = response.json()["data"]
        assert member["user_id"] == str(riders.outsider.id)
        assert (member["role"], member["status"]) == ("member", "active")

        pending = await group_client.get(f"{GROUPS_URL}/{private_group_id}/join-requests")
        assert pending.json()["data"] == []
        members = await group_client.get(f"{GROUPS_URL}/{private_group_id}/members")
        assert str(riders.outsider.id) in {m["user_id"] for m in members.json()["data"]}

    @pytest.mark.asyncio
    async def test_reject_then_request_again(
        self, group_client: AsyncClient, private_group_id: str, acting: ActingUser, riders: Riders
    ) -> None:
        acting.user = riders.outsider
        first = await _request(group_client, private_group_id)
        acting.user = riders.owner

        rejected = await group_client.post(f"{REQUESTS_URL}/{first['id']}/reject")
        assert rejected.json()["data"]["status"] == "rejected"

        acting.user = riders.outsider
        second = await _request(group_client, private_group_id)

        assert second["id"] != first["id"]
        assert second["status"] == "pending"

        acting.user = riders.owner
        stale = await group_client.post(f"{REQUESTS_URL}/{first['id']}/approve")
        assert stale.status_code == 404

    @pytest.mark.asyncio
    async def test_resolved_request_cannot_be_approved(
        self, group_client: AsyncClient, private_group_id: str, acting: ActingUser, riders: Riders
    ) -> None:
        acting.user = riders.outsider
        request = await _request(group_client, private_group_id)
        acting.user = riders.owner
        await group_client.post(f"{REQUESTS_URL}/{request['id']}/reject")

        response = await group_client.post(f"{REQUESTS_URL}/{request['id']}/approve")

        assert response.status_code == 409
        assert response.json()["error_code"] == "JOIN_REQUEST_ALREADY_RESOLVED"

    @pytest.mark.asyncio
    async def test_member_cannot_approve(
        self, group_client: AsyncClient, private_group_id: str, acting: ActingUser, riders: Riders
    ) -> None:
        acting.user = riders.member
        request = await _request(group_client, private_group_id)
        acting.user = riders.owner
        await group_client.post(f"{REQUESTS_URL}/{request['id']}/approve")
        acting.user = riders.outsider
        other = await _request(group_client, private_group_id)
        acting.user = riders.member

        response = await group_client.post(f"{REQUESTS_URL}/{other['id']}/approve")

        assert response.status_code == 403
        assert response.json()["error_code"] == "INSUFFICIENT_PERMISSIONS"

    @pytest.mark.asyncio
    async def test_unknown_request(self, group_client: AsyncClient) -> None:
        response = await group_client.post(f"{REQUESTS_URL}/{uuid4()}/approve")

        assert response.status_code == 404
        assert response.json()["error_code"] == "JOIN_REQUEST_NOT_FOUND"
