"""Pydantic schemas for group membership API."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class MemberProfileResponse(BaseModel):
    """An active member as displayed by clients."""

    model_config = ConfigDict(from_attributes=True)

    user_id: UUID
    name: str
    role: str
    joined_at: datetime
    avatar_url: str | None = None
    is_placeholder: bool = False


class MemberProfileListResponse(BaseModel):
    """Schema for list of group members response."""

    data: list[MemberProfileResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class GroupMemberResponse(BaseModel):
    """Schema for a membership row."""

    model_config = ConfigDict(from_attributes=True)

    group_id: UUID
    user_id: UUID
    role: str
    status: str
    joined_at: datetime


class GroupMemberDetailResponse(BaseModel):
    """Schema for single membership response."""

    data: GroupMemberResponse


class TransferOwnershipRequest(BaseModel):
    """Schema for handing a group over to another member."""

    new_owner_id: UUID
