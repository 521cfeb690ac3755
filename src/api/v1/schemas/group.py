"""Pydantic schemas for Group API."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from api.v1.schemas.member import MemberProfileResponse


class GroupCreate(BaseModel):
    """Schema for creating a group."""

    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    location: str | None = Field(None, max_length=255)
    avatar_url: str | None = Field(None, max_length=500)
    is_private: bool = False


class GroupUpdate(BaseModel):
    """Schema for updating a group."""

    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    location: str | None = Field(None, max_length=255)
    avatar_url: str | None = Field(None, max_length=500)
    is_private: bool | None = None


class GroupResponse(BaseModel):
    """Schema for Group response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: str | None
    location: str | None
    avatar_url: str | None
    created_by: UUID
    is_private: bool
    total_distance: float = 0.0
    total_rides: int = 0
    member_count: int = 0
    request_status: str | None = None
    created_at: datetime
    updated_at: datetime


class GroupWithMembersResponse(GroupResponse):
    """Group detail including its resolved member list."""

    members: list[MemberProfileResponse] = Field(default_factory=list)


class GroupListResponse(BaseModel):
    """Schema for list of Groups response."""

    data: list[GroupResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class GroupDetailResponse(BaseModel):
    """Schema for single Group response."""

    data: GroupWithMembersResponse


class GroupStatsResponse(BaseModel):
    """Ride aggregates of a group."""

    model_config = ConfigDict(from_attributes=True)

    group_id: UUID
    total_distance: float
    total_rides: int
    updated_at: datetime


class GroupStatsDetailResponse(BaseModel):
    """Schema for single Group stats response."""

    data: GroupStatsResponse
