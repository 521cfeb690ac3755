"""Pydantic schemas for Join Request API."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class JoinRequestCreate(BaseModel):
    """Schema for asking to join a private group."""

    message: str | None = Field(None, max_length=500)


class JoinRequestResponse(BaseModel):
    """Schema for Join Request response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    group_id: UUID
    user_id: UUID
    message: str | None
    status: str
    created_at: datetime


class JoinRequestDetailResponse(BaseModel):
    """Schema for single Join Request response."""

    data: JoinRequestResponse


class PendingJoinRequestResponse(JoinRequestResponse):
    """A pending request with the requester's display data."""

    name: str
    avatar_url: str | None = None


class PendingJoinRequestListResponse(BaseModel):
    """Schema for list of pending Join Requests response."""

    data: list[PendingJoinRequestResponse]
    meta: dict[str, Any] = Field(default_factory=dict)
