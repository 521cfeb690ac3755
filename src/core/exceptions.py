"""Custom exceptions and error codes."""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for the API."""

    # Authentication errors (401)
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_TOKEN = "INVALID_TOKEN"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"

    # Authorization errors (403)
    FORBIDDEN = "FORBIDDEN"
    NOT_A_GROUP_MEMBER = "NOT_A_GROUP_MEMBER"
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"
    JOIN_REQUEST_REQUIRED = "JOIN_REQUEST_REQUIRED"

    # Not found errors (404)
    GROUP_NOT_FOUND = "GROUP_NOT_FOUND"
    GROUP_MEMBER_NOT_FOUND = "GROUP_MEMBER_NOT_FOUND"
    JOIN_REQUEST_NOT_FOUND = "JOIN_REQUEST_NOT_FOUND"

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_ROLE_TRANSITION = "INVALID_ROLE_TRANSITION"
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"
    OWNER_CANNOT_LEAVE = "OWNER_CANNOT_LEAVE"
    CREATOR_PROTECTED = "CREATOR_PROTECTED"
    JOIN_REQUEST_NOT_REQUIRED = "JOIN_REQUEST_NOT_REQUIRED"

    # Conflict errors (409)
    ALREADY_A_GROUP_MEMBER = "ALREADY_A_GROUP_MEMBER"
    JOIN_REQUEST_ALREADY_RESOLVED = "JOIN_REQUEST_ALREADY_RESOLVED"

    # Rate limiting (429)
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Server errors (500)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Any | None = None,
    ) -> None:
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class AuthenticationError(AppException):
    """Authentication failed."""

    def __init__(
        self,
        message: str = "Authentication required",
        error_code: ErrorCode = ErrorCode.UNAUTHORIZED,
    ) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=401,
        )


class GroupNotFoundError(AppException):
    """Group not found."""

    def __init__(self, group_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.GROUP_NOT_FOUND,
            message=f"Group not found: {group_id}",
            status_code=404,
            details={"group_id": group_id},
        )


class GroupMemberNotFoundError(AppException):
    """Target user has no active membership in the group."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.GROUP_MEMBER_NOT_FOUND,
            message="User is not a member of this group",
            status_code=404,
            details={"user_id": user_id},
        )


class NotAGroupMemberError(AppException):
    """The acting user is not an active member of the group."""

    def __init__(self, group_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.NOT_A_GROUP_MEMBER,
            message="You are not a member of this group",
            status_code=403,
            details={"group_id": group_id},
        )


class InsufficientPermissionsError(AppException):
    """User does not have sufficient permissions."""

    def __init__(self, required_role: str = "admin") -> None:
        super().__init__(
            error_code=ErrorCode.INSUFFICIENT_PERMISSIONS,
            message=f"Insufficient permissions. Required role: {required_role}",
            status_code=403,
            details={"required_role": required_role},
        )


class AlreadyAGroupMemberError(AppException):
    """User is already an active member of the group."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.ALREADY_A_GROUP_MEMBER,
            message="User is already a member of this group",
            status_code=409,
            details={"user_id": user_id},
        )


class JoinRequestRequiredError(AppException):
    """Private groups can only be entered through an approved join request."""

    def __init__(self, group_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.JOIN_REQUEST_REQUIRED,
            message="This group is private. Send a join request instead",
            status_code=403,
            details={"group_id": group_id},
        )


class JoinRequestNotRequiredError(AppException):
    """Public groups are joined directly."""

    def __init__(self, group_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.JOIN_REQUEST_NOT_REQUIRED,
            message="This group is public and can be joined directly",
            status_code=400,
            details={"group_id": group_id},
        )


class JoinRequestNotFoundError(AppException):
    """Join request not found."""

    def __init__(self, request_id: str = "") -> None:
        super().__init__(
            error_code=ErrorCode.JOIN_REQUEST_NOT_FOUND,
            message="Join request not found",
            status_code=404,
            details={"request_id": request_id} if request_id else None,
        )


class JoinRequestAlreadyResolvedError(AppException):
    """Join request was already approved or rejected."""

    def __init__(self, status: str) -> None:
        super().__init__(
            error_code=ErrorCode.JOIN_REQUEST_ALREADY_RESOLVED,
            message=f"This join request has already been {status}",
            status_code=409,
            details={"status": status},
        )


class InvalidRoleTransitionError(AppException):
    """The requested role change is not allowed."""

    def __init__(self, current: str, target: str) -> None:
        super().__init__(
            error_code=ErrorCode.INVALID_ROLE_TRANSITION,
            message=f"Cannot change role from {current} to {target}",
            status_code=400,
            details={"current": current, "target": target},
        )


class InvalidStatusTransitionError(AppException):
    """The requested membership status change is not allowed."""

    def __init__(self, current: str, target: str) -> None:
        super().__init__(
            error_code=ErrorCode.INVALID_STATUS_TRANSITION,
            message=f"Cannot change membership status from {current} to {target}",
            status_code=400,
            details={"current": current, "target": target},
        )


class OwnerCannotLeaveError(AppException):
    """The group owner must hand over ownership before leaving."""

    def __init__(self) -> None:
        super().__init__(
            error_code=ErrorCode.OWNER_CANNOT_LEAVE,
            message="The group owner cannot leave. Transfer ownership first",
            status_code=400,
        )


class CreatorProtectedError(AppException):
    """The group creator cannot be removed from the group."""

    def __init__(self) -> None:
        super().__init__(
            error_code=ErrorCode.CREATOR_PROTECTED,
            message="The group creator cannot be removed",
            status_code=400,
        )


class InvalidGroupDataError(AppException):
    """Group attributes failed validation."""

    def __init__(self, message: str) -> None:
        super().__init__(
            error_code=ErrorCode.VALIDATION_ERROR,
            message=message,
            status_code=400,
        )
