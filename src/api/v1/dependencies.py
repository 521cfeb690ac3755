"""Dependency injection factories for API v1."""

from functools import lru_cache
from typing import Callable

from core.config import settings
from domain.services.consistency import ConsistencyRepair
from domain.services.group_service import GroupService
from domain.services.join_request_service import JoinRequestService
from domain.services.membership_service import MembershipService
from domain.services.role_service import RoleService
from infrastructure.database.session import async_session_factory
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork


def get_uow_factory() -> Callable[[], SQLAlchemyUnitOfWork]:
    """Factory for creating Unit of Work instances."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(async_session_factory)

    return factory


@lru_cache
def get_membership_service() -> MembershipService:
    """Get Membership service instance."""
    uow_factory = get_uow_factory()
    return MembershipService(
        uow_factory,
        repair=ConsistencyRepair(uow_factory, persist=settings.membership_repair_persist),
    )


@lru_cache
def get_group_service() -> GroupService:
    """Get Group service instance."""
    return GroupService(get_uow_factory(), membership_service=get_membership_service())


@lru_cache
def get_join_request_service() -> JoinRequestService:
    """Get Join Request service instance."""
    return JoinRequestService(get_uow_factory())


@lru_cache
def get_role_service() -> RoleService:
    """Get Role service instance."""
    return RoleService(get_uow_factory())
