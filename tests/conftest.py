"""Pytest configuration and fixtures."""

import os
import sys
from collections.abc import AsyncGenerator
from dataclasses import dataclass
from pathlib import Path
from uuid import uuid4

# Disable rate limiting and keep the app engine off Postgres in tests
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.auth.provider import TokenUser
from infrastructure.database.models import Base, UserModel

# Test database URL (SQLite in memory)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@dataclass
class Riders:
    """The users every integration test can act as."""

    owner: TokenUser
    admin: TokenUser
    member: TokenUser
    outsider: TokenUser


class ActingUser:
    """Mutable holder for the user the test client authenticates as."""

    def __init__(self, user: TokenUser) -> None:
        self.user = user


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh in-memory database per test.

    StaticPool keeps one connection so every session sees the same database.
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create session factory."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
async def riders(session_factory: async_sessionmaker[AsyncSession]) -> Riders:
    """Seed four user profiles and return their token users."""
    profiles = [
        ("owner", "Olivia", "Owner"),
        ("admin", "Adam", "Admin"),
        ("member", "Mia", "Member"),
        ("outsider", None, None),
    ]
    users = {}
    async with session_factory() as session:
        for username, first_name, last_name in profiles:
            user_id = uuid4()
            session.add(
                UserModel(
                    id=user_id,
                    email=f"{username}@example.com",
                    username=username,
                    first_name=first_name,
                    last_name=last_name,
                )
            )
            users[username] = TokenUser(
                id=user_id,
                email=f"{username}@example.com",
                display_name=username,
            )
        await session.commit()
    return Riders(**users)


@pytest.fixture
def acting(riders: Riders) -> ActingUser:
    """The authenticated user for group_client; starts as the owner."""
    return ActingUser(riders.owner)


@pytest.fixture
def auth_provider() -> JWTAuthProvider:
    """Create auth provider for testing."""
    return JWTAuthProvider(
        secret_key="test-secret-key",
        algorithm="HS256",
        expire_minutes=30,
    )


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Create async test client (no auth)."""
    from main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
async def group_client(
    session_factory: async_sessionmaker[AsyncSession],
    acting: ActingUser,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create an authenticated test client wired to the test database.

    This client:
    - Uses the per-test in-memory SQLite database
    - Authenticates as ``acting.user`` (switch it to act as someone else)
    - Builds the group services on a test UoW factory
    """
    from api.dependencies.auth import get_current_user
    from api.v1.dependencies import (
        get_group_service,
        get_join_request_service,
        get_membership_service,
        get_role_service,
    )
    from domain.services.consistency import ConsistencyRepair
    from domain.services.group_service import GroupService
    from domain.services.join_request_service import JoinRequestService
    from domain.services.membership_service import MembershipService
    from domain.services.role_service import RoleService
    from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork
    from main import create_app

    app = create_app()

    def test_uow_factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(session_factory)

    membership_service = MembershipService(
        test_uow_factory, repair=ConsistencyRepair(test_uow_factory, persist=True)
    )

    async def override_get_user() -> TokenUser:
        return acting.user

    app.dependency_overrides[get_current_user] = override_get_user
    app.dependency_overrides[get_membership_service] = lambda: membership_service
    app.dependency_overrides[get_group_service] = lambda: GroupService(
        test_uow_factory, membership_service=membership_service
    )
    app.dependency_overrides[get_join_request_service] = lambda: JoinRequestService(
        test_uow_factory
    )
    app.dependency_overrides[get_role_service] = lambda: RoleService(test_uow_factory)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
