"""SQLAlchemy implementation of the read-only User repository."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.user import User
from infrastructure.database.models import UserModel


class SQLAlchemyUserRepository:
    """SQLAlchemy implementation of IUserRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_many(self, ids: list[UUID]) -> dict[UUID, User]:
        """Get profiles by ID, keyed by user ID."""
        unique_ids = list(dict.fromkeys(ids))
        if not unique_ids:
            return {}
        stmt = select(UserModel).where(UserModel.id.in_(unique_ids))
        result = await self._session.execute(stmt)
        return {model.id: self._to_entity(model) for model in result.scalars()}

    def _to_entity(self, model: UserModel) -> User:
        """Convert ORM model to domain entity."""
        return User(
            id=model.id,
            username=model.username,
            first_name=model.first_name,
            last_name=model.last_name,
            avatar_url=model.avatar_url,
            email=model.email,
        )
