"""SQLAlchemy implementation of Group repository."""

from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.group import Group
from infrastructure.database.models import GroupModel


class SQLAlchemyGroupRepository:
    """SQLAlchemy implementation of IGroupRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: UUID) -> Group | None:
        """Get a group by ID."""
        model = await self._get_model(id)
        return self._to_entity(model) if model else None

    async def get_many(self, ids: list[UUID]) -> list[Group]:
        """Get groups by ID, newest first."""
        if not ids:
            return []
        stmt = (
            select(GroupModel)
            .where(GroupModel.id.in_(ids))
            .order_by(GroupModel.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def find(
        self,
        limit: int | None = 50,
        offset: int = 0,
        location: str | None = None,
        search: str | None = None,
        exclude_ids: list[UUID] | None = None,
    ) -> list[Group]:
        """List groups newest first.

        ``location`` and ``search`` are case-insensitive substring filters;
        ``search`` matches the name or the description. A ``limit`` of None
        returns every match.
        """
        stmt = select(GroupModel)
        if location:
            stmt = stmt.where(GroupModel.location.ilike(f"%{location}%"))
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(
                or_(
                    GroupModel.name.ilike(pattern),
                    GroupModel.description.ilike(pattern),
                )
            )
        if exclude_ids:
            stmt = stmt.where(GroupModel.id.not_in(exclude_ids))
        stmt = stmt.order_by(GroupModel.created_at.desc()).offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)

        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def create(self, group: Group) -> Group:
        """Create a new group."""
        model = self._to_model(group)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def update(self, group: Group) -> Group:
        """Update the editable fields and the creator reference of a group."""
        model = await self._get_model(group.id)

        if not model:
            raise ValueError(f"Group {group.id} not found")

        model.name = group.name
        model.description = group.description
        model.location = group.location
        model.avatar_url = group.avatar_url
        model.is_private = group.is_private
        model.created_by = group.created_by

        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def delete(self, id: UUID) -> bool:
        """Delete a group (cascade deletes members and join requests)."""
        model = await self._get_model(id)

        if not model:
            return False

        await self._session.delete(model)
        await self._session.flush()
        return True

    async def _get_model(self, id: UUID) -> GroupModel | None:
        stmt = select(GroupModel).where(GroupModel.id == id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    def _to_entity(self, model: GroupModel) -> Group:
        """Convert ORM model to domain entity."""
        return Group(
            id=model.id,
            name=model.name,
            description=model.description,
            location=model.location,
            avatar_url=model.avatar_url,
            created_by=model.created_by,
            is_private=bool(model.is_private),
            total_distance=float(model.total_distance or 0),
            total_rides=int(model.total_rides or 0),
            created_at=model.created_at,
            updated_at=model.updated_at or model.created_at,
        )

    def _to_model(self, entity: Group) -> GroupModel:
        """Convert domain entity to ORM model."""
        return GroupModel(
            id=entity.id,
            name=entity.name,
            description=entity.description,
            location=entity.location,
            avatar_url=entity.avatar_url,
            created_by=entity.created_by,
            is_private=entity.is_private,
            total_distance=entity.total_distance,
            total_rides=entity.total_rides,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )
