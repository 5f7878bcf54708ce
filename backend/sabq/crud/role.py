import uuid
from collections.abc import Iterable

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.role import Role
from ..models.user_role import UserRole


class RoleRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_name(self, name: str) -> Role | None:
        result = await self.session.execute(
            select(Role).where(Role.name == name)
        )
        return result.scalar_one_or_none()

    async def list_by_names(self, names: Iterable[str]) -> list[Role]:
        result = await self.session.execute(
            select(Role).where(Role.name.in_(list(names)))
        )
        return list(result.scalars().all())

    async def list_all(self, include_inactive: bool = False) -> list[Role]:
        query = select(Role)
        if not include_inactive:
            query = query.where(Role.is_active)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def upsert(
        self,
        name: str,
        name_ar: str,
        display_name: str,
        description: str | None = None,
        is_system: bool = False,
    ) -> tuple[Role, bool]:
        """Create the role or refresh its labels. Returns (role, created)."""
        role = await self.get_by_name(name)
        created = role is None
        if role is None:
            role = Role(name=name, name_ar=name_ar, display_name=display_name)
            self.session.add(role)
        role.name_ar = name_ar
        role.display_name = display_name
        role.description = description
        role.is_system = is_system
        await self.session.flush()
        await self.session.refresh(role)
        return role, created

    async def get_user_role_names(self, user_id: uuid.UUID) -> list[str]:
        result = await self.session.execute(
            select(Role.name)
            .join(UserRole, UserRole.role_id == Role.id)
            .where(UserRole.user_id == user_id)
            .where(Role.is_active)
        )
        return list(result.scalars().all())

    async def replace_user_roles(
        self,
        user_id: uuid.UUID,
        roles: Iterable[Role],
        assigned_by: uuid.UUID | None = None,
    ) -> list[UserRole]:
        await self.session.execute(
            delete(UserRole).where(UserRole.user_id == user_id)
        )
        user_roles = [
            UserRole(user_id=user_id, role_id=role.id, assigned_by=assigned_by)
            for role in roles
        ]
        self.session.add_all(user_roles)
        await self.session.flush()
        return user_roles

    async def count_users_by_role(self) -> dict[str, int]:
        result = await self.session.execute(
            select(Role.name, func.count(UserRole.id))
            .join(UserRole, UserRole.role_id == Role.id, isouter=True)
            .group_by(Role.name)
        )
        return {name: count for name, count in result.all()}
