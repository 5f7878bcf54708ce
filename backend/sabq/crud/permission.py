import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.permission import Permission
from ..models.role_permission import RolePermission


class PermissionRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_code(self, code: str) -> Permission | None:
        result = await self.session.execute(
            select(Permission).where(Permission.code == code)
        )
        return result.scalar_one_or_none()

    async def list_all(self) -> list[Permission]:
        result = await self.session.execute(select(Permission))
        return list(result.scalars().all())

    async def upsert(
        self, code: str, label: str, label_ar: str, resource: str, action: str
    ) -> tuple[Permission, bool]:
        """Create the permission or refresh its labels. Returns (permission, created)."""
        permission = await self.get_by_code(code)
        created = permission is None
        if permission is None:
            permission = Permission(code=code, resource=resource, action=action)
            self.session.add(permission)
        permission.label = label
        permission.label_ar = label_ar
        permission.resource = resource
        permission.action = action
        await self.session.flush()
        await self.session.refresh(permission)
        return permission, created

    async def get_role_permission_codes(self, role_id: uuid.UUID) -> set[str]:
        result = await self.session.execute(
            select(Permission.code)
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .where(RolePermission.role_id == role_id)
        )
        return set(result.scalars().all())

    async def grant_to_role(self, role_id: uuid.UUID, permission_id: uuid.UUID) -> RolePermission:
        role_permission = RolePermission(role_id=role_id, permission_id=permission_id)
        self.session.add(role_permission)
        await self.session.flush()
        return role_permission
