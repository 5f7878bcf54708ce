import logging
from collections.abc import Iterable
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from ...auth.errors import UnknownRoleError
from ...auth.rbac import RBAC, get_rbac
from ...crud.role import RoleRepository
from ...errors import PermissionError
from ...models.user import User
from ..audit.activity_service import ActivityAction, log_best_effort

logger = logging.getLogger("sabq.rbac")


class PermissionService:
    """Answers permission questions for persisted users.

    A user's roles are the rows in user_roles. Users that predate the
    multi-role schema have none, and fall back to the single users.role
    column. Every role name read from the database must be registered;
    an unknown name raises UnknownRoleError instead of granting nothing
    silently.
    """

    def __init__(self, session: AsyncSession, rbac: RBAC | None = None):
        self.session = session
        self.rbac = rbac or get_rbac()
        self.role_repo = RoleRepository(session)

    async def get_user_roles(self, user: User) -> list[str]:
        names = await self.role_repo.get_user_role_names(user.id)
        if not names and user.role:
            names = [user.role]

        for name in names:
            if name not in self.rbac.registry:
                logger.error("User %s holds unregistered role '%s'", user.id, name)
                raise UnknownRoleError(name)
        return sorted(set(names))

    async def get_user_permissions(self, user: User) -> frozenset[str]:
        return self.rbac.resolver.resolve(await self.get_user_roles(user))

    async def has_permission(self, user: User | None, code: str) -> bool:
        """Check a single permission.

        Raises:
            UnknownPermissionError: If ``code`` is not in the catalog.
        """
        self.rbac.catalog.get(code)
        if user is None:
            return False
        return self.rbac.resolver.has_permission(await self.get_user_roles(user), code)

    async def has_any_permission(self, user: User | None, codes: Iterable[str]) -> bool:
        codes = list(codes)
        for code in codes:
            self.rbac.catalog.get(code)
        if user is None:
            return False
        return self.rbac.resolver.has_any_permission(await self.get_user_roles(user), codes)

    async def has_all_permissions(self, user: User | None, codes: Iterable[str]) -> bool:
        codes = list(codes)
        for code in codes:
            self.rbac.catalog.get(code)
        if user is None:
            return False
        return self.rbac.resolver.has_all_permissions(await self.get_user_roles(user), codes)

    async def has_role(self, user: User | None, *role_names: str) -> bool:
        wanted = {self.rbac.registry.get(name).name for name in role_names}
        if user is None:
            return False
        return bool(wanted.intersection(await self.get_user_roles(user)))

    async def require_permission(
        self, user: User | None, code: str, context: dict[str, Any] | None = None
    ) -> None:
        if not await self.has_permission(user, code):
            await self.deny(user, [code], context)

    async def require_any_permission(
        self, user: User | None, codes: Iterable[str], context: dict[str, Any] | None = None
    ) -> None:
        codes = list(codes)
        if not await self.has_any_permission(user, codes):
            await self.deny(user, codes, context, match="any")

    async def require_all_permissions(
        self, user: User | None, codes: Iterable[str], context: dict[str, Any] | None = None
    ) -> None:
        codes = list(codes)
        if not await self.has_all_permissions(user, codes):
            await self.deny(user, codes, context)

    async def deny(
        self,
        user: User | None,
        required: list[str],
        context: dict[str, Any] | None = None,
        match: str = "all",
    ) -> None:
        """Record the denial and raise a generic 403."""
        user_id = user.id if user else None
        logger.warning("Permission denied user=%s required=%s match=%s", user_id, required, match)
        await log_best_effort(
            ActivityAction.PERMISSION_DENIED,
            entity_type="permission",
            entity_id=",".join(required),
            actor=user,
            new_value={"required": required, "match": match, **(context or {})},
        )
        raise PermissionError()
