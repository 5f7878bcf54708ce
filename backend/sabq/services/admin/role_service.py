import logging
import uuid
from collections.abc import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from ...auth.rbac import RBAC, get_rbac
from ...auth.roles import Role
from ...crud.role import RoleRepository
from ...crud.user import UserRepository
from ...errors import (
    NotFoundError,
    RoleAssignmentDeniedError,
    SelfModificationError,
    ValidationError,
)
from ...models.user import User
from ..audit.activity_service import ActivityAction, ActivityService
from .permission_service import PermissionService

logger = logging.getLogger("sabq.rbac")


class RoleAssignmentService:
    def __init__(self, session: AsyncSession, rbac: RBAC | None = None):
        self.session = session
        self.rbac = rbac or get_rbac()
        self.role_repo = RoleRepository(session)
        self.user_repo = UserRepository(session)
        self.permission_service = PermissionService(session, self.rbac)

    async def assignable_roles(self, actor: User) -> list[Role]:
        """Roles that at least one of the actor's roles may grant."""
        held = await self.permission_service.get_user_roles(actor)
        return [
            role
            for role in self.rbac.registry.list_roles()
            if self.rbac.authorizer.can_assign_any(held, role)
        ]

    async def assign_roles(
        self,
        actor: User,
        target_user_id: uuid.UUID,
        role_names: Iterable[str],
        *,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> list[str]:
        """Replace the target user's roles.

        Raises:
            SelfModificationError: If the actor targets themselves.
            NotFoundError: If the target user does not exist.
            ValidationError: If a requested role is not registered.
            RoleAssignmentDeniedError: If the actor may not grant a requested role
                or remove one the target currently holds.
        """
        if actor.id == target_user_id:
            raise SelfModificationError()

        target = await self.user_repo.get_by_id(target_user_id)
        if target is None:
            raise NotFoundError("User not found")

        requested = sorted(set(role_names))
        unknown = [name for name in requested if name not in self.rbac.registry]
        if unknown:
            raise ValidationError("Unknown role", code="UNKNOWN_ROLE", details=unknown)

        held = await self.permission_service.get_user_roles(actor)
        current = sorted(await self.role_repo.get_user_role_names(target.id)) or [target.role]
        # Removing a role needs the same authority as granting it
        guarded = requested + [name for name in current if name in self.rbac.registry]
        for name in guarded:
            if not self.rbac.authorizer.can_assign_any(held, name):
                logger.warning(
                    "Role assignment denied actor=%s target=%s role=%s",
                    actor.id,
                    target_user_id,
                    name,
                )
                raise RoleAssignmentDeniedError(details={"role": name})

        role_rows = await self.role_repo.list_by_names(requested)
        missing = set(requested) - {row.name for row in role_rows}
        if missing:
            raise ValidationError(
                "Role is not seeded", code="ROLE_NOT_SEEDED", details=sorted(missing)
            )

        try:
            await self.role_repo.replace_user_roles(target.id, role_rows, assigned_by=actor.id)
            await ActivityService(self.session).log(
                ActivityAction.ROLES_UPDATED,
                entity_type="user",
                entity_id=target.id,
                actor=actor,
                old_value={"roles": current},
                new_value={"roles": requested},
                ip_address=ip_address,
                user_agent=user_agent,
                commit=False,
            )
            # Role rows and the activity entry commit together
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            "Roles updated actor=%s target=%s roles=%s", actor.id, target.id, requested
        )
        return requested
