import logging
import uuid
from enum import Enum
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from ...auth.rbac_contract import DEFAULT_LOCALE
from ...crud.activity_log import ActivityLogRepository
from ...database import isolated_session
from ...models.activity_log import ActivityLog
from ...models.user import User

logger = logging.getLogger("sabq.activity")


class ActivityAction(str, Enum):
    USER_CREATED = "user_created"
    USER_UPDATED = "user_updated"
    USER_DELETED = "user_deleted"
    ROLES_UPDATED = "roles_updated"
    STATUS_UPDATED = "status_updated"
    PASSWORD_RESET = "password_reset"
    PERMISSION_DENIED = "permission_denied"


ACTIVITY_LABELS: dict[str, dict[ActivityAction, str]] = {
    "ar": {
        ActivityAction.USER_CREATED: "إنشاء مستخدم",
        ActivityAction.USER_UPDATED: "تعديل مستخدم",
        ActivityAction.USER_DELETED: "حذف مستخدم",
        ActivityAction.ROLES_UPDATED: "تحديث الأدوار",
        ActivityAction.STATUS_UPDATED: "تحديث الحالة",
        ActivityAction.PASSWORD_RESET: "إعادة تعيين كلمة المرور",
        ActivityAction.PERMISSION_DENIED: "رفض صلاحية",
    },
    "en": {
        ActivityAction.USER_CREATED: "User created",
        ActivityAction.USER_UPDATED: "User updated",
        ActivityAction.USER_DELETED: "User deleted",
        ActivityAction.ROLES_UPDATED: "Roles updated",
        ActivityAction.STATUS_UPDATED: "Status updated",
        ActivityAction.PASSWORD_RESET: "Password reset",
        ActivityAction.PERMISSION_DENIED: "Permission denied",
    },
}


def action_label(action: str, locale: str = DEFAULT_LOCALE) -> str | None:
    """Localized label for a known action, None for free-form actions."""
    try:
        key = ActivityAction(action)
    except ValueError:
        return None
    labels = ACTIVITY_LABELS.get(locale, ACTIVITY_LABELS[DEFAULT_LOCALE])
    return labels[key]


class ActivityService:
    """Writes user-management events to activity_logs."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.activity_repo = ActivityLogRepository(session)

    async def log(
        self,
        action: ActivityAction | str,
        entity_type: str,
        entity_id: str | uuid.UUID,
        actor: User | None = None,
        old_value: dict[str, Any] | None = None,
        new_value: dict[str, Any] | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
        commit: bool = True,
    ) -> ActivityLog:
        action_name = action.value if isinstance(action, ActivityAction) else action
        meta: dict[str, Any] = {}
        if ip_address:
            meta["ip_address"] = ip_address
        if user_agent:
            meta["user_agent"] = user_agent

        return await self.activity_repo.create(
            user_id=actor.id if actor else None,
            action=action_name,
            entity_type=entity_type,
            entity_id=str(entity_id),
            old_value=old_value,
            new_value=new_value,
            meta=meta or None,
            commit=commit,
        )

    async def list_recent(
        self,
        limit: int = 50,
        offset: int = 0,
        action: str | None = None,
        user_id: uuid.UUID | None = None,
    ) -> list[ActivityLog]:
        return await self.activity_repo.list_recent(
            limit=limit, offset=offset, action=action, user_id=user_id
        )


async def log_best_effort(
    action: ActivityAction | str,
    entity_type: str,
    entity_id: str | uuid.UUID,
    actor: User | None = None,
    **kwargs: Any,
) -> None:
    """Log in a separate session; a failure here never reaches the caller."""
    try:
        async with isolated_session() as session:
            await ActivityService(session).log(
                action, entity_type, entity_id, actor=actor, **kwargs
            )
    except Exception:
        logger.exception(
            "Failed to write activity log action=%s entity=%s:%s",
            action,
            entity_type,
            entity_id,
        )
