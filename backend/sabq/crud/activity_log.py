import uuid
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.activity_log import ActivityLog


class ActivityLogRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        user_id: uuid.UUID | None,
        action: str,
        entity_type: str,
        entity_id: str,
        old_value: dict[str, Any] | None = None,
        new_value: dict[str, Any] | None = None,
        meta: dict[str, Any] | None = None,
        commit: bool = True,
    ) -> ActivityLog:
        """Add an entry. With commit=False it only flushes, so it joins the caller's transaction."""
        activity_log = ActivityLog(
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            old_value=old_value,
            new_value=new_value,
            meta=meta,
        )
        self.session.add(activity_log)
        if not commit:
            await self.session.flush()
            return activity_log
        await self.session.commit()
        await self.session.refresh(activity_log)
        return activity_log

    async def list_recent(
        self,
        limit: int = 50,
        offset: int = 0,
        action: str | None = None,
        user_id: uuid.UUID | None = None,
    ) -> list[ActivityLog]:
        query = select(ActivityLog)
        if action is not None:
            query = query.where(ActivityLog.action == action)
        if user_id is not None:
            query = query.where(ActivityLog.user_id == user_id)
        result = await self.session.execute(
            query.order_by(ActivityLog.created_at.desc()).limit(limit).offset(offset)
        )
        return list(result.scalars().all())
