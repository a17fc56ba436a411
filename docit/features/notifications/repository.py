"""SQLAlchemy repository for notifications"""

import logging
from typing import Iterable, List

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from docit.db.models.notification import Notification as NotificationORM
from docit.features.notifications.domain import Notification, NotificationType

logger = logging.getLogger(__name__)


class NotificationRepository:
    """Repository for notification operations using SQLAlchemy"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_many(
        self,
        user_ids: Iterable[int],
        type: NotificationType,
        payload: dict,
    ) -> List[Notification]:
        rows = [
            NotificationORM(user_id=user_id, type=type.value, read=False, payload=dict(payload))
            for user_id in user_ids
        ]
        if not rows:
            return []
        self.db.add_all(rows)
        await self.db.commit()
        return [Notification.model_validate(row) for row in rows]

    async def list_for_user(self, user_id: int, limit: int, unread_only: bool = False) -> List[Notification]:
        """Newest first"""
        stmt = select(NotificationORM).where(NotificationORM.user_id == user_id)
        if unread_only:
            stmt = stmt.where(NotificationORM.read.is_(False))
        stmt = stmt.order_by(NotificationORM.created_at.desc(), NotificationORM.id.desc()).limit(limit)
        rows = (await self.db.execute(stmt)).scalars().all()
        return [Notification.model_validate(row) for row in rows]

    async def unread_count(self, user_id: int) -> int:
        count = await self.db.scalar(
            select(func.count())
            .select_from(NotificationORM)
            .where(NotificationORM.user_id == user_id, NotificationORM.read.is_(False))
        )
        return count or 0

    async def mark_read(self, notification_id: int, user_id: int) -> bool:
        """Idempotent; False only when the notification is not the user's"""
        row = await self.db.scalar(
            select(NotificationORM).where(
                NotificationORM.id == notification_id,
                NotificationORM.user_id == user_id,
            )
        )
        if row is None:
            return False
        if not row.read:
            row.read = True
            await self.db.commit()
        return True

    async def mark_all_read(self, user_id: int) -> int:
        """Returns the number of notifications that changed"""
        result = await self.db.execute(
            update(NotificationORM)
            .where(NotificationORM.user_id == user_id, NotificationORM.read.is_(False))
            .values(read=True)
        )
        await self.db.commit()
        return result.rowcount or 0
