"""Notification ledger: per-user inbox writes and reads.

Fan-out helpers run as background tasks after the triggering request has
responded. They open their own database session and never raise.
"""

import logging
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from docit.db import SessionLocal
from docit.errors import NotFoundError
from docit.features.notifications.domain import Notification, NotificationType
from docit.features.notifications.repository import NotificationRepository
from docit.features.notifications.schemas import NotificationPayload
from docit.features.workspaces.repository import WorkspaceRepository

logger = logging.getLogger(__name__)

MAX_LIST_LIMIT = 50


class NotificationService:
    """Service layer for reading and acknowledging notifications"""

    def __init__(self, db: AsyncSession):
        self.repository = NotificationRepository(db)

    async def list_for_user(self, user_id: int, limit: int = 20, unread_only: bool = False) -> List[Notification]:
        limit = min(MAX_LIST_LIMIT, max(1, limit))
        return await self.repository.list_for_user(user_id, limit, unread_only)

    async def unread_count(self, user_id: int) -> int:
        return await self.repository.unread_count(user_id)

    async def mark_as_read(self, notification_id: int, user_id: int) -> None:
        if not await self.repository.mark_read(notification_id, user_id):
            raise NotFoundError("Notification not found")

    async def mark_all_as_read(self, user_id: int) -> int:
        return await self.repository.mark_all_read(user_id)


async def create_notification(
    user_id: int,
    type: NotificationType,
    payload: NotificationPayload,
) -> None:
    try:
        async with SessionLocal() as db:
            await NotificationRepository(db).create_many([user_id], type, payload.to_storage())
    except Exception as e:
        logger.error(f"Failed to create {type.value} notification for user {user_id}: {e}", exc_info=True)


async def notify_workspace_members_except(
    workspace_id: int,
    except_user_id: int,
    type: NotificationType,
    payload: NotificationPayload,
) -> None:
    """Notify the owner and every member of a workspace except one user"""
    try:
        async with SessionLocal() as db:
            member_ids = await WorkspaceRepository(db).member_user_ids(workspace_id)
            recipients = [uid for uid in member_ids if uid != except_user_id]
            created = await NotificationRepository(db).create_many(recipients, type, payload.to_storage())
        logger.info(f"{len(created)} {type.value} notifications created for workspace {workspace_id}")
    except Exception as e:
        logger.error(f"Notification fan-out failed for workspace {workspace_id}: {e}", exc_info=True)
