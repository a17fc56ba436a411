"""Notifications API endpoints"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from docit.api.schemas import ApiResponse
from docit.db import get_db
from docit.features.notifications.schemas import (
    CountResponse,
    MarkReadResponse,
    NotificationPayload,
    NotificationResponse,
)
from docit.features.notifications.service import NotificationService
from docit.middleware.auth import get_current_user_id

logger = logging.getLogger(__name__)


router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", response_model=ApiResponse[List[NotificationResponse]])
async def list_notifications(
    limit: int = Query(20, ge=1, le=50),
    unread_only: bool = Query(False, alias="unreadOnly"),
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """List the caller's notifications, newest first"""
    notifications = await NotificationService(db).list_for_user(user_id, limit, unread_only)
    data = [
        NotificationResponse(
            id=n.id,
            type=n.type,
            read=n.read,
            payload=NotificationPayload.model_validate(n.payload),
            created_at=n.created_at,
        )
        for n in notifications
    ]
    return ApiResponse(data=data)


@router.get("/unread-count", response_model=ApiResponse[CountResponse])
async def get_unread_count(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    count = await NotificationService(db).unread_count(user_id)
    return ApiResponse(data=CountResponse(count=count))


@router.patch("/read-all", response_model=ApiResponse[CountResponse])
async def mark_all_as_read(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    count = await NotificationService(db).mark_all_as_read(user_id)
    return ApiResponse(data=CountResponse(count=count))


@router.patch("/{notification_id}/read", response_model=ApiResponse[MarkReadResponse])
async def mark_as_read(
    notification_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Mark one notification read; repeating the call has no further effect"""
    await NotificationService(db).mark_as_read(notification_id, user_id)
    return ApiResponse(data=MarkReadResponse())
