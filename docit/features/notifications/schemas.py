"""Request and response schemas for Notifications API"""

from datetime import datetime
from typing import Optional

from docit.api.schemas import CamelModel
from docit.features.notifications.domain import NotificationType


class NotificationPayload(CamelModel):
    """Informational context shown with a notification; every field optional"""
    workspace_id: Optional[int] = None
    workspace_name: Optional[str] = None
    document_id: Optional[int] = None
    document_title: Optional[str] = None
    actor_user_id: Optional[int] = None
    actor_name: Optional[str] = None

    def to_storage(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class NotificationResponse(CamelModel):
    id: int
    type: NotificationType
    read: bool
    payload: NotificationPayload
    created_at: datetime


class CountResponse(CamelModel):
    count: int


class MarkReadResponse(CamelModel):
    ok: bool = True
