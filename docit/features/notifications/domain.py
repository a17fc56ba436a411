"""Domain models for notifications feature"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel


class NotificationType(str, Enum):
    WORKSPACE_INVITE = "workspace_invite"
    DOCUMENT_UPLOADED = "document_uploaded"


class Notification(BaseModel):
    """Notification domain model"""
    id: int
    user_id: int
    type: NotificationType
    read: bool = False
    payload: Dict[str, Any] = {}
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
