"""Domain models for webhooks feature"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel


class WebhookEvent(str, Enum):
    DOCUMENT_UPLOADED = "document_uploaded"
    DOCUMENT_SUMMARIZED = "document_summarized"
    WORKSPACE_CREATED = "workspace_created"
    MEMBER_INVITED = "member_invited"


ALL_EVENTS: List[WebhookEvent] = list(WebhookEvent)


class Webhook(BaseModel):
    """Webhook domain model"""
    id: int
    workspace_id: int
    url: str
    description: Optional[str] = None
    events: List[WebhookEvent] = ALL_EVENTS
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    def subscribes_to(self, event: WebhookEvent) -> bool:
        return event in self.events
