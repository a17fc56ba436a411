"""Request and response schemas for Webhooks API"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from docit.api.schemas import CamelModel
from docit.features.webhooks.domain import WebhookEvent


class CreateWebhookRequest(CamelModel):
    url: str = Field(max_length=2048)
    description: Optional[str] = Field(default=None, max_length=500)
    # Unknown names are dropped; an empty result subscribes to every event
    events: Optional[List[str]] = None

    @field_validator("url")
    @classmethod
    def url_is_http(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Webhook URL is required")
        if not v.startswith(("http://", "https://")):
            raise ValueError("URL must start with http:// or https://")
        return v

    @field_validator("description")
    @classmethod
    def strip_description(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v is not None else None

    def known_events(self) -> List[WebhookEvent]:
        valid = {e.value for e in WebhookEvent}
        return [WebhookEvent(e) for e in (self.events or []) if e in valid]


class WebhookResponse(CamelModel):
    id: int
    workspace_id: int
    url: str
    description: Optional[str] = None
    events: List[WebhookEvent]
    created_at: datetime
    updated_at: datetime
