"""Webhook dispatcher.

Deliveries are fire-and-forget HTTP POSTs. A failing target is logged and
never affects the operation that triggered the event.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from docit import config
from docit.db import SessionLocal
from docit.errors import NotFoundError
from docit.features.webhooks.domain import Webhook, WebhookEvent
from docit.features.webhooks.repository import WebhookRepository
from docit.features.webhooks.schemas import CreateWebhookRequest
from docit.features.workspaces.policy import Capability
from docit.features.workspaces.service import WorkspaceService

logger = logging.getLogger(__name__)


class WebhookService:
    """Webhook management, restricted to editors and admins"""

    def __init__(self, db: AsyncSession):
        self.repository = WebhookRepository(db)
        self.workspaces = WorkspaceService(db)

    async def list(self, workspace_id: int, caller_id: int) -> List[Webhook]:
        await self.workspaces.require(workspace_id, caller_id, Capability.WRITE)
        return await self.repository.list_by_workspace(workspace_id)

    async def create(self, workspace_id: int, caller_id: int, request: CreateWebhookRequest) -> Webhook:
        await self.workspaces.require(workspace_id, caller_id, Capability.WRITE)
        webhook = await self.repository.create(
            workspace_id,
            request.url,
            description=request.description,
            events=request.known_events(),
        )
        logger.info(f"Webhook {webhook.id} registered for workspace {workspace_id}")
        return webhook

    async def delete(self, workspace_id: int, caller_id: int, webhook_id: int) -> None:
        await self.workspaces.require(workspace_id, caller_id, Capability.WRITE)
        if not await self.repository.delete(webhook_id, workspace_id):
            raise NotFoundError("Webhook not found")


def build_payload(workspace_id: int, event: WebhookEvent, extra: Dict[str, Any]) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "event": event.value,
        "workspaceId": workspace_id,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    body.update(extra)
    return body


async def _post(client: httpx.AsyncClient, url: str, event: WebhookEvent, body: Dict[str, Any]) -> None:
    try:
        response = await client.post(url, json=body)
        if response.is_success:
            logger.debug(f"Webhook {url} accepted {event.value}")
        else:
            logger.warning(f"Webhook {url} returned {response.status_code} for event {event.value}")
    except httpx.HTTPError as e:
        logger.error(f"Webhook {url} failed for event {event.value}: {e}")


async def fire_webhooks(
    workspace_id: int,
    event: WebhookEvent,
    extra: Optional[Dict[str, Any]] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> int:
    """
    POST the event to every webhook of the workspace subscribed to it.

    Returns:
        Number of targets attempted
    """
    try:
        async with SessionLocal() as db:
            webhooks = await WebhookRepository(db).list_subscribed(workspace_id, event)
    except Exception as e:
        logger.error(f"Could not load webhooks for workspace {workspace_id}: {e}", exc_info=True)
        return 0

    if not webhooks:
        return 0

    body = build_payload(workspace_id, event, extra or {})
    async with httpx.AsyncClient(timeout=config.WEBHOOK_TIMEOUT_SECONDS, transport=transport) as client:
        await asyncio.gather(*(_post(client, w.url, event, body) for w in webhooks))
    return len(webhooks)
