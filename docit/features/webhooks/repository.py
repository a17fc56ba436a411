"""SQLAlchemy repository for webhooks"""

from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from docit.db.models.webhook import Webhook as WebhookORM
from docit.features.webhooks.domain import ALL_EVENTS, Webhook, WebhookEvent


class WebhookRepository:
    """Repository for webhook operations using SQLAlchemy"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(
        self,
        workspace_id: int,
        url: str,
        description: Optional[str] = None,
        events: Optional[List[WebhookEvent]] = None,
    ) -> Webhook:
        row = WebhookORM(
            workspace_id=workspace_id,
            url=url,
            description=description,
            events=[e.value for e in (events or ALL_EVENTS)],
        )
        self.db.add(row)
        await self.db.commit()
        return Webhook.model_validate(row)

    async def list_by_workspace(self, workspace_id: int) -> List[Webhook]:
        stmt = (
            select(WebhookORM)
            .where(WebhookORM.workspace_id == workspace_id)
            .order_by(WebhookORM.id)
        )
        rows = (await self.db.execute(stmt)).scalars().all()
        return [Webhook.model_validate(row) for row in rows]

    async def list_subscribed(self, workspace_id: int, event: WebhookEvent) -> List[Webhook]:
        # Event lists are JSON; filter in Python to stay portable across backends
        return [w for w in await self.list_by_workspace(workspace_id) if w.subscribes_to(event)]

    async def delete(self, webhook_id: int, workspace_id: int) -> bool:
        result = await self.db.execute(
            delete(WebhookORM).where(
                WebhookORM.id == webhook_id,
                WebhookORM.workspace_id == workspace_id,
            )
        )
        await self.db.commit()
        return result.rowcount > 0
