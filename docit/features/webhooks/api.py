"""Webhooks API endpoints (nested under a workspace)"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from docit.api.schemas import ApiResponse
from docit.db import get_db
from docit.features.webhooks.schemas import CreateWebhookRequest, WebhookResponse
from docit.features.webhooks.service import WebhookService
from docit.middleware.auth import get_current_user_id

logger = logging.getLogger(__name__)


router = APIRouter(prefix="/api/workspaces/{workspace_id}/webhooks", tags=["webhooks"])


@router.get("", response_model=ApiResponse[List[WebhookResponse]])
async def list_webhooks(
    workspace_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    webhooks = await WebhookService(db).list(workspace_id, user_id)
    return ApiResponse(data=[WebhookResponse.model_validate(w) for w in webhooks])


@router.post("", response_model=ApiResponse[WebhookResponse], status_code=201)
async def create_webhook(
    workspace_id: int,
    request: CreateWebhookRequest,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Register a webhook target for this workspace (editor or admin)"""
    webhook = await WebhookService(db).create(workspace_id, user_id, request)
    return ApiResponse(data=WebhookResponse.model_validate(webhook))


@router.delete("/{webhook_id}", status_code=204)
async def delete_webhook(
    workspace_id: int,
    webhook_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    await WebhookService(db).delete(workspace_id, user_id, webhook_id)
    return Response(status_code=204)
