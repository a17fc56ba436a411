"""Workspace chat WebSocket endpoint"""

from typing import Optional

from fastapi import APIRouter, Query, WebSocket

from docit.features.chat.service import get_chat_manager

router = APIRouter(tags=["chat"])


@router.websocket("/ws")
async def workspace_chat(
    websocket: WebSocket,
    token: Optional[str] = Query(None),
    workspace_id: Optional[str] = Query(None, alias="workspaceId"),
):
    """
    Join the chat room of a workspace.

    Connect with ``/ws?token=<access token>&workspaceId=<id>``. Rejected joins
    are closed with a 4xxx code identifying the reason.
    """
    await get_chat_manager().connect(websocket, token, workspace_id)
