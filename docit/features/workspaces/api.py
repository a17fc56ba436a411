"""Workspaces API endpoints"""

import logging
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from docit.api.schemas import ApiResponse
from docit.db import get_db
from docit.features.auth.domain import User
from docit.features.documents.storage import BlobStorage, get_blob_storage, release_blobs
from docit.features.notifications.domain import NotificationType
from docit.features.notifications.schemas import NotificationPayload
from docit.features.notifications.service import create_notification
from docit.features.webhooks.domain import WebhookEvent
from docit.features.webhooks.service import fire_webhooks
from docit.features.workspaces.domain import Workspace
from docit.features.workspaces.schemas import (
    AddMemberRequest,
    CreateWorkspaceRequest,
    InviteMemberRequest,
    UpdateMemberRoleRequest,
    UpdateWorkspaceRequest,
    WorkspaceResponse,
)
from docit.features.workspaces.service import WorkspaceService
from docit.middleware.auth import get_current_user, get_current_user_id

logger = logging.getLogger(__name__)


router = APIRouter(prefix="/api/workspaces", tags=["workspaces"])


def _to_response(workspace: Workspace) -> WorkspaceResponse:
    return WorkspaceResponse.model_validate(workspace)


def _schedule_member_added(
    background_tasks: BackgroundTasks,
    workspace: Workspace,
    new_user_id: int,
    actor: User,
) -> None:
    background_tasks.add_task(
        create_notification,
        new_user_id,
        NotificationType.WORKSPACE_INVITE,
        NotificationPayload(
            workspace_id=workspace.id,
            workspace_name=workspace.name,
            actor_user_id=actor.id,
            actor_name=actor.name,
        ),
    )
    background_tasks.add_task(
        fire_webhooks,
        workspace.id,
        WebhookEvent.MEMBER_INVITED,
        {"workspaceName": workspace.name, "userId": new_user_id, "invitedBy": actor.id},
    )


@router.post("", response_model=ApiResponse[WorkspaceResponse], status_code=201)
async def create_workspace(
    request: CreateWorkspaceRequest,
    background_tasks: BackgroundTasks,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Create a workspace owned by the caller"""
    workspace = await WorkspaceService(db).create_workspace(request.name, request.description, user)
    background_tasks.add_task(
        fire_webhooks,
        workspace.id,
        WebhookEvent.WORKSPACE_CREATED,
        {"workspaceName": workspace.name, "createdBy": user.id},
    )
    return ApiResponse(data=_to_response(workspace))


@router.get("", response_model=ApiResponse[List[WorkspaceResponse]])
async def list_workspaces(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Workspaces the caller owns or belongs to, most recently updated first"""
    items, pagination = await WorkspaceService(db).list_workspaces_for_user(user_id, page, limit)
    return ApiResponse(data=[_to_response(w) for w in items], pagination=pagination)


@router.get("/{workspace_id}", response_model=ApiResponse[WorkspaceResponse])
async def get_workspace(
    workspace_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    workspace = await WorkspaceService(db).get_workspace_by_id(workspace_id, user_id)
    return ApiResponse(data=_to_response(workspace))


@router.patch("/{workspace_id}", response_model=ApiResponse[WorkspaceResponse])
async def update_workspace(
    workspace_id: int,
    request: UpdateWorkspaceRequest,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Partial update; requires editor or admin"""
    fields = request.model_dump(exclude_unset=True)
    # A null name is treated as absent
    if fields.get("name") is None:
        fields.pop("name", None)
    workspace = await WorkspaceService(db).update_workspace(workspace_id, user_id, fields)
    return ApiResponse(data=_to_response(workspace))


@router.delete("/{workspace_id}", status_code=204)
async def delete_workspace(
    workspace_id: int,
    background_tasks: BackgroundTasks,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage),
):
    """Delete the workspace with its documents, members, webhooks and chat history"""
    blobs = await WorkspaceService(db).delete_workspace(workspace_id, user_id)
    if blobs:
        background_tasks.add_task(release_blobs, storage, blobs)
    return Response(status_code=204)


@router.post("/{workspace_id}/members", response_model=ApiResponse[WorkspaceResponse])
async def add_member(
    workspace_id: int,
    request: AddMemberRequest,
    background_tasks: BackgroundTasks,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    workspace = await WorkspaceService(db).add_member(workspace_id, user.id, request.user_id, request.role)
    _schedule_member_added(background_tasks, workspace, request.user_id, user)
    return ApiResponse(data=_to_response(workspace))


@router.post("/{workspace_id}/invite", response_model=ApiResponse[WorkspaceResponse])
async def invite_member(
    workspace_id: int,
    request: InviteMemberRequest,
    background_tasks: BackgroundTasks,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Add an already registered user by email"""
    workspace, invited = await WorkspaceService(db).invite_by_email(
        workspace_id, user.id, request.email, request.role
    )
    _schedule_member_added(background_tasks, workspace, invited.id, user)
    return ApiResponse(data=_to_response(workspace))


@router.delete("/{workspace_id}/members/{member_user_id}", response_model=ApiResponse[dict])
async def remove_member(
    workspace_id: int,
    member_user_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    await WorkspaceService(db).remove_member(workspace_id, user_id, member_user_id)
    return ApiResponse(data={"message": "Member removed"})


@router.patch("/{workspace_id}/members/{member_user_id}/role", response_model=ApiResponse[WorkspaceResponse])
async def update_member_role(
    workspace_id: int,
    member_user_id: int,
    request: UpdateMemberRoleRequest,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    workspace = await WorkspaceService(db).update_member_role(
        workspace_id, user_id, member_user_id, request.role
    )
    return ApiResponse(data=_to_response(workspace))
