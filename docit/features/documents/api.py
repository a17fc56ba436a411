"""Documents API endpoints"""

import logging
from typing import List, Optional
from urllib.parse import quote

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, Query, Response, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from docit import config
from docit.api.schemas import ApiResponse
from docit.db import get_db
from docit.features.auth.domain import User
from docit.features.documents.domain import Document
from docit.features.documents.schemas import (
    AttachSummaryRequest,
    DocumentResponse,
    SummaryResponse,
    UploaderInfo,
)
from docit.features.documents.service import DocumentService
from docit.features.documents.storage import BlobStorage, get_blob_storage
from docit.features.notifications.domain import NotificationType
from docit.features.notifications.schemas import NotificationPayload
from docit.features.notifications.service import notify_workspace_members_except
from docit.features.webhooks.domain import WebhookEvent
from docit.features.webhooks.service import fire_webhooks
from docit.features.workspaces.repository import WorkspaceRepository
from docit.middleware.auth import get_current_user, get_current_user_id
from docit.services.llm import Summarizer, get_summarizer

logger = logging.getLogger(__name__)


router = APIRouter(prefix="/api/documents", tags=["documents"])


def _to_response(document: Document) -> DocumentResponse:
    return DocumentResponse(
        id=document.id,
        title=document.title,
        filename=document.filename,
        file_size=document.file_size,
        mime_type=document.mime_type,
        summary=document.summary,
        workspace_id=document.workspace_id,
        uploaded_by=UploaderInfo(
            id=document.uploaded_by_id,
            name=document.uploaded_by_name,
            email=document.uploaded_by_email,
        ),
        created_at=document.created_at,
        updated_at=document.updated_at,
    )


def _content_disposition(filename: str) -> str:
    ascii_name = filename.encode("ascii", "replace").decode("ascii").replace('"', "_")
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(filename)}"


@router.post("/upload", response_model=ApiResponse[DocumentResponse], status_code=201)
async def upload_document(
    background_tasks: BackgroundTasks,
    file: UploadFile = File(...),
    workspace_id: int = Form(..., alias="workspaceId"),
    title: Optional[str] = Form(None),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage),
):
    """
    Upload a file into a workspace (editor or admin).

    Other members are notified and webhooks fire after the response is sent.
    """
    # At most one byte past the limit, so oversized files fail validation
    content = await file.read(config.MAX_FILE_SIZE + 1)
    mime_type = (file.content_type or "application/octet-stream").split(";")[0].strip().lower()
    filename = file.filename or "document"

    document = await DocumentService(db, storage).upload(
        workspace_id, user, content, filename, mime_type, title=title
    )
    workspace_name = await WorkspaceRepository(db).get_name(workspace_id)

    background_tasks.add_task(
        notify_workspace_members_except,
        workspace_id,
        user.id,
        NotificationType.DOCUMENT_UPLOADED,
        NotificationPayload(
            workspace_id=workspace_id,
            workspace_name=workspace_name,
            document_id=document.id,
            document_title=document.title,
            actor_user_id=user.id,
            actor_name=user.name,
        ),
    )
    background_tasks.add_task(
        fire_webhooks,
        workspace_id,
        WebhookEvent.DOCUMENT_UPLOADED,
        {
            "workspaceName": workspace_name,
            "documentId": document.id,
            "documentTitle": document.title,
            "uploadedBy": user.id,
        },
    )
    return ApiResponse(data=_to_response(document))


@router.get("/workspace/{workspace_id}", response_model=ApiResponse[List[DocumentResponse]])
async def list_documents(
    workspace_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage),
):
    """Documents of a workspace, newest first"""
    items, pagination = await DocumentService(db, storage).list(workspace_id, user_id, page, limit)
    return ApiResponse(data=[_to_response(d) for d in items], pagination=pagination)


@router.get("/{document_id}", response_model=ApiResponse[DocumentResponse])
async def get_document(
    document_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage),
):
    document = await DocumentService(db, storage).get_by_id(document_id, user_id)
    return ApiResponse(data=_to_response(document))


@router.get("/{document_id}/download")
async def download_document(
    document_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage),
):
    """Raw bytes; accepts the token as a query parameter for browser links"""
    downloaded = await DocumentService(db, storage).download(document_id, user_id)
    return Response(
        content=downloaded.content,
        media_type=downloaded.mime_type,
        headers={"Content-Disposition": _content_disposition(downloaded.filename)},
    )


@router.delete("/{document_id}", status_code=204)
async def delete_document(
    document_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage),
):
    await DocumentService(db, storage).remove(document_id, user_id)
    return Response(status_code=204)


@router.put("/{document_id}/summary", response_model=ApiResponse[DocumentResponse])
async def attach_summary(
    document_id: int,
    request: AttachSummaryRequest,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage),
):
    document = await DocumentService(db, storage).attach_summary(document_id, user_id, request.summary)
    return ApiResponse(data=_to_response(document))


@router.post("/{document_id}/summarize", response_model=ApiResponse[SummaryResponse])
async def summarize_document(
    document_id: int,
    background_tasks: BackgroundTasks,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage),
    summarizer: Summarizer = Depends(get_summarizer),
):
    """Generate an AI summary and store it on the document"""
    document, result = await DocumentService(db, storage).summarize(document_id, user_id, summarizer)
    background_tasks.add_task(
        fire_webhooks,
        document.workspace_id,
        WebhookEvent.DOCUMENT_SUMMARIZED,
        {"documentId": document.id, "documentTitle": document.title, "summarizedBy": user_id},
    )
    return ApiResponse(data=SummaryResponse(
        document=_to_response(document),
        summary=result.summary,
        key_points=result.key_points,
        topics=result.topics,
        document_type=result.document_type,
    ))
