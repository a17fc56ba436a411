"""Document registry: metadata in the database, bytes in blob storage.

Every operation addressed by document id authorizes against the document's
own workspace, never against a workspace id supplied by the caller.
"""

import logging
import os
import re
import time
from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from docit import config
from docit.api.schemas import Pagination
from docit.errors import NotFoundError, ValidationError
from docit.features.auth.domain import User
from docit.features.documents.domain import Document, DownloadedDocument
from docit.features.documents.repository import DocumentRepository
from docit.features.documents.storage import BlobStorage, StorageError
from docit.features.workspaces.policy import Capability
from docit.features.workspaces.service import WorkspaceService
from docit.services.llm import DocumentSummary, Summarizer

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9.-]")

DOCUMENT_NOT_FOUND = "Document not found"


def sanitize_filename(filename: str) -> str:
    return _UNSAFE_FILENAME_CHARS.sub("_", filename)


def storage_key(workspace_id: int, filename: str, now_ms: Optional[int] = None) -> str:
    """workspaces/{workspaceId}/{epochMillis}-{sanitized filename}"""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"workspaces/{workspace_id}/{now_ms}-{sanitize_filename(filename)}"


def default_title(filename: str) -> str:
    stem, _ = os.path.splitext(filename)
    return stem.strip() or filename


def extract_text(content: bytes, mime_type: str) -> str:
    """Plain-text types only; anything else yields no text"""
    if not mime_type.lower().startswith("text/"):
        return ""
    return content.decode("utf-8", errors="replace").strip()


class DocumentService:
    """Service layer for document business logic"""

    def __init__(self, db: AsyncSession, storage: BlobStorage):
        self.repository = DocumentRepository(db)
        self.workspaces = WorkspaceService(db)
        self.storage = storage

    async def upload(
        self,
        workspace_id: int,
        uploader: User,
        content: bytes,
        filename: str,
        mime_type: str,
        title: Optional[str] = None,
    ) -> Document:
        """
        Store the bytes, then record the metadata.

        Raises:
            NotFoundError: Caller is not an editor or admin of the workspace
            ValidationError: Empty, oversized or disallowed file
            StorageError: Bytes could not be stored; no metadata is written
        """
        await self.workspaces.require(workspace_id, uploader.id, Capability.WRITE)

        if not content:
            raise ValidationError("File is empty")
        if len(content) > config.MAX_FILE_SIZE:
            raise ValidationError(f"File exceeds the {config.MAX_FILE_SIZE} byte limit")
        if mime_type not in config.ALLOWED_MIME_TYPES:
            raise ValidationError(f"File type {mime_type} is not allowed")

        key = storage_key(workspace_id, filename)
        blob = await self.storage.put(content, key, mime_type)

        try:
            document = await self.repository.create(
                title=(title or "").strip() or default_title(filename),
                filename=filename,
                storage_path=blob.storage_path,
                provider_file_id=blob.provider_file_id,
                file_size=blob.size,
                mime_type=mime_type,
                workspace_id=workspace_id,
                uploaded_by_id=uploader.id,
            )
        except Exception:
            # Bytes stay in storage without a metadata record
            logger.error(f"Metadata creation failed after storing {blob.storage_path}; blob orphaned")
            raise

        logger.info(f"Document {document.id} uploaded to workspace {workspace_id} by user {uploader.id}")
        return document

    async def list(
        self,
        workspace_id: int,
        caller_id: int,
        page: int = 1,
        limit: int = 50,
    ) -> Tuple[List[Document], Pagination]:
        await self.workspaces.require(workspace_id, caller_id, Capability.READ)
        items, total = await self.repository.list_by_workspace(workspace_id, page, limit)
        return items, Pagination.build(page, limit, total)

    async def get_by_id(self, document_id: int, caller_id: int) -> Document:
        document, _ = await self._authorize(document_id, caller_id, Capability.READ)
        return document

    async def download(self, document_id: int, caller_id: int) -> DownloadedDocument:
        document, _ = await self._authorize(document_id, caller_id, Capability.READ)
        content = await self.storage.get(document.storage_path)
        return DownloadedDocument(
            content=content,
            filename=document.filename,
            mime_type=document.mime_type,
        )

    async def remove(self, document_id: int, caller_id: int) -> None:
        """Delete bytes best-effort, then the metadata"""
        document, _ = await self._authorize(document_id, caller_id, Capability.WRITE)
        try:
            await self.storage.delete(document.storage_path, document.provider_file_id)
        except StorageError as e:
            logger.warning(f"Blob delete failed for document {document_id}, removing metadata anyway: {e}")
        await self.repository.delete(document_id)
        logger.info(f"Document {document_id} deleted by user {caller_id}")

    async def attach_summary(self, document_id: int, caller_id: int, summary: str) -> Document:
        await self._authorize(document_id, caller_id, Capability.READ)
        document = await self.repository.set_summary(document_id, summary)
        if document is None:
            raise NotFoundError(DOCUMENT_NOT_FOUND)
        return document

    async def summarize(
        self,
        document_id: int,
        caller_id: int,
        summarizer: Summarizer,
    ) -> Tuple[Document, DocumentSummary]:
        """
        Generate an AI summary and store its prose on the document.

        Raises:
            SummarizerError: The model failed; the document is left unchanged
        """
        document, _ = await self._authorize(document_id, caller_id, Capability.READ)
        content = await self.storage.get(document.storage_path)
        result = await summarizer.summarize(document.title, extract_text(content, document.mime_type))
        updated = await self.attach_summary(document_id, caller_id, result.summary)
        return updated, result

    async def _authorize(self, document_id: int, caller_id: int, capability: Capability):
        document = await self.repository.get(document_id)
        if document is None:
            raise NotFoundError(DOCUMENT_NOT_FOUND)
        try:
            role = await self.workspaces.require(document.workspace_id, caller_id, capability)
        except NotFoundError:
            raise NotFoundError(DOCUMENT_NOT_FOUND)
        return document, role
