"""SQLAlchemy repository for document metadata"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from docit.db.models.document import Document as DocumentORM
from docit.db.models.user import User as UserORM
from docit.features.documents.domain import Document

logger = logging.getLogger(__name__)


class DocumentRepository:
    """Repository for document operations using SQLAlchemy"""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _with_uploader(self):
        return (
            select(DocumentORM, UserORM.name, UserORM.email)
            .outerjoin(UserORM, UserORM.id == DocumentORM.uploaded_by_id)
        )

    @staticmethod
    def _to_domain(row: DocumentORM, name: Optional[str], email: Optional[str]) -> Document:
        document = Document.model_validate(row)
        document.uploaded_by_name = name
        document.uploaded_by_email = email
        return document

    async def create(
        self,
        title: str,
        filename: str,
        storage_path: str,
        provider_file_id: str,
        file_size: int,
        mime_type: str,
        workspace_id: int,
        uploaded_by_id: int,
    ) -> Document:
        row = DocumentORM(
            title=title,
            filename=filename,
            storage_path=storage_path,
            provider_file_id=provider_file_id,
            file_size=file_size,
            mime_type=mime_type,
            workspace_id=workspace_id,
            uploaded_by_id=uploaded_by_id,
        )
        self.db.add(row)
        await self.db.commit()
        return await self.get(row.id)

    async def get(self, document_id: int) -> Optional[Document]:
        stmt = self._with_uploader().where(DocumentORM.id == document_id)
        found = (await self.db.execute(stmt)).first()
        if found is None:
            return None
        return self._to_domain(*found)

    async def list_by_workspace(
        self,
        workspace_id: int,
        page: int,
        limit: int,
    ) -> Tuple[List[Document], int]:
        """Newest first"""
        total = await self.db.scalar(
            select(func.count())
            .select_from(DocumentORM)
            .where(DocumentORM.workspace_id == workspace_id)
        )
        stmt = (
            self._with_uploader()
            .where(DocumentORM.workspace_id == workspace_id)
            .order_by(DocumentORM.created_at.desc(), DocumentORM.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        rows = (await self.db.execute(stmt)).all()
        return [self._to_domain(*row) for row in rows], total or 0

    async def set_summary(self, document_id: int, summary: str) -> Optional[Document]:
        row = await self.db.get(DocumentORM, document_id)
        if row is None:
            return None
        row.summary = summary
        await self.db.commit()
        return await self.get(document_id)

    async def delete(self, document_id: int) -> bool:
        result = await self.db.execute(delete(DocumentORM).where(DocumentORM.id == document_id))
        await self.db.commit()
        return result.rowcount > 0
