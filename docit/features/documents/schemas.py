"""Request and response schemas for Documents API"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from docit.api.schemas import CamelModel


class UploaderInfo(CamelModel):
    id: int
    name: Optional[str] = None
    email: Optional[str] = None


class DocumentResponse(CamelModel):
    id: int
    title: str
    filename: str
    file_size: int
    mime_type: str
    summary: Optional[str] = None
    workspace_id: int
    uploaded_by: UploaderInfo
    created_at: datetime
    updated_at: datetime


class AttachSummaryRequest(CamelModel):
    summary: str = Field(max_length=20000)


class SummaryResponse(CamelModel):
    """AI summary returned by the summarize endpoint"""
    document: DocumentResponse
    summary: str
    key_points: List[str]
    topics: List[str]
    document_type: str
