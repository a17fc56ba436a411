"""Domain models for documents feature"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class Document(BaseModel):
    """Document metadata; the bytes live in blob storage"""
    id: int
    title: str
    filename: str
    storage_path: str
    provider_file_id: str
    file_size: int
    mime_type: str
    summary: Optional[str] = None
    workspace_id: int
    uploaded_by_id: int
    uploaded_by_name: Optional[str] = None
    uploaded_by_email: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class DownloadedDocument(BaseModel):
    content: bytes
    filename: str
    mime_type: str
