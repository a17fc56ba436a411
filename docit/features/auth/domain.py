"""Domain models for users and authentication"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class GlobalRole(str, Enum):
    """Global default role; a fallback only, never used for workspace access"""
    ADMIN = "admin"
    MANAGER = "manager"
    EDITOR = "editor"
    VIEWER = "viewer"


class User(BaseModel):
    """User domain model"""
    id: int
    email: str
    name: str
    google_id: Optional[str] = None
    avatar_url: Optional[str] = None
    role: GlobalRole = GlobalRole.VIEWER
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class GoogleProfile(BaseModel):
    """Profile returned by the identity provider after a code exchange"""
    id: str
    email: str
    name: str
    picture: Optional[str] = None
