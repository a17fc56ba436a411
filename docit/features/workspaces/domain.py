"""Domain models for workspaces feature"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel


class WorkspaceRole(str, Enum):
    """Per-workspace role"""
    ADMIN = "admin"
    EDITOR = "editor"
    VIEWER = "viewer"


class WorkspaceMember(BaseModel):
    user_id: int
    role: WorkspaceRole
    added_at: datetime
    name: Optional[str] = None
    email: Optional[str] = None

    class Config:
        from_attributes = True


class Workspace(BaseModel):
    """Workspace domain model"""
    id: int
    name: str
    description: Optional[str] = None
    slug: str
    owner_id: int
    members: List[WorkspaceMember] = []
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    def member_ids(self) -> List[int]:
        return [m.user_id for m in self.members]
