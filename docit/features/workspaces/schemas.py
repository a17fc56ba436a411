"""Request and response schemas for Workspaces API"""

from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field, field_validator

from docit.api.schemas import CamelModel
from docit.features.workspaces.domain import WorkspaceRole


def _lenient_role(value):
    """Unknown roles fall back to viewer when adding members"""
    if isinstance(value, WorkspaceRole):
        return value
    try:
        return WorkspaceRole(value)
    except ValueError:
        return WorkspaceRole.VIEWER


class CreateWorkspaceRequest(CamelModel):
    name: str = Field(max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("description")
    @classmethod
    def strip_description(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v is not None else None


class UpdateWorkspaceRequest(CamelModel):
    """Partial update: only fields present in the body change"""
    name: Optional[str] = Field(default=None, max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be empty")
        return v


class AddMemberRequest(CamelModel):
    user_id: int = Field(gt=0)
    role: WorkspaceRole = WorkspaceRole.VIEWER

    @field_validator("role", mode="before")
    @classmethod
    def normalize_role(cls, v):
        return _lenient_role(v)


class InviteMemberRequest(CamelModel):
    email: EmailStr
    role: WorkspaceRole = WorkspaceRole.VIEWER

    @field_validator("role", mode="before")
    @classmethod
    def normalize_role(cls, v):
        return _lenient_role(v)


class UpdateMemberRoleRequest(CamelModel):
    role: WorkspaceRole


class MemberResponse(CamelModel):
    user_id: int
    name: Optional[str] = None
    email: Optional[str] = None
    role: WorkspaceRole
    added_at: datetime


class WorkspaceResponse(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    slug: str
    owner_id: int
    members: List[MemberResponse] = []
    created_at: datetime
    updated_at: datetime
