"""SQLAlchemy ORM models for workspaces and workspace_members tables"""

from sqlalchemy import Column, ForeignKey, Integer, String, Text, UniqueConstraint

from docit.db.base import Base
from docit.db.models._mixins import created_at_column, updated_at_column


class Workspace(Base):
    """
    SQLAlchemy ORM model for the workspaces table.
    The owner is always treated as admin, whether or not a member row exists.
    """
    __tablename__ = "workspaces"

    id = Column(Integer, primary_key=True, index=True)

    name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    # Unique constraint backs up the sequential slug probing
    slug = Column(String(255), nullable=False, unique=True, index=True)

    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    created_at = created_at_column()
    updated_at = updated_at_column()

    def __repr__(self) -> str:
        return f"<Workspace(id={self.id}, slug='{self.slug}')>"


class WorkspaceMember(Base):
    """
    SQLAlchemy ORM model for the workspace_members table.
    A user appears at most once per workspace.
    """
    __tablename__ = "workspace_members"
    __table_args__ = (
        UniqueConstraint("workspace_id", "user_id", name="uq_workspace_members_workspace_user"),
    )

    id = Column(Integer, primary_key=True, index=True)

    workspace_id = Column(
        Integer, ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    role = Column(String(16), nullable=False, default="viewer")

    added_at = created_at_column()

    def __repr__(self) -> str:
        return f"<WorkspaceMember(workspace_id={self.workspace_id}, user_id={self.user_id}, role='{self.role}')>"
