"""SQLAlchemy ORM models for users and their denormalized workspace list"""

from sqlalchemy import Column, ForeignKey, Integer, String, Text, UniqueConstraint

from docit.db.base import Base
from docit.db.models._mixins import created_at_column, updated_at_column


class User(Base):
    """
    SQLAlchemy ORM model for the users table.
    Users are created on first Google sign-in or matched by email.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)

    email = Column(String(320), nullable=False, unique=True, index=True)
    name = Column(Text, nullable=False)
    google_id = Column(String(255), nullable=True, unique=True, index=True)
    avatar_url = Column(Text, nullable=True)

    # Global default role, never used for workspace authorization
    role = Column(String(16), nullable=False, default="viewer")

    created_at = created_at_column()
    updated_at = updated_at_column()

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"


class UserWorkspace(Base):
    """
    Denormalized "my workspaces" index.
    Kept in sync with workspace_members by the workspace repository.
    """
    __tablename__ = "user_workspaces"
    __table_args__ = (
        UniqueConstraint("user_id", "workspace_id", name="uq_user_workspaces_user_workspace"),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    workspace_id = Column(Integer, nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<UserWorkspace(user_id={self.user_id}, workspace_id={self.workspace_id})>"
