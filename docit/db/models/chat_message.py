"""SQLAlchemy ORM model for workspace_chat_messages table"""

from sqlalchemy import Column, ForeignKey, Index, Integer, String

from docit.db.base import Base
from docit.db.models._mixins import created_at_column


class WorkspaceChatMessage(Base):
    """
    SQLAlchemy ORM model for the workspace_chat_messages table.
    Messages are immutable once written.
    """
    __tablename__ = "workspace_chat_messages"
    __table_args__ = (
        Index("ix_workspace_chat_messages_workspace_created", "workspace_id", "created_at"),
    )

    id = Column(Integer, primary_key=True, index=True)

    workspace_id = Column(
        Integer, ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False
    )
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    text = Column(String(2000), nullable=False)

    created_at = created_at_column()

    def __repr__(self) -> str:
        return f"<WorkspaceChatMessage(id={self.id}, workspace_id={self.workspace_id})>"
