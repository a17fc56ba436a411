"""SQLAlchemy ORM model for notifications table"""

from sqlalchemy import JSON, Boolean, Column, ForeignKey, Index, Integer, String

from docit.db.base import Base
from docit.db.models._mixins import created_at_column, updated_at_column


class Notification(Base):
    """
    SQLAlchemy ORM model for the notifications table.
    Append-only; only the read flag is ever updated.
    """
    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notifications_user_created", "user_id", "created_at"),
        Index("ix_notifications_user_read", "user_id", "read"),
    )

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    type = Column(String(64), nullable=False)
    read = Column(Boolean, nullable=False, default=False)

    # Informational only (workspaceId, documentTitle, actorName, ...)
    payload = Column(JSON, nullable=False, default=dict)

    created_at = created_at_column()
    updated_at = updated_at_column()

    def __repr__(self) -> str:
        return f"<Notification(id={self.id}, user_id={self.user_id}, type='{self.type}')>"
