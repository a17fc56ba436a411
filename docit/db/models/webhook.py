"""SQLAlchemy ORM model for webhooks table"""

from sqlalchemy import JSON, Column, ForeignKey, Integer, Text

from docit.db.base import Base
from docit.db.models._mixins import created_at_column, updated_at_column


class Webhook(Base):
    """SQLAlchemy ORM model for the webhooks table."""
    __tablename__ = "webhooks"

    id = Column(Integer, primary_key=True, index=True)

    workspace_id = Column(
        Integer, ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False, index=True
    )
    url = Column(Text, nullable=False)
    description = Column(Text, nullable=True)

    # Subscribed event names
    events = Column(JSON, nullable=False, default=list)

    created_at = created_at_column()
    updated_at = updated_at_column()

    def __repr__(self) -> str:
        return f"<Webhook(id={self.id}, workspace_id={self.workspace_id}, url='{self.url}')>"
