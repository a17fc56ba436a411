"""SQLAlchemy ORM model for documents table"""

from sqlalchemy import BigInteger, Column, ForeignKey, Integer, String, Text

from docit.db.base import Base
from docit.db.models._mixins import created_at_column, updated_at_column


class Document(Base):
    """
    SQLAlchemy ORM model for the documents table.
    Bytes live in blob storage; this row is the record of truth.
    """
    __tablename__ = "documents"

    id = Column(Integer, primary_key=True, index=True)

    title = Column(Text, nullable=False)
    filename = Column(Text, nullable=False)

    # Blob storage references
    storage_path = Column(Text, nullable=False)
    provider_file_id = Column(Text, nullable=False)

    file_size = Column(BigInteger, nullable=False)
    mime_type = Column(String(255), nullable=False, default="application/pdf")

    summary = Column(Text, nullable=True)

    workspace_id = Column(Integer, ForeignKey("workspaces.id"), nullable=False, index=True)
    uploaded_by_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    created_at = created_at_column()
    updated_at = updated_at_column()

    def __repr__(self) -> str:
        return f"<Document(id={self.id}, title='{self.title}', workspace_id={self.workspace_id})>"
