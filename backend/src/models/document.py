"""Document SQLAlchemy model

Document represents an uploaded file (PDF, Excel, PowerPoint) that passed
validation and malware scanning. Tracks the durable storage location and the
metadata echoed back on download.
"""

import uuid

from sqlalchemy import Column, Text, ForeignKey, BigInteger, DateTime, Uuid, Index, CheckConstraint
from sqlalchemy.orm import relationship

from .base import Base, utcnow


class Document(Base):
    """Document model representing one stored file.

    A row is only ever inserted after the bytes were fully written to the
    content store, and the bytes are removed before the row is deleted.
    """
    __tablename__ = "document"
    __table_args__ = (
        Index("ix_document_company_created", "company_id", "created_at"),
        CheckConstraint("size_bytes >= 0", name="ck_document_size_nonnegative"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    company_id = Column(Uuid(as_uuid=True), ForeignKey("company.id", ondelete="RESTRICT"), nullable=False)
    name = Column(Text, nullable=False)  # sanitized original filename
    mime_type = Column(Text, nullable=False)
    size_bytes = Column(BigInteger, nullable=False)
    storage_path = Column(Text, nullable=False)  # never exposed through the API
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    # Relationships
    company = relationship("Company", back_populates="documents")

    def __repr__(self):
        return f"<Document(id={self.id}, name='{self.name}', company_id={self.company_id})>"
