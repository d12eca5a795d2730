"""Company model - Root entity for document namespace isolation"""

import uuid

from sqlalchemy import Column, Text, DateTime, Uuid, ForeignKey
from sqlalchemy.orm import validates, relationship

from .base import Base, utcnow


class Company(Base):
    """
    Company model - the storage and ownership namespace for documents.

    Each company is owned by exactly one user. Every document belongs to one
    company, and its bytes live under a directory/key prefix named after the
    company id.
    """
    __tablename__ = "company"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    owner_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("user.id", ondelete="RESTRICT"),
        nullable=False,
        unique=True,
    )
    name = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    # Relationships
    owner = relationship("User", back_populates="company")
    documents = relationship("Document", back_populates="company")

    @validates('name')
    def validate_name(self, key, value):
        """
        Ensure company name is not empty and within length limits.

        Raises:
            ValueError: If name is empty/whitespace or exceeds 200 characters
        """
        if not value or len(value.strip()) == 0:
            raise ValueError("Company name cannot be empty")
        if len(value) > 200:
            raise ValueError("Company name cannot exceed 200 characters")
        return value.strip()

    def __repr__(self):
        return f"<Company(id={self.id}, name='{self.name}')>"
