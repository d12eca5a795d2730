"""Notification SQLAlchemy model"""

import uuid

from sqlalchemy import Column, Text, ForeignKey, DateTime, Uuid, Index

from .base import Base, utcnow


class Notification(Base):
    """In-app notification delivered to a user after a document mutation."""
    __tablename__ = "notification"
    __table_args__ = (
        Index("ix_notification_user_created", "user_id", "created_at"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    category = Column(Text, nullable=False)  # e.g. "document"
    message = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
