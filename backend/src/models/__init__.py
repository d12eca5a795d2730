"""SQLAlchemy Models for DocVault"""

from .base import Base
from .user import User
from .company import Company
from .document import Document
from .notification import Notification

__all__ = [
    "Base",
    "User",
    "Company",
    "Document",
    "Notification",
]
