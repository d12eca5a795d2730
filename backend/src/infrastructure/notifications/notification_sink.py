"""Database-backed notification sink.

Notifications are persisted as rows in the notification table; delivery to
the client (polling, websockets) is handled elsewhere.
"""

import logging
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.notification import Notification
from domain.documents.ports.notification_port import NotificationSink

logger = logging.getLogger(__name__)


class DatabaseNotificationSink(NotificationSink):

    def __init__(self, db: Session):
        self.db = db

    def send(self, user_id: UUID, category: str, message: str) -> None:
        try:
            self.db.add(Notification(user_id=user_id, category=category, message=message))
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

        logger.debug(f"Notification stored for user {user_id}: {message}")
