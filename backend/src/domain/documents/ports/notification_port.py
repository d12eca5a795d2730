"""Notification Port - fire-and-forget sink for user notifications."""

from abc import ABC, abstractmethod
from uuid import UUID


class NotificationSink(ABC):

    @abstractmethod
    def send(self, user_id: UUID, category: str, message: str) -> None:
        """Deliver a notification. Implementations may raise; callers treat
        delivery as best-effort."""
        pass
