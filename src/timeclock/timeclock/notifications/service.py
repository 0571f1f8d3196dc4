from __future__ import annotations

import logging
from typing import Sequence

from ..core.enums import NotificationType
from ..core.exceptions import NotFoundError
from .model import Notification
from .repository import NotificationRepository

logger = logging.getLogger(__name__)


class NotificationService:
    def __init__(self, notifications: NotificationRepository):
        self._notifications = notifications

    def notify(self, *, user_id: int, title: str, message: str, notification_type: NotificationType) -> int:
        notification_id = self._notifications.create(
            user_id=int(user_id),
            title=title,
            message=message,
            notification_type=notification_type,
        )
        logger.debug("Notification %s stored for user %s", notification_id, user_id)
        return notification_id

    def list_for_user(self, user_id: int, *, limit: int = 50) -> Sequence[Notification]:
        return self._notifications.list_for_user(int(user_id), limit=int(limit))

    def unread_count(self, user_id: int) -> int:
        return self._notifications.count_unread(int(user_id))

    def mark_read(self, *, user_id: int, notification_id: int) -> None:
        if not self._notifications.mark_read(notification_id=int(notification_id), user_id=int(user_id)):
            raise NotFoundError("Notification not found")

    def mark_all_read(self, user_id: int) -> int:
        return self._notifications.mark_all_read(int(user_id))
