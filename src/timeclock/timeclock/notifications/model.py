from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from ..core.enums import NotificationType


@dataclass(frozen=True)
class Notification:
    notification_id: int
    user_id: int
    title: str
    message: str
    notification_type: NotificationType
    read_status: bool
    created_at: datetime

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.notification_id,
            "title": self.title,
            "message": self.message,
            "type": self.notification_type.value,
            "read": self.read_status,
            "createdAt": self.created_at.isoformat(timespec="seconds"),
        }
