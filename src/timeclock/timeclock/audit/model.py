from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from ..core.enums import AuditTarget


@dataclass(frozen=True)
class AuditLog:
    log_id: int
    actor_id: int
    action: str
    target_type: AuditTarget
    target_id: Optional[str]
    details: Optional[str]
    created_at: datetime

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.log_id,
            "actorId": self.actor_id,
            "action": self.action,
            "targetType": self.target_type.value,
            "targetId": self.target_id,
            "details": self.details,
            "createdAt": self.created_at.isoformat(timespec="seconds"),
        }
