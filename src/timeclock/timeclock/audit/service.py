from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from ..core.constants import DEFAULT_AUDIT_LIMIT, MAX_AUDIT_LIMIT
from ..core.enums import AuditTarget, Role
from ..core.exceptions import AuthorizationError, ValidationError
from ..users.model import User
from .model import AuditLog
from .repository import AuditRepository

logger = logging.getLogger(__name__)


def parse_target(value: Any) -> AuditTarget:
    try:
        return AuditTarget(value)
    except ValueError:
        raise ValidationError(f"Unknown target type: {value!r}", code="INVALID_TARGET_TYPE")


class AuditService:
    """Append-only trail of administrative changes, readable by admins."""

    def __init__(self, logs: AuditRepository):
        self._logs = logs

    def record(
        self,
        *,
        actor: User,
        action: str,
        target_type: AuditTarget,
        target_id: Any = None,
        details: Optional[str] = None,
    ) -> int:
        log_id = self._logs.create(
            actor_id=actor.user_id,
            action=action,
            target_type=target_type,
            target_id=None if target_id is None else str(target_id),
            details=details,
        )
        logger.debug("Audit %s: %s %s/%s by user %s", log_id, action, target_type.value, target_id, actor.user_id)
        return log_id

    def _require_admin(self, current_user: User) -> None:
        if current_user.role != Role.ADMIN:
            raise AuthorizationError("Only admins can read the audit log")

    def list_logs(
        self,
        *,
        current_user: User,
        actor_id: Optional[int] = None,
        target_type: Optional[AuditTarget] = None,
        limit: int = DEFAULT_AUDIT_LIMIT,
        offset: int = 0,
    ) -> Sequence[AuditLog]:
        self._require_admin(current_user)
        return self._logs.list_logs(
            actor_id=actor_id,
            target_type=target_type,
            limit=max(1, min(int(limit), MAX_AUDIT_LIMIT)),
            offset=max(0, int(offset)),
        )

    def list_for_target(self, *, current_user: User, target_type: AuditTarget, target_id: Any) -> Sequence[AuditLog]:
        self._require_admin(current_user)
        return self._logs.list_for_target(target_type=target_type, target_id=str(target_id))
