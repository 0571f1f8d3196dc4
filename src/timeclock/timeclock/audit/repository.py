from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import AuditTarget
from .model import AuditLog


class AuditRepository(Protocol):
    def create(
        self,
        *,
        actor_id: int,
        action: str,
        target_type: AuditTarget,
        target_id: Optional[str],
        details: Optional[str],
    ) -> int:
        raise NotImplementedError

    def list_logs(
        self,
        *,
        actor_id: Optional[int] = None,
        target_type: Optional[AuditTarget] = None,
        limit: int,
        offset: int = 0,
    ) -> Sequence[AuditLog]:
        """Newest first."""

        raise NotImplementedError

    def list_for_target(self, *, target_type: AuditTarget, target_id: str) -> Sequence[AuditLog]:
        raise NotImplementedError
