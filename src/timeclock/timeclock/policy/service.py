from __future__ import annotations

import logging
from typing import Any, Mapping

from ..audit.service import AuditService
from ..core.enums import AuditTarget, Role
from ..core.exceptions import AuthorizationError, InvalidInput
from ..users.model import User
from .model import AttendancePolicy
from .repository import PolicyRepository

logger = logging.getLogger(__name__)


class PolicyService:
    def __init__(self, policies: PolicyRepository, audit: AuditService):
        self._policies = policies
        self._audit = audit

    def get_policy(self) -> AttendancePolicy:
        """Stored policy, or the defaults when the organization has none yet."""
        return self._policies.get() or AttendancePolicy.default()

    def update_policy(self, *, current_user: User, changes: Mapping[str, Any]) -> AttendancePolicy:
        if current_user.role != Role.ADMIN:
            raise AuthorizationError("Only admins can change the attendance policy")

        policy = AttendancePolicy.from_payload(changes, base=self.get_policy())

        # Overnight shifts are not supported: the whole shift lives inside one day.
        if policy.work_end_minutes <= policy.work_start_minutes:
            raise InvalidInput("workEnd must be after workStart")
        if len(policy.weekly_off_days) == 7:
            raise InvalidInput("At least one weekday must be a working day")

        saved = self._policies.save(policy)
        logger.info("Attendance policy updated by user %s: %s", current_user.user_id, saved.to_payload())
        self._audit.record(
            actor=current_user,
            action="Updated attendance policy",
            target_type=AuditTarget.POLICY,
            target_id=saved.policy_id,
            details=", ".join(sorted(changes)),
        )
        return saved
