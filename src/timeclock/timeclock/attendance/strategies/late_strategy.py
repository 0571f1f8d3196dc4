from __future__ import annotations

from ...core.enums import AttendanceStatus
from ...policy.model import AttendancePolicy
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Late check-in; lateness is measured from the end of the grace period."""

    def decide_checkin(self, *, check_in_minutes: int, policy: AttendancePolicy) -> StatusDecision:
        return StatusDecision(
            status=AttendanceStatus.LATE,
            late_minutes=check_in_minutes - policy.late_threshold_minutes,
        )
