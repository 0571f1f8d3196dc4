from __future__ import annotations

from ...core.enums import AttendanceStatus
from ...policy.model import AttendancePolicy
from .base import AttendanceStrategy, StatusDecision


class OnTimeStrategy(AttendanceStrategy):
    """Check-in at or before work start plus grace."""

    def decide_checkin(self, *, check_in_minutes: int, policy: AttendancePolicy) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT, late_minutes=0)
