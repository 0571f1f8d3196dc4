from __future__ import annotations

from dataclasses import dataclass

from ..policy.model import AttendancePolicy
from .strategies.base import AttendanceStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.on_time_strategy import OnTimeStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def for_checkin(self, *, check_in_minutes: int, policy: AttendancePolicy) -> AttendanceStrategy:
        if check_in_minutes <= policy.late_threshold_minutes:
            return OnTimeStrategy()
        return LateStrategy()
