from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ...core.enums import AttendanceStatus
from ...policy.model import AttendancePolicy


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    late_minutes: int = 0


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how we decide the check-in status."""

    @abstractmethod
    def decide_checkin(self, *, check_in_minutes: int, policy: AttendancePolicy) -> StatusDecision:
        raise NotImplementedError
