"""Attendance status rules.

Everything here is a pure function of its arguments: a policy, the punches of
one day and, where the answer depends on the clock, an explicit ``as_of``
instant. Times of day are integer minutes since midnight (0..1439).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import time_to_minutes, weekday_index
from ..core.constants import EARLY_CHECKOUT_WINDOW_MINUTES, MINUTES_PER_DAY
from ..core.enums import DayStatus
from ..core.exceptions import InvalidInput
from ..policy.model import AttendancePolicy
from .factory import AttendanceStrategyFactory
from .model import DayClassification, PunchRecord
from .strategies.base import StatusDecision


def _require_minute(value: int, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInput(f"{field_name} must be an integer minute of day, got {value!r}")
    if not 0 <= value < MINUTES_PER_DAY:
        raise InvalidInput(f"{field_name} out of range (0..{MINUTES_PER_DAY - 1}): {value}")
    return value


def compute_hours_worked(check_in_minutes: int, check_out_minutes: int) -> float:
    """Decimal hours between two punches of the same day.

    Overnight shifts are not supported, so a check-out before the check-in is
    rejected instead of producing a negative duration.
    """
    check_in_minutes = _require_minute(check_in_minutes, "check_in")
    check_out_minutes = _require_minute(check_out_minutes, "check_out")
    if check_out_minutes < check_in_minutes:
        raise InvalidInput("Check-out time cannot be before check-in time")
    return max(check_out_minutes - check_in_minutes, 0) / 60.0


def is_late_arrival_overtime(check_in_minutes: int, work_end_minutes: int) -> bool:
    """Arriving after the shift ended counts the whole session as overtime."""
    return _require_minute(check_in_minutes, "check_in") > _require_minute(work_end_minutes, "work_end")


def is_early_checkout(
    check_out_minutes: int,
    work_end_minutes: int,
    *,
    window_minutes: int = EARLY_CHECKOUT_WINDOW_MINUTES,
) -> bool:
    """Leaving more than ``window_minutes`` before work end (a warning only)."""
    return _require_minute(check_out_minutes, "check_out") < _require_minute(work_end_minutes, "work_end") - window_minutes


def is_before_shift(now_minutes: int, work_start_minutes: int) -> bool:
    return _require_minute(now_minutes, "now") < _require_minute(work_start_minutes, "work_start")


@dataclass
class AttendanceClassifier:
    strategy_factory: AttendanceStrategyFactory = field(default_factory=AttendanceStrategyFactory)

    def classify_check_in(self, policy: AttendancePolicy, check_in_minutes: int) -> StatusDecision:
        """present when at or before ``work_start + grace``, late otherwise."""
        check_in_minutes = _require_minute(check_in_minutes, "check_in")
        strategy = self.strategy_factory.for_checkin(check_in_minutes=check_in_minutes, policy=policy)
        return strategy.decide_checkin(check_in_minutes=check_in_minutes, policy=policy)

    def classify_day(
        self,
        *,
        policy: AttendancePolicy,
        punch: Optional[PunchRecord],
        work_date: date,
        as_of: datetime,
        leave_overlap: bool = False,
        is_weekly_off: Optional[bool] = None,
    ) -> DayClassification:
        """Classify one calendar day for read-side aggregation.

        Precedence: weekly off day, approved leave, recorded check-in, absence
        past the cutoff. A day with none of those is UNDETERMINED, which callers
        must treat as transient. ``is_weekly_off`` defaults to the policy's off
        days for ``work_date``.
        """
        if punch is not None and punch.work_date != work_date:
            raise InvalidInput("Punch record belongs to a different date")
        if is_weekly_off is None:
            is_weekly_off = policy.is_weekly_off(weekday_index(work_date))

        hours_worked = None
        is_overtime = False
        if punch is not None and punch.check_in_time is not None:
            is_overtime = is_late_arrival_overtime(punch.check_in_minutes, policy.work_end_minutes)
            if punch.check_out_time is not None:
                hours_worked = compute_hours_worked(punch.check_in_minutes, punch.check_out_minutes)

        def _result(status: DayStatus, late_minutes: int = 0) -> DayClassification:
            return DayClassification(
                status=status,
                late_minutes=late_minutes,
                hours_worked=hours_worked,
                is_overtime=is_overtime,
            )

        if is_weekly_off:
            return _result(DayStatus.NON_WORKING)
        if leave_overlap:
            return _result(DayStatus.ON_LEAVE)

        if punch is not None and punch.check_in_time is not None:
            if punch.status is not None:
                # Written once at check-in; later policy edits do not reclassify the day.
                return _result(DayStatus(punch.status.value), int(punch.late_minutes or 0))
            decision = self.classify_check_in(policy, punch.check_in_minutes)
            return _result(DayStatus(decision.status.value), decision.late_minutes)

        if self._past_absent_cutoff(policy, work_date=work_date, as_of=as_of):
            return _result(DayStatus.ABSENT)
        return _result(DayStatus.UNDETERMINED)

    @staticmethod
    def _past_absent_cutoff(policy: AttendancePolicy, *, work_date: date, as_of: datetime) -> bool:
        today = as_of.date()
        if work_date < today:
            # Historical days are evaluated at end of day.
            return True
        if work_date > today:
            return False
        return time_to_minutes(as_of.time()) > policy.absent_cutoff_minutes
