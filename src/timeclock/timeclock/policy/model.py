from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import time
from typing import Any, Iterable, Mapping, Optional

from ..common.datetime_utils import minutes_to_time, parse_hhmm, time_to_minutes
from ..core import constants
from ..core.exceptions import InvalidInput


def _normalize_off_days(values: Iterable[Any]) -> frozenset[int]:
    days = set()
    for value in values:
        if isinstance(value, bool):
            raise InvalidInput(f"Invalid weekday index: {value!r}")
        try:
            day = int(value)
        except (TypeError, ValueError):
            raise InvalidInput(f"Invalid weekday index: {value!r}")
        if not 0 <= day <= 6:
            raise InvalidInput(f"Weekday index must be 0 (Sunday) .. 6 (Saturday): {day}")
        days.add(day)
    return frozenset(days)


@dataclass(frozen=True)
class AttendancePolicy:
    """Organization-wide attendance policy, immutable per evaluation."""

    work_start: time
    work_end: time
    grace_period_minutes: int
    absent_cutoff: time
    weekly_off_days: frozenset[int] = field(default_factory=frozenset)
    max_late_days_before_warning: int = constants.DEFAULT_MAX_LATE_DAYS_BEFORE_WARNING
    annual_leave_per_year: int = constants.DEFAULT_ANNUAL_LEAVE_PER_YEAR
    sick_leave_per_year: int = constants.DEFAULT_SICK_LEAVE_PER_YEAR
    policy_id: Optional[int] = None

    def __post_init__(self):
        if int(self.grace_period_minutes) < 0:
            raise InvalidInput("grace_period_minutes must be >= 0")
        object.__setattr__(self, "weekly_off_days", _normalize_off_days(self.weekly_off_days))

    @property
    def work_start_minutes(self) -> int:
        return time_to_minutes(self.work_start)

    @property
    def work_end_minutes(self) -> int:
        return time_to_minutes(self.work_end)

    @property
    def absent_cutoff_minutes(self) -> int:
        return time_to_minutes(self.absent_cutoff)

    @property
    def late_threshold_minutes(self) -> int:
        """Last minute of day at which a check-in still counts as on time."""
        return self.work_start_minutes + int(self.grace_period_minutes)

    def is_weekly_off(self, weekday: int) -> bool:
        return weekday in self.weekly_off_days

    @classmethod
    def default(cls) -> "AttendancePolicy":
        return cls(
            work_start=minutes_to_time(parse_hhmm(constants.DEFAULT_WORK_START)),
            work_end=minutes_to_time(parse_hhmm(constants.DEFAULT_WORK_END)),
            grace_period_minutes=constants.DEFAULT_GRACE_MINUTES,
            absent_cutoff=minutes_to_time(parse_hhmm(constants.DEFAULT_ABSENT_CUTOFF)),
            weekly_off_days=frozenset(constants.DEFAULT_WEEKLY_OFF_DAYS),
        )

    @classmethod
    def from_payload(cls, data: Mapping[str, Any], *, base: Optional["AttendancePolicy"] = None) -> "AttendancePolicy":
        """Build a policy from the wire shape.

        ``{workStart, workEnd, gracePeriodMinutes, absentCutoff, weeklyOffDays}``
        plus the optional allowance fields. Missing keys fall back to ``base``
        (or the defaults), which lets partial updates reuse this parser.
        """
        base = base or cls.default()
        changes: dict[str, Any] = {}

        for key, attr in (("workStart", "work_start"), ("workEnd", "work_end"), ("absentCutoff", "absent_cutoff")):
            if key in data:
                changes[attr] = minutes_to_time(parse_hhmm(data[key]))

        int_fields = (
            ("gracePeriodMinutes", "grace_period_minutes"),
            ("maxLateDaysBeforeWarning", "max_late_days_before_warning"),
            ("annualLeavePerYear", "annual_leave_per_year"),
            ("sickLeavePerYear", "sick_leave_per_year"),
        )
        for key, attr in int_fields:
            if key in data:
                value = data[key]
                if isinstance(value, bool) or not isinstance(value, int):
                    raise InvalidInput(f"{key} must be an integer")
                if value < 0:
                    raise InvalidInput(f"{key} must be >= 0")
                changes[attr] = value

        if "weeklyOffDays" in data:
            off_days = data["weeklyOffDays"]
            if not isinstance(off_days, (list, tuple, set, frozenset)):
                raise InvalidInput("weeklyOffDays must be a list of weekday indices")
            changes["weekly_off_days"] = _normalize_off_days(off_days)

        return replace(base, **changes)

    def to_payload(self) -> dict[str, Any]:
        return {
            "workStart": self.work_start.strftime("%H:%M"),
            "workEnd": self.work_end.strftime("%H:%M"),
            "gracePeriodMinutes": int(self.grace_period_minutes),
            "absentCutoff": self.absent_cutoff.strftime("%H:%M"),
            "weeklyOffDays": sorted(self.weekly_off_days),
            "maxLateDaysBeforeWarning": int(self.max_late_days_before_warning),
            "annualLeavePerYear": int(self.annual_leave_per_year),
            "sickLeavePerYear": int(self.sick_leave_per_year),
        }
