from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from typing import Any, Mapping, Optional

from ..common.datetime_utils import minutes_to_time, parse_hhmm, parse_iso_date, time_to_minutes
from ..core.enums import AttendanceStatus, DayStatus, PunchState
from ..core.exceptions import InvalidInput


@dataclass(frozen=True)
class PunchRecord:
    """One user's punches for one calendar date.

    ``status`` and ``late_minutes`` are the values decided at check-in time;
    they are None for raw punches that have not been through a check-in.
    """

    work_date: date
    check_in_time: Optional[time] = None
    check_out_time: Optional[time] = None
    status: Optional[AttendanceStatus] = None
    late_minutes: Optional[int] = None

    def __post_init__(self):
        if self.check_out_time is not None and self.check_in_time is None:
            raise InvalidInput("A check-out requires a check-in on the same record")

    @property
    def state(self) -> PunchState:
        if self.check_in_time is None:
            return PunchState.EMPTY
        if self.check_out_time is None:
            return PunchState.CHECKED_IN
        return PunchState.CHECKED_OUT

    @property
    def check_in_minutes(self) -> Optional[int]:
        return time_to_minutes(self.check_in_time) if self.check_in_time else None

    @property
    def check_out_minutes(self) -> Optional[int]:
        return time_to_minutes(self.check_out_time) if self.check_out_time else None

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "PunchRecord":
        """``{date: "YYYY-MM-DD", checkInTime: "HH:MM"|null, checkOutTime: "HH:MM"|null}``"""
        if not isinstance(data, Mapping) or "date" not in data:
            raise InvalidInput("Punch record requires a date")

        def _opt(key: str) -> Optional[time]:
            value = data.get(key)
            return minutes_to_time(parse_hhmm(value)) if value is not None else None

        return cls(
            work_date=parse_iso_date(data["date"]),
            check_in_time=_opt("checkInTime"),
            check_out_time=_opt("checkOutTime"),
        )


@dataclass(frozen=True)
class AttendanceRecord:
    """Persisted attendance row (one per user per date)."""

    attendance_id: int
    user_id: int
    work_date: date
    check_in_time: Optional[time]
    check_out_time: Optional[time]
    status: Optional[AttendanceStatus]
    late_minutes: int = 0
    check_in_lat: Optional[float] = None
    check_in_lng: Optional[float] = None
    check_out_lat: Optional[float] = None
    check_out_lng: Optional[float] = None

    def to_punch(self) -> PunchRecord:
        return PunchRecord(
            work_date=self.work_date,
            check_in_time=self.check_in_time,
            check_out_time=self.check_out_time,
            status=self.status if self.check_in_time else None,
            late_minutes=self.late_minutes if self.check_in_time else None,
        )

    @property
    def state(self) -> PunchState:
        return self.to_punch().state

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.attendance_id,
            "userId": self.user_id,
            "date": self.work_date.isoformat(),
            "checkInTime": self.check_in_time.strftime("%H:%M") if self.check_in_time else None,
            "checkOutTime": self.check_out_time.strftime("%H:%M") if self.check_out_time else None,
            "status": self.status.value if self.status else None,
            "lateMinutes": int(self.late_minutes or 0),
        }


@dataclass(frozen=True)
class Coordinates:
    lat: float
    lng: float

    @classmethod
    def from_payload(cls, data: Any) -> Optional["Coordinates"]:
        if data is None:
            return None
        try:
            lat, lng = float(data["lat"]), float(data["lng"])
        except (KeyError, TypeError, ValueError):
            raise InvalidInput("coords must be an object with numeric lat and lng")
        if not (-90 <= lat <= 90 and -180 <= lng <= 180):
            raise InvalidInput("coords out of range")
        return cls(lat=lat, lng=lng)


@dataclass(frozen=True)
class DayClassification:
    """Derived view of a day; recomputed on demand, never stored."""

    status: DayStatus
    late_minutes: int = 0
    hours_worked: Optional[float] = None
    is_overtime: bool = False

    def to_payload(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "lateMinutes": self.late_minutes,
            "hoursWorked": self.hours_worked,
            "isOvertime": self.is_overtime,
        }


@dataclass(frozen=True)
class DaySummary:
    work_date: date
    classification: DayClassification
    record: Optional[AttendanceRecord] = None

    def to_payload(self) -> dict[str, Any]:
        payload = {"date": self.work_date.isoformat(), **self.classification.to_payload()}
        payload["checkInTime"] = (
            self.record.check_in_time.strftime("%H:%M") if self.record and self.record.check_in_time else None
        )
        payload["checkOutTime"] = (
            self.record.check_out_time.strftime("%H:%M") if self.record and self.record.check_out_time else None
        )
        return payload


@dataclass(frozen=True)
class MonthlyStats:
    present_days: int
    late_days: int
    absent_days: int
    leave_days: int
    late_minutes: int
    hours_worked: float
    late_warning: bool

    @property
    def total_working_days(self) -> int:
        return self.present_days + self.late_days + self.absent_days + self.leave_days

    def to_payload(self) -> dict[str, Any]:
        return {
            "presentDays": self.present_days,
            "lateDays": self.late_days,
            "absentDays": self.absent_days,
            "leaveDays": self.leave_days,
            "totalWorkingDays": self.total_working_days,
            "lateMinutes": self.late_minutes,
            "hoursWorked": round(self.hours_worked, 2),
            "lateWarning": self.late_warning,
        }

