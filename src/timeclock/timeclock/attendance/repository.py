from __future__ import annotations

from datetime import date, time
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord, Coordinates


class AttendanceRepository(Protocol):
    def get_recent_for_user(self, user_id: int, limit: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_range(self, *, start: date, end: date, user_ids: Sequence[int]) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def create_checkin(
        self,
        *,
        user_id: int,
        work_date: date,
        check_in_time: time,
        status: AttendanceStatus,
        late_minutes: int,
        coords: Optional[Coordinates] = None,
    ) -> int:
        """Insert the day's row.

        Must raise ``AlreadyCheckedIn`` when a row for (user_id, work_date)
        already exists; the uniqueness check is the storage's job.
        """

        raise NotImplementedError

    def fill_checkin(
        self,
        *,
        attendance_id: int,
        check_in_time: time,
        status: AttendanceStatus,
        late_minutes: int,
        coords: Optional[Coordinates] = None,
    ) -> bool:
        """Set the check-in on an existing row that has none. False if already set."""

        raise NotImplementedError

    def update_checkout(
        self,
        *,
        attendance_id: int,
        check_out_time: time,
        coords: Optional[Coordinates] = None,
    ) -> bool:
        """Set the check-out once. False when the row was already checked out."""

        raise NotImplementedError

    def admin_update_times(
        self,
        *,
        attendance_id: int,
        check_in_time: Optional[time],
        check_out_time: Optional[time],
    ) -> bool:
        """Override punch times after an approved time adjustment. Status is untouched."""

        raise NotImplementedError
