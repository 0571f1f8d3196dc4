from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

from ..attendance.service import AttendanceService, tally
from ..common.datetime_utils import format_hhmm
from ..core.constants import DEFAULT_REPORT_DAYS, MAX_REPORT_DAYS
from ..core.enums import DayStatus
from ..core.exceptions import AuthorizationError, ValidationError
from ..policy.service import PolicyService
from ..users.department_repository import DepartmentRepository
from ..users.model import User
from ..users.service import UserService


@dataclass(frozen=True)
class ReportData:
    rows: list[dict]
    summary: list[dict]


def default_report_range(today: date) -> tuple[date, date]:
    return today - timedelta(days=DEFAULT_REPORT_DAYS - 1), today


class AttendanceReportService:
    """Per-day rows and per-user tallies for dashboards and admin reports."""

    def __init__(
        self,
        attendance: AttendanceService,
        users: UserService,
        departments: DepartmentRepository,
        policies: PolicyService,
    ):
        self._attendance = attendance
        self._users = users
        self._departments = departments
        self._policies = policies

    def _scope(self, current_user: User, *, user_id: Optional[int], dept_id: Optional[int]) -> list[User]:
        users = list(self._users.visible_users(current_user, dept_id=dept_id))
        if user_id is None:
            return users
        picked = [u for u in users if u.user_id == int(user_id)]
        if not picked:
            raise AuthorizationError("You do not have permission to view this user's attendance")
        return picked

    def build_attendance_report(
        self,
        *,
        current_user: User,
        start: date,
        end: date,
        as_of: datetime,
        user_id: Optional[int] = None,
        dept_id: Optional[int] = None,
    ) -> ReportData:
        if end < start:
            raise ValidationError("End date must be on or after start date")
        if (end - start).days + 1 > MAX_REPORT_DAYS:
            raise ValidationError(f"Report range cannot exceed {MAX_REPORT_DAYS} days")

        users = self._scope(current_user, user_id=user_id, dept_id=dept_id)
        dept_names = {d.dept_id: d.name for d in self._departments.list_all()}
        policy = self._policies.get_policy()
        days_by_user = self._attendance.summarize_range(
            [u.user_id for u in users], start=start, end=end, as_of=as_of, policy=policy
        )

        out_rows: list[dict] = []
        summary: list[dict] = []
        for user in users:
            days = days_by_user.get(user.user_id, [])
            for day in days:
                c = day.classification
                # Off days and days still in progress only appear when someone punched.
                if not c.status.is_tallied and day.record is None:
                    continue
                out_rows.append(
                    {
                        "userId": user.user_id,
                        "fullName": user.full_name,
                        "department": dept_names.get(user.dept_id, "-"),
                        **day.to_payload(),
                    }
                )

            stats = tally(days, policy=policy)
            total_minutes = int(round(stats.hours_worked * 60))
            summary.append(
                {
                    "userId": user.user_id,
                    "fullName": user.full_name,
                    "department": dept_names.get(user.dept_id, "-"),
                    **stats.to_payload(),
                    "totalHours": format_hhmm(total_minutes),
                }
            )

        out_rows.sort(key=lambda r: (r["date"], r["fullName"]), reverse=True)
        summary.sort(key=lambda s: s["hoursWorked"], reverse=True)
        return ReportData(rows=out_rows, summary=summary)

    def build_daily_overview(
        self,
        *,
        current_user: User,
        day: date,
        as_of: datetime,
        dept_id: Optional[int] = None,
    ) -> dict:
        """Status counts for one day, the numbers behind the dashboard tiles."""
        users = self._scope(current_user, user_id=None, dept_id=dept_id)
        days_by_user = self._attendance.summarize_range([u.user_id for u in users], start=day, end=day, as_of=as_of)

        counts = {status: 0 for status in DayStatus}
        for user in users:
            for summary in days_by_user.get(user.user_id, []):
                counts[summary.classification.status] += 1

        return {
            "date": day.isoformat(),
            "totalEmployees": len(users),
            "present": counts[DayStatus.PRESENT],
            "late": counts[DayStatus.LATE],
            "absent": counts[DayStatus.ABSENT],
            "onLeave": counts[DayStatus.ON_LEAVE],
            "undetermined": counts[DayStatus.UNDETERMINED],
            "nonWorking": counts[DayStatus.NON_WORKING],
        }
