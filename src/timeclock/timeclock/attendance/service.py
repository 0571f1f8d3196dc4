from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Mapping, Optional, Sequence

from ..common.datetime_utils import iter_dates, minutes_to_time, month_bounds, parse_iso_date, time_to_minutes
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import DayStatus, PunchAction, PunchState, RequestType
from ..core.exceptions import (
    AlreadyCheckedIn,
    AlreadyCheckedOut,
    AttendanceStateError,
    AuthorizationError,
    InvalidInput,
)
from ..policy.model import AttendancePolicy
from ..policy.service import PolicyService
from ..requests.repository import RequestRepository
from ..users.model import User
from ..users.repository import UserRepository
from .classifier import AttendanceClassifier, is_before_shift, is_early_checkout, is_late_arrival_overtime
from .model import AttendanceRecord, Coordinates, DayClassification, DaySummary, MonthlyStats, PunchRecord
from .repository import AttendanceRepository
from .state import ensure_can_check_in, ensure_can_check_out

logger = logging.getLogger(__name__)

FULL_DAY_LEAVE_TYPES = tuple(t for t in RequestType if t.is_full_day)


@dataclass(frozen=True)
class TodayStatus:
    """What the dashboard card needs to render the punch buttons and warnings."""

    work_date: date
    state: PunchState
    record: Optional[AttendanceRecord]
    classification: DayClassification
    worked_minutes: int
    is_before_shift: bool
    is_overtime: bool
    is_early_checkout: bool
    policy: AttendancePolicy

    def to_payload(self) -> dict[str, Any]:
        return {
            "date": self.work_date.isoformat(),
            "state": self.state.value,
            "record": self.record.to_payload() if self.record else None,
            "classification": self.classification.to_payload(),
            "workedMinutes": self.worked_minutes,
            "warnings": {
                "isBeforeShift": self.is_before_shift,
                "isOvertime": self.is_overtime,
                "isEarlyCheckout": self.is_early_checkout,
            },
            "shift": {
                "workStart": self.policy.work_start.strftime("%H:%M"),
                "workEnd": self.policy.work_end.strftime("%H:%M"),
                "gracePeriodMinutes": int(self.policy.grace_period_minutes),
            },
        }


@dataclass(frozen=True)
class MonthOverview:
    year: int
    month: int
    days: list[DaySummary]
    stats: MonthlyStats

    def to_payload(self) -> dict[str, Any]:
        return {
            "year": self.year,
            "month": self.month,
            "stats": self.stats.to_payload(),
            "days": [d.to_payload() for d in self.days],
        }


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        users: UserRepository,
        policies: PolicyService,
        requests: RequestRepository,
        *,
        classifier: Optional[AttendanceClassifier] = None,
    ):
        self._attendance = attendance
        self._users = users
        self._policies = policies
        self._requests = requests
        self._classifier = classifier or AttendanceClassifier()

    def _require_active_user(self, user_id: int) -> User:
        user = self._users.get_by_id(int(user_id))
        if not user or not user.is_active:
            raise AuthorizationError("Profile not found", code="NO_PROFILE")
        return user

    # -------- Punches --------
    def punch(
        self,
        user_id: int,
        action: Any,
        *,
        now: datetime,
        coords: Optional[Coordinates] = None,
    ) -> AttendanceRecord:
        try:
            action = PunchAction(action)
        except ValueError:
            raise InvalidInput("action must be check_in or check_out", code="INVALID_ACTION")
        if action == PunchAction.CHECK_IN:
            return self.check_in(user_id, now=now, coords=coords)
        return self.check_out(user_id, now=now, coords=coords)

    def check_in(self, user_id: int, *, now: datetime, coords: Optional[Coordinates] = None) -> AttendanceRecord:
        user = self._require_active_user(user_id)
        today = now.date()
        check_in_minutes = time_to_minutes(now.time())

        existing = self._attendance.get_for_user_and_date(user.user_id, today)
        try:
            ensure_can_check_in(existing)
        except AttendanceStateError:
            logger.warning("Rejected check-in for user %s on %s: already checked in", user.user_id, today)
            raise

        policy = self._policies.get_policy()
        decision = self._classifier.classify_check_in(policy, check_in_minutes)
        check_in_time = minutes_to_time(check_in_minutes)

        if existing is not None:
            # Row created earlier without a check-in (e.g. by an approved adjustment).
            filled = self._attendance.fill_checkin(
                attendance_id=existing.attendance_id,
                check_in_time=check_in_time,
                status=decision.status,
                late_minutes=decision.late_minutes,
                coords=coords,
            )
            if not filled:
                raise AlreadyCheckedIn("Already checked in today")
        else:
            self._attendance.create_checkin(
                user_id=user.user_id,
                work_date=today,
                check_in_time=check_in_time,
                status=decision.status,
                late_minutes=decision.late_minutes,
                coords=coords,
            )

        logger.info(
            "User %s checked in on %s at %s (%s, %s min late)",
            user.user_id,
            today,
            check_in_time.strftime("%H:%M"),
            decision.status.value,
            decision.late_minutes,
        )
        return self._reload(user.user_id, today)

    def check_out(self, user_id: int, *, now: datetime, coords: Optional[Coordinates] = None) -> AttendanceRecord:
        user = self._require_active_user(user_id)
        today = now.date()
        check_out_time = minutes_to_time(time_to_minutes(now.time()))

        existing = self._attendance.get_for_user_and_date(user.user_id, today)
        try:
            ensure_can_check_out(existing)
        except AttendanceStateError as exc:
            logger.warning("Rejected check-out for user %s on %s: %s", user.user_id, today, exc)
            raise

        if check_out_time < existing.check_in_time:
            raise InvalidInput("Check-out time cannot be before check-in time")

        updated = self._attendance.update_checkout(
            attendance_id=existing.attendance_id,
            check_out_time=check_out_time,
            coords=coords,
        )
        if not updated:
            # Lost the race against a concurrent check-out.
            raise AlreadyCheckedOut("Already checked out today")

        logger.info("User %s checked out on %s at %s", user.user_id, today, check_out_time.strftime("%H:%M"))
        return self._reload(user.user_id, today)

    def _reload(self, user_id: int, work_date: date) -> AttendanceRecord:
        record = self._attendance.get_for_user_and_date(user_id, work_date)
        if record is None:
            raise AttendanceStateError("Attendance record disappeared after write")
        return record

    # -------- Reads --------
    def get_today_record(self, user_id: int, *, now: datetime) -> Optional[AttendanceRecord]:
        return self._attendance.get_for_user_and_date(int(user_id), now.date())

    def get_history(self, user_id: int, *, limit: int = DEFAULT_HISTORY_LIMIT) -> Sequence[AttendanceRecord]:
        return self._attendance.get_recent_for_user(int(user_id), int(limit))

    def get_today_status(self, user_id: int, *, now: datetime) -> TodayStatus:
        today = now.date()
        policy = self._policies.get_policy()
        record = self._attendance.get_for_user_and_date(int(user_id), today)
        leave_dates = self.approved_leave_dates([int(user_id)], start=today, end=today).get(int(user_id), set())

        classification = self._classifier.classify_day(
            policy=policy,
            punch=record.to_punch() if record else None,
            work_date=today,
            as_of=now,
            leave_overlap=today in leave_dates,
        )

        now_minutes = time_to_minutes(now.time())
        state = record.state if record else PunchState.EMPTY
        worked_minutes = 0
        if record is not None and record.check_in_time is not None:
            until = time_to_minutes(record.check_out_time) if record.check_out_time else now_minutes
            worked_minutes = max(until - time_to_minutes(record.check_in_time), 0)

        return TodayStatus(
            work_date=today,
            state=state,
            record=record,
            classification=classification,
            worked_minutes=worked_minutes,
            is_before_shift=state == PunchState.EMPTY and is_before_shift(now_minutes, policy.work_start_minutes),
            is_overtime=state != PunchState.CHECKED_OUT
            and is_late_arrival_overtime(now_minutes, policy.work_end_minutes),
            is_early_checkout=state == PunchState.CHECKED_IN
            and is_early_checkout(now_minutes, policy.work_end_minutes),
            policy=policy,
        )

    # -------- Aggregation --------
    def approved_leave_dates(self, user_ids: Sequence[int], *, start: date, end: date) -> dict[int, set[date]]:
        """Dates inside [start, end] covered by an approved full-day leave, per user."""
        out: dict[int, set[date]] = defaultdict(set)
        leaves = self._requests.list_approved_overlapping(
            user_ids=list(user_ids),
            start=start,
            end=end,
            types=FULL_DAY_LEAVE_TYPES,
        )
        for leave in leaves:
            for day in iter_dates(max(leave.from_date, start), min(leave.to_date, end)):
                out[leave.user_id].add(day)
        return dict(out)

    def summarize_range(
        self,
        user_ids: Sequence[int],
        *,
        start: date,
        end: date,
        as_of: datetime,
        policy: Optional[AttendancePolicy] = None,
    ) -> dict[int, list[DaySummary]]:
        """Classify every calendar day in [start, end] for each user."""
        if end < start:
            raise InvalidInput("End date must be on or after start date")
        user_ids = [int(u) for u in user_ids]
        policy = policy or self._policies.get_policy()

        records = {
            (r.user_id, r.work_date): r for r in self._attendance.list_range(start=start, end=end, user_ids=user_ids)
        }
        leave_dates = self.approved_leave_dates(user_ids, start=start, end=end)

        out: dict[int, list[DaySummary]] = {}
        for user_id in user_ids:
            days: list[DaySummary] = []
            user_leaves = leave_dates.get(user_id, set())
            for day in iter_dates(start, end):
                record = records.get((user_id, day))
                classification = self._classifier.classify_day(
                    policy=policy,
                    punch=record.to_punch() if record else None,
                    work_date=day,
                    as_of=as_of,
                    leave_overlap=day in user_leaves,
                )
                days.append(DaySummary(work_date=day, classification=classification, record=record))
            out[user_id] = days
        return out

    def get_month_overview(self, user_id: int, year: int, month: int, *, as_of: datetime) -> MonthOverview:
        """Day-by-day calendar and its tally, both evaluated against one policy read."""
        policy = self._policies.get_policy()
        start, end = month_bounds(year, month)
        days = self.summarize_range([int(user_id)], start=start, end=end, as_of=as_of, policy=policy)[int(user_id)]
        return MonthOverview(year=year, month=month, days=days, stats=tally(days, policy=policy))

    # -------- Stateless evaluation --------
    def classify_payload(self, data: Mapping[str, Any], *, as_of: datetime) -> DayClassification:
        """Evaluate a raw punch against a policy without touching storage.

        ``{policy: {...}, record: {date, checkInTime, checkOutTime} | null,
        date?: "YYYY-MM-DD", leaveOverlap?: bool, isWeeklyOff?: bool}``.
        Missing policy keys fall back to the stored policy.
        """
        policy_data = data.get("policy") or {}
        if not isinstance(policy_data, Mapping):
            raise InvalidInput("policy must be an object")
        policy = AttendancePolicy.from_payload(policy_data, base=self._policies.get_policy())

        raw_record = data.get("record")
        punch = PunchRecord.from_payload(raw_record) if raw_record is not None else None
        if punch is not None:
            work_date = punch.work_date
        elif data.get("date"):
            work_date = parse_iso_date(data["date"])
        else:
            raise InvalidInput("Either record or date is required")

        is_weekly_off = data.get("isWeeklyOff")
        if is_weekly_off is not None and not isinstance(is_weekly_off, bool):
            raise InvalidInput("isWeeklyOff must be a boolean")
        leave_overlap = data.get("leaveOverlap", False)
        if not isinstance(leave_overlap, bool):
            raise InvalidInput("leaveOverlap must be a boolean")

        return self._classifier.classify_day(
            policy=policy,
            punch=punch,
            work_date=work_date,
            as_of=as_of,
            leave_overlap=leave_overlap,
            is_weekly_off=is_weekly_off,
        )


def tally(days: Sequence[DaySummary], *, policy: AttendancePolicy) -> MonthlyStats:
    """Count tallied days; NON_WORKING and UNDETERMINED days are left out."""
    counts = {status: 0 for status in DayStatus}
    late_minutes = 0
    hours_worked = 0.0
    for day in days:
        c = day.classification
        counts[c.status] += 1
        if c.status.is_tallied:
            late_minutes += c.late_minutes
        if c.hours_worked is not None:
            hours_worked += c.hours_worked

    late_days = counts[DayStatus.LATE]
    return MonthlyStats(
        present_days=counts[DayStatus.PRESENT],
        late_days=late_days,
        absent_days=counts[DayStatus.ABSENT],
        leave_days=counts[DayStatus.ON_LEAVE],
        late_minutes=late_minutes,
        hours_worked=hours_worked,
        late_warning=late_days > int(policy.max_late_days_before_warning),
    )
