from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Any, Mapping, Optional, Sequence

from ..attendance.classifier import AttendanceClassifier
from ..attendance.repository import AttendanceRepository
from ..audit.service import AuditService
from ..common.datetime_utils import iter_dates, parse_iso_date, parse_optional_hhmm, time_to_minutes, weekday_index
from ..core.constants import DEFAULT_REQUEST_LIST_LIMIT, PENDING_REQUEST_LIST_LIMIT
from ..core.enums import AuditTarget, NotificationType, RequestStatus, RequestType, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..notifications.service import NotificationService
from ..policy.model import AttendancePolicy
from ..policy.service import PolicyService
from ..users.model import User
from ..users.service import UserService
from .model import LeaveBalance, LeaveRequest
from .repository import LeaveBalanceRepository, RequestRepository

logger = logging.getLogger(__name__)

_DAY_START = time(0, 0)
_DAY_END = time(23, 59)

_TYPE_LABELS = {
    RequestType.ANNUAL_LEAVE: "Annual leave",
    RequestType.SICK_LEAVE: "Sick leave",
    RequestType.HOURLY_PERMISSION: "Hourly permission",
    RequestType.TIME_ADJUSTMENT: "Time adjustment",
}


def _text(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    return value.strip() if isinstance(value, str) else ""


def parse_request_window(data: Mapping[str, Any]) -> tuple[RequestType, datetime, datetime]:
    """Validate the request form and return ``(type, from, to)``.

    Full-day leave needs ``toDate >= fromDate``. A time adjustment needs
    ``fromTime`` and ``toTime`` on ``fromDate`` with the end after the start.
    An hourly permission needs ``fromTime``, ``toDate`` and ``toTime`` with
    the end after the start.
    """
    try:
        request_type = RequestType(data.get("type"))
    except ValueError:
        raise ValidationError("Request type is required", code="INVALID_TYPE")

    if not _text(data, "fromDate"):
        raise ValidationError("fromDate is required")
    from_date = parse_iso_date(_text(data, "fromDate"))

    if request_type.is_full_day:
        if not _text(data, "toDate"):
            raise ValidationError("toDate is required")
        to_date = parse_iso_date(_text(data, "toDate"))
        if to_date < from_date:
            raise ValidationError("toDate must be on or after fromDate")
        return request_type, datetime.combine(from_date, _DAY_START), datetime.combine(to_date, _DAY_END)

    from_time = parse_optional_hhmm(_text(data, "fromTime"))
    to_time = parse_optional_hhmm(_text(data, "toTime"))
    if from_time is None:
        raise ValidationError("fromTime is required")
    if to_time is None:
        raise ValidationError("toTime is required")

    if request_type == RequestType.TIME_ADJUSTMENT:
        start, end = datetime.combine(from_date, from_time), datetime.combine(from_date, to_time)
        if end <= start:
            raise ValidationError("toTime must be after fromTime")
        return request_type, start, end

    if not _text(data, "toDate"):
        raise ValidationError("toDate is required")
    start = datetime.combine(from_date, from_time)
    end = datetime.combine(parse_iso_date(_text(data, "toDate")), to_time)
    if end <= start:
        raise ValidationError("The end must be after the start")
    return request_type, start, end


def count_working_days(policy: AttendancePolicy, start: date, end: date) -> int:
    return sum(1 for day in iter_dates(start, end) if not policy.is_weekly_off(weekday_index(day)))


class RequestService:
    def __init__(
        self,
        requests: RequestRepository,
        balances: LeaveBalanceRepository,
        attendance: AttendanceRepository,
        users: UserService,
        policies: PolicyService,
        notifications: NotificationService,
        audit: AuditService,
        *,
        classifier: Optional[AttendanceClassifier] = None,
    ):
        self._requests = requests
        self._balances = balances
        self._attendance = attendance
        self._users = users
        self._policies = policies
        self._notifications = notifications
        self._audit = audit
        self._classifier = classifier or AttendanceClassifier()

    # -------- Submit / read --------
    def submit(self, *, current_user: User, data: Mapping[str, Any]) -> LeaveRequest:
        request_type, start, end = parse_request_window(data)
        attachment_url = _text(data, "attachmentUrl") or None

        request_id = self._requests.create(
            user_id=current_user.user_id,
            request_type=request_type,
            from_date_time=start,
            to_date_time=end,
            note=_text(data, "note"),
            attachment_url=attachment_url,
        )
        logger.info("User %s submitted %s request %s", current_user.user_id, request_type.value, request_id)
        return self._get(request_id)

    def _get(self, request_id: int) -> LeaveRequest:
        req = self._requests.get_by_id(int(request_id))
        if not req:
            raise NotFoundError("Request not found")
        return req

    def get_request(self, *, current_user: User, request_id: int) -> LeaveRequest:
        req = self._get(request_id)
        if req.user_id != current_user.user_id and not self._can_review(current_user, req):
            raise AuthorizationError("You do not have permission to view this request")
        return req

    def list_my_requests(self, user_id: int, *, limit: int = DEFAULT_REQUEST_LIST_LIMIT) -> Sequence[LeaveRequest]:
        return self._requests.list_for_user(int(user_id), limit=int(limit))

    def _reviewable_user_ids(self, current_user: User) -> Optional[list[int]]:
        """None means every user (admin); managers review their departments."""
        if current_user.role == Role.ADMIN:
            return None
        if current_user.role != Role.MANAGER:
            raise AuthorizationError("You do not have permission to review requests")
        return [u.user_id for u in self._users.managed_members(current_user) if u.user_id != current_user.user_id]

    def list_pending(self, *, current_user: User, limit: int = PENDING_REQUEST_LIST_LIMIT) -> Sequence[LeaveRequest]:
        user_ids = self._reviewable_user_ids(current_user)
        pending = self._requests.list_pending(user_ids=user_ids, limit=int(limit))
        return [r for r in pending if r.user_id != current_user.user_id]

    def count_pending(self, *, current_user: User) -> int:
        return self._requests.count_pending(user_ids=self._reviewable_user_ids(current_user))

    # -------- Decisions --------
    def _can_review(self, current_user: User, req: LeaveRequest) -> bool:
        if current_user.role == Role.ADMIN:
            return True
        return self._users.manages(current_user, req.user_id)

    def _load_for_decision(self, current_user: User, request_id: int) -> LeaveRequest:
        req = self._get(request_id)
        if req.user_id == current_user.user_id:
            raise AuthorizationError("You cannot decide your own request")
        if not self._can_review(current_user, req):
            raise AuthorizationError("Only the department manager or an admin can decide this request")
        if req.status != RequestStatus.PENDING:
            raise ValidationError("Request has already been decided", code="ALREADY_DECIDED")
        return req

    def approve(self, *, current_user: User, request_id: int, note: str = "", now: datetime) -> LeaveRequest:
        """Apply the request's effects, then mark it approved.

        The decision is written last; if it or any effect fails, the leave
        days charged here are returned before the error propagates.
        """
        req = self._load_for_decision(current_user, request_id)

        charged = self._charge_leave(req) if req.request_type.is_full_day else 0
        try:
            if req.request_type == RequestType.TIME_ADJUSTMENT:
                self._apply_time_adjustment(req)
            self._record_decision(current_user, req, RequestStatus.APPROVED, note, now)
        except Exception:
            if charged:
                self._balances.refund(user_id=req.user_id, request_type=req.request_type, days=charged)
                logger.warning(
                    "Refunded %s day(s) to user %s after failed approval of request %s", charged, req.user_id, req.request_id
                )
            raise

        self._audit_decision(current_user, req, RequestStatus.APPROVED)
        return self._notify_decision(req.request_id)

    def reject(self, *, current_user: User, request_id: int, note: str = "", now: datetime) -> LeaveRequest:
        req = self._load_for_decision(current_user, request_id)
        self._record_decision(current_user, req, RequestStatus.REJECTED, note, now)
        self._audit_decision(current_user, req, RequestStatus.REJECTED)
        return self._notify_decision(req.request_id)

    def _charge_leave(self, req: LeaveRequest) -> int:
        """Deduct the request's working days from the requester's allowance."""
        policy = self._policies.get_policy()
        days = count_working_days(policy, req.from_date, req.to_date)
        if days == 0:
            return 0
        self._balances.ensure(
            LeaveBalance.fresh(
                req.user_id,
                total_annual=int(policy.annual_leave_per_year),
                total_sick=int(policy.sick_leave_per_year),
            )
        )
        if not self._balances.deduct(user_id=req.user_id, request_type=req.request_type, days=days):
            label = _TYPE_LABELS[req.request_type].lower()
            raise ValidationError(f"Insufficient {label} balance", code="INSUFFICIENT_BALANCE")
        return days

    def _record_decision(
        self,
        current_user: User,
        req: LeaveRequest,
        status: RequestStatus,
        note: str,
        now: datetime,
    ) -> None:
        decided = self._requests.decide(
            request_id=req.request_id,
            status=status,
            approver_id=current_user.user_id,
            decision_note=(note or "").strip() or None,
            decided_at=now,
        )
        if not decided:
            raise ValidationError("Request has already been decided", code="ALREADY_DECIDED")
        logger.info("Request %s %s by user %s", req.request_id, status.value, current_user.user_id)

    def _audit_decision(self, current_user: User, req: LeaveRequest, status: RequestStatus) -> None:
        verdict = "Approved" if status == RequestStatus.APPROVED else "Rejected"
        self._audit.record(
            actor=current_user,
            action=f"{verdict} {_TYPE_LABELS[req.request_type].lower()} request",
            target_type=AuditTarget.REQUEST,
            target_id=req.request_id,
            details=f"userId={req.user_id}",
        )

    def _notify_decision(self, request_id: int) -> LeaveRequest:
        req = self._get(request_id)
        label = _TYPE_LABELS[req.request_type]
        verdict = "approved" if req.status == RequestStatus.APPROVED else "rejected"
        message = f"Your {label.lower()} request starting {req.from_date.isoformat()} was {verdict}."
        if req.decision_note:
            message += f" Note: {req.decision_note}"
        self._notifications.notify(
            user_id=req.user_id,
            title=f"{label} request {verdict}",
            message=message,
            notification_type=NotificationType.REQUEST_UPDATE,
        )
        return req

    def _apply_time_adjustment(self, req: LeaveRequest) -> None:
        """Write the requested punch times onto the day's record.

        An existing record keeps the status it got at check-in; a new record is
        classified against the current policy like a regular check-in.
        """
        work_date = req.from_date
        check_in, check_out = req.from_date_time.time(), req.to_date_time.time()

        record = self._attendance.get_for_user_and_date(req.user_id, work_date)
        if record is not None:
            self._attendance.admin_update_times(
                attendance_id=record.attendance_id,
                check_in_time=check_in,
                check_out_time=check_out,
            )
            return

        policy = self._policies.get_policy()
        decision = self._classifier.classify_check_in(policy, time_to_minutes(check_in))
        attendance_id = self._attendance.create_checkin(
            user_id=req.user_id,
            work_date=work_date,
            check_in_time=check_in,
            status=decision.status,
            late_minutes=decision.late_minutes,
        )
        self._attendance.update_checkout(attendance_id=attendance_id, check_out_time=check_out)

    # -------- Balances --------
    def balance_for(self, user_id: int, *, policy: Optional[AttendancePolicy] = None) -> LeaveBalance:
        balance = self._balances.get(int(user_id))
        if balance is not None:
            return balance
        policy = policy or self._policies.get_policy()
        return LeaveBalance.fresh(
            int(user_id),
            total_annual=int(policy.annual_leave_per_year),
            total_sick=int(policy.sick_leave_per_year),
        )

    def get_balance(self, *, current_user: User, user_id: int) -> LeaveBalance:
        allowed = (
            int(user_id) == current_user.user_id
            or current_user.role == Role.ADMIN
            or self._users.manages(current_user, user_id)
        )
        if not allowed:
            raise AuthorizationError("You do not have permission to view this balance")
        return self.balance_for(user_id)

    def reset_balances(self, *, current_user: User) -> int:
        if current_user.role != Role.ADMIN:
            raise AuthorizationError("Only admins can reset leave balances")
        policy = self._policies.get_policy()
        updated = self._balances.reset_all(
            total_annual=int(policy.annual_leave_per_year),
            total_sick=int(policy.sick_leave_per_year),
        )
        logger.info("Leave balances reset by admin %s (%s rows)", current_user.user_id, updated)
        self._audit.record(
            actor=current_user,
            action="Reset leave balances",
            target_type=AuditTarget.LEAVE_BALANCE,
            details=f"annual={policy.annual_leave_per_year}, sick={policy.sick_leave_per_year}, rows={updated}",
        )
        return updated
