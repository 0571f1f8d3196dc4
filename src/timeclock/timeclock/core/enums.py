from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for authorization checks in services."""

    ADMIN = "admin"
    MANAGER = "manager"
    EMPLOYEE = "employee"


class AttendanceStatus(str, Enum):
    """Status persisted on an attendance record (written once at check-in)."""

    PRESENT = "present"
    LATE = "late"
    ABSENT = "absent"
    ON_LEAVE = "on_leave"


class DayStatus(str, Enum):
    """Derived classification of a calendar day.

    The first four mirror ``AttendanceStatus`` and are the only ones counted in
    attendance statistics. ``NON_WORKING`` marks weekly off days on calendars and
    ``UNDETERMINED`` is the transient state of a day still in progress.
    """

    PRESENT = "present"
    LATE = "late"
    ABSENT = "absent"
    ON_LEAVE = "on_leave"
    NON_WORKING = "non_working"
    UNDETERMINED = "undetermined"

    @property
    def is_tallied(self) -> bool:
        return self not in {DayStatus.NON_WORKING, DayStatus.UNDETERMINED}


class PunchState(str, Enum):
    EMPTY = "empty"
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"


class PunchAction(str, Enum):
    CHECK_IN = "check_in"
    CHECK_OUT = "check_out"


class RequestStatus(str, Enum):
    """Approval workflow state of a leave request."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class RequestType(str, Enum):
    ANNUAL_LEAVE = "annual_leave"
    SICK_LEAVE = "sick_leave"
    HOURLY_PERMISSION = "hourly_permission"
    TIME_ADJUSTMENT = "time_adjustment"

    @property
    def is_full_day(self) -> bool:
        return self in {RequestType.ANNUAL_LEAVE, RequestType.SICK_LEAVE}


class NotificationType(str, Enum):
    REQUEST_UPDATE = "request_update"
    ATTENDANCE = "attendance"
    SYSTEM = "system"
    APPROVAL = "approval"


class AuditTarget(str, Enum):
    """Kind of record an audit entry points at."""

    POLICY = "policy"
    REQUEST = "request"
    USER = "user"
    DEPARTMENT = "department"
    LEAVE_BALANCE = "leave_balance"
