"""In-memory repositories shared by the service and HTTP tests."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime

from timeclock.attendance.model import AttendanceRecord
from timeclock.audit.model import AuditLog
from timeclock.container import wire
from timeclock.core.enums import RequestStatus, RequestType, Role
from timeclock.core.exceptions import AlreadyCheckedIn
from timeclock.notifications.model import Notification
from timeclock.requests.model import LeaveRequest
from timeclock.users.department_model import Department
from timeclock.users.model import User


def make_user(user_id, role=Role.EMPLOYEE, dept_id=1, *, is_active=True, name=None):
    return User(
        user_id=user_id,
        full_name=name or f"User {user_id}",
        email=f"user{user_id}@example.com",
        role=role,
        dept_id=dept_id,
        is_active=is_active,
    )


class FakeUserRepo:
    def __init__(self, users=()):
        self.users = {u.user_id: u for u in users}

    def get_by_id(self, user_id):
        return self.users.get(int(user_id))

    def list_users(self, *, dept_id=None, active_only=True):
        out = [u for u in self.users.values() if dept_id is None or u.dept_id == dept_id]
        if active_only:
            out = [u for u in out if u.is_active]
        return sorted(out, key=lambda u: u.full_name)

    def update_assignment(self, user_id, *, role, dept_id):
        self.users[user_id] = replace(self.users[user_id], role=role, dept_id=dept_id)
        return True

    def set_active(self, user_id, *, is_active):
        self.users[user_id] = replace(self.users[user_id], is_active=is_active)
        return True


class FakeDepartmentRepo:
    def __init__(self, departments=()):
        self.departments = {d.dept_id: d for d in departments}
        self._next_id = max(self.departments, default=0) + 1
        self.members = {}

    def list_all(self):
        return sorted(self.departments.values(), key=lambda d: d.name)

    def get_by_id(self, dept_id):
        return self.departments.get(int(dept_id))

    def get_by_name(self, name):
        return next((d for d in self.departments.values() if d.name == name), None)

    def create(self, *, name, name_ar, manager_id):
        dept_id = self._next_id
        self._next_id += 1
        self.departments[dept_id] = Department(dept_id=dept_id, name=name, name_ar=name_ar, manager_id=manager_id)
        return dept_id

    def update(self, dept_id, *, name, name_ar, manager_id):
        self.departments[dept_id] = Department(dept_id=dept_id, name=name, name_ar=name_ar, manager_id=manager_id)
        return True

    def delete(self, dept_id):
        return self.departments.pop(dept_id, None) is not None

    def count_members(self, dept_id):
        return self.members.get(dept_id, 0)


class FakePolicyRepo:
    def __init__(self, policy=None):
        self.policy = policy

    def get(self):
        return self.policy

    def save(self, policy):
        self.policy = replace(policy, policy_id=1)
        return self.policy


class FakeAttendanceRepo:
    def __init__(self, records=()):
        self._next_id = 1
        self.rows = {}
        for r in records:
            self.rows[(r.user_id, r.work_date)] = r
            self._next_id = max(self._next_id, r.attendance_id + 1)

    def _by_id(self, attendance_id):
        return next(r for r in self.rows.values() if r.attendance_id == attendance_id)

    def _put(self, record):
        self.rows[(record.user_id, record.work_date)] = record

    def get_recent_for_user(self, user_id, limit):
        rows = sorted((r for r in self.rows.values() if r.user_id == user_id), key=lambda r: r.work_date, reverse=True)
        return rows[:limit]

    def get_for_user_and_date(self, user_id, work_date):
        return self.rows.get((user_id, work_date))

    def list_range(self, *, start, end, user_ids):
        return [r for r in self.rows.values() if r.user_id in user_ids and start <= r.work_date <= end]

    def create_checkin(self, *, user_id, work_date, check_in_time, status, late_minutes, coords=None):
        if (user_id, work_date) in self.rows:
            raise AlreadyCheckedIn("Already checked in today")
        record = AttendanceRecord(
            attendance_id=self._next_id,
            user_id=user_id,
            work_date=work_date,
            check_in_time=check_in_time,
            check_out_time=None,
            status=status,
            late_minutes=late_minutes,
            check_in_lat=coords.lat if coords else None,
            check_in_lng=coords.lng if coords else None,
        )
        self._next_id += 1
        self._put(record)
        return record.attendance_id

    def fill_checkin(self, *, attendance_id, check_in_time, status, late_minutes, coords=None):
        record = self._by_id(attendance_id)
        if record.check_in_time is not None:
            return False
        self._put(replace(record, check_in_time=check_in_time, status=status, late_minutes=late_minutes))
        return True

    def update_checkout(self, *, attendance_id, check_out_time, coords=None):
        record = self._by_id(attendance_id)
        if record.check_in_time is None or record.check_out_time is not None:
            return False
        self._put(replace(record, check_out_time=check_out_time))
        return True

    def admin_update_times(self, *, attendance_id, check_in_time, check_out_time):
        record = self._by_id(attendance_id)
        self._put(replace(record, check_in_time=check_in_time, check_out_time=check_out_time))
        return True


class FakeRequestRepo:
    def __init__(self):
        self._next_id = 1
        self.items = {}

    def create(self, *, user_id, request_type, from_date_time, to_date_time, note, attachment_url=None):
        request_id = self._next_id
        self._next_id += 1
        self.items[request_id] = LeaveRequest(
            request_id=request_id,
            user_id=user_id,
            request_type=request_type,
            from_date_time=from_date_time,
            to_date_time=to_date_time,
            note=note,
            status=RequestStatus.PENDING,
            created_at=datetime(2025, 3, 1, 9, 0),
            attachment_url=attachment_url,
        )
        return request_id

    def add(self, request):
        self.items[request.request_id] = request
        self._next_id = max(self._next_id, request.request_id + 1)
        return request

    def get_by_id(self, request_id):
        return self.items.get(int(request_id))

    def list_for_user(self, user_id, *, limit):
        return [r for r in self.items.values() if r.user_id == user_id][:limit]

    def list_pending(self, *, user_ids=None, limit):
        out = [
            r
            for r in self.items.values()
            if r.status == RequestStatus.PENDING and (user_ids is None or r.user_id in user_ids)
        ]
        return out[:limit]

    def count_pending(self, *, user_ids=None):
        return len(self.list_pending(user_ids=user_ids, limit=10_000))

    def decide(self, *, request_id, status, approver_id, decision_note, decided_at):
        req = self.items.get(int(request_id))
        if not req or req.status != RequestStatus.PENDING:
            return False
        self.items[req.request_id] = replace(
            req, status=status, approver_id=approver_id, decision_note=decision_note, decided_at=decided_at
        )
        return True

    def list_approved_overlapping(self, *, user_ids, start, end, types):
        types = set(types)
        return [
            r
            for r in self.items.values()
            if r.status == RequestStatus.APPROVED
            and r.user_id in user_ids
            and r.request_type in types
            and r.from_date <= end
            and r.to_date >= start
        ]


class FakeBalanceRepo:
    def __init__(self, balances=()):
        self.balances = {b.user_id: b for b in balances}

    def get(self, user_id):
        return self.balances.get(int(user_id))

    def ensure(self, balance):
        self.balances.setdefault(balance.user_id, balance)

    def deduct(self, *, user_id, request_type, days):
        balance = self.balances[int(user_id)]
        if balance.remaining_for(request_type) < days:
            return False
        self.balances[balance.user_id] = _shift_used(balance, request_type, days)
        return True

    def refund(self, *, user_id, request_type, days):
        balance = self.balances[int(user_id)]
        self.balances[balance.user_id] = _shift_used(balance, request_type, -days)

    def reset_all(self, *, total_annual, total_sick):
        for user_id, b in list(self.balances.items()):
            self.balances[user_id] = replace(
                b, total_annual=total_annual, used_annual=0, total_sick=total_sick, used_sick=0
            )
        return len(self.balances)


def _shift_used(balance, request_type, days):
    if request_type == RequestType.ANNUAL_LEAVE:
        return replace(balance, used_annual=max(0, balance.used_annual + days))
    return replace(balance, used_sick=max(0, balance.used_sick + days))


class FakeAuditRepo:
    def __init__(self):
        self.items = []

    def create(self, *, actor_id, action, target_type, target_id, details):
        entry = AuditLog(
            log_id=len(self.items) + 1,
            actor_id=actor_id,
            action=action,
            target_type=target_type,
            target_id=target_id,
            details=details,
            created_at=datetime(2025, 3, 1, 12, 0),
        )
        self.items.append(entry)
        return entry.log_id

    def list_logs(self, *, actor_id=None, target_type=None, limit, offset=0):
        out = [
            e
            for e in reversed(self.items)
            if (actor_id is None or e.actor_id == actor_id) and (target_type is None or e.target_type == target_type)
        ]
        return out[offset : offset + limit]

    def list_for_target(self, *, target_type, target_id):
        return [e for e in reversed(self.items) if e.target_type == target_type and e.target_id == target_id]


class FakeNotificationRepo:
    def __init__(self):
        self.items = []

    def create(self, *, user_id, title, message, notification_type):
        notification = Notification(
            notification_id=len(self.items) + 1,
            user_id=user_id,
            title=title,
            message=message,
            notification_type=notification_type,
            read_status=False,
            created_at=datetime(2025, 3, 1, 12, 0),
        )
        self.items.append(notification)
        return notification.notification_id

    def list_for_user(self, user_id, *, limit):
        return [n for n in reversed(self.items) if n.user_id == user_id][:limit]

    def count_unread(self, user_id):
        return sum(1 for n in self.items if n.user_id == user_id and not n.read_status)

    def mark_read(self, *, notification_id, user_id):
        for i, n in enumerate(self.items):
            if n.notification_id == notification_id and n.user_id == user_id:
                self.items[i] = replace(n, read_status=True)
                return True
        return False

    def mark_all_read(self, user_id):
        count = 0
        for i, n in enumerate(self.items):
            if n.user_id == user_id and not n.read_status:
                self.items[i] = replace(n, read_status=True)
                count += 1
        return count


class FakeWorld:
    """All fakes plus a container wired on top of them."""

    def __init__(self, *, users=(), departments=(), policy=None, records=()):
        self.users = FakeUserRepo(users)
        self.departments = FakeDepartmentRepo(departments)
        self.policies = FakePolicyRepo(policy)
        self.attendance = FakeAttendanceRepo(records)
        self.requests = FakeRequestRepo()
        self.balances = FakeBalanceRepo()
        self.notifications = FakeNotificationRepo()
        self.audit = FakeAuditRepo()
        self.container = wire(
            users_repo=self.users,
            departments_repo=self.departments,
            policy_repo=self.policies,
            attendance_repo=self.attendance,
            requests_repo=self.requests,
            balances_repo=self.balances,
            notifications_repo=self.notifications,
            audit_repo=self.audit,
        )
