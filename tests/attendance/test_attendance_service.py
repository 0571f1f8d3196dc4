from __future__ import annotations

from datetime import date, datetime, time

import pytest

from fakes import FakeWorld, make_user
from timeclock.attendance.model import AttendanceRecord, Coordinates
from timeclock.core.enums import AttendanceStatus, DayStatus, PunchState, RequestStatus, RequestType
from timeclock.core.exceptions import (
    AlreadyCheckedIn,
    AlreadyCheckedOut,
    AuthorizationError,
    InvalidInput,
    NotCheckedIn,
)
from timeclock.requests.model import LeaveRequest

MONDAY = date(2025, 3, 3)


@pytest.fixture
def world():
    return FakeWorld(users=[make_user(1), make_user(2, is_active=False)])


def test_check_in_on_time_creates_present_record(world):
    service = world.container.attendance_service

    record = service.check_in(1, now=datetime(2025, 3, 3, 8, 10), coords=Coordinates(lat=33.3, lng=44.4))

    assert record.status == AttendanceStatus.PRESENT
    assert record.late_minutes == 0
    assert record.check_in_time == time(8, 10)
    assert record.check_in_lat == 33.3


def test_late_check_in_stores_late_minutes(world):
    record = world.container.attendance_service.check_in(1, now=datetime(2025, 3, 3, 8, 47, 59))

    assert record.status == AttendanceStatus.LATE
    assert record.late_minutes == 32
    assert record.check_in_time == time(8, 47)


def test_second_check_in_same_day_fails(world):
    service = world.container.attendance_service
    service.check_in(1, now=datetime(2025, 3, 3, 8, 0))

    with pytest.raises(AlreadyCheckedIn):
        service.check_in(1, now=datetime(2025, 3, 3, 8, 5))

    assert len(world.attendance.rows) == 1


def test_concurrent_insert_surfaces_as_already_checked_in(world):
    # The read happened before the other request inserted; the unique key decides.
    world.attendance.get_for_user_and_date = lambda user_id, work_date: None
    world.attendance.rows[(1, MONDAY)] = AttendanceRecord(
        attendance_id=99,
        user_id=1,
        work_date=MONDAY,
        check_in_time=time(8, 0),
        check_out_time=None,
        status=AttendanceStatus.PRESENT,
    )

    with pytest.raises(AlreadyCheckedIn):
        world.container.attendance_service.check_in(1, now=datetime(2025, 3, 3, 8, 1))


def test_check_in_fills_existing_row_without_check_in(world):
    world.attendance.rows[(1, MONDAY)] = AttendanceRecord(
        attendance_id=7,
        user_id=1,
        work_date=MONDAY,
        check_in_time=None,
        check_out_time=None,
        status=None,
    )

    record = world.container.attendance_service.check_in(1, now=datetime(2025, 3, 3, 8, 30))

    assert record.attendance_id == 7
    assert record.status == AttendanceStatus.LATE
    assert len(world.attendance.rows) == 1


def test_check_out_flow(world):
    service = world.container.attendance_service

    with pytest.raises(NotCheckedIn):
        service.check_out(1, now=datetime(2025, 3, 3, 16, 0))

    service.check_in(1, now=datetime(2025, 3, 3, 8, 0))
    record = service.check_out(1, now=datetime(2025, 3, 3, 16, 0))
    assert record.check_out_time == time(16, 0)

    with pytest.raises(AlreadyCheckedOut):
        service.check_out(1, now=datetime(2025, 3, 3, 16, 5))


def test_lost_checkout_race_is_already_checked_out(world):
    service = world.container.attendance_service
    service.check_in(1, now=datetime(2025, 3, 3, 8, 0))
    world.attendance.update_checkout = lambda **kwargs: False

    with pytest.raises(AlreadyCheckedOut):
        service.check_out(1, now=datetime(2025, 3, 3, 16, 0))


def test_stale_open_record_does_not_block_next_day(world):
    service = world.container.attendance_service
    service.check_in(1, now=datetime(2025, 3, 2, 8, 0))

    record = service.check_in(1, now=datetime(2025, 3, 3, 8, 0))

    assert record.work_date == MONDAY


def test_inactive_user_cannot_punch(world):
    with pytest.raises(AuthorizationError) as exc:
        world.container.attendance_service.check_in(2, now=datetime(2025, 3, 3, 8, 0))

    assert exc.value.code == "NO_PROFILE"


def test_punch_rejects_unknown_action(world):
    with pytest.raises(InvalidInput) as exc:
        world.container.attendance_service.punch(1, "lunch", now=datetime(2025, 3, 3, 8, 0))

    assert exc.value.code == "INVALID_ACTION"


def test_punch_dispatches_actions(world):
    service = world.container.attendance_service

    service.punch(1, "check_in", now=datetime(2025, 3, 3, 8, 0))
    record = service.punch(1, "check_out", now=datetime(2025, 3, 3, 15, 0))

    assert record.state == PunchState.CHECKED_OUT


def test_today_status_before_shift(world):
    status = world.container.attendance_service.get_today_status(1, now=datetime(2025, 3, 3, 7, 30))

    assert status.state == PunchState.EMPTY
    assert status.is_before_shift is True
    assert status.classification.status == DayStatus.UNDETERMINED
    assert status.worked_minutes == 0


def test_today_status_warns_about_early_checkout(world):
    service = world.container.attendance_service
    service.check_in(1, now=datetime(2025, 3, 3, 8, 0))

    status = service.get_today_status(1, now=datetime(2025, 3, 3, 14, 0))

    assert status.is_early_checkout is True
    assert status.is_overtime is False
    assert status.worked_minutes == 360
    assert status.to_payload()["classification"]["status"] == "present"


def test_today_status_warns_check_in_after_shift_would_be_overtime(world):
    status = world.container.attendance_service.get_today_status(1, now=datetime(2025, 3, 3, 17, 0))

    assert status.is_overtime is True
    assert status.classification.status == DayStatus.ABSENT


def test_monthly_stats_tally_only_working_days(world):
    service = world.container.attendance_service
    service.check_in(1, now=datetime(2025, 3, 2, 8, 0))  # Sunday, present
    service.check_out(1, now=datetime(2025, 3, 2, 16, 0))
    service.check_in(1, now=datetime(2025, 3, 3, 8, 30))  # Monday, late 15

    stats = service.get_month_overview(1, 2025, 3, as_of=datetime(2025, 3, 3, 18, 0)).stats

    # March 1 is a Saturday (off); days after March 3 are still undetermined.
    assert stats.present_days == 1
    assert stats.late_days == 1
    assert stats.absent_days == 0
    assert stats.late_minutes == 15
    assert stats.hours_worked == 8.0
    assert stats.total_working_days == 2
    assert stats.late_warning is False


def test_month_calendar_marks_off_days_and_leave(world):
    world.requests.add(
        LeaveRequest(
            request_id=1,
            user_id=1,
            request_type=RequestType.ANNUAL_LEAVE,
            from_date_time=datetime(2025, 3, 2, 0, 0),
            to_date_time=datetime(2025, 3, 3, 23, 59),
            note="",
            status=RequestStatus.APPROVED,
            created_at=datetime(2025, 2, 20, 9, 0),
        )
    )
    service = world.container.attendance_service

    overview = service.get_month_overview(1, 2025, 3, as_of=datetime(2025, 3, 5, 18, 0))
    days = {d.work_date: d.classification.status for d in overview.days}

    assert len(days) == 31
    assert days[date(2025, 3, 1)] == DayStatus.NON_WORKING
    assert days[date(2025, 3, 2)] == DayStatus.ON_LEAVE
    assert days[date(2025, 3, 3)] == DayStatus.ON_LEAVE
    assert days[date(2025, 3, 4)] == DayStatus.ABSENT
    assert days[date(2025, 3, 5)] == DayStatus.ABSENT
    assert days[date(2025, 3, 6)] == DayStatus.UNDETERMINED
    assert days[date(2025, 3, 7)] == DayStatus.NON_WORKING


def test_hourly_permission_is_not_full_day_leave(world):
    world.requests.add(
        LeaveRequest(
            request_id=1,
            user_id=1,
            request_type=RequestType.HOURLY_PERMISSION,
            from_date_time=datetime(2025, 3, 3, 10, 0),
            to_date_time=datetime(2025, 3, 3, 12, 0),
            note="",
            status=RequestStatus.APPROVED,
            created_at=datetime(2025, 2, 20, 9, 0),
        )
    )

    leave = world.container.attendance_service.approved_leave_dates([1], start=MONDAY, end=MONDAY)

    assert leave == {}


def test_late_warning_after_threshold(world):
    service = world.container.attendance_service
    for day in (2, 3, 4, 5):
        service.check_in(1, now=datetime(2025, 3, day, 9, 0))

    stats = service.get_month_overview(1, 2025, 3, as_of=datetime(2025, 3, 5, 18, 0)).stats

    assert stats.late_days == 4
    assert stats.late_warning is True


def test_classify_payload_uses_given_policy(world):
    result = world.container.attendance_service.classify_payload(
        {
            "policy": {"workStart": "09:00", "workEnd": "17:00", "gracePeriodMinutes": 0, "absentCutoff": "11:00", "weeklyOffDays": []},
            "record": {"date": "2025-03-07", "checkInTime": "09:10", "checkOutTime": "17:10"},
        },
        as_of=datetime(2025, 3, 7, 18, 0),
    )

    assert result.to_payload() == {"status": "late", "lateMinutes": 10, "hoursWorked": 8.0, "isOvertime": False}


def test_classify_payload_without_record_needs_date(world):
    service = world.container.attendance_service

    with pytest.raises(InvalidInput):
        service.classify_payload({"policy": {}}, as_of=datetime(2025, 3, 3, 18, 0))

    result = service.classify_payload({"date": "2025-03-03", "leaveOverlap": True}, as_of=datetime(2025, 3, 3, 18, 0))
    assert result.status == DayStatus.ON_LEAVE


def test_month_overview_tallies_the_calendar_it_returns(world, monkeypatch):
    service = world.container.attendance_service
    service.check_in(1, now=datetime(2025, 3, 2, 8, 30))
    reads = []
    stored_get = world.policies.get
    monkeypatch.setattr(world.policies, "get", lambda: reads.append(1) or stored_get())

    overview = service.get_month_overview(1, 2025, 3, as_of=datetime(2025, 3, 3, 18, 0))

    assert len(reads) == 1
    late = [d for d in overview.days if d.classification.status == DayStatus.LATE]
    assert overview.stats.late_days == len(late) == 1
    assert overview.stats.late_minutes == 15
