from datetime import date, time

import pytest

from timeclock.attendance.model import PunchRecord
from timeclock.attendance.state import ensure_can_check_in, ensure_can_check_out, next_state, punch_state
from timeclock.core.enums import PunchAction, PunchState
from timeclock.core.exceptions import AlreadyCheckedIn, AlreadyCheckedOut, InvalidInput, NotCheckedIn

DAY = date(2025, 3, 3)


def test_full_day_walks_through_states():
    state = PunchState.EMPTY
    state = next_state(state, PunchAction.CHECK_IN)
    assert state == PunchState.CHECKED_IN
    state = next_state(state, PunchAction.CHECK_OUT)
    assert state == PunchState.CHECKED_OUT


@pytest.mark.parametrize(
    "state, action, error",
    [
        (PunchState.CHECKED_IN, PunchAction.CHECK_IN, AlreadyCheckedIn),
        (PunchState.CHECKED_OUT, PunchAction.CHECK_IN, AlreadyCheckedIn),
        (PunchState.EMPTY, PunchAction.CHECK_OUT, NotCheckedIn),
        (PunchState.CHECKED_OUT, PunchAction.CHECK_OUT, AlreadyCheckedOut),
    ],
)
def test_illegal_transitions(state, action, error):
    with pytest.raises(error):
        next_state(state, action)


def test_record_state_helpers():
    assert punch_state(None) == PunchState.EMPTY
    open_record = PunchRecord(work_date=DAY, check_in_time=time(8, 0))

    ensure_can_check_in(None)
    ensure_can_check_out(open_record)
    with pytest.raises(AlreadyCheckedIn):
        ensure_can_check_in(open_record)
    with pytest.raises(NotCheckedIn):
        ensure_can_check_out(PunchRecord(work_date=DAY))


def test_checkout_without_checkin_cannot_be_represented():
    with pytest.raises(InvalidInput):
        PunchRecord(work_date=DAY, check_out_time=time(16, 0))


def test_punch_payload_parsing():
    punch = PunchRecord.from_payload({"date": "2025-03-03", "checkInTime": "08:05", "checkOutTime": None})

    assert punch.check_in_minutes == 8 * 60 + 5
    assert punch.state == PunchState.CHECKED_IN


@pytest.mark.parametrize("value", ["8:05", "24:00", "08:60", "0805", 805])
def test_malformed_punch_time_rejected(value):
    with pytest.raises(InvalidInput):
        PunchRecord.from_payload({"date": "2025-03-03", "checkInTime": value})
