from dataclasses import replace

import pytest

from timeclock.attendance.classifier import (
    AttendanceClassifier,
    compute_hours_worked,
    is_before_shift,
    is_early_checkout,
    is_late_arrival_overtime,
)
from timeclock.core.enums import AttendanceStatus
from timeclock.core.exceptions import InvalidInput


def hm(h, m=0):
    return h * 60 + m


def test_check_in_at_threshold_is_present(policy):
    decision = AttendanceClassifier().classify_check_in(policy, hm(8, 15))

    assert decision.status == AttendanceStatus.PRESENT
    assert decision.late_minutes == 0


def test_check_in_one_minute_after_threshold_is_late_by_one(policy):
    decision = AttendanceClassifier().classify_check_in(policy, hm(8, 16))

    assert decision.status == AttendanceStatus.LATE
    assert decision.late_minutes == 1


def test_late_minutes_measured_from_end_of_grace(policy):
    decision = AttendanceClassifier().classify_check_in(policy, hm(9, 0))

    assert decision.late_minutes == 45


@pytest.mark.parametrize(
    "check_in, status, late_minutes",
    [
        (hm(8, 9), AttendanceStatus.PRESENT, 0),
        (hm(8, 10), AttendanceStatus.PRESENT, 0),
        (hm(8, 11), AttendanceStatus.LATE, 1),
        (hm(8, 15), AttendanceStatus.LATE, 5),
    ],
)
def test_grace_period_comes_from_policy(policy, check_in, status, late_minutes):
    decision = AttendanceClassifier().classify_check_in(replace(policy, grace_period_minutes=10), check_in)

    assert (decision.status, decision.late_minutes) == (status, late_minutes)


def test_early_check_in_is_present(policy):
    assert AttendanceClassifier().classify_check_in(policy, 0).status == AttendanceStatus.PRESENT


@pytest.mark.parametrize("minutes", [-1, 1440, 5000])
def test_out_of_range_check_in_rejected(policy, minutes):
    with pytest.raises(InvalidInput):
        AttendanceClassifier().classify_check_in(policy, minutes)


def test_non_integer_check_in_rejected(policy):
    with pytest.raises(InvalidInput):
        AttendanceClassifier().classify_check_in(policy, True)


def test_hours_worked():
    assert compute_hours_worked(hm(8), hm(16, 30)) == 8.5
    assert compute_hours_worked(hm(10), hm(10)) == 0


def test_checkout_before_checkin_is_invalid():
    with pytest.raises(InvalidInput):
        compute_hours_worked(hm(22), hm(6))


def test_late_arrival_overtime_is_strictly_after_work_end():
    assert is_late_arrival_overtime(hm(16, 1), hm(16)) is True
    assert is_late_arrival_overtime(hm(16), hm(16)) is False


def test_early_checkout_window():
    assert is_early_checkout(hm(14, 59), hm(16)) is True
    assert is_early_checkout(hm(15), hm(16)) is False
    assert is_early_checkout(hm(15, 30), hm(16), window_minutes=15) is True


def test_before_shift():
    assert is_before_shift(hm(7, 59), hm(8)) is True
    assert is_before_shift(hm(8), hm(8)) is False
