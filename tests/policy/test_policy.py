from datetime import time

import pytest

from fakes import FakeAuditRepo, FakePolicyRepo, make_user
from timeclock.audit.service import AuditService
from timeclock.core.enums import AuditTarget, Role
from timeclock.core.exceptions import AuthorizationError, InvalidInput
from timeclock.policy.model import AttendancePolicy
from timeclock.policy.service import PolicyService

ADMIN = make_user(1, Role.ADMIN)


def make_service(repo=None, audit=None):
    return PolicyService(repo or FakePolicyRepo(), AuditService(audit or FakeAuditRepo()))


def test_defaults_when_no_policy_row():
    policy = make_service().get_policy()

    assert policy.to_payload() == {
        "workStart": "08:00",
        "workEnd": "16:00",
        "gracePeriodMinutes": 15,
        "absentCutoff": "12:00",
        "weeklyOffDays": [5, 6],
        "maxLateDaysBeforeWarning": 3,
        "annualLeavePerYear": 21,
        "sickLeavePerYear": 10,
    }


def test_partial_payload_keeps_other_fields(policy):
    updated = AttendancePolicy.from_payload({"workStart": "07:30", "weeklyOffDays": [0]}, base=policy)

    assert updated.work_start == time(7, 30)
    assert updated.work_end == policy.work_end
    assert updated.weekly_off_days == frozenset({0})
    assert updated.late_threshold_minutes == 7 * 60 + 45


@pytest.mark.parametrize(
    "payload",
    [
        {"workStart": "7:30"},
        {"absentCutoff": "25:00"},
        {"gracePeriodMinutes": -5},
        {"gracePeriodMinutes": "15"},
        {"weeklyOffDays": [7]},
        {"weeklyOffDays": "5,6"},
    ],
)
def test_invalid_policy_payload(policy, payload):
    with pytest.raises(InvalidInput):
        AttendancePolicy.from_payload(payload, base=policy)


def test_admin_updates_policy():
    repo, audit = FakePolicyRepo(), FakeAuditRepo()
    service = make_service(repo, audit)

    saved = service.update_policy(current_user=ADMIN, changes={"gracePeriodMinutes": 5})

    assert saved.grace_period_minutes == 5
    assert repo.policy.policy_id == 1
    assert service.get_policy().grace_period_minutes == 5
    [entry] = audit.items
    assert (entry.action, entry.target_type, entry.target_id) == ("Updated attendance policy", AuditTarget.POLICY, "1")
    assert entry.details == "gracePeriodMinutes"


def test_only_admin_updates_policy():
    service = make_service()

    with pytest.raises(AuthorizationError):
        service.update_policy(current_user=make_user(2, Role.MANAGER), changes={"gracePeriodMinutes": 5})


def test_overnight_shift_rejected():
    service = make_service()

    with pytest.raises(InvalidInput):
        service.update_policy(current_user=ADMIN, changes={"workStart": "22:00", "workEnd": "06:00"})


def test_every_day_off_rejected():
    service = make_service()

    with pytest.raises(InvalidInput):
        service.update_policy(current_user=ADMIN, changes={"weeklyOffDays": [0, 1, 2, 3, 4, 5, 6]})
