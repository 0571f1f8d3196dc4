from datetime import datetime

import pytest

from timeclock.policy.model import AttendancePolicy


@pytest.fixture
def fixed_now():
    # Monday; 2025-03-01 is a Saturday and 2025-03-07 a Friday (default weekly off days).
    return datetime(2025, 3, 3, 9, 30)


@pytest.fixture
def policy():
    """08:00-16:00, 15 min grace, cutoff 12:00, Friday and Saturday off."""
    return AttendancePolicy.default()
