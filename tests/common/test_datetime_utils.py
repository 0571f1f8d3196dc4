from datetime import date, datetime

import pytest

from timeclock.common.datetime_utils import (
    format_hhmm,
    month_bounds,
    parse_hhmm,
    parse_iso_date,
    parse_override_instant,
    weekday_index,
)
from timeclock.core.exceptions import InvalidInput


def test_parse_hhmm():
    assert parse_hhmm("00:00") == 0
    assert parse_hhmm("23:59") == 1439
    assert format_hhmm(parse_hhmm("08:05")) == "08:05"


@pytest.mark.parametrize("value", ["8:00", "24:00", "08:60", "08-00", "٠٨:٠٠", "０８:００"])
def test_parse_hhmm_rejects_malformed(value):
    with pytest.raises(InvalidInput):
        parse_hhmm(value)


def test_weekday_index_starts_on_sunday():
    assert weekday_index(date(2025, 3, 2)) == 0  # Sunday
    assert weekday_index(date(2025, 3, 7)) == 5  # Friday
    assert weekday_index(date(2025, 3, 8)) == 6  # Saturday


def test_month_bounds():
    assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))
    with pytest.raises(InvalidInput):
        month_bounds(2024, 13)


def test_parse_iso_date_rejects_garbage():
    with pytest.raises(InvalidInput):
        parse_iso_date("03/03/2025")
    with pytest.raises(InvalidInput):
        parse_iso_date(20250303)


def test_override_instant():
    assert parse_override_instant("2025-03-03T08:20:00") == datetime(2025, 3, 3, 8, 20)
    assert parse_override_instant("2025-03-03T08:20:00Z").tzinfo is None

    with pytest.raises(InvalidInput) as exc:
        parse_override_instant("yesterday")
    assert exc.value.code == "INVALID_TIME"
