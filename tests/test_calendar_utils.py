"""Tests for calendar helpers."""
from datetime import date, datetime, timezone

import pytest

from nebula_planner.calendar_utils import (
    date_key, same_calendar_day, truncate_to_midnight, parse_instant, to_date,
    weekday_name, is_weekend, due_on,
)


def test_date_key_ignores_time_of_day():
    assert date_key(datetime(2024, 3, 5, 0, 0)) == "2024-03-05"
    assert date_key(datetime(2024, 3, 5, 23, 59, 59)) == "2024-03-05"


def test_date_key_accepts_dates_and_strings():
    assert date_key(date(2024, 12, 31)) == "2024-12-31"
    assert date_key("2024-07-04T18:30:00") == "2024-07-04"


def test_same_calendar_day():
    assert same_calendar_day(datetime(2024, 1, 1, 8), datetime(2024, 1, 1, 22))
    assert not same_calendar_day(datetime(2024, 1, 1, 23, 59), datetime(2024, 1, 2, 0, 0))


def test_truncate_to_midnight():
    assert truncate_to_midnight(datetime(2024, 5, 6, 13, 45, 12, 999)) == datetime(2024, 5, 6)


def test_parse_instant_drops_timezone_to_local():
    aware = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
    parsed = parse_instant("2024-01-01T12:00:00Z")
    assert parsed.tzinfo is None
    assert parsed == aware.astimezone().replace(tzinfo=None)


def test_parse_instant_rejects_garbage():
    with pytest.raises(ValueError):
        parse_instant("next tuesday")
    with pytest.raises(ValueError):
        to_date(42)


def test_weekday_helpers():
    assert weekday_name(date(2024, 1, 1)) == "Monday"
    assert weekday_name(date(2024, 1, 7)) == "Sunday"
    assert is_weekend(date(2024, 1, 6))
    assert not is_weekend(date(2024, 1, 5))


def test_day_predicates():
    predicate = due_on(date(2024, 2, 29))
    assert predicate(datetime(2024, 2, 29, 23, 0))
    assert not predicate(datetime(2024, 3, 1, 0, 0))
