from datetime import date

import pytest

from edusmart.domain.schedule import Schedule, parse_schedule


def test_parse_weekdays_and_time():
    schedule = parse_schedule("2,4,6 (08:00-10:00)")
    assert schedule == Schedule(days=frozenset({1, 3, 5}), start="08:00", end="10:00")


@pytest.mark.parametrize("text", ["CN (19:00-21:00)", "Sun (19:00-21:00)", "8 (19:00-21:00)"])
def test_sunday_tokens(text):
    assert parse_schedule(text).days == frozenset({0})


def test_mixed_days_with_sunday():
    schedule = parse_schedule("7, CN (7:30 - 9:00)")
    assert schedule.days == frozenset({6, 0})
    assert schedule.start == "7:30"
    assert schedule.end == "9:00"


@pytest.mark.parametrize("text", [None, "", 42, "2,4,6", "2,4,6 (morning)", "(-)"])
def test_unusable_input_returns_none(text):
    assert parse_schedule(text) is None


def test_no_recognised_day_still_parses_time():
    schedule = parse_schedule("weekly (08:00-09:00)")
    assert schedule.days == frozenset()
    assert schedule.start == "08:00"


def test_occurs_on():
    schedule = parse_schedule("2,4,6 (08:00-10:00)")
    assert schedule.occurs_on(date(2025, 3, 10))  # Monday
    assert not schedule.occurs_on(date(2025, 3, 11))  # Tuesday
    assert not schedule.occurs_on(date(2025, 3, 16))  # Sunday
    assert parse_schedule("CN (08:00-10:00)").occurs_on(date(2025, 3, 16))


def test_calendar_event():
    event = parse_schedule("6,2 (08:00-10:00)").to_calendar_event(
        "Class A", date(2025, 3, 1), date(2025, 6, 30), url="https://meet"
    )
    assert event == {
        "title": "Class A",
        "daysOfWeek": [1, 5],
        "startTime": "08:00:00",
        "endTime": "10:00:00",
        "startRecur": "2025-03-01",
        "endRecur": "2025-07-01",
        "url": "https://meet",
    }


def test_calendar_event_open_ended():
    event = parse_schedule("3 (18:00-20:00)").to_calendar_event("Evening")
    assert event["startRecur"] is None
    assert event["endRecur"] is None
