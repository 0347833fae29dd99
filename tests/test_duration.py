"""
Tests for duration calculation and hour formatting.
"""

import itertools

import pytest

from timesheet.domain.errors import InvalidInputError
from timesheet.services.duration import (
    IN_PROGRESS,
    Duration,
    Open,
    calculate_duration,
    duration_label,
    format_minutes_to_hours,
    minutes_between,
)

SAMPLE_TIMES = ["00:00", "00:01", "06:00", "09:30", "12:00", "17:45", "22:00", "23:59"]


def _minutes_of_day(value: str) -> int:
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


class TestCalculateDuration:

    def test_hours_and_minutes(self):
        assert calculate_duration("09:00", "17:30") == Duration(510, "8h 30m")
        assert calculate_duration("08:00", "12:00").label == "4h"
        assert calculate_duration("14:00", "14:45").label == "45m"

    def test_exact_hours(self):
        assert calculate_duration("09:00", "12:00").label == "3h"
        assert calculate_duration("00:00", "08:00").label == "8h"

    def test_minutes_only(self):
        assert calculate_duration("09:00", "09:30").label == "30m"
        assert calculate_duration("10:15", "10:45").label == "30m"

    def test_overnight(self):
        assert calculate_duration("22:00", "06:00") == Duration(480, "8h")
        assert calculate_duration("23:30", "00:30").label == "1h"

    def test_zero_duration(self):
        assert calculate_duration("09:00", "09:00") == Duration(0, "0m")

    def test_missing_end_is_open(self):
        assert calculate_duration("09:00", None) is Open.OPEN
        assert calculate_duration("09:00", "") is Open.OPEN

    @pytest.mark.parametrize("start", SAMPLE_TIMES)
    def test_open_for_every_start(self, start: str):
        assert calculate_duration(start, None) is Open.OPEN

    def test_open_entry_still_validates_start(self):
        with pytest.raises(InvalidInputError):
            calculate_duration("9am", None)

    def test_label_helper(self):
        assert duration_label("09:00", "10:30") == "1h 30m"
        assert duration_label("09:00", None) == IN_PROGRESS == "In Progress"


class TestMinutesBetween:

    @pytest.mark.parametrize("start,end", list(itertools.product(SAMPLE_TIMES, repeat=2)))
    def test_same_day_and_overnight(self, start: str, end: str):
        difference = _minutes_of_day(end) - _minutes_of_day(start)
        expected = difference if difference >= 0 else difference + 1440
        assert minutes_between(start, end) == expected
        assert 0 <= minutes_between(start, end) < 1440


class TestFormatMinutesToHours:

    @pytest.mark.parametrize("minutes,expected", [
        (0, "0m"),
        (1, "1m"),
        (59, "59m"),
        (60, "1h"),
        (61, "1h 1m"),
        (90, "1h 30m"),
        (180, "3h"),
        (1439, "23h 59m"),
        (3000, "50h"),
    ])
    def test_formatting(self, minutes: int, expected: str):
        assert format_minutes_to_hours(minutes) == expected

    def test_duration_label_matches_formatter(self):
        for start, end in itertools.product(SAMPLE_TIMES, repeat=2):
            result = calculate_duration(start, end)
            assert result.label == format_minutes_to_hours(result.minutes)
