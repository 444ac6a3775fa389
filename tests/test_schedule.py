"""Tests for the weekday and schedule model"""
import json
from datetime import date, datetime, timezone

import pytest

from tracker.models import (
    Weekday,
    as_datetime,
    calendar_day,
    decode_schedule,
    describe_schedule,
    encode_schedule,
    normalize_schedule,
)


class TestWeekday:
    """Test weekday derivation"""

    @pytest.mark.parametrize(
        "day, expected",
        [
            (date(2026, 10, 18), Weekday.SUNDAY),
            (date(2026, 10, 19), Weekday.MONDAY),
            (date(2026, 10, 21), Weekday.WEDNESDAY),
            (date(2026, 10, 24), Weekday.SATURDAY),
        ],
    )
    def test_from_date(self, day, expected):
        """Test dates map to Sunday-first weekday numbers"""
        assert Weekday.from_date(day) == expected

    def test_from_datetime_ignores_time(self):
        """Test the time of day does not change the weekday"""
        assert Weekday.from_date(datetime(2026, 10, 19, 23, 59)) == Weekday.MONDAY

    def test_numbering(self):
        """Test Sunday is 1 and Saturday is 7"""
        assert int(Weekday.SUNDAY) == 1
        assert int(Weekday.SATURDAY) == 7

    def test_week_order_starts_monday(self):
        """Test display order"""
        order = Weekday.week_order()
        assert order[0] == Weekday.MONDAY
        assert order[-1] == Weekday.SUNDAY
        assert set(order) == set(Weekday)

    def test_names(self):
        """Test short and full names"""
        assert Weekday.TUESDAY.short_symbol == "Tue"
        assert Weekday.TUESDAY.full_name == "Tuesday"


class TestCalendarDay:
    """Test calendar day helpers"""

    def test_calendar_day_of_datetime(self):
        assert calendar_day(datetime(2026, 10, 19, 8, 30)) == date(2026, 10, 19)

    def test_calendar_day_of_date(self):
        assert calendar_day(date(2026, 10, 19)) == date(2026, 10, 19)

    def test_as_datetime_promotes_date_to_midnight(self):
        assert as_datetime(date(2026, 10, 19)) == datetime(2026, 10, 19, 0, 0)

    def test_aware_datetime_becomes_naive_local(self):
        aware = datetime(2026, 10, 19, 8, 30, tzinfo=timezone.utc)
        local = aware.astimezone().replace(tzinfo=None)

        assert as_datetime(aware) == local
        assert calendar_day(aware) == local.date()
        assert Weekday.from_date(aware) == Weekday.from_date(local)


class TestScheduleEncoding:
    """Test schedule persistence format"""

    def test_round_trip(self):
        """Test {1,4,6} reads back as the same set"""
        encoded = encode_schedule([6, 1, 4])
        assert json.loads(encoded) == [1, 4, 6]
        assert decode_schedule(encoded) == {Weekday(1), Weekday(4), Weekday(6)}

    def test_duplicates_collapse(self):
        """Test schedules behave as sets"""
        assert normalize_schedule([2, 2, Weekday.MONDAY]) == {Weekday.MONDAY}
        assert encode_schedule([3, 3, 1]) == "[1, 3]"

    def test_decode_accepts_list(self):
        """Test an already decoded list is accepted"""
        assert decode_schedule([7]) == {Weekday.SATURDAY}

    @pytest.mark.parametrize("raw", [None, "not json", '{"a": 1}', "[0]", "[8]", '["1"]', "[true]"])
    def test_decode_rejects_malformed(self, raw):
        """Test malformed schedules raise ValueError"""
        with pytest.raises(ValueError):
            decode_schedule(raw)


class TestDescribeSchedule:
    """Test human readable schedule summaries"""

    def test_every_day(self):
        assert describe_schedule(set(Weekday)) == "Every day"

    def test_some_days_in_week_order(self):
        schedule = {Weekday.SUNDAY, Weekday.MONDAY, Weekday.FRIDAY}
        assert describe_schedule(schedule) == "Mon, Fri, Sun"

    def test_empty(self):
        assert describe_schedule(set()) == ""
