"""
Weekday and schedule models.

A tracker's schedule is a set of weekdays. Weekdays are numbered the way the
persisted schedule stores them: Sunday is 1 and Saturday is 7.
"""

import json
from datetime import date, datetime, time
from enum import Enum
from typing import Iterable, Union

DateLike = Union[date, datetime]


class Weekday(int, Enum):
    """Day of the week, Sunday-first, numbered 1-7."""

    SUNDAY = 1
    MONDAY = 2
    TUESDAY = 3
    WEDNESDAY = 4
    THURSDAY = 5
    FRIDAY = 6
    SATURDAY = 7

    @classmethod
    def from_date(cls, value: DateLike) -> "Weekday":
        """Get the weekday a date (or datetime) falls on."""
        # isoweekday: Monday=1 ... Sunday=7
        return cls(calendar_day(value).isoweekday() % 7 + 1)

    @classmethod
    def week_order(cls) -> list["Weekday"]:
        """Weekdays in display order, Monday first."""
        return [
            cls.MONDAY,
            cls.TUESDAY,
            cls.WEDNESDAY,
            cls.THURSDAY,
            cls.FRIDAY,
            cls.SATURDAY,
            cls.SUNDAY,
        ]

    @property
    def short_symbol(self) -> str:
        return _SHORT_SYMBOLS[self]

    @property
    def full_name(self) -> str:
        return self.name.capitalize()


_SHORT_SYMBOLS = {
    Weekday.MONDAY: "Mon",
    Weekday.TUESDAY: "Tue",
    Weekday.WEDNESDAY: "Wed",
    Weekday.THURSDAY: "Thu",
    Weekday.FRIDAY: "Fri",
    Weekday.SATURDAY: "Sat",
    Weekday.SUNDAY: "Sun",
}


def calendar_day(value: DateLike) -> date:
    """Strip the time of day; two moments on the same day compare equal."""
    if isinstance(value, datetime):
        return as_datetime(value).date()
    return value


def as_datetime(value: DateLike) -> datetime:
    """
    Promote a plain date to midnight of that day.

    Aware datetimes are converted to naive local time, the form every stored
    date and the default clock use.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone().replace(tzinfo=None)
        return value
    return datetime.combine(value, time.min)


def normalize_schedule(days: Iterable[Union[int, Weekday]]) -> frozenset[Weekday]:
    """
    Build a schedule set from weekday numbers or enumerants.

    Duplicates collapse.

    Raises:
        ValueError: If any value is outside 1-7
    """
    return frozenset(Weekday(int(day)) for day in days)


def encode_schedule(schedule: Iterable[Union[int, Weekday]]) -> str:
    """Serialize a schedule as a sorted JSON array of small integers."""
    return json.dumps(sorted({int(day) for day in schedule}))


def decode_schedule(raw) -> frozenset[Weekday]:
    """
    Parse a persisted schedule.

    Accepts the JSON text written by encode_schedule, or an already decoded
    list of integers.

    Raises:
        ValueError: If the value is not a list of integers in 1-7
    """
    if raw is None:
        raise ValueError("schedule is missing")

    values = json.loads(raw) if isinstance(raw, (str, bytes)) else raw
    if not isinstance(values, list):
        raise ValueError(f"schedule must be a list, got {type(values).__name__}")
    if any(isinstance(v, bool) or not isinstance(v, int) for v in values):
        raise ValueError(f"schedule must contain integers, got {values!r}")

    return normalize_schedule(values)


def describe_schedule(schedule: Iterable[Weekday]) -> str:
    """
    Human readable schedule summary.

    "Every day" when all seven days are selected, otherwise the short
    symbols in Monday-first order.
    """
    days = set(schedule)
    if not days:
        return ""
    if len(days) == len(Weekday):
        return "Every day"
    return ", ".join(day.short_symbol for day in Weekday.week_order() if day in days)
