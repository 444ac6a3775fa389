"""
Persisted entities of the tracker core.

Defines the category, tracker and completion record types stored in SQLite
and how they map to and from database rows.
"""

import sqlite3
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, NamedTuple, Optional, Union
from uuid import UUID

from tracker.config import (
    DEFAULT_COLOR_NAME,
    DEFAULT_EMOJI,
    MAX_TRACKER_NAME_LENGTH,
)
from tracker.models import Weekday, calendar_day, decode_schedule, normalize_schedule


def _require(row: sqlite3.Row, column: str):
    """Read a required column, rejecting NULL and empty text."""
    value = row[column]
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValueError(f"missing required field '{column}'")
    return value


@dataclass
class Tracker:
    """
    A user-defined habit.

    The schedule is held as a set of weekdays; the order it was entered in
    carries no meaning.
    """

    id: UUID
    name: str
    color_name: str
    emoji: str
    schedule: frozenset[Weekday]
    category_title: str

    def __post_init__(self):
        """Normalize the schedule to a set of Weekday values."""
        self.schedule = normalize_schedule(self.schedule)

    @classmethod
    def create(
        cls,
        name: str,
        schedule: Iterable[Union[int, Weekday]],
        category_title: str,
        color_name: str = DEFAULT_COLOR_NAME,
        emoji: str = DEFAULT_EMOJI,
        tracker_id: Optional[UUID] = None,
    ) -> "Tracker":
        """
        Build a new, validated tracker with a fresh id.

        Raises:
            ValueError: If any field is invalid
        """
        tracker = cls(
            id=tracker_id or uuid.uuid4(),
            name=(name or "").strip(),
            color_name=color_name,
            emoji=emoji,
            schedule=frozenset(schedule),
            category_title=(category_title or "").strip(),
        )
        tracker.validate()
        return tracker

    def validate(self):
        """
        Check the tracker can be written.

        Raises:
            ValueError: If any field is invalid
        """
        if not isinstance(self.id, UUID):
            raise ValueError(f"Invalid tracker id: {self.id!r}")
        if not self.name or not self.name.strip():
            raise ValueError("Tracker name cannot be empty")
        if len(self.name) > MAX_TRACKER_NAME_LENGTH:
            raise ValueError(
                f"Tracker name must be at most {MAX_TRACKER_NAME_LENGTH} characters, "
                f"got {len(self.name)}"
            )
        if not self.color_name:
            raise ValueError("Tracker color cannot be empty")
        if not self.emoji:
            raise ValueError("Tracker emoji cannot be empty")
        if not self.schedule:
            raise ValueError("Tracker schedule must contain at least one weekday")
        if not self.category_title or not self.category_title.strip():
            raise ValueError("Tracker category title cannot be empty")

    def is_scheduled_on(self, day: Union[date, datetime]) -> bool:
        """Check whether the tracker is scheduled on the weekday of a date."""
        return Weekday.from_date(day) in self.schedule

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "id": str(self.id),
            "name": self.name,
            "color_name": self.color_name,
            "emoji": self.emoji,
            "schedule": sorted(int(day) for day in self.schedule),
            "category_title": self.category_title,
        }

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "Tracker":
        """
        Create a Tracker from a database row.

        Raises:
            ValueError: If a required field is missing or malformed
        """
        return cls(
            id=UUID(_require(row, "id")),
            name=_require(row, "name"),
            color_name=_require(row, "color_name"),
            emoji=_require(row, "emoji"),
            schedule=decode_schedule(row["schedule"]),
            category_title=_require(row, "category_title"),
        )


@dataclass
class Category:
    """A named group of trackers, trackers ordered by name."""

    title: str
    trackers: list[Tracker] = field(default_factory=list)

    def __post_init__(self):
        """Normalize the title."""
        if self.title:
            self.title = self.title.strip()

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "title": self.title,
            "trackers": [tracker.to_dict() for tracker in self.trackers],
        }


class RecordKey(NamedTuple):
    """Natural key of a completion: one per tracker per calendar day."""

    tracker_id: UUID
    day: date


@dataclass(eq=False)
class Record:
    """
    Evidence that a tracker was completed on a calendar day.

    Two records are the same completion when they share tracker and day,
    whatever their ids and times of day.
    """

    id: UUID
    date: datetime
    tracker_id: UUID

    @property
    def day(self) -> date:
        return calendar_day(self.date)

    @property
    def key(self) -> RecordKey:
        return RecordKey(self.tracker_id, self.day)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Record):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "id": str(self.id),
            "date": self.date.isoformat(),
            "day": self.day.isoformat(),
            "tracker_id": str(self.tracker_id),
        }

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "Record":
        """
        Create a Record from a database row.

        Raises:
            ValueError: If a required field is missing or malformed
        """
        return cls(
            id=UUID(_require(row, "id")),
            date=datetime.fromisoformat(_require(row, "date")),
            tracker_id=UUID(_require(row, "tracker_id")),
        )
