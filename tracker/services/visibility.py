"""
Visibility query for the trackers screen.

Joins categories, trackers and completion records into what is shown for a
selected date. Everything is recomputed on each call; the data set is small
enough that no cache is kept.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Sequence
from uuid import UUID

from tracker.db import Category, CategoryStore, Record, RecordStore, Tracker
from tracker.models import DateLike, Weekday, as_datetime, calendar_day

logger = logging.getLogger(__name__)


@dataclass
class TrackerView:
    """A tracker as shown on a given date."""

    tracker: Tracker
    completion_count: int
    is_completed_today: bool


@dataclass
class VisibleCategory:
    """A category with the trackers visible on a given date."""

    title: str
    trackers: list[TrackerView]


def build_visible_categories(
    categories: Sequence[Category],
    records: Sequence[Record],
    selected: DateLike,
    now: datetime,
    search_text: Optional[str] = None,
) -> list[VisibleCategory]:
    """
    Derive the visible categories for a selected date.

    A tracker is visible when the selected moment is not after `now` and the
    selected weekday is in its schedule. When `search_text` is given the
    tracker name must also contain it, ignoring case. Categories left with no
    visible trackers are dropped.

    Completion counts are all-time and count each calendar day once.
    """
    moment = as_datetime(selected)
    if moment > as_datetime(now):
        return []

    weekday = Weekday.from_date(moment)
    day = calendar_day(moment)
    needle = search_text.strip().casefold() if search_text else ""

    completion_days: dict[UUID, set] = {}
    for record in records:
        completion_days.setdefault(record.tracker_id, set()).add(record.day)

    visible = []
    for category in categories:
        views = [
            TrackerView(
                tracker=tracker,
                completion_count=len(completion_days.get(tracker.id, ())),
                is_completed_today=day in completion_days.get(tracker.id, ()),
            )
            for tracker in category.trackers
            if weekday in tracker.schedule and needle in tracker.name.casefold()
        ]
        if views:
            visible.append(VisibleCategory(title=category.title, trackers=views))

    return visible


class VisibilityService:
    """Presentation-facing queries and completion toggling for a selected date."""

    def __init__(
        self,
        category_store: CategoryStore,
        record_store: RecordStore,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize the visibility service.

        Args:
            category_store: Store providing categories with their trackers
            record_store: Store providing completion records
            clock: Source of "now"
        """
        self.category_store = category_store
        self.record_store = record_store
        self.clock = clock

    def visible_categories(
        self, selected: DateLike, search_text: Optional[str] = None
    ) -> list[VisibleCategory]:
        """Get the categories and trackers to show for a selected date."""
        visible = build_visible_categories(
            self.category_store.fetch_categories(),
            self.record_store.fetch_records(),
            selected,
            self.clock(),
            search_text=search_text,
        )
        logger.debug(
            f"{sum(len(c.trackers) for c in visible)} trackers visible "
            f"in {len(visible)} categories for {calendar_day(selected)}"
        )
        return visible

    def is_empty(self, selected: DateLike, search_text: Optional[str] = None) -> bool:
        """Check whether nothing is visible, e.g. to show a placeholder."""
        return not self.visible_categories(selected, search_text=search_text)

    def toggle_completion(self, tracker_id: UUID, selected: DateLike) -> bool:
        """
        Flip a tracker's completion on the selected day.

        Returns:
            True if the tracker is now complete on that day, False otherwise

        Raises:
            FutureCompletion: If completing a tracker after now
            TrackerNotFound: If the tracker does not exist
            WriteError: If the change cannot be committed
        """
        if self.record_store.delete_record_for_day(tracker_id, selected):
            return False

        self.record_store.add_record(tracker_id, selected)
        return True
