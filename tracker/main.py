"""
Demo script for the tracker core.

Creates a few trackers in a scratch database, marks some of them complete,
and prints what the trackers screen and the statistics screen would show.
"""

import logging
import tempfile
from datetime import datetime, timedelta
from pathlib import Path

from tracker.config import configure_logging, load_environment
from tracker.db import Tracker, TrackerRepository
from tracker.models import Weekday, describe_schedule
from tracker.services import StatisticsService, VisibilityService

logger = logging.getLogger(__name__)


def main():
    load_environment()
    configure_logging()

    with tempfile.TemporaryDirectory() as tmp:
        repo = TrackerRepository(Path(tmp) / "demo.db")
        repo.categories.on_change(lambda diff: print(f"  categories changed: {diff.to_dict()}"))

        print("=" * 60)
        print("Tracker Core Demo")
        print("=" * 60)

        repo.categories.add_category("Health")
        trackers = [
            Tracker.create("Drink water", list(Weekday), "Health", emoji="💧"),
            Tracker.create("Run", [Weekday.MONDAY, Weekday.THURSDAY], "Health", emoji="🏃"),
            Tracker.create("Read", [Weekday.SATURDAY, Weekday.SUNDAY], "Default", emoji="📚"),
        ]
        with repo.batch("demo_setup"):
            for tracker in trackers:
                repo.trackers.add_tracker(tracker)

        now = datetime.now()
        for days_ago in range(5):
            repo.records.add_record(trackers[0].id, now - timedelta(days=days_ago))

        visibility = VisibilityService(repo.categories, repo.records)
        for category in visibility.visible_categories(now):
            print(f"\n{category.title}")
            print("-" * 40)
            for view in category.trackers:
                mark = "x" if view.is_completed_today else " "
                print(
                    f"  [{mark}] {view.tracker.emoji} {view.tracker.name:<20} "
                    f"{view.completion_count} days  ({describe_schedule(view.tracker.schedule)})"
                )

        stats = StatisticsService(repo.trackers, repo.records)
        print(f"\nStatistics: {stats.summary().to_dict()}")


if __name__ == "__main__":
    main()
