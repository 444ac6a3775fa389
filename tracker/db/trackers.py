"""
Tracker store.

Handles tracker persistence: creating trackers in an existing category,
listing them by name, and deleting them together with their completions.
"""

import logging
import sqlite3
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from tracker.exceptions import CategoryNotFound
from tracker.models import encode_schedule

from .base import BaseStore
from .changes import SnapshotItem
from .models import Tracker

logger = logging.getLogger(__name__)

TRACKER_COLUMNS = "t.id, t.name, t.color_name, t.emoji, t.schedule, t.category_title"


def insert_tracker_row(conn: sqlite3.Connection, tracker: Tracker, category_title: str):
    """Insert one tracker row; shared with the category store."""
    conn.execute(
        """
        INSERT INTO trackers (
            id, name, color_name, emoji, schedule, category_title, created_at
        ) VALUES (?, ?, ?, ?, ?, ?, ?)
        """,
        (
            str(tracker.id),
            tracker.name,
            tracker.color_name,
            tracker.emoji,
            encode_schedule(tracker.schedule),
            category_title,
            datetime.now(timezone.utc).isoformat(),
        ),
    )


class TrackerStore(BaseStore):
    """
    Repository for trackers.

    A tracker must reference an existing category; deleting a tracker
    deletes its completion records.
    """

    table = "trackers"

    # =========================================================================
    # Create Operations
    # =========================================================================

    def add_tracker(self, tracker: Tracker) -> Tracker:
        """
        Persist a new tracker.

        Args:
            tracker: The tracker to store; its category must already exist

        Returns:
            The stored tracker

        Raises:
            ValueError: If the tracker fails validation
            CategoryNotFound: If no category has the tracker's category title
            WriteError: If the transaction cannot be committed
        """
        tracker.validate()

        with self.database.transaction("add_tracker") as conn:
            cursor = conn.execute(
                "SELECT 1 FROM categories WHERE title = ?", (tracker.category_title,)
            )
            if cursor.fetchone() is None:
                raise CategoryNotFound(tracker.category_title, operation="add_tracker")

            insert_tracker_row(conn, tracker, tracker.category_title)

        logger.info(
            f"Added tracker {tracker.id} '{tracker.name}' to '{tracker.category_title}'"
        )
        return tracker

    # =========================================================================
    # Read Operations
    # =========================================================================

    def fetch_trackers(self) -> list[Tracker]:
        """
        Get all trackers sorted by name.

        Rows with missing fields or an unreadable schedule are skipped and
        counted in `dropped_rows`.
        """
        rows = self._fetch_rows(
            f"""
            SELECT {TRACKER_COLUMNS}
            FROM trackers t
            JOIN categories c ON c.title = t.category_title
            ORDER BY t.name, t.id
            """
        )
        trackers = self._decode_rows(rows, Tracker.from_row, "fetch_trackers")
        logger.debug(f"Fetched {len(trackers)} trackers")
        return trackers

    def get_tracker(self, tracker_id: UUID) -> Optional[Tracker]:
        """
        Get a tracker by id.

        Returns:
            The tracker, or None if it does not exist or cannot be decoded
        """
        rows = self._fetch_rows(
            f"SELECT {TRACKER_COLUMNS} FROM trackers t WHERE t.id = ?",
            (str(tracker_id),),
        )
        trackers = self._decode_rows(rows, Tracker.from_row, "get_tracker")
        return trackers[0] if trackers else None

    # =========================================================================
    # Delete Operations
    # =========================================================================

    def delete_tracker(self, tracker_id: UUID) -> bool:
        """
        Delete a tracker and its completion records.

        Returns:
            True if deleted, False if not found

        Raises:
            WriteError: If the transaction cannot be committed
        """
        with self.database.transaction("delete_tracker") as conn:
            cursor = conn.execute("DELETE FROM trackers WHERE id = ?", (str(tracker_id),))
            deleted = cursor.rowcount > 0

        if deleted:
            logger.info(f"Deleted tracker {tracker_id}")
        else:
            logger.debug(f"No tracker to delete with id {tracker_id}")
        return deleted

    def _snapshot(self) -> list[SnapshotItem]:
        return [
            (
                tracker.id,
                (
                    tracker.name,
                    tracker.color_name,
                    tracker.emoji,
                    tuple(sorted(tracker.schedule)),
                    tracker.category_title,
                ),
            )
            for tracker in self.fetch_trackers()
        ]
