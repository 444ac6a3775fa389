"""
Record store.

Handles completion records: marking a tracker complete on a day, listing
completions, and removing them. Enforces one completion per tracker per
calendar day and refuses completions in the future.
"""

import logging
import uuid
from datetime import date, datetime
from typing import Callable, Optional
from uuid import UUID

from tracker.exceptions import DuplicateCompletion, FutureCompletion, TrackerNotFound
from tracker.models import DateLike, as_datetime, calendar_day

from .base import BaseStore, Database
from .changes import SnapshotItem
from .models import Record

logger = logging.getLogger(__name__)


class RecordStore(BaseStore):
    """
    Repository for completion records.

    Records are identified by (tracker_id, calendar day); the random record
    id exists only as a storage key.
    """

    table = "records"

    def __init__(
        self,
        database: Database,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize the record store.

        Args:
            database: Storage handle shared with the other stores
            clock: Source of "now", compared against completion dates
        """
        super().__init__(database)
        self.clock = clock

    # =========================================================================
    # Create Operations
    # =========================================================================

    def add_record(self, tracker_id: UUID, when: DateLike) -> Record:
        """
        Mark a tracker complete on the calendar day of `when`.

        Args:
            tracker_id: Id of the completed tracker
            when: Moment of completion; a plain date means midnight of that day

        Returns:
            The stored record

        Raises:
            FutureCompletion: If `when` is after now
            TrackerNotFound: If the tracker does not exist
            DuplicateCompletion: If the tracker is already complete that day
            WriteError: If the transaction cannot be committed
        """
        moment = as_datetime(when)
        if moment > as_datetime(self.clock()):
            raise FutureCompletion(tracker_id, moment, operation="add_record")

        record = Record(id=uuid.uuid4(), date=moment, tracker_id=tracker_id)

        with self.database.transaction("add_record") as conn:
            tracker_row = conn.execute(
                "SELECT 1 FROM trackers WHERE id = ?", (str(tracker_id),)
            ).fetchone()
            if tracker_row is None:
                raise TrackerNotFound(tracker_id, operation="add_record")

            existing = conn.execute(
                "SELECT 1 FROM records WHERE tracker_id = ? AND day = ?",
                (str(tracker_id), record.day.isoformat()),
            ).fetchone()
            if existing is not None:
                raise DuplicateCompletion(tracker_id, record.day, operation="add_record")

            conn.execute(
                "INSERT INTO records (id, tracker_id, day, date) VALUES (?, ?, ?, ?)",
                (
                    str(record.id),
                    str(tracker_id),
                    record.day.isoformat(),
                    record.date.isoformat(),
                ),
            )

        logger.info(f"Recorded completion of tracker {tracker_id} on {record.day}")
        return record

    # =========================================================================
    # Read Operations
    # =========================================================================

    def fetch_records(self) -> list[Record]:
        """
        Get all completion records ordered by date.

        Records whose tracker no longer exists, and malformed rows, are
        skipped and counted in `dropped_rows`.
        """
        rows = self._fetch_rows(
            """
            SELECT r.id, r.date, r.tracker_id, t.id AS linked_tracker
            FROM records r
            LEFT JOIN trackers t ON t.id = r.tracker_id
            ORDER BY r.date, r.id
            """
        )
        return self._decode_linked(rows, "fetch_records")

    def fetch_records_for_tracker(self, tracker_id: UUID) -> list[Record]:
        """Get the completion records of one tracker ordered by date."""
        rows = self._fetch_rows(
            """
            SELECT r.id, r.date, r.tracker_id, t.id AS linked_tracker
            FROM records r
            LEFT JOIN trackers t ON t.id = r.tracker_id
            WHERE r.tracker_id = ?
            ORDER BY r.date, r.id
            """,
            (str(tracker_id),),
        )
        return self._decode_linked(rows, "fetch_records_for_tracker")

    def has_record(self, tracker_id: UUID, day: DateLike) -> bool:
        """Check whether a tracker is complete on a calendar day."""
        rows = self._fetch_rows(
            "SELECT 1 FROM records WHERE tracker_id = ? AND day = ?",
            (str(tracker_id), calendar_day(day).isoformat()),
        )
        return bool(rows)

    def get_record(self, tracker_id: UUID, day: DateLike) -> Optional[Record]:
        """Get a tracker's completion on a calendar day, if any."""
        wanted = calendar_day(day)
        for record in self.fetch_records_for_tracker(tracker_id):
            if record.day == wanted:
                return record
        return None

    def _decode_linked(self, rows, operation: str) -> list[Record]:
        linked = []
        for row in rows:
            if row["linked_tracker"] is None:
                self._drop_row(row, f"tracker {row['tracker_id']} no longer exists", operation)
            else:
                linked.append(row)

        records = self._decode_rows(linked, Record.from_row, operation)
        logger.debug(f"Fetched {len(records)} records")
        return records

    # =========================================================================
    # Delete Operations
    # =========================================================================

    def delete_record(self, record_id: UUID) -> bool:
        """
        Delete a record by id.

        Returns:
            True if deleted, False if not found
        """
        with self.database.transaction("delete_record") as conn:
            cursor = conn.execute("DELETE FROM records WHERE id = ?", (str(record_id),))
            deleted = cursor.rowcount > 0

        if deleted:
            logger.info(f"Deleted record {record_id}")
        return deleted

    def delete_record_for_day(self, tracker_id: UUID, day: DateLike) -> bool:
        """
        Remove a tracker's completion on a calendar day.

        Returns:
            True if a completion was removed, False if there was none
        """
        day_value: date = calendar_day(day)
        with self.database.transaction("delete_record_for_day") as conn:
            cursor = conn.execute(
                "DELETE FROM records WHERE tracker_id = ? AND day = ?",
                (str(tracker_id), day_value.isoformat()),
            )
            deleted = cursor.rowcount > 0

        if deleted:
            logger.info(f"Removed completion of tracker {tracker_id} on {day_value}")
        else:
            logger.debug(f"No completion of tracker {tracker_id} on {day_value}")
        return deleted

    def _snapshot(self) -> list[SnapshotItem]:
        return [(record.id, record.date) for record in self.fetch_records()]
