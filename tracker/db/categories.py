"""
Category store.

Handles category persistence: seeding the default category, creating a
category together with its trackers in one transaction, listing categories
with their trackers, and deleting a category with everything it owns.
"""

import logging
import sqlite3
from dataclasses import replace
from datetime import datetime, timezone
from typing import Iterable, Optional

from tracker.config import DEFAULT_CATEGORY_TITLE

from .base import BaseStore, Database
from .changes import SnapshotItem
from .models import Category, Tracker
from .trackers import TRACKER_COLUMNS, insert_tracker_row

logger = logging.getLogger(__name__)


class CategoryStore(BaseStore):
    """
    Repository for categories.

    Categories are keyed by title. Deleting a category deletes its trackers
    and, through them, their completion records.
    """

    table = "categories"

    def __init__(self, database: Database, seed_default: bool = True):
        """
        Initialize the category store.

        Args:
            database: Storage handle shared with the other stores
            seed_default: Whether to create the default category when none exist
        """
        super().__init__(database)
        if seed_default:
            if database.is_initialized():
                self.ensure_default_category()
            else:
                logger.warning("Schema not initialized; default category not seeded")

    # =========================================================================
    # Create Operations
    # =========================================================================

    def ensure_default_category(self) -> bool:
        """
        Create the default category if the store holds no categories.

        Safe to call repeatedly.

        Returns:
            True if the default category was created
        """
        with self.database.transaction("ensure_default_category") as conn:
            count = conn.execute("SELECT COUNT(*) FROM categories").fetchone()[0]
            if count:
                return False
            self._insert_category_row(conn, DEFAULT_CATEGORY_TITLE)

        logger.info(f"Seeded default category '{DEFAULT_CATEGORY_TITLE}'")
        return True

    def add_category(self, title: str, trackers: Iterable[Tracker] = ()) -> Category:
        """
        Persist a category and its trackers in one transaction.

        Trackers are filed under this category whatever their own
        category_title says.

        Args:
            title: Unique category title
            trackers: Optional trackers to create alongside the category

        Returns:
            The stored category, trackers sorted by name

        Raises:
            ValueError: If the title or a tracker is invalid
            WriteError: If the transaction cannot be committed (nothing is stored)
        """
        title = (title or "").strip()
        if not title:
            raise ValueError("Category title cannot be empty")

        stored = []
        for tracker in trackers:
            tracker = replace(tracker, category_title=title)
            tracker.validate()
            stored.append(tracker)

        with self.database.transaction("add_category") as conn:
            self._insert_category_row(conn, title)
            for tracker in stored:
                insert_tracker_row(conn, tracker, title)

        logger.info(f"Added category '{title}' with {len(stored)} trackers")
        return Category(title=title, trackers=sorted(stored, key=lambda t: t.name))

    def _insert_category_row(self, conn: sqlite3.Connection, title: str):
        conn.execute(
            "INSERT INTO categories (title, created_at) VALUES (?, ?)",
            (title, datetime.now(timezone.utc).isoformat()),
        )

    # =========================================================================
    # Read Operations
    # =========================================================================

    def fetch_categories(self) -> list[Category]:
        """
        Get all categories sorted by title, each with its trackers sorted by name.

        Returns an empty list for an empty or uninitialized store. Malformed
        tracker rows are skipped.
        """
        category_rows = self._fetch_rows("SELECT title FROM categories ORDER BY title")
        tracker_rows = self._fetch_rows(
            f"SELECT {TRACKER_COLUMNS} FROM trackers t ORDER BY t.name, t.id"
        )

        categories = {
            row["title"]: Category(title=row["title"]) for row in category_rows
        }
        for tracker in self._decode_rows(tracker_rows, Tracker.from_row, "fetch_categories"):
            category = categories.get(tracker.category_title)
            if category is not None:
                category.trackers.append(tracker)

        logger.debug(f"Fetched {len(categories)} categories")
        return list(categories.values())

    def get_category(self, title: str) -> Optional[Category]:
        """
        Get a category by title.

        Returns:
            The category with its trackers, or None if not found
        """
        rows = self._fetch_rows("SELECT title FROM categories WHERE title = ?", (title,))
        if not rows:
            return None

        tracker_rows = self._fetch_rows(
            f"""
            SELECT {TRACKER_COLUMNS} FROM trackers t
            WHERE t.category_title = ?
            ORDER BY t.name, t.id
            """,
            (title,),
        )
        trackers = self._decode_rows(tracker_rows, Tracker.from_row, "get_category")
        return Category(title=rows[0]["title"], trackers=trackers)

    # =========================================================================
    # Delete Operations
    # =========================================================================

    def delete_category(self, title: str) -> bool:
        """
        Delete a category, its trackers, and their records.

        Returns:
            True if deleted, False if not found

        Raises:
            WriteError: If the transaction cannot be committed
        """
        with self.database.transaction("delete_category") as conn:
            cursor = conn.execute("DELETE FROM categories WHERE title = ?", (title,))
            deleted = cursor.rowcount > 0

        if deleted:
            logger.info(f"Deleted category '{title}'")
        else:
            logger.debug(f"No category to delete titled '{title}'")
        return deleted

    def _snapshot(self) -> list[SnapshotItem]:
        # A category counts as updated when its set of trackers changes
        return [
            (
                category.title,
                tuple((tracker.id, tracker.name) for tracker in category.trackers),
            )
            for category in self.fetch_categories()
        ]
