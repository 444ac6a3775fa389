"""
Repository facade composing the storage handle and the three stores.

This is the seam the UI layer consumes: one object built from a database
path, exposing the category, tracker and record stores that share it.
"""

import logging
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Union

from .base import Database
from .categories import CategoryStore
from .records import RecordStore
from .trackers import TrackerStore

logger = logging.getLogger(__name__)


class TrackerRepository:
    """
    Facade over the category, tracker and record stores.

    Constructed explicitly; nothing here is process-global.
    """

    def __init__(
        self,
        db_path: Optional[Union[str, Path]] = None,
        clock: Callable[[], datetime] = datetime.now,
        seed_default: bool = True,
        database: Optional[Database] = None,
    ):
        """
        Initialize the repository and its stores.

        Args:
            db_path: Path to the SQLite database file. Defaults to data/tracker.db
            clock: Source of "now" for completion checks
            seed_default: Whether to create the default category when none exist
            database: Existing storage handle to use instead of opening db_path
        """
        self.database = database or Database(db_path)
        self.clock = clock
        self.trackers = TrackerStore(self.database)
        self.records = RecordStore(self.database, clock=clock)
        self.categories = CategoryStore(self.database, seed_default=seed_default)

        logger.info(f"TrackerRepository initialized with db_path: {self.database.db_path}")

    @contextmanager
    def batch(self, operation: str = "batch"):
        """
        Group several store calls into one transaction.

        Observers receive a single Diff per store once the batch commits;
        if any call fails, nothing in the batch is stored.
        """
        with self.database.transaction(operation) as conn:
            yield conn
