"""
Storage handle with connection management and schema initialization.

A Database is constructed explicitly and passed to every store. It owns the
SQLite file, the single-writer lock, and the transaction boundary that
drives change notification: one outermost transaction is one batch.
"""

import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Optional, TypeVar, Union

from tracker.config import DB_TIMEOUT, get_db_path
from tracker.exceptions import DecodingError, WriteError

from .changes import ChangeHandler, ResultsController, SnapshotItem

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Database:
    """
    SQLite storage handle shared by the category, tracker and record stores.

    All access goes through one re-entrant lock, so writers on different
    threads are serialized per handle. Nested transaction() calls run as
    savepoints of the outermost one; changes become visible to observers
    only after it commits. Separate processes writing the same file are only
    coordinated by SQLite's own file locking.
    """

    def __init__(
        self,
        db_path: Optional[Union[str, Path]] = None,
        init_schema: bool = True,
        timeout: float = DB_TIMEOUT,
    ):
        """
        Initialize the storage handle.

        Args:
            db_path: Path to the SQLite database file. Defaults to data/tracker.db
            init_schema: Whether to create the tables on startup
            timeout: Seconds to wait for a locked database file
        """
        self.db_path = Path(db_path) if db_path else get_db_path()
        self.timeout = timeout
        self._lock = threading.RLock()
        self._conn: Optional[sqlite3.Connection] = None
        self._depth = 0
        self._controllers: list[ResultsController] = []

        self._ensure_db_directory()
        if init_schema:
            self.init_schema()

    def _ensure_db_directory(self):
        """Ensure the database directory exists."""
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            logger.debug(f"Database directory ensured: {self.db_path.parent}")
        except Exception as e:
            logger.error(f"Failed to create database directory: {e}", exc_info=True)
            raise

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=self.timeout)
        conn.row_factory = sqlite3.Row
        # Cascading deletes rely on this being set on every connection
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    # =========================================================================
    # Change observers
    # =========================================================================

    def register_controller(self, controller: ResultsController):
        """Attach a results controller to the transaction lifecycle."""
        with self._lock:
            if controller not in self._controllers:
                self._controllers.append(controller)

    def _begin_batch(self):
        for controller in self._controllers:
            if controller.has_subscribers:
                controller.will_change_content()

    def _finish_batch(self):
        for controller in self._controllers:
            controller.did_change_content()

    def _discard_batch(self):
        for controller in self._controllers:
            controller.discard_changes()

    # =========================================================================
    # Connections
    # =========================================================================

    @contextmanager
    def transaction(self, operation: str = "transaction"):
        """
        Context manager for a write transaction.

        Commits on success and notifies observers once. On failure rolls back,
        drops the pending batch, and re-raises; SQLite errors are raised as
        WriteError.

        A nested call runs inside a savepoint of the outer transaction. If it
        fails, only its own writes are undone, so a caller may catch the
        error and still commit the rest of the batch.

        Args:
            operation: Name of the calling operation, used in errors and logs
        """
        with self._lock:
            if self._conn is not None:
                yield from self._savepoint(self._conn, operation)
                return

            self._begin_batch()
            conn = None
            try:
                conn = self._connect()
                self._conn = conn
                # Explicit so that savepoints never open (and release) the
                # transaction themselves
                conn.execute("BEGIN")
                yield conn
                conn.commit()
            except sqlite3.Error as e:
                logger.error(f"Transaction '{operation}' failed: {e}", exc_info=True)
                if conn:
                    conn.rollback()
                self._discard_batch()
                raise WriteError(
                    message=f"Could not commit {operation}: {e}",
                    operation=operation,
                    cause=e,
                ) from e
            except BaseException:
                if conn:
                    conn.rollback()
                self._discard_batch()
                raise
            finally:
                self._conn = None
                if conn:
                    conn.close()

            self._finish_batch()

    def _savepoint(self, conn: sqlite3.Connection, operation: str):
        name = f"sp_{self._depth}"
        self._depth += 1
        conn.execute(f"SAVEPOINT {name}")
        try:
            yield conn
        except sqlite3.Error as e:
            logger.error(f"Nested '{operation}' failed: {e}", exc_info=True)
            conn.execute(f"ROLLBACK TO {name}")
            conn.execute(f"RELEASE {name}")
            raise WriteError(
                message=f"Could not commit {operation}: {e}",
                operation=operation,
                cause=e,
            ) from e
        except BaseException:
            conn.execute(f"ROLLBACK TO {name}")
            conn.execute(f"RELEASE {name}")
            raise
        else:
            conn.execute(f"RELEASE {name}")
        finally:
            self._depth -= 1

    @contextmanager
    def read(self):
        """Context manager for a read-only connection; joins an open transaction."""
        with self._lock:
            if self._conn is not None:
                yield self._conn
                return

            conn = self._connect()
            try:
                yield conn
            finally:
                conn.close()

    # =========================================================================
    # Schema
    # =========================================================================

    def is_initialized(self) -> bool:
        """Check whether all tables exist."""
        try:
            with self.read() as conn:
                cursor = conn.execute(
                    """
                    SELECT COUNT(*) FROM sqlite_master
                    WHERE type = 'table' AND name IN ('categories', 'trackers', 'records')
                    """
                )
                return cursor.fetchone()[0] == 3
        except sqlite3.Error as e:
            logger.warning(f"Could not inspect schema: {e}")
            return False

    def init_schema(self):
        """Initialize the database schema."""
        with self.transaction("init_schema") as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS categories (
                    title TEXT PRIMARY KEY CHECK(length(title) > 0),
                    created_at TEXT NOT NULL
                )
            """)

            # name, color_name, emoji and schedule are checked on read so that
            # a damaged row can be skipped instead of failing the whole fetch
            conn.execute("""
                CREATE TABLE IF NOT EXISTS trackers (
                    id TEXT PRIMARY KEY,
                    name TEXT,
                    color_name TEXT,
                    emoji TEXT,
                    schedule TEXT,
                    category_title TEXT NOT NULL
                        REFERENCES categories(title) ON DELETE CASCADE,
                    created_at TEXT NOT NULL
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS records (
                    id TEXT PRIMARY KEY,
                    tracker_id TEXT NOT NULL
                        REFERENCES trackers(id) ON DELETE CASCADE,
                    day TEXT NOT NULL,
                    date TEXT NOT NULL,
                    UNIQUE(tracker_id, day)
                )
            """)

            self._create_indexes(conn)

            logger.debug("Tracker schema initialized successfully")

    def _create_indexes(self, conn):
        """Create database indexes for query performance."""
        indexes = [
            ("idx_trackers_category_title", "trackers", "category_title"),
            ("idx_trackers_name", "trackers", "name"),
            ("idx_records_tracker_id", "records", "tracker_id"),
            ("idx_records_day", "records", "day"),
        ]

        for index_name, table, columns in indexes:
            conn.execute(f"""
                CREATE INDEX IF NOT EXISTS {index_name}
                ON {table}({columns})
            """)


class BaseStore:
    """
    Base class for the entity stores.

    Binds a store to its storage handle, wires its ordered fetch into a
    ResultsController, and provides tolerant row decoding.
    """

    table = ""

    def __init__(self, database: Database):
        """
        Initialize the store.

        Args:
            database: Storage handle shared with the other stores
        """
        self.database = database
        self._dropped_ids: set[str] = set()
        self._controller = ResultsController(self.__class__.__name__, self._snapshot)
        database.register_controller(self._controller)

    @property
    def dropped_rows(self) -> int:
        """Number of distinct rows skipped as malformed or orphaned so far."""
        return len(self._dropped_ids)

    def on_change(self, handler: ChangeHandler) -> Callable[[], None]:
        """
        Subscribe to batched changes of this store's ordered fetch result.

        Returns:
            A callable that cancels the subscription
        """
        return self._controller.subscribe(handler)

    def _snapshot(self) -> list[SnapshotItem]:
        """Current ordered result as (key, fingerprint) pairs."""
        raise NotImplementedError

    def _fetch_rows(self, query: str, params: tuple = ()) -> list[sqlite3.Row]:
        """
        Run a read query.

        A store whose tables do not exist yet reads as empty.
        """
        try:
            with self.database.read() as conn:
                return conn.execute(query, params).fetchall()
        except sqlite3.OperationalError as e:
            logger.warning(f"{self.table}: read against uninitialized store: {e}")
            return []

    def _decode_rows(
        self,
        rows: list[sqlite3.Row],
        decoder: Callable[[sqlite3.Row], T],
        operation: str,
    ) -> list[T]:
        """Decode rows, skipping (and logging) any that are malformed."""
        items = []
        for row in rows:
            try:
                items.append(decoder(row))
            except (ValueError, TypeError, KeyError) as e:
                self._drop_row(row, f"malformed row: {e}", operation, cause=e)
        return items

    def _drop_row(self, row: sqlite3.Row, reason: str, operation: str, cause=None):
        row_id = str(row[0])
        # Snapshots re-read the same rows on every write
        if row_id in self._dropped_ids:
            logger.debug(f"Skipping {self.table} row {row_id} again: {reason}")
            return
        self._dropped_ids.add(row_id)
        DecodingError(
            message=f"Skipping {self.table} row: {reason}",
            table=self.table,
            row_id=row_id,
            operation=operation,
            cause=cause,
        )
