"""
Exception hierarchy for the tracker core.

Every error carries the failing operation, structured context and the
underlying cause, and logs itself when created. Missing rows are not errors:
fetches return None or an empty list and deletes return False.
"""

import logging
from typing import Any, Optional
from uuid import UUID

logger = logging.getLogger(__name__)


class TrackerError(Exception):
    """
    Base exception for all tracker core errors.

    Example:
        raise TrackerError(
            message="Failed to save tracker",
            operation="add_tracker",
            context={"tracker_id": "..."},
        )
    """

    log_level = logging.ERROR

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        context: Optional[dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.context = context or {}
        self.cause = cause

        self._log_error()

    def _log_error(self) -> None:
        """Log error with its context."""
        log_data = {
            "error_type": self.__class__.__name__,
            "operation": self.operation,
            "error_context": self.context,
        }
        logger.log(
            self.log_level,
            f"{self.__class__.__name__}: {self.message}",
            extra=log_data,
            exc_info=self.cause,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "operation": self.operation,
            "context": {k: str(v) for k, v in self.context.items()},
        }


class WriteError(TrackerError):
    """A transaction could not be committed; prior state is unchanged."""


class DecodingError(TrackerError):
    """
    A stored row is malformed or misses required fields.

    Never escapes a batch fetch: the row is skipped and the error is only
    logged.
    """

    log_level = logging.WARNING

    def __init__(self, message: str, table: str, row_id: Optional[str] = None, **kwargs):
        self.table = table
        self.row_id = row_id
        kwargs.setdefault("context", {"table": table, "row_id": row_id})
        super().__init__(message=message, **kwargs)


class CategoryNotFound(TrackerError):
    """A tracker referenced a category title that does not exist."""

    def __init__(self, title: str, **kwargs):
        self.title = title
        super().__init__(
            message=f"Category '{title}' does not exist",
            context={"title": title},
            **kwargs,
        )


class TrackerNotFound(TrackerError):
    """A record referenced a tracker id that does not exist."""

    def __init__(self, tracker_id: UUID, **kwargs):
        self.tracker_id = tracker_id
        super().__init__(
            message=f"Tracker {tracker_id} does not exist",
            context={"tracker_id": tracker_id},
            **kwargs,
        )


class DuplicateCompletion(TrackerError):
    """A tracker already has a completion on that calendar day."""

    def __init__(self, tracker_id: UUID, day, **kwargs):
        self.tracker_id = tracker_id
        self.day = day
        super().__init__(
            message=f"Tracker {tracker_id} is already completed on {day}",
            context={"tracker_id": tracker_id, "day": day},
            **kwargs,
        )


class FutureCompletion(TrackerError):
    """A completion was requested for a moment after now."""

    def __init__(self, tracker_id: UUID, when, **kwargs):
        self.tracker_id = tracker_id
        self.when = when
        super().__init__(
            message=f"Cannot complete tracker {tracker_id} in the future ({when})",
            context={"tracker_id": tracker_id, "when": when},
            **kwargs,
        )
