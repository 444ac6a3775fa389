"""
Tracker - Habit Tracking Core

Persistence, change notification and schedule filtering for a habit
tracker: categories of trackers with weekly schedules, and the completions
recorded against them.
"""

from .db import (
    Category,
    CategoryStore,
    Database,
    Diff,
    Move,
    Record,
    RecordStore,
    Tracker,
    TrackerRepository,
    TrackerStore,
)
from .exceptions import (
    CategoryNotFound,
    DecodingError,
    DuplicateCompletion,
    FutureCompletion,
    TrackerError,
    TrackerNotFound,
    WriteError,
)
from .models import Weekday
from .services import (
    StatisticsService,
    VisibilityService,
    build_visible_categories,
)

__version__ = "0.1.0"

__all__ = [
    "Category",
    "CategoryNotFound",
    "CategoryStore",
    "Database",
    "DecodingError",
    "Diff",
    "DuplicateCompletion",
    "FutureCompletion",
    "Move",
    "Record",
    "RecordStore",
    "StatisticsService",
    "Tracker",
    "TrackerError",
    "TrackerNotFound",
    "TrackerRepository",
    "TrackerStore",
    "VisibilityService",
    "Weekday",
    "WriteError",
    "build_visible_categories",
]
