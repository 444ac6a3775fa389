"""
Database module for the tracker core.

This module provides the persistence layer: an explicitly constructed storage
handle shared by three stores, and the change feed they publish.

Structure:
- base.py: Storage handle (connections, schema, transactions) and store base class
- changes.py: Diff type and the results controller that batches changes
- models.py: Persisted entities (Category, Tracker, Record)
- categories.py: Category store
- trackers.py: Tracker store
- records.py: Completion record store
- repository.py: Facade that composes the storage handle and all stores
"""

from .base import BaseStore, Database
from .categories import CategoryStore
from .changes import Diff, Move, ResultsController, compute_diff
from .models import Category, Record, RecordKey, Tracker
from .records import RecordStore
from .repository import TrackerRepository
from .trackers import TrackerStore

__all__ = [
    # Base
    "BaseStore",
    "Database",
    # Change feed
    "Diff",
    "Move",
    "ResultsController",
    "compute_diff",
    # Models
    "Category",
    "Record",
    "RecordKey",
    "Tracker",
    # Stores
    "CategoryStore",
    "RecordStore",
    "TrackerStore",
    # Facade
    "TrackerRepository",
]
