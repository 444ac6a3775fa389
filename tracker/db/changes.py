"""
Change notification for ordered store results.

A ResultsController watches one ordered fetch of a store. When the storage
handle starts a transaction the controller captures a snapshot; when the
transaction commits it re-fetches, diffs the two snapshots and delivers a
single Diff describing the whole batch to its subscribers.

Positions in `deleted`, `updated` and the old side of `moved` index the
snapshot taken before the batch; positions in `inserted` and the new side of
`moved` index the result after it.
"""

import logging
from dataclasses import dataclass, field
from difflib import SequenceMatcher
from typing import Callable, Hashable, NamedTuple, Optional, Sequence

logger = logging.getLogger(__name__)


class Move(NamedTuple):
    """An item that changed position in the ordered result."""

    old_index: int
    new_index: int


@dataclass
class Diff:
    """Batched description of changes to an ordered collection."""

    inserted: set[int] = field(default_factory=set)
    deleted: set[int] = field(default_factory=set)
    updated: set[int] = field(default_factory=set)
    moved: set[Move] = field(default_factory=set)

    @property
    def is_empty(self) -> bool:
        return not (self.inserted or self.deleted or self.updated or self.moved)

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "inserted": sorted(self.inserted),
            "deleted": sorted(self.deleted),
            "updated": sorted(self.updated),
            "moved": sorted((m.old_index, m.new_index) for m in self.moved),
        }


# (key, fingerprint): key identifies the item, fingerprint changes with its content
SnapshotItem = tuple[Hashable, Hashable]
ChangeHandler = Callable[[Diff], None]


def compute_diff(old: Sequence[SnapshotItem], new: Sequence[SnapshotItem]) -> Diff:
    """
    Diff two ordered snapshots.

    Items are matched by key. Unmatched old items are deleted, unmatched new
    items are inserted. Matched items whose fingerprint changed are updated;
    matched items that left the longest common ordering are moved.
    """
    old_index = {key: i for i, (key, _) in enumerate(old)}
    new_index = {key: i for i, (key, _) in enumerate(new)}
    old_prints = dict(old)
    new_prints = dict(new)

    diff = Diff()
    diff.deleted = {i for key, i in old_index.items() if key not in new_index}
    diff.inserted = {i for key, i in new_index.items() if key not in old_index}

    old_common = [key for key, _ in old if key in new_index]
    new_common = [key for key, _ in new if key in old_index]

    matcher = SequenceMatcher(a=old_common, b=new_common, autojunk=False)
    in_place = set()
    for block in matcher.get_matching_blocks():
        in_place.update(old_common[block.a : block.a + block.size])

    for key in old_common:
        if key not in in_place:
            diff.moved.add(Move(old_index[key], new_index[key]))
        elif old_prints[key] != new_prints[key]:
            diff.updated.add(old_index[key])

    return diff


class ResultsController:
    """
    Observes one ordered fetch and turns batches of changes into Diffs.

    Args:
        name: Label used in log messages
        fetch: Returns the current ordered snapshot as (key, fingerprint) pairs
    """

    def __init__(self, name: str, fetch: Callable[[], list[SnapshotItem]]):
        self.name = name
        self._fetch = fetch
        self._handlers: list[ChangeHandler] = []
        self._snapshot: Optional[list[SnapshotItem]] = None

    @property
    def has_subscribers(self) -> bool:
        return bool(self._handlers)

    @property
    def is_accumulating(self) -> bool:
        return self._snapshot is not None

    def subscribe(self, handler: ChangeHandler) -> Callable[[], None]:
        """
        Register a handler for change batches.

        Returns:
            A callable that removes the handler again
        """
        self._handlers.append(handler)
        logger.debug(f"{self.name}: handler subscribed ({len(self._handlers)} total)")

        def unsubscribe():
            if handler in self._handlers:
                self._handlers.remove(handler)
                logger.debug(f"{self.name}: handler unsubscribed")

        return unsubscribe

    def will_change_content(self):
        """Begin a batch: remember the result as it is before the changes."""
        if not self._handlers:
            return
        self._snapshot = self._fetch()

    def did_change_content(self) -> Optional[Diff]:
        """
        Finish a batch: diff, deliver one Diff, reset.

        Returns:
            The delivered Diff, or None when nothing observable changed
        """
        if self._snapshot is None:
            return None

        before = self._snapshot
        self._snapshot = None

        diff = compute_diff(before, self._fetch())
        if diff.is_empty:
            logger.debug(f"{self.name}: batch produced no visible changes")
            return None

        logger.debug(f"{self.name}: delivering diff {diff.to_dict()}")
        for handler in list(self._handlers):
            try:
                handler(diff)
            except Exception as e:
                logger.error(f"{self.name}: change handler failed: {e}", exc_info=True)
        return diff

    def discard_changes(self):
        """Abandon a batch whose transaction was rolled back."""
        if self._snapshot is not None:
            logger.debug(f"{self.name}: discarding batch after rollback")
        self._snapshot = None
