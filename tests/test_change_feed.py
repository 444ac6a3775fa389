"""Tests for change notification through the stores"""
import pytest

from tracker.db import Tracker
from tracker.exceptions import DuplicateCompletion
from tracker.models import Weekday


def tracker(name, category_title="Default"):
    return Tracker.create(name, list(Weekday), category_title)


class TestStoreChangeFeed:
    """Test diffs delivered by the stores"""

    def test_single_write_delivers_one_diff(self, repository):
        received = []
        repository.trackers.on_change(received.append)

        repository.trackers.add_tracker(tracker("Water"))

        assert len(received) == 1
        assert received[0].inserted == {0}

    def test_batch_delivers_one_diff(self, repository):
        """Test three inserts in one batch arrive as one Diff"""
        received = []
        repository.trackers.on_change(received.append)

        with repository.batch("setup"):
            for name in ["Walk", "Read", "Meditate"]:
                repository.trackers.add_tracker(tracker(name))

        assert len(received) == 1
        assert received[0].inserted == {0, 1, 2}
        assert not received[0].deleted

    def test_failed_batch_delivers_nothing(self, repository):
        received = []
        repository.trackers.on_change(received.append)

        with pytest.raises(RuntimeError):
            with repository.batch("doomed"):
                repository.trackers.add_tracker(tracker("Water"))
                raise RuntimeError("abort")

        assert received == []
        assert repository.trackers.fetch_trackers() == []

    def test_rejected_write_delivers_nothing(self, repository, now):
        water = repository.trackers.add_tracker(tracker("Water"))
        repository.records.add_record(water.id, now)

        received = []
        repository.records.on_change(received.append)
        with pytest.raises(DuplicateCompletion):
            repository.records.add_record(water.id, now)

        assert received == []

    def test_deleted_index_refers_to_old_result(self, repository):
        for name in ["A", "B", "C"]:
            repository.trackers.add_tracker(tracker(name))
        b = repository.trackers.fetch_trackers()[1]

        received = []
        repository.trackers.on_change(received.append)
        repository.trackers.delete_tracker(b.id)

        assert received[0].deleted == {1}
        assert not received[0].inserted

    def test_category_updated_when_tracker_added(self, repository):
        received = []
        repository.categories.on_change(received.append)

        repository.trackers.add_tracker(tracker("Water"))

        assert len(received) == 1
        assert received[0].updated == {0}
        assert not received[0].inserted

    def test_category_insert_position(self, repository):
        received = []
        repository.categories.on_change(received.append)

        repository.categories.add_category("Chores")

        # Sorted by title: Chores, Default
        assert received[0].inserted == {0}

    def test_cascade_is_observed_by_record_store(self, repository, now):
        water = repository.trackers.add_tracker(tracker("Water"))
        repository.records.add_record(water.id, now)

        received = []
        repository.records.on_change(received.append)
        repository.trackers.delete_tracker(water.id)

        assert received[0].deleted == {0}

    def test_unsubscribe(self, repository):
        received = []
        unsubscribe = repository.trackers.on_change(received.append)
        unsubscribe()

        repository.trackers.add_tracker(tracker("Water"))

        assert received == []

    def test_no_change_delivers_nothing(self, repository):
        received = []
        repository.trackers.on_change(received.append)

        repository.trackers.delete_tracker(tracker("Ghost").id)

        assert received == []
