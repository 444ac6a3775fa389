"""Tests for snapshot diffing and the results controller"""
from tracker.db import Diff, Move, ResultsController, compute_diff


def snapshot(*keys, prints=None):
    prints = prints or {}
    return [(key, prints.get(key, key)) for key in keys]


class TestComputeDiff:
    """Test diffing of ordered snapshots"""

    def test_no_change(self):
        diff = compute_diff(snapshot("a", "b"), snapshot("a", "b"))
        assert diff.is_empty

    def test_inserted_positions_index_new_result(self):
        diff = compute_diff(snapshot("b"), snapshot("a", "b", "c"))
        assert diff.inserted == {0, 2}
        assert not diff.deleted
        assert not diff.moved

    def test_deleted_positions_index_old_result(self):
        diff = compute_diff(snapshot("a", "b", "c"), snapshot("b"))
        assert diff.deleted == {0, 2}
        assert not diff.inserted

    def test_updated_when_fingerprint_changes(self):
        old = snapshot("a", "b", prints={"b": 1})
        new = snapshot("a", "b", prints={"b": 2})
        diff = compute_diff(old, new)
        assert diff.updated == {1}
        assert not diff.moved

    def test_moved_when_order_changes(self):
        diff = compute_diff(snapshot("a", "b", "c"), snapshot("b", "c", "a"))
        assert diff.moved == {Move(0, 2)}
        assert not diff.inserted
        assert not diff.deleted

    def test_mixed_changes(self):
        old = snapshot("a", "b", "c")
        new = snapshot("b", "c", "d", prints={"c": "changed"})
        diff = compute_diff(old, new)
        assert diff.deleted == {0}
        assert diff.inserted == {2}
        assert diff.updated == {2}


class TestResultsController:
    """Test the batch lifecycle"""

    def test_delivers_one_diff_per_batch(self):
        """Test several changes in one batch arrive as a single Diff"""
        data = ["a"]
        received = []
        controller = ResultsController("test", lambda: snapshot(*data))
        controller.subscribe(received.append)

        controller.will_change_content()
        data.extend(["b", "c", "d"])
        controller.did_change_content()

        assert len(received) == 1
        assert received[0].inserted == {1, 2, 3}

    def test_resets_after_delivery(self):
        """Test accumulation state is cleared"""
        data = ["a"]
        controller = ResultsController("test", lambda: snapshot(*data))
        controller.subscribe(lambda diff: None)

        controller.will_change_content()
        assert controller.is_accumulating
        data.append("b")
        controller.did_change_content()
        assert not controller.is_accumulating
        assert controller.did_change_content() is None

    def test_empty_batch_is_not_delivered(self):
        received = []
        controller = ResultsController("test", lambda: snapshot("a"))
        controller.subscribe(received.append)

        controller.will_change_content()
        controller.did_change_content()

        assert received == []

    def test_discard_drops_pending_batch(self):
        data = ["a"]
        received = []
        controller = ResultsController("test", lambda: snapshot(*data))
        controller.subscribe(received.append)

        controller.will_change_content()
        data.append("b")
        controller.discard_changes()
        controller.did_change_content()

        assert received == []

    def test_unsubscribe(self):
        data = ["a"]
        received = []
        controller = ResultsController("test", lambda: snapshot(*data))
        unsubscribe = controller.subscribe(received.append)
        unsubscribe()

        controller.will_change_content()
        data.append("b")
        controller.did_change_content()

        assert received == []
        assert not controller.has_subscribers

    def test_failing_handler_does_not_block_others(self):
        data = ["a"]
        received = []
        controller = ResultsController("test", lambda: snapshot(*data))

        def broken(diff):
            raise RuntimeError("boom")

        controller.subscribe(broken)
        controller.subscribe(received.append)

        controller.will_change_content()
        data.append("b")
        controller.did_change_content()

        assert len(received) == 1


class TestDiff:
    """Test Diff helpers"""

    def test_to_dict_is_sorted(self):
        diff = Diff(inserted={2, 0}, moved={Move(3, 1)})
        assert diff.to_dict() == {
            "inserted": [0, 2],
            "deleted": [],
            "updated": [],
            "moved": [(3, 1)],
        }
