"""Tests for completion statistics"""
from datetime import date

import pytest

from tracker.db import Tracker
from tracker.models import Weekday
from tracker.services import StatisticsService


@pytest.fixture
def stats(repository, clock):
    return StatisticsService(repository.trackers, repository.records, clock=clock)


@pytest.fixture
def history(repository):
    """
    Tracker A every day, tracker B on Mondays only.

    A: Sat 10-10, Sat 10-17, Sun 10-18, Mon 10-19
    B: Mon 10-12, Mon 10-19
    """
    a = repository.trackers.add_tracker(Tracker.create("A", list(Weekday), "Default"))
    b = repository.trackers.add_tracker(Tracker.create("B", [Weekday.MONDAY], "Default"))

    for day in [date(2026, 10, 10), date(2026, 10, 17), date(2026, 10, 18), date(2026, 10, 19)]:
        repository.records.add_record(a.id, day)
    for day in [date(2026, 10, 12), date(2026, 10, 19)]:
        repository.records.add_record(b.id, day)
    return a, b


class TestSummary:
    """Test aggregate statistics"""

    def test_empty_store(self, stats):
        summary = stats.summary()
        assert summary.is_empty
        assert summary.to_dict() == {
            "best_period": 0,
            "perfect_days": 0,
            "completed_total": 0,
            "average_per_day": 0.0,
        }

    def test_completed_total(self, stats, history):
        assert stats.completed_total() == 6

    def test_best_period(self, stats, history):
        """Test the longest run is 10-17 through 10-19"""
        assert stats.best_period() == 3

    def test_perfect_days(self, stats, history):
        """Test 10-12 is not perfect because A was missed"""
        assert stats.perfect_days() == 4

    def test_average_per_day(self, stats, history):
        assert stats.average_per_day() == 1.2

    def test_summary(self, stats, history):
        summary = stats.summary()
        assert not summary.is_empty
        assert summary.best_period == 3
        assert summary.perfect_days == 4
        assert summary.completed_total == 6


class TestDailyCompletions:
    """Test the per-day series"""

    def test_includes_empty_days(self, stats, history):
        data = stats.daily_completions(10)

        assert len(data) == 10
        assert data["day"].iloc[0] == date(2026, 10, 10)
        assert data["day"].iloc[-1] == date(2026, 10, 19)
        assert data["completions"].sum() == 6
        assert data["completions"].iloc[-1] == 2
        assert data["completions"].iloc[1] == 0

    def test_invalid_days(self, stats):
        with pytest.raises(ValueError):
            stats.daily_completions(0)

    def test_chart_is_png(self, stats, history):
        buf = stats.generate_completion_chart(7)
        assert buf.read(4) == b"\x89PNG"
