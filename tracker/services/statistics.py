"""
Statistics service for completion history.

Provides functionality for:
- Best period (longest streak of days with at least one completion)
- Perfect days (every tracker scheduled that day was completed)
- Completed total and average completions per active day
- A daily completions chart
"""

import io
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, Optional

import matplotlib
import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns

from tracker.config import (
    CHART_DPI,
    CHART_FORMAT,
    CHART_HEIGHT,
    CHART_WIDTH,
    DEFAULT_CHART_DAYS,
)
from tracker.db import RecordStore, TrackerStore
from tracker.models import Weekday, calendar_day

# Charts are rendered to buffers, never to a window
matplotlib.use("Agg")

logger = logging.getLogger(__name__)


@dataclass
class StatisticsSummary:
    """Aggregate completion statistics."""

    best_period: int
    perfect_days: int
    completed_total: int
    average_per_day: float

    @property
    def is_empty(self) -> bool:
        return self.completed_total == 0

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "best_period": self.best_period,
            "perfect_days": self.perfect_days,
            "completed_total": self.completed_total,
            "average_per_day": self.average_per_day,
        }


class StatisticsService:
    """Service for computing completion statistics."""

    def __init__(
        self,
        tracker_store: TrackerStore,
        record_store: RecordStore,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize the statistics service.

        Args:
            tracker_store: Store providing trackers and their schedules
            record_store: Store providing completion records
            clock: Source of "now", used to anchor charts
        """
        self.tracker_store = tracker_store
        self.record_store = record_store
        self.clock = clock

        try:
            sns.set_theme(style="darkgrid")
        except Exception as e:
            logger.warning(f"Failed to set seaborn theme: {e}")

    def _completions_frame(self) -> pd.DataFrame:
        """One row per completion: tracker_id, day."""
        records = self.record_store.fetch_records()
        return pd.DataFrame(
            {
                "tracker_id": [record.tracker_id for record in records],
                "day": pd.to_datetime([record.day for record in records]),
            },
            columns=["tracker_id", "day"],
        )

    def completed_total(self, frame: Optional[pd.DataFrame] = None) -> int:
        """Number of completions recorded."""
        frame = self._completions_frame() if frame is None else frame
        return int(len(frame))

    def best_period(self, frame: Optional[pd.DataFrame] = None) -> int:
        """Length in days of the longest run of days with a completion."""
        frame = self._completions_frame() if frame is None else frame
        if frame.empty:
            return 0

        days = frame["day"].drop_duplicates().sort_values().reset_index(drop=True)
        # A new run starts wherever the gap to the previous day is not one day
        run_ids = days.diff().dt.days.ne(1).cumsum()
        return int(days.groupby(run_ids).size().max())

    def perfect_days(self, frame: Optional[pd.DataFrame] = None) -> int:
        """
        Number of days on which every scheduled tracker was completed.

        Uses the current trackers' schedules; days with nothing scheduled are
        never perfect.
        """
        frame = self._completions_frame() if frame is None else frame
        if frame.empty:
            return 0

        trackers = self.tracker_store.fetch_trackers()
        completed_by_day = frame.groupby("day")["tracker_id"].agg(lambda ids: set(ids))

        perfect = 0
        for day, completed in completed_by_day.items():
            weekday = Weekday.from_date(day.date())
            scheduled = {t.id for t in trackers if weekday in t.schedule}
            if scheduled and scheduled <= completed:
                perfect += 1
        return perfect

    def average_per_day(self, frame: Optional[pd.DataFrame] = None) -> float:
        """Mean completions per day that has at least one completion."""
        frame = self._completions_frame() if frame is None else frame
        if frame.empty:
            return 0.0
        return round(float(frame.groupby("day").size().mean()), 2)

    def summary(self) -> StatisticsSummary:
        """Compute all statistics from a single read of the records."""
        frame = self._completions_frame()
        summary = StatisticsSummary(
            best_period=self.best_period(frame),
            perfect_days=self.perfect_days(frame),
            completed_total=self.completed_total(frame),
            average_per_day=self.average_per_day(frame),
        )
        logger.debug(f"Statistics summary: {summary.to_dict()}")
        return summary

    def daily_completions(self, days: int = DEFAULT_CHART_DAYS) -> pd.DataFrame:
        """
        Completions per day for the last `days` days, including empty days.

        Returns:
            DataFrame with columns day (date) and completions (int)
        """
        if days < 1:
            raise ValueError(f"days must be >= 1, got {days}")

        end: date = calendar_day(self.clock())
        start = end - timedelta(days=days - 1)
        index = pd.date_range(start=start, end=end, freq="D")

        frame = self._completions_frame()
        counts = frame.groupby("day").size().reindex(index, fill_value=0)
        return pd.DataFrame(
            {"day": index.date, "completions": counts.astype(int).to_numpy()}
        )

    def generate_completion_chart(self, days: int = DEFAULT_CHART_DAYS) -> io.BytesIO:
        """
        Generate a bar chart of completions per day.

        Returns:
            BytesIO buffer containing the PNG image
        """
        data = self.daily_completions(days)
        data["label"] = [d.strftime("%m-%d") for d in data["day"]]

        fig = None
        try:
            fig, ax = plt.subplots(figsize=(CHART_WIDTH, CHART_HEIGHT))
            sns.barplot(data=data, x="label", y="completions", color="#4472C4", ax=ax)
            ax.set_title(f"Completions over the last {days} days")
            ax.set_xlabel("Day")
            ax.set_ylabel("Completions")
            ax.tick_params(axis="x", rotation=45)
            plt.tight_layout()

            buf = io.BytesIO()
            fig.savefig(buf, format=CHART_FORMAT, dpi=CHART_DPI, bbox_inches="tight")
            buf.seek(0)
            logger.debug(f"Generated completion chart for {days} days")
            return buf
        except Exception as e:
            logger.error(f"Failed to generate completion chart: {e}", exc_info=True)
            raise
        finally:
            if fig is not None:
                plt.close(fig)
