from .statistics import StatisticsService, StatisticsSummary
from .visibility import (
    TrackerView,
    VisibilityService,
    VisibleCategory,
    build_visible_categories,
)

__all__ = [
    "StatisticsService",
    "StatisticsSummary",
    "TrackerView",
    "VisibilityService",
    "VisibleCategory",
    "build_visible_categories",
]
