"""Chronicle core package (progress archive)"""

from src.core.chronicle.analysis import (
    build_timeline,
    compute_insights,
    compute_streak_clusters,
    fill_absent_days,
)
from src.core.chronicle.classifier import classify_day
from src.core.chronicle.logbook import (
    build_daily_log,
    compact_world_events,
    compact_world_snapshot,
)
from src.core.chronicle.models import (
    CompactWorldEvent,
    DailyLog,
    DayRating,
    PatternInsight,
    StreakCluster,
    TimelineItem,
)

__all__ = [
    "DayRating",
    "DailyLog",
    "CompactWorldEvent",
    "PatternInsight",
    "StreakCluster",
    "TimelineItem",
    "classify_day",
    "build_daily_log",
    "compact_world_snapshot",
    "compact_world_events",
    "compute_insights",
    "compute_streak_clusters",
    "build_timeline",
    "fill_absent_days",
]
