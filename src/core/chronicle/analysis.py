"""Pattern analysis over daily logs"""

from collections import Counter
from datetime import date, timedelta
from typing import Sequence

from src.core.chronicle.models import (
    DailyLog,
    DayRating,
    PatternInsight,
    StreakCluster,
    TimelineItem,
)
from src.core.world.definitions import district_for_stat
from src.core.world.engine import round_half_up

MIN_LOGS_FOR_INSIGHTS = 3

EVENT_CATEGORIES = {
    "UNLOCK": "district",
    "BUILD": "structure",
    "COMPANION": "companion",
    "RECOVERY": "recovery",
    "MILESTONE": "milestone",
    "DISCOVERY": "expedition",
    "DECAY": "decay",
}


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'s' if count != 1 else ''}"


def fill_absent_days(logs: Sequence[DailyLog], start: date, end: date) -> list[DailyLog]:
    """Chronological logs for [start, end], with ABSENT placeholders for gaps."""
    by_date = {log.log_date: log for log in logs}
    filled = []
    day = start
    while day <= end:
        filled.append(by_date.get(day) or DailyLog(log_date=day, day_rating=DayRating.ABSENT.value))
        day += timedelta(days=1)
    return filled


def compute_insights(logs: Sequence[DailyLog]) -> list[PatternInsight]:
    if len(logs) < MIN_LOGS_FOR_INSIGHTS:
        return []

    insights = []

    # most_common keeps first-seen order on ties
    stat_counts = Counter(stat for log in logs for stat in log.stats_touched)
    ranked = stat_counts.most_common()
    if ranked:
        top_stat, count = ranked[0]
        district = district_for_stat(top_stat)
        if district:
            insights.append(
                PatternInsight(
                    "strongest-district",
                    f"Strongest District: {district.name}",
                    f"Most consistent engagement ({count} active days)",
                    "positive",
                )
            )
    if len(ranked) > 1:
        weak_stat, _ = ranked[-1]
        district = district_for_stat(weak_stat)
        if district:
            insights.append(
                PatternInsight(
                    "growth-area",
                    f"Growth Area: {district.name}",
                    "Least consistent engagement. Not a judgment, just a signal",
                    "gentle",
                )
            )

    active = [log for log in logs if log.is_active]
    if active:
        avg_xp = round_half_up(sum(log.xp_earned for log in logs) / len(active))
        insights.append(
            PatternInsight(
                "avg-xp",
                f"Average Pace: +{avg_xp} XP/day",
                f"Across {len(active)} active days this period",
                "neutral",
            )
        )

    recoveries = sum(log.day_rating == DayRating.RECOVERY.value for log in logs)
    if recoveries:
        insights.append(
            PatternInsight(
                "recovery-strength",
                f"Recovery Strength: {_plural(recoveries, 'comeback')}",
                "You always come back. That matters.",
                "positive",
            )
        )

    present = sum(log.day_rating != DayRating.ABSENT.value for log in logs)
    insights.append(
        PatternInsight(
            "active-days",
            f"{present} active days",
            f"Out of {len(logs)} days this period",
            "neutral",
        )
    )

    strong = sum(log.day_rating == DayRating.STRONG.value for log in logs)
    if strong:
        insights.append(
            PatternInsight(
                "strong-days",
                _plural(strong, "strong day"),
                "3+ quests completed with no penalties",
                "positive",
            )
        )

    return insights


def compute_streak_clusters(logs: Sequence[DailyLog]) -> list[StreakCluster]:
    """Runs of consecutive active log rows, oldest first."""
    clusters = []
    start = end = None
    length = 0
    has_recovery = False

    for log in sorted(logs, key=lambda l: l.log_date):
        if log.is_active:
            if start is None:
                start = log.log_date
                length = 0
                has_recovery = log.day_rating == DayRating.RECOVERY.value
            end = log.log_date
            length += 1
        elif start is not None:
            clusters.append(StreakCluster(start, end, length, has_recovery))
            start = None

    if start is not None:
        clusters.append(StreakCluster(start, end, length, has_recovery))
    return clusters


def build_timeline(logs: Sequence[DailyLog]) -> list[TimelineItem]:
    """World events from all logs, newest day first."""
    items = []
    for log in logs:
        for event in log.world_events:
            items.append(
                TimelineItem(
                    item_id=f"{log.log_date.isoformat()}-{event.event_type}-{event.title}",
                    log_date=log.log_date,
                    category=EVENT_CATEGORIES.get(event.event_type, "milestone"),
                    title=event.title,
                    district_id=event.district_id,
                )
            )
    items.sort(key=lambda item: item.log_date, reverse=True)
    return items
