"""Chronicle models (DB independent)"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Optional


class DayRating(str, Enum):
    RECOVERY = "recovery"  # completions after an absent/light day
    STRONG = "strong"  # 3+ completions, no XP lost
    STEADY = "steady"  # 1+ completions
    LIGHT = "light"  # no completions, world still moved
    NEUTRAL = "neutral"
    ABSENT = "absent"  # no record at all; assigned by callers only


@dataclass(frozen=True)
class CompactWorldEvent:
    event_type: str
    title: str
    district_id: Optional[str] = None


@dataclass
class DailyLog:
    """One row per player per local calendar day."""

    log_date: date

    # quest activity
    quests_completed: int = 0
    quests_pending: int = 0
    quest_titles: list[str] = field(default_factory=list)
    quest_cadences: list[str] = field(default_factory=list)
    stats_touched: list[str] = field(default_factory=list)

    # economy
    xp_earned: int = 0
    xp_lost: int = 0
    credits_earned: int = 0
    credits_spent: int = 0

    # player snapshot
    player_level: int = 1
    total_xp: int = 0
    streak_count: int = 0

    # world
    world_snapshot: Optional[dict[str, Any]] = None
    world_events: list[CompactWorldEvent] = field(default_factory=list)

    narrative_summary: Optional[str] = None
    day_rating: str = DayRating.NEUTRAL.value

    @property
    def is_active(self) -> bool:
        return self.day_rating != DayRating.ABSENT.value and self.quests_completed > 0


@dataclass(frozen=True)
class PatternInsight:
    insight_id: str
    label: str
    detail: str
    tone: str  # positive | neutral | gentle


@dataclass(frozen=True)
class StreakCluster:
    start_date: date
    end_date: date
    length: int
    has_recovery: bool  # starts with a recovery day


@dataclass(frozen=True)
class TimelineItem:
    item_id: str
    log_date: date
    category: str
    title: str
    district_id: Optional[str] = None
