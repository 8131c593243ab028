"""Daily log assembly and compact world snapshots"""

from datetime import date
from typing import Any, Iterable, Optional, Sequence

from src.core.chronicle.classifier import classify_day
from src.core.chronicle.models import CompactWorldEvent, DailyLog
from src.core.player.models import PlayerProgress
from src.core.quest.enums import QuestStatus
from src.core.quest.models import Quest
from src.core.quest.rewards import resolve_affected_stats
from src.core.world.conditions import district_condition
from src.core.world.models import WorldEvent, WorldState
from src.core.world.summary import world_title


def compact_world_snapshot(state: WorldState) -> dict[str, Any]:
    """Small JSON-able picture of the world for one log row."""
    return {
        "era": state.era,
        "total_structures_built": state.total_structures_built,
        "world_title": world_title(state),
        "districts": [
            {
                "district_id": d.district_id,
                "vitality": d.vitality,
                "condition": district_condition(d.vitality).value,
                "structures_built": sum(s.is_built for s in d.structures),
            }
            for d in state.unlocked_districts()
        ],
        "companion_moods": {c.companion_id: c.mood for c in state.companions},
    }


def compact_world_events(events: Iterable[WorldEvent]) -> list[CompactWorldEvent]:
    return [
        CompactWorldEvent(
            event_type=e.event_type, title=e.title, district_id=e.district_id
        )
        for e in events
    ]


def build_daily_log(
    log_date: date,
    quests: Sequence[Quest],
    player: PlayerProgress,
    world_state: Optional[WorldState],
    events_today: Sequence[CompactWorldEvent],
    previous_rating: Optional[str] = None,
    xp_lost: int = 0,
    credits_spent: int = 0,
    narrative_summary: Optional[str] = None,
) -> DailyLog:
    """Summarize one day from current quest, player and world state.

    A quest counts toward the day when it was completed on `log_date`.
    """
    completed = [
        q
        for q in quests
        if q.status == QuestStatus.COMPLETED.value and q.last_completed_at == log_date
    ]
    pending = [q for q in quests if q.status == QuestStatus.PENDING.value]

    stats_touched: list[str] = []
    for quest in completed:
        for stat in resolve_affected_stats(quest):
            if stat not in stats_touched:
                stats_touched.append(stat)

    rating = classify_day(len(completed), xp_lost, events_today, previous_rating)

    return DailyLog(
        log_date=log_date,
        quests_completed=len(completed),
        quests_pending=len(pending),
        quest_titles=[q.title for q in completed],
        quest_cadences=[q.cadence for q in completed],
        stats_touched=stats_touched,
        xp_earned=sum(q.xp_reward for q in completed),
        xp_lost=xp_lost,
        credits_earned=sum(q.credit_reward for q in completed),
        credits_spent=credits_spent,
        player_level=player.level,
        total_xp=player.current_xp,
        streak_count=player.streak_days,
        world_snapshot=compact_world_snapshot(world_state) if world_state else None,
        world_events=list(events_today),
        narrative_summary=narrative_summary,
        day_rating=rating.value,
    )
