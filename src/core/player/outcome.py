"""Player-side transactions.

XP, credits, stats and streak change together in a single value object
instead of as separate field writes, so a caller can never persist a player
whose level moved but whose credits did not.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import TYPE_CHECKING

from src.core.quest.enums import Cadence, QuestStatus

from .leveling import normalize
from .models import PlayerProgress

if TYPE_CHECKING:
    from src.core.quest.models import Quest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuestOutcome:
    """Result of completing or un-completing one quest"""

    player: PlayerProgress
    quest: "Quest"
    completing: bool
    xp_delta: int
    credit_delta: int
    stat_deltas: dict[str, int]
    levels_gained: int  # negative on level loss

    @property
    def leveled_up(self) -> bool:
        return self.levels_gained > 0


def apply_quest_outcome(
    player: PlayerProgress,
    quest: "Quest",
    completing: bool,
    today: date,
    yesterday: date,
) -> QuestOutcome:
    """Apply (or revert) a quest's rewards to the player.

    Daily completions drive the streak: +1 when the player was last active
    yesterday, unchanged when already active today, otherwise restart at 1.
    Reverting leaves the streak alone.
    """
    sign = 1 if completing else -1

    state = normalize(
        player.level,
        player.current_xp + quest.xp_reward * sign,
        player.xp_to_next_level,
    )
    credits = max(0, player.credits + quest.credit_reward * sign)

    stats = dict(player.stats)
    stat_deltas: dict[str, int] = {}
    for key, value in quest.stat_rewards.items():
        before = stats.get(key, 0)
        stats[key] = max(0, before + value * sign)
        stat_deltas[key] = stats[key] - before

    streak = player.streak_days
    last_active = player.last_active_date
    if completing and quest.cadence == Cadence.DAILY.value:
        if last_active == yesterday:
            streak += 1
        elif last_active != today:
            streak = 1
        last_active = today

    new_player = replace(
        player,
        level=state.level,
        current_xp=state.xp,
        xp_to_next_level=state.threshold,
        credits=credits,
        stats=stats,
        streak_days=streak,
        last_active_date=last_active,
    )
    new_quest = replace(
        quest,
        status=QuestStatus.COMPLETED.value if completing else QuestStatus.PENDING.value,
        last_completed_at=today if completing else quest.last_completed_at,
    )

    levels_gained = state.level - player.level
    if levels_gained:
        logger.info(
            "Player %s level %d -> %d", player.player_id, player.level, state.level
        )

    return QuestOutcome(
        player=new_player,
        quest=new_quest,
        completing=completing,
        xp_delta=quest.xp_reward * sign,
        credit_delta=credits - player.credits,
        stat_deltas=stat_deltas,
        levels_gained=levels_gained,
    )


def apply_reset_penalty(
    player: PlayerProgress, total_penalty: int, streak_broken: bool
) -> PlayerProgress:
    """Subtract a reset penalty, borrowing from lower levels if needed."""
    if total_penalty <= 0 and not streak_broken:
        return player

    state = normalize(
        player.level,
        player.current_xp - max(0, total_penalty),
        player.xp_to_next_level,
    )
    return replace(
        player,
        level=state.level,
        current_xp=state.xp,
        xp_to_next_level=state.threshold,
        streak_days=0 if streak_broken else player.streak_days,
    )
