"""Quest economics: penalty rates, fallback reward table, affected stats."""

import logging
import math

from src.core.player.models import STAT_KEYS

from .enums import Cadence, Difficulty
from .models import Quest

logger = logging.getLogger(__name__)

# === Reset penalties (fraction of xp_reward, ceil per quest) ===
PENALTY_RATES: dict[str, float] = {
    Cadence.DAILY.value: 0.1,
    Cadence.WEEKLY.value: 0.2,
    Cadence.EPIC.value: 0.3,
}
MAX_PENALTY_RATE = max(PENALTY_RATES.values())

# === Fallback economics when the narrative service is unavailable ===
CADENCE_BASE_XP: dict[str, int] = {
    Cadence.DAILY.value: 100,
    Cadence.WEEKLY.value: 250,
    Cadence.EPIC.value: 500,
    Cadence.LEGENDARY.value: 1000,
}

DIFFICULTY_XP_SCALE: dict[str, float] = {
    Difficulty.EASY.value: 0.6,
    Difficulty.MEDIUM.value: 1.0,
    Difficulty.HARD.value: 1.5,
    Difficulty.EXTREME.value: 2.0,
}

CREDIT_RATIO = 0.3
FALLBACK_STAT_REWARDS: dict[str, int] = {"mental": 1}

DEADLINES: dict[str, str] = {
    Cadence.DAILY.value: "23:59",
    Cadence.WEEKLY.value: "Sunday 23:59",
    Cadence.EPIC.value: "End of Month",
    Cadence.LEGENDARY.value: "Open",
}


def penalty_for(quest: Quest) -> int:
    """Penalty one missed window costs. 0 for cadences that never fail."""
    rate = PENALTY_RATES.get(quest.cadence)
    if rate is None:
        return 0
    return math.ceil(quest.xp_reward * rate)


def fallback_rewards(cadence: str, difficulty: str) -> dict:
    """Deterministic reward table.

    Returns: {"xp_reward", "credit_reward", "stat_rewards", "penalty_description"}
    """
    base = CADENCE_BASE_XP.get(cadence, CADENCE_BASE_XP[Cadence.DAILY.value])
    xp = round(base * DIFFICULTY_XP_SCALE.get(difficulty, 1.0))
    rate = PENALTY_RATES.get(cadence)
    if rate is None:
        penalty_text = "No XP penalty. Legendary quests never expire."
    else:
        penalty_text = f"No entertainment apps for 24h (-{math.ceil(xp * rate)} XP)"

    return {
        "xp_reward": xp,
        "credit_reward": round(xp * CREDIT_RATIO),
        "stat_rewards": dict(FALLBACK_STAT_REWARDS),
        "penalty_description": penalty_text,
    }


def resolve_affected_stats(quest: Quest) -> list[str]:
    """Stats a quest touches.

    Two explicit paths:
    - reward map present -> its keys (unknown keys dropped)
    - reward map empty   -> the single legacy linked_stat
    """
    if quest.stat_rewards:
        return stats_from_reward_map(quest.stat_rewards)
    return stats_from_linked_stat(quest.linked_stat)


def stats_from_reward_map(stat_rewards: dict[str, int]) -> list[str]:
    stats = [key for key in stat_rewards if key in STAT_KEYS]
    dropped = set(stat_rewards) - set(stats)
    if dropped:
        logger.warning("Unknown stat keys ignored: %s", sorted(dropped))
    return stats


def stats_from_linked_stat(linked_stat: str | None) -> list[str]:
    if linked_stat and linked_stat in STAT_KEYS:
        return [linked_stat]
    return []
