"""Quest core package"""

from src.core.quest.enums import Cadence, Difficulty, QuestStatus
from src.core.quest.models import Quest
from src.core.quest.reset_logic import ResetResult, reset_all
from src.core.quest.rewards import (
    MAX_PENALTY_RATE,
    PENALTY_RATES,
    fallback_rewards,
    penalty_for,
    resolve_affected_stats,
)

__all__ = [
    # enums
    "Cadence",
    "Difficulty",
    "QuestStatus",
    # models
    "Quest",
    # reset
    "ResetResult",
    "reset_all",
    # rewards
    "PENALTY_RATES",
    "MAX_PENALTY_RATE",
    "penalty_for",
    "fallback_rewards",
    "resolve_affected_stats",
]
