"""Player core package

Quest transactions live in src.core.player.outcome and are imported from
there directly (it depends on the quest package).
"""

from src.core.player.leveling import LevelState, level_title, normalize
from src.core.player.models import (
    BASE_XP_THRESHOLD,
    STAT_KEYS,
    PlayerProgress,
    StatKey,
)

__all__ = [
    "PlayerProgress",
    "StatKey",
    "STAT_KEYS",
    "BASE_XP_THRESHOLD",
    "LevelState",
    "normalize",
    "level_title",
]
