"""Player domain model (DB independent)"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional


class StatKey(str, Enum):
    PHYSICAL = "physical"
    COGNITIVE = "cognitive"
    MENTAL = "mental"
    CAREER = "career"
    FINANCIAL = "financial"
    CREATIVE = "creative"


STAT_KEYS: tuple[str, ...] = tuple(s.value for s in StatKey)

BASE_XP_THRESHOLD = 1000
BASE_STAT_VALUE = 10


def _default_stats() -> dict[str, int]:
    return {key: BASE_STAT_VALUE for key in STAT_KEYS}


@dataclass
class PlayerProgress:
    """Player aggregate. Invariant: 0 <= current_xp < xp_to_next_level."""

    player_id: str
    name: str = "Operative"

    level: int = 1
    current_xp: int = 0
    xp_to_next_level: int = BASE_XP_THRESHOLD

    credits: int = 0
    streak_days: int = 0
    last_active_date: Optional[date] = None

    # StatKey value -> points
    stats: dict[str, int] = field(default_factory=_default_stats)

    def stat(self, key: str) -> int:
        return self.stats.get(key, 0)
