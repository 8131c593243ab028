"""Quest domain model (DB independent)"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from src.core.player.models import StatKey


@dataclass
class Quest:
    """User-defined task with a repetition cadence"""

    quest_id: str
    title: str
    description: str = ""

    cadence: str = "DAILY"  # Cadence value
    difficulty: str = "MEDIUM"  # Difficulty value
    status: str = "PENDING"  # QuestStatus value

    # rewards
    xp_reward: int = 0
    credit_reward: int = 0
    stat_rewards: dict[str, int] = field(default_factory=dict)
    # legacy single-stat link, used when stat_rewards is empty
    linked_stat: str = StatKey.MENTAL.value
    penalty_description: str = ""

    # local calendar dates
    created_at: Optional[date] = None
    last_completed_at: Optional[date] = None
    last_penalty_at: Optional[date] = None

    @property
    def is_completed(self) -> bool:
        return self.status == "COMPLETED"
