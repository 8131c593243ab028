"""Quest enums"""

from enum import Enum


class Cadence(str, Enum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    EPIC = "EPIC"
    LEGENDARY = "LEGENDARY"


class Difficulty(str, Enum):
    EASY = "EASY"
    MEDIUM = "MEDIUM"
    HARD = "HARD"
    EXTREME = "EXTREME"


class QuestStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
