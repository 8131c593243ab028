"""World enums"""

from enum import Enum


class DistrictCondition(str, Enum):
    PRISTINE = "PRISTINE"  # 80-100
    THRIVING = "THRIVING"  # 60-79
    STABLE = "STABLE"  # 40-59
    WORN = "WORN"  # 25-39
    DECAYING = "DECAYING"  # 10-24
    RUINED = "RUINED"  # 0-9


class CompanionMood(str, Enum):
    ELATED = "ELATED"
    CONTENT = "CONTENT"
    NEUTRAL = "NEUTRAL"
    CONCERNED = "CONCERNED"
    DISTRESSED = "DISTRESSED"
    ABSENT = "ABSENT"


class WorldEventType(str, Enum):
    UNLOCK = "UNLOCK"
    DECAY = "DECAY"
    RECOVERY = "RECOVERY"
    DISCOVERY = "DISCOVERY"
    COMPANION = "COMPANION"
    MILESTONE = "MILESTONE"
    BUILD = "BUILD"


class Rarity(str, Enum):
    COMMON = "COMMON"
    UNCOMMON = "UNCOMMON"
    RARE = "RARE"
    LEGENDARY = "LEGENDARY"


# bottom two condition bands; leaving them counts as a recovery
CRITICAL_CONDITIONS = frozenset({DistrictCondition.DECAYING, DistrictCondition.RUINED})

# downward transitions into these bands emit DECAY events
DECAY_CONDITIONS = frozenset(
    {DistrictCondition.WORN, DistrictCondition.DECAYING, DistrictCondition.RUINED}
)
