"""Level calculator.

Normalizes a (level, xp, threshold) triple so that 0 <= xp < threshold.
Thresholds grow x1.25 (floored) per level gained and shrink /1.25 (ceiled)
per level lost, so a gain followed by an equal loss may not land exactly on
the starting threshold: floor and ceil do not cancel at every boundary.
"""

import logging
import math
from typing import NamedTuple

from .models import BASE_XP_THRESHOLD

logger = logging.getLogger(__name__)

THRESHOLD_GROWTH = 1.25

LEVEL_TITLES: dict[int, str] = {
    1: "Initiate",
    3: "Cadet",
    5: "Operative",
    10: "Specialist",
    15: "Vanguard",
    20: "Elite",
    30: "Architect",
    40: "Overseer",
    50: "Ascendant",
    100: "Deity",
}


class LevelState(NamedTuple):
    level: int
    xp: int
    threshold: int


def normalize(level: int, xp: int, threshold: int) -> LevelState:
    """Carry xp over level boundaries in either direction.

    Malformed input is clamped, not rejected: threshold <= 0 falls back to
    the base threshold and level < 1 is raised to 1. Level never drops
    below 1; a remaining deficit at level 1 clamps xp to 0.
    """
    if threshold <= 0:
        logger.warning("Non-positive threshold %s, using base", threshold)
        threshold = BASE_XP_THRESHOLD
    if level < 1:
        level = 1

    while xp >= threshold:
        xp -= threshold
        level += 1
        threshold = math.floor(threshold * THRESHOLD_GROWTH)

    while xp < 0 and level > 1:
        previous = math.ceil(threshold / THRESHOLD_GROWTH)
        xp += previous
        level -= 1
        threshold = previous

    if level == 1 and xp < 0:
        xp = 0

    return LevelState(level, xp, threshold)


def level_title(level: int) -> str:
    """Highest title whose level requirement is met."""
    eligible = [lv for lv in LEVEL_TITLES if level >= lv]
    return LEVEL_TITLES[max(eligible)] if eligible else LEVEL_TITLES[1]
