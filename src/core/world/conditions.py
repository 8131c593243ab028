"""Derived world conditions

Pure mappings from raw numbers (vitality, loyalty) to the bands used by the
engine, narrative and chronicle.
"""

from src.core.world.enums import CompanionMood, DistrictCondition

# (min vitality, condition), highest first
CONDITION_BANDS = (
    (80, DistrictCondition.PRISTINE),
    (60, DistrictCondition.THRIVING),
    (40, DistrictCondition.STABLE),
    (25, DistrictCondition.WORN),
    (10, DistrictCondition.DECAYING),
)

COMPANION_DEPART_VITALITY = 10
ELATED_MIN_LOYALTY = 50


def district_condition(vitality: int) -> DistrictCondition:
    for floor, condition in CONDITION_BANDS:
        if vitality >= floor:
            return condition
    return DistrictCondition.RUINED


def companion_mood(vitality: int, loyalty: int) -> CompanionMood:
    if vitality < COMPANION_DEPART_VITALITY:
        return CompanionMood.ABSENT
    if vitality >= 80 and loyalty >= ELATED_MIN_LOYALTY:
        return CompanionMood.ELATED
    if vitality >= 60:
        return CompanionMood.CONTENT
    if vitality >= 40:
        return CompanionMood.NEUTRAL
    if vitality >= 25:
        return CompanionMood.CONCERNED
    return CompanionMood.DISTRESSED
