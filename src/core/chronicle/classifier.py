"""Day rating classification"""

from typing import Optional, Sized

from src.core.chronicle.models import DayRating

STRONG_DAY_COMPLETIONS = 3

# a completion after one of these counts as a comeback
_LOW_RATINGS = frozenset({DayRating.ABSENT.value, DayRating.LIGHT.value})


def classify_day(
    completed_count: int,
    xp_lost: int,
    events_today: Sized,
    previous_rating: Optional[str] = None,
) -> DayRating:
    """Rate one day. First match wins.

    RECOVERY > STRONG > STEADY > LIGHT > NEUTRAL. Never returns ABSENT;
    a day without any record is marked absent by the caller.
    """
    if isinstance(previous_rating, DayRating):
        previous_rating = previous_rating.value

    if completed_count > 0 and previous_rating in _LOW_RATINGS:
        return DayRating.RECOVERY
    if completed_count >= STRONG_DAY_COMPLETIONS and xp_lost == 0:
        return DayRating.STRONG
    if completed_count >= 1:
        return DayRating.STEADY
    if len(events_today) > 0:
        return DayRating.LIGHT
    return DayRating.NEUTRAL
