"""Calendar-boundary reset + penalty pass.

One batch pass over every quest against *today's* calendar window. There is
no per-day replay: a quest missed for N days costs one penalty per missed
cadence window, never N. Each quest's branch is independent of the others,
so quest order does not change the totals.

`last_penalty_at` makes the pass idempotent inside a window: running it a
second time the same day (or the same week/month for WEEKLY/EPIC) charges
nothing new.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Optional

from .enums import Cadence, QuestStatus
from .models import Quest
from .rewards import penalty_for

logger = logging.getLogger(__name__)

STREAK_BROKEN_MESSAGE = "STREAK BROKEN: Consistency failure."


@dataclass
class ResetResult:
    quests: list[Quest]
    total_penalty: int = 0
    streak_broken: bool = False
    messages: list[str] = field(default_factory=list)
    changed_quest_ids: list[str] = field(default_factory=list)


@dataclass
class _QuestVerdict:
    quest: Quest
    penalty: int = 0
    streak_broken: bool = False
    message: Optional[str] = None


def reset_all(
    quests: list[Quest],
    today: date,
    yesterday: date,
    start_of_week: date,
    start_of_month: date,
) -> ResetResult:
    """Re-evaluate every quest's lifecycle against the current window.

    Input quests are not mutated; changed quests are returned as copies.
    The caller subtracts total_penalty from the player's XP (re-normalizing)
    and zeroes the daily streak when streak_broken is set.
    """
    result = ResetResult(quests=[])

    for quest in quests:
        if quest.cadence == Cadence.DAILY.value:
            verdict = _reset_daily(quest, today, yesterday)
        elif quest.cadence == Cadence.WEEKLY.value:
            verdict = _reset_windowed(quest, today, start_of_week, "WEEKLY FAILURE")
        elif quest.cadence == Cadence.EPIC.value:
            verdict = _reset_windowed(quest, today, start_of_month, "EPIC FAILURE")
        else:
            # LEGENDARY: no window, never resets
            verdict = _QuestVerdict(quest)

        result.quests.append(verdict.quest)
        if verdict.quest is not quest:
            result.changed_quest_ids.append(quest.quest_id)
        result.total_penalty += verdict.penalty
        result.streak_broken = result.streak_broken or verdict.streak_broken
        if verdict.message:
            result.messages.append(verdict.message)

    if result.streak_broken:
        result.messages.insert(0, STREAK_BROKEN_MESSAGE)

    logger.debug(
        "Reset pass: %d quests, %d changed, penalty=%d, streak_broken=%s",
        len(quests),
        len(result.changed_quest_ids),
        result.total_penalty,
        result.streak_broken,
    )
    return result


def _reset_daily(quest: Quest, today: date, yesterday: date) -> _QuestVerdict:
    completed = quest.last_completed_at
    created = quest.created_at or today

    if completed == today:
        return _QuestVerdict(quest)

    # fresh slate: done yesterday, new day begins
    if completed == yesterday and quest.is_completed:
        return _QuestVerdict(replace(quest, status=QuestStatus.PENDING.value))

    if created < today and completed != yesterday:
        if _already_penalized(quest, today):
            return _QuestVerdict(_as_pending(quest))
        penalty = penalty_for(quest)
        logger.info("Daily quest missed: %s (-%d XP)", quest.quest_id, penalty)
        return _QuestVerdict(
            replace(quest, status=QuestStatus.PENDING.value, last_penalty_at=today),
            penalty=penalty,
            streak_broken=True,
            message=f"MISSED PROTOCOL: {quest.title} (-{penalty} XP)",
        )

    # catch-all: stale completion from an older day
    if quest.is_completed:
        return _QuestVerdict(replace(quest, status=QuestStatus.PENDING.value))
    return _QuestVerdict(quest)


def _reset_windowed(
    quest: Quest, today: date, window_start: date, label: str
) -> _QuestVerdict:
    """WEEKLY and EPIC share one rule set with different windows."""
    completed = quest.last_completed_at
    created = quest.created_at or today

    if quest.is_completed and completed is not None and completed >= window_start:
        return _QuestVerdict(quest)

    # completed in an earlier window -> new window, no penalty
    if quest.is_completed:
        return _QuestVerdict(replace(quest, status=QuestStatus.PENDING.value))

    # pending across a window boundary -> missed, status unchanged
    if created < window_start and not _already_penalized(quest, window_start):
        penalty = penalty_for(quest)
        logger.info("%s: %s (-%d XP)", label, quest.quest_id, penalty)
        return _QuestVerdict(
            replace(quest, last_penalty_at=today),
            penalty=penalty,
            message=f"{label}: {quest.title} (-{penalty} XP)",
        )
    return _QuestVerdict(quest)


def _already_penalized(quest: Quest, window_start: date) -> bool:
    return quest.last_penalty_at is not None and quest.last_penalty_at >= window_start


def _as_pending(quest: Quest) -> Quest:
    if quest.status == QuestStatus.PENDING.value:
        return quest
    return replace(quest, status=QuestStatus.PENDING.value)
