"""Reminder planning

Decides which reminders are due for one player at one local hour. Delivery
is someone else's job; planning reads pending quest titles and never writes
back into the core.
"""

import calendar
from dataclasses import dataclass
from datetime import datetime
from typing import Mapping, Sequence

from src.core.quest.enums import Cadence

QUEST_REMINDER_HOUR = 21
RECAP_HOUR = 20
FRIDAY = 4
SUNDAY = 6
EPIC_DAYS_BEFORE_MONTH_END = 5


@dataclass(frozen=True)
class ReminderPreferences:
    quest_reminders: bool = True
    weekly_recap: bool = True


@dataclass(frozen=True)
class Reminder:
    tag: str
    title: str
    body: str
    kind: str  # quest_reminder | weekly_recap


def _quest_reminder(
    tag: str, title: str, titles: Sequence[str], single: str, multiple: str
) -> Reminder:
    if len(titles) == 1:
        body = f'"{titles[0]}": {single}'
    else:
        body = f"{len(titles)} {multiple}"
    return Reminder(tag=tag, title=title, body=body, kind="quest_reminder")


def plan_reminders(
    local_time: datetime,
    pending_by_cadence: Mapping[str, Sequence[str]],
    preferences: ReminderPreferences = ReminderPreferences(),
) -> list[Reminder]:
    """Reminders due at `local_time` (matched on the hour).

    pending_by_cadence maps a Cadence value to the titles of its PENDING quests.
    """
    reminders = []
    hour = local_time.hour
    weekday = local_time.weekday()
    days_in_month = calendar.monthrange(local_time.year, local_time.month)[1]

    if preferences.quest_reminders and hour == QUEST_REMINDER_HOUR:
        daily = pending_by_cadence.get(Cadence.DAILY.value, ())
        if daily:
            reminders.append(
                _quest_reminder(
                    "daily-reminder",
                    "Daily Quests Remaining",
                    daily,
                    "still pending. 3 hours left!",
                    "daily quests still pending. 3 hours left!",
                )
            )

        weekly = pending_by_cadence.get(Cadence.WEEKLY.value, ())
        if weekday == FRIDAY and weekly:
            reminders.append(
                _quest_reminder(
                    "weekly-reminder",
                    "Weekly Quests Due Soon",
                    weekly,
                    "2 days left this week.",
                    "weekly quests still pending. 2 days left!",
                )
            )

        epic = pending_by_cadence.get(Cadence.EPIC.value, ())
        if days_in_month - local_time.day == EPIC_DAYS_BEFORE_MONTH_END and epic:
            reminders.append(
                _quest_reminder(
                    "monthly-reminder",
                    "Monthly Objectives Due Soon",
                    epic,
                    "5 days left this month.",
                    "epic quests still pending. 5 days left!",
                )
            )

    if preferences.weekly_recap and hour == RECAP_HOUR and weekday == SUNDAY:
        reminders.append(
            Reminder(
                tag="weekly-recap",
                title="Weekly Chronicle Ready",
                body="Your weekly recap is available. See how your world evolved this week.",
                kind="weekly_recap",
            )
        )

    return reminders
