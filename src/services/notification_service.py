"""Notification Service - toast notices and reminder planning.

Strictly downstream: listens on the EventBus and reads quest lists handed to
it, never writes into the core.
"""

from collections import defaultdict, deque
from dataclasses import dataclass
from datetime import datetime
from typing import Deque, Dict, List, Optional, Sequence

from src.core.event_bus import EventBus, GameEvent
from src.core.event_types import EventTypes
from src.core.logging import get_logger
from src.core.quest.enums import QuestStatus
from src.core.quest.models import Quest
from src.core.reminders import Reminder, ReminderPreferences, plan_reminders

logger = get_logger(__name__)

MAX_NOTICES = 20


@dataclass(frozen=True)
class Notice:
    """Transient toast shown to the player"""

    kind: str  # world | penalty | streak | level
    title: str
    body: str = ""


class NotificationService:
    def __init__(self, event_bus: EventBus) -> None:
        self._bus = event_bus
        self._notices: Dict[str, Deque[Notice]] = defaultdict(
            lambda: deque(maxlen=MAX_NOTICES)
        )
        self._register_event_handlers()

    def _register_event_handlers(self) -> None:
        """EventBus subscriptions"""
        self._bus.subscribe(EventTypes.WORLD_EVENT, self._on_world_event)
        self._bus.subscribe(EventTypes.PENALTY_APPLIED, self._on_penalty_applied)
        self._bus.subscribe(EventTypes.STREAK_BROKEN, self._on_streak_broken)
        self._bus.subscribe(EventTypes.LEVEL_UP, self._on_level_changed)
        self._bus.subscribe(EventTypes.LEVEL_DOWN, self._on_level_changed)

    # === notices ===

    def _push(self, player_id: str, notice: Notice) -> None:
        self._notices[player_id].append(notice)
        logger.debug("Notice for %s: %s", player_id, notice.title)

    def drain(self, player_id: str) -> List[Notice]:
        """Pending notices, oldest first. Clears the queue."""
        queue = self._notices.pop(player_id, None)
        return list(queue) if queue else []

    def _on_world_event(self, event: GameEvent) -> None:
        self._push(
            event.data.get("player_id", ""),
            Notice(kind="world", title=event.data.get("title", "")),
        )

    def _on_penalty_applied(self, event: GameEvent) -> None:
        penalty = event.data.get("penalty", 0)
        messages = event.data.get("messages", [])
        self._push(
            event.data.get("player_id", ""),
            Notice(kind="penalty", title=f"-{penalty} XP", body="\n".join(messages)),
        )

    def _on_streak_broken(self, event: GameEvent) -> None:
        self._push(
            event.data.get("player_id", ""),
            Notice(kind="streak", title="Streak broken", body="Consistency failure."),
        )

    def _on_level_changed(self, event: GameEvent) -> None:
        level = event.data.get("level", 0)
        if event.event_type == EventTypes.LEVEL_UP:
            title = f"Level up! Now level {level}"
        else:
            title = f"Level lost. Now level {level}"
        self._push(event.data.get("player_id", ""), Notice(kind="level", title=title))

    # === reminders ===

    def plan_for(
        self,
        quests: Sequence[Quest],
        local_time: datetime,
        preferences: Optional[ReminderPreferences] = None,
    ) -> List[Reminder]:
        """Reminders due at this local hour for the given quest list."""
        pending: Dict[str, List[str]] = defaultdict(list)
        for quest in quests:
            if quest.status == QuestStatus.PENDING.value:
                pending[quest.cadence].append(quest.title)

        return plan_reminders(local_time, pending, preferences or ReminderPreferences())
