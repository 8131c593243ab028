"""Event name constants published on the EventBus."""


class EventTypes:
    """Event name strings"""

    # === Session / reset ===
    SESSION_STARTED = "session_started"
    QUESTS_RESET = "quests_reset"
    PENALTY_APPLIED = "penalty_applied"
    STREAK_BROKEN = "streak_broken"

    # === Quest lifecycle ===
    QUEST_CREATED = "quest_created"
    QUEST_COMPLETED = "quest_completed"
    QUEST_UNCOMPLETED = "quest_uncompleted"

    # === Player ===
    LEVEL_UP = "level_up"
    LEVEL_DOWN = "level_down"

    # === World (one per emitted WorldEvent) ===
    WORLD_EVENT = "world_event"

    # === Chronicle ===
    DAILY_LOG_WRITTEN = "daily_log_written"
