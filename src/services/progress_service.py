"""Progress Service - the session pipeline around the pure core.

Every operation follows the same order: read from the repository, run the
core transitions in memory, write back, publish events. Repository writes
are best-effort: a failed write is logged and the computed snapshot is still
returned, since the next session start recomputes from the calendar anyway.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from typing import Callable, Optional, Union

from src.config import settings
from src.core.calendar import CalendarWindow
from src.core.chronicle import (
    DailyLog,
    DayRating,
    build_daily_log,
    compact_world_events,
)
from src.core.event_bus import EventBus, GameEvent
from src.core.event_types import EventTypes
from src.core.logging import get_logger
from src.core.player.models import PlayerProgress
from src.core.player.outcome import apply_quest_outcome, apply_reset_penalty
from src.core.quest.enums import QuestStatus
from src.core.quest.models import Quest
from src.core.quest.reset_logic import reset_all
from src.core.quest.rewards import resolve_affected_stats
from src.core.world import engine as world_engine
from src.core.world.models import BuildResult, EngineError, WorldEvent, WorldState
from src.repositories.base import ProgressRepository, RepositoryError
from src.services.narrative_service import NarrativeService

logger = get_logger(__name__)

SOURCE = "progress_service"

# Decay catch-up after a long absence stops here
MAX_DECAY_CATCHUP_DAYS = 14


class PlayerNotFoundError(LookupError):
    """No player (or no world) for the given id."""


class QuestNotFoundError(LookupError):
    pass


# === results ===


@dataclass
class SessionReport:
    player: PlayerProgress
    quests: list[Quest]
    world_state: WorldState
    penalty: int = 0
    streak_broken: bool = False
    messages: list[str] = field(default_factory=list)
    reset_quest_ids: list[str] = field(default_factory=list)
    decay_days: int = 0
    world_events: list[WorldEvent] = field(default_factory=list)
    daily_log: Optional[DailyLog] = None


@dataclass
class ToggleReport:
    player: PlayerProgress
    quest: Quest
    world_state: WorldState
    completed: bool
    xp_delta: int
    credit_delta: int
    levels_gained: int
    world_events: list[WorldEvent] = field(default_factory=list)


@dataclass
class WorldActionReport:
    player: PlayerProgress
    world_state: WorldState
    credits_cost: int
    world_events: list[WorldEvent] = field(default_factory=list)


@dataclass
class PlayerSnapshot:
    player: PlayerProgress
    quests: list[Quest]
    world_state: WorldState


class ProgressService:
    """Single-writer orchestration for one player's quests, XP and Nexus."""

    def __init__(
        self,
        repository: ProgressRepository,
        event_bus: EventBus,
        narrative: Optional[NarrativeService] = None,
        timezone_name: Optional[str] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._repo = repository
        self._bus = event_bus
        self._narrative = narrative
        self._timezone = timezone_name or settings.SYNC_TIMEZONE
        self._clock = clock

    # === helpers ===

    def _window(self, today: Optional[date]) -> CalendarWindow:
        if today is not None:
            return CalendarWindow.for_date(today)
        return CalendarWindow.now(self._timezone)

    def _now(self) -> Optional[datetime]:
        return self._clock() if self._clock else None

    def _persist(self, what: str, write: Callable[[], None]) -> bool:
        try:
            write()
            return True
        except RepositoryError as e:
            logger.warning("Persistence write failed (%s): %s", what, e)
            return False

    def _require_player(self, player_id: str) -> PlayerProgress:
        player = self._repo.load_player(player_id)
        if player is None:
            raise PlayerNotFoundError(f"Player not found: {player_id}")
        return player

    def _require_world(self, player_id: str) -> WorldState:
        state = self._repo.load_world_state(player_id)
        if state is None:
            raise PlayerNotFoundError(f"World not found for player: {player_id}")
        return state

    def _emit(self, event_type: str, data: dict, key: str = "") -> None:
        self._bus.emit(GameEvent(event_type=event_type, data=data, source=SOURCE, key=key))

    def _emit_world_events(self, player_id: str, events: list[WorldEvent]) -> None:
        for event in events:
            self._emit(
                EventTypes.WORLD_EVENT,
                {
                    "player_id": player_id,
                    "event_id": event.event_id,
                    "event_type": event.event_type,
                    "title": event.title,
                    "district_id": event.district_id,
                },
                key=event.event_id,
            )

    def _emit_level_change(self, player: PlayerProgress, levels: int) -> None:
        if levels == 0:
            return
        self._emit(
            EventTypes.LEVEL_UP if levels > 0 else EventTypes.LEVEL_DOWN,
            {"player_id": player.player_id, "level": player.level, "delta": levels},
        )

    # === player lifecycle ===

    def register_player(
        self, player_id: str, name: str = "Operative", nexus_name: Optional[str] = None
    ) -> PlayerSnapshot:
        """Create a player with a fresh Nexus. Existing players are returned as-is."""
        existing = self._repo.load_player(player_id)
        if existing is not None:
            world = self._repo.load_world_state(player_id)
            if world is not None:
                return PlayerSnapshot(existing, self._repo.load_quests(player_id), world)

        player = existing or PlayerProgress(player_id=player_id, name=name)
        world = world_engine.create_initial_world_state(
            nexus_name or settings.NEXUS_DEFAULT_NAME, now=self._now()
        )
        self._persist("save_player", lambda: self._repo.save_player(player))
        self._persist("save_world_state", lambda: self._repo.save_world_state(player_id, world))
        logger.info("Registered player %s (%s)", player_id, world.nexus_name)
        return PlayerSnapshot(player, [], world)

    def get_state(self, player_id: str) -> PlayerSnapshot:
        return PlayerSnapshot(
            player=self._require_player(player_id),
            quests=self._repo.load_quests(player_id),
            world_state=self._require_world(player_id),
        )

    # === session start ===

    def start_session(self, player_id: str, today: Optional[date] = None) -> SessionReport:
        """Reset pass, penalty, world decay catch-up, then today's log."""
        self._bus.reset_chain()
        window = self._window(today)
        now = self._now()

        player = self._require_player(player_id)
        world = self._require_world(player_id)
        quests = self._repo.load_quests(player_id)

        reset = reset_all(
            quests,
            window.today,
            window.yesterday,
            window.start_of_week,
            window.start_of_month,
        )
        by_id = {q.quest_id: q for q in reset.quests}
        for quest_id in reset.changed_quest_ids:
            quest = by_id[quest_id]
            self._persist(
                f"save_quest({quest_id})",
                lambda q=quest: self._repo.save_quest(player_id, q),
            )

        before_level = player.level
        player = apply_reset_penalty(player, reset.total_penalty, reset.streak_broken)
        if reset.total_penalty or reset.streak_broken:
            self._persist("save_player", lambda: self._repo.save_player(player))

        world, decay_events, decay_days = self._catch_up_decay(
            world, quests, window.today, now
        )
        self._persist("save_world_state", lambda: self._repo.save_world_state(player_id, world))

        self._summarize_yesterday(player_id, window.yesterday)
        log = self._write_daily_log(
            player_id,
            window.today,
            player,
            reset.quests,
            world,
            decay_events,
            xp_lost=reset.total_penalty,
        )

        logger.info(
            "Session start %s: %d reset, penalty=%d, streak_broken=%s, decay_days=%d",
            player_id,
            len(reset.changed_quest_ids),
            reset.total_penalty,
            reset.streak_broken,
            decay_days,
        )

        self._emit(
            EventTypes.SESSION_STARTED,
            {"player_id": player_id, "date": window.today.isoformat()},
        )
        if reset.changed_quest_ids:
            self._emit(
                EventTypes.QUESTS_RESET,
                {"player_id": player_id, "quest_ids": list(reset.changed_quest_ids)},
            )
        if reset.total_penalty > 0:
            self._emit(
                EventTypes.PENALTY_APPLIED,
                {
                    "player_id": player_id,
                    "penalty": reset.total_penalty,
                    "messages": list(reset.messages),
                },
            )
        if reset.streak_broken:
            self._emit(EventTypes.STREAK_BROKEN, {"player_id": player_id})
        self._emit_level_change(player, player.level - before_level)
        self._emit_world_events(player_id, decay_events)

        return SessionReport(
            player=player,
            quests=reset.quests,
            world_state=world,
            penalty=reset.total_penalty,
            streak_broken=reset.streak_broken,
            messages=list(reset.messages),
            reset_quest_ids=list(reset.changed_quest_ids),
            decay_days=decay_days,
            world_events=decay_events,
            daily_log=log,
        )

    def _catch_up_decay(
        self,
        world: WorldState,
        quests: list[Quest],
        today: date,
        now: Optional[datetime],
    ) -> tuple[WorldState, list[WorldEvent], int]:
        """Run one decay pass per day that ended since the last pass.

        The first session of a new world only records today. Activity for a
        past day is taken from the quests as loaded, before the reset pass:
        a quest counts for the day it was last completed on only while it is
        still completed. A completion reverted the same day leaves nothing.
        """
        if world.last_decay_on is None:
            world = replace(world, last_decay_on=today.isoformat())
            return world, [], 0

        last = date.fromisoformat(world.last_decay_on)
        elapsed = (today - last).days
        if elapsed <= 0:
            return world, [], 0

        days = min(elapsed, MAX_DECAY_CATCHUP_DAYS)
        first_day = today - timedelta(days=days)
        events: list[WorldEvent] = []
        for offset in range(days):
            day = first_day + timedelta(days=offset)
            stats: set[str] = set()
            for quest in quests:
                if quest.is_completed and quest.last_completed_at == day:
                    stats.update(resolve_affected_stats(quest))
            result = world_engine.on_daily_decay(world, stats, now=now)
            world = result.state
            events.extend(result.events)

        world = replace(world, last_decay_on=today.isoformat())
        return world, events, days

    # === chronicle ===

    def _previous_rating(self, player_id: str, log_date: date) -> str:
        previous = self._repo.load_daily_log(player_id, log_date - timedelta(days=1))
        return previous.day_rating if previous else DayRating.ABSENT.value

    def _write_daily_log(
        self,
        player_id: str,
        log_date: date,
        player: PlayerProgress,
        quests: list[Quest],
        world: WorldState,
        new_events: list[WorldEvent],
        xp_lost: int = 0,
        credits_spent: int = 0,
    ) -> DailyLog:
        """Upsert today's log. Penalties, spending and events accumulate."""
        existing = self._repo.load_daily_log(player_id, log_date)
        events_today = compact_world_events(new_events)
        if existing is not None:
            events_today = existing.world_events + events_today
            xp_lost += existing.xp_lost
            credits_spent += existing.credits_spent

        log = build_daily_log(
            log_date,
            quests,
            player,
            world,
            events_today,
            previous_rating=self._previous_rating(player_id, log_date),
            xp_lost=xp_lost,
            credits_spent=credits_spent,
            narrative_summary=existing.narrative_summary if existing else None,
        )
        if self._persist("save_daily_log", lambda: self._repo.save_daily_log(player_id, log)):
            self._emit(
                EventTypes.DAILY_LOG_WRITTEN,
                {
                    "player_id": player_id,
                    "date": log_date.isoformat(),
                    "day_rating": log.day_rating,
                },
            )
        return log

    def _summarize_yesterday(self, player_id: str, yesterday: date) -> None:
        if self._narrative is None:
            return
        log = self._repo.load_daily_log(player_id, yesterday)
        if log is None or log.narrative_summary:
            return
        log = replace(log, narrative_summary=self._narrative.summarize_day(log))
        self._persist("save_daily_log", lambda: self._repo.save_daily_log(player_id, log))

    def get_chronicle(self, player_id: str, start: date, end: date) -> list[DailyLog]:
        self._require_player(player_id)
        return self._repo.load_daily_logs(player_id, start, end)

    # === quests ===

    def create_quest(
        self,
        player_id: str,
        title: str,
        cadence: str,
        difficulty: str,
        description: str = "",
        linked_stat: Optional[str] = None,
        today: Optional[date] = None,
    ) -> Quest:
        """Create a quest with AI-proposed rewards (or the fallback table)."""
        self._bus.reset_chain()
        player = self._require_player(player_id)
        window = self._window(today)

        if self._narrative is not None:
            analysis = self._narrative.analyze_quest(title, cadence, difficulty, player.level)
        else:
            analysis = NarrativeService.fallback_analysis(title, cadence, difficulty)

        quest = Quest(
            quest_id=f"q-{uuid.uuid4().hex[:12]}",
            title=analysis.technical_title,
            description=description,
            cadence=cadence,
            difficulty=difficulty,
            status=QuestStatus.PENDING.value,
            xp_reward=analysis.xp_reward,
            credit_reward=analysis.credit_reward,
            stat_rewards=dict(analysis.stat_rewards),
            penalty_description=analysis.penalty_description,
            created_at=window.today,
        )
        if linked_stat:
            quest.linked_stat = linked_stat

        quest = self._repo.create_quest(player_id, quest)
        logger.info("Quest created %s: %s (%s/%s)", quest.quest_id, quest.title, cadence, difficulty)
        self._emit(
            EventTypes.QUEST_CREATED,
            {"player_id": player_id, "quest_id": quest.quest_id, "cadence": cadence},
            key=quest.quest_id,
        )
        return quest

    def delete_quest(self, player_id: str, quest_id: str) -> None:
        self._require_player(player_id)
        if not self._repo.delete_quest(player_id, quest_id):
            raise QuestNotFoundError(f"Quest not found: {quest_id}")

    def toggle_quest(
        self, player_id: str, quest_id: str, today: Optional[date] = None
    ) -> ToggleReport:
        """Complete a pending quest or revert a completed one."""
        self._bus.reset_chain()
        window = self._window(today)
        now = self._now()

        player = self._require_player(player_id)
        world = self._require_world(player_id)
        quests = self._repo.load_quests(player_id)
        quest = next((q for q in quests if q.quest_id == quest_id), None)
        if quest is None:
            raise QuestNotFoundError(f"Quest not found: {quest_id}")

        completing = not quest.is_completed
        outcome = apply_quest_outcome(
            player, quest, completing, window.today, window.yesterday
        )
        if completing:
            world_result = world_engine.on_quest_completed(
                world, outcome.quest, outcome.player, now=now
            )
        else:
            world_result = world_engine.on_quest_uncompleted(world, outcome.quest, now=now)

        new_player = outcome.player
        new_quest = outcome.quest
        new_world = world_result.state

        self._persist("save_player", lambda: self._repo.save_player(new_player))
        self._persist(f"save_quest({quest_id})", lambda: self._repo.save_quest(player_id, new_quest))
        self._persist("save_world_state", lambda: self._repo.save_world_state(player_id, new_world))

        updated_quests = [new_quest if q.quest_id == quest_id else q for q in quests]
        self._write_daily_log(
            player_id,
            window.today,
            new_player,
            updated_quests,
            new_world,
            world_result.events,
        )

        logger.info(
            "Quest %s %s: xp %+d, credits %+d",
            quest_id,
            "completed" if completing else "uncompleted",
            outcome.xp_delta,
            outcome.credit_delta,
        )
        self._emit(
            EventTypes.QUEST_COMPLETED if completing else EventTypes.QUEST_UNCOMPLETED,
            {
                "player_id": player_id,
                "quest_id": quest_id,
                "xp_delta": outcome.xp_delta,
                "credit_delta": outcome.credit_delta,
            },
            key=quest_id,
        )
        self._emit_level_change(new_player, outcome.levels_gained)
        self._emit_world_events(player_id, world_result.events)

        return ToggleReport(
            player=new_player,
            quest=new_quest,
            world_state=new_world,
            completed=completing,
            xp_delta=outcome.xp_delta,
            credit_delta=outcome.credit_delta,
            levels_gained=outcome.levels_gained,
            world_events=world_result.events,
        )

    # === world actions ===

    def _spend(
        self,
        player_id: str,
        action: str,
        run: Callable[[PlayerProgress, WorldState, Optional[datetime]], Union[BuildResult, EngineError]],
        today: Optional[date],
    ) -> Union[WorldActionReport, EngineError]:
        self._bus.reset_chain()
        window = self._window(today)
        player = self._require_player(player_id)
        world = self._require_world(player_id)

        result = run(player, world, self._now())
        if isinstance(result, EngineError):
            logger.info("%s rejected for %s: %s", action, player_id, result.error)
            return result

        new_player = replace(player, credits=player.credits - result.credits_cost)
        new_world = result.state
        self._persist("save_player", lambda: self._repo.save_player(new_player))
        self._persist("save_world_state", lambda: self._repo.save_world_state(player_id, new_world))

        self._write_daily_log(
            player_id,
            window.today,
            new_player,
            self._repo.load_quests(player_id),
            new_world,
            result.events,
            credits_spent=result.credits_cost,
        )
        self._emit_world_events(player_id, result.events)
        return WorldActionReport(
            player=new_player,
            world_state=new_world,
            credits_cost=result.credits_cost,
            world_events=result.events,
        )

    def build_structure(
        self,
        player_id: str,
        district_id: str,
        structure_id: str,
        today: Optional[date] = None,
    ) -> Union[WorldActionReport, EngineError]:
        return self._spend(
            player_id,
            "build_structure",
            lambda p, w, now: world_engine.build_structure(
                w, district_id, structure_id, p.level, p.credits, now=now
            ),
            today,
        )

    def repair_structure(
        self,
        player_id: str,
        district_id: str,
        structure_id: str,
        today: Optional[date] = None,
    ) -> Union[WorldActionReport, EngineError]:
        return self._spend(
            player_id,
            "repair_structure",
            lambda p, w, now: world_engine.repair_structure(
                w, district_id, structure_id, p.credits, now=now
            ),
            today,
        )

    def launch_expedition(
        self, player_id: str, expedition_id: str, today: Optional[date] = None
    ) -> Union[WorldActionReport, EngineError]:
        return self._spend(
            player_id,
            "launch_expedition",
            lambda p, w, now: world_engine.launch_expedition(
                w, expedition_id, p.credits, p.level, p.stats, now=now
            ),
            today,
        )

    def mark_event_read(self, player_id: str, event_id: str) -> WorldState:
        world = world_engine.mark_event_read(self._require_world(player_id), event_id)
        self._persist("save_world_state", lambda: self._repo.save_world_state(player_id, world))
        return world
