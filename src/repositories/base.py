"""Persistence adapter contract

Services talk to storage only through ProgressRepository. Writes are
best-effort from the caller's point of view; the services decide what to do
when one fails.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional

from src.core.chronicle.models import DailyLog
from src.core.player.models import PlayerProgress
from src.core.quest.models import Quest
from src.core.world.models import WorldState


class RepositoryError(Exception):
    """A storage operation failed."""


class ProgressRepository(ABC):
    # === player ===

    @abstractmethod
    def load_player(self, player_id: str) -> Optional[PlayerProgress]:
        raise NotImplementedError

    @abstractmethod
    def save_player(self, player: PlayerProgress) -> None:
        raise NotImplementedError

    # === quests ===

    @abstractmethod
    def load_quests(self, player_id: str) -> list[Quest]:
        raise NotImplementedError

    @abstractmethod
    def create_quest(self, player_id: str, quest: Quest) -> Quest:
        raise NotImplementedError

    @abstractmethod
    def save_quest(self, player_id: str, quest: Quest) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete_quest(self, player_id: str, quest_id: str) -> bool:
        raise NotImplementedError

    # === world ===

    @abstractmethod
    def load_world_state(self, player_id: str) -> Optional[WorldState]:
        raise NotImplementedError

    @abstractmethod
    def save_world_state(self, player_id: str, state: WorldState) -> None:
        raise NotImplementedError

    # === chronicle ===

    @abstractmethod
    def load_daily_log(self, player_id: str, log_date: date) -> Optional[DailyLog]:
        raise NotImplementedError

    @abstractmethod
    def save_daily_log(self, player_id: str, log: DailyLog) -> None:
        raise NotImplementedError

    @abstractmethod
    def load_daily_logs(
        self, player_id: str, start: date, end: date
    ) -> list[DailyLog]:
        """Logs with start <= log_date <= end, oldest first."""
        raise NotImplementedError

    def save_quests(self, player_id: str, quests: list[Quest]) -> None:
        for quest in quests:
            self.save_quest(player_id, quest)
