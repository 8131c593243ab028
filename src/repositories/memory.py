"""In-memory repository

Constructed explicitly and injected like the SQL one, so tests and demo
mode never share process-wide state.
"""

import copy
from datetime import date
from typing import Optional

from src.core.chronicle.models import DailyLog
from src.core.player.models import PlayerProgress
from src.core.quest.models import Quest
from src.core.world.models import WorldState
from src.repositories.base import ProgressRepository


class InMemoryProgressRepository(ProgressRepository):
    def __init__(self) -> None:
        self._players: dict[str, PlayerProgress] = {}
        # player_id -> quest_id -> Quest, insertion ordered
        self._quests: dict[str, dict[str, Quest]] = {}
        self._worlds: dict[str, WorldState] = {}
        self._logs: dict[str, dict[date, DailyLog]] = {}

    def load_player(self, player_id: str) -> Optional[PlayerProgress]:
        player = self._players.get(player_id)
        return copy.deepcopy(player) if player else None

    def save_player(self, player: PlayerProgress) -> None:
        self._players[player.player_id] = copy.deepcopy(player)

    def load_quests(self, player_id: str) -> list[Quest]:
        return [copy.deepcopy(q) for q in self._quests.get(player_id, {}).values()]

    def create_quest(self, player_id: str, quest: Quest) -> Quest:
        self._quests.setdefault(player_id, {})[quest.quest_id] = copy.deepcopy(quest)
        return quest

    def save_quest(self, player_id: str, quest: Quest) -> None:
        quests = self._quests.setdefault(player_id, {})
        if quest.quest_id in quests:
            quests[quest.quest_id] = copy.deepcopy(quest)

    def delete_quest(self, player_id: str, quest_id: str) -> bool:
        return self._quests.get(player_id, {}).pop(quest_id, None) is not None

    def load_world_state(self, player_id: str) -> Optional[WorldState]:
        state = self._worlds.get(player_id)
        return copy.deepcopy(state) if state else None

    def save_world_state(self, player_id: str, state: WorldState) -> None:
        self._worlds[player_id] = copy.deepcopy(state)

    def load_daily_log(self, player_id: str, log_date: date) -> Optional[DailyLog]:
        log = self._logs.get(player_id, {}).get(log_date)
        return copy.deepcopy(log) if log else None

    def save_daily_log(self, player_id: str, log: DailyLog) -> None:
        self._logs.setdefault(player_id, {})[log.log_date] = copy.deepcopy(log)

    def load_daily_logs(self, player_id: str, start: date, end: date) -> list[DailyLog]:
        logs = self._logs.get(player_id, {})
        return [
            copy.deepcopy(logs[d]) for d in sorted(logs) if start <= d <= end
        ]
