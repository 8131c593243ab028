"""SQLAlchemy-backed repository"""

import logging
from contextlib import contextmanager
from dataclasses import asdict
from datetime import date
from typing import Iterator, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.core.chronicle.models import CompactWorldEvent, DailyLog
from src.core.player.models import PlayerProgress
from src.core.quest.models import Quest
from src.core.world.models import WorldState
from src.db.models import DailyLogModel, PlayerModel, QuestModel, WorldStateModel
from src.repositories.base import ProgressRepository, RepositoryError

logger = logging.getLogger(__name__)


class SqlProgressRepository(ProgressRepository):
    def __init__(self, db: Session):
        self._db = db

    @contextmanager
    def _reading(self, what: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as e:
            raise RepositoryError(f"{what} failed: {e}") from e

    def _commit(self, what: str) -> None:
        try:
            self._db.commit()
        except SQLAlchemyError as e:
            self._db.rollback()
            raise RepositoryError(f"{what} failed: {e}") from e

    # === player ===

    def load_player(self, player_id: str) -> Optional[PlayerProgress]:
        with self._reading(f"load_player({player_id})"):
            orm = self._db.get(PlayerModel, player_id)
        if orm is None:
            return None
        return self._player_to_core(orm)

    def save_player(self, player: PlayerProgress) -> None:
        with self._reading(f"save_player({player.player_id})"):
            orm = self._db.get(PlayerModel, player.player_id)
        if orm is None:
            orm = PlayerModel(player_id=player.player_id)
            self._db.add(orm)
        orm.name = player.name
        orm.level = player.level
        orm.current_xp = player.current_xp
        orm.xp_to_next_level = player.xp_to_next_level
        orm.credits = player.credits
        orm.streak_days = player.streak_days
        orm.last_active_date = player.last_active_date
        orm.stats = dict(player.stats)
        self._commit(f"save_player({player.player_id})")

    # === quests ===

    def load_quests(self, player_id: str) -> list[Quest]:
        with self._reading(f"load_quests({player_id})"):
            orms = (
                self._db.query(QuestModel)
                .filter(QuestModel.player_id == player_id)
                .order_by(QuestModel.created_at, QuestModel.quest_id)
                .all()
            )
        return [self._quest_to_core(o) for o in orms]

    def create_quest(self, player_id: str, quest: Quest) -> Quest:
        orm = QuestModel(quest_id=quest.quest_id, player_id=player_id)
        self._apply_quest(orm, quest)
        self._db.add(orm)
        self._commit(f"create_quest({quest.quest_id})")
        return quest

    def save_quest(self, player_id: str, quest: Quest) -> None:
        with self._reading(f"save_quest({quest.quest_id})"):
            orm = self._db.get(QuestModel, quest.quest_id)
        if orm is None or orm.player_id != player_id:
            logger.warning("save_quest: unknown quest %s", quest.quest_id)
            return
        self._apply_quest(orm, quest)
        self._commit(f"save_quest({quest.quest_id})")

    def delete_quest(self, player_id: str, quest_id: str) -> bool:
        with self._reading(f"delete_quest({quest_id})"):
            orm = self._db.get(QuestModel, quest_id)
        if orm is None or orm.player_id != player_id:
            return False
        self._db.delete(orm)
        self._commit(f"delete_quest({quest_id})")
        return True

    # === world ===

    def load_world_state(self, player_id: str) -> Optional[WorldState]:
        with self._reading(f"load_world_state({player_id})"):
            orm = self._db.get(WorldStateModel, player_id)
        if orm is None:
            return None
        return WorldState.from_dict(orm.state)

    def save_world_state(self, player_id: str, state: WorldState) -> None:
        with self._reading(f"save_world_state({player_id})"):
            orm = self._db.get(WorldStateModel, player_id)
        if orm is None:
            self._db.add(WorldStateModel(player_id=player_id, state=state.to_dict()))
        else:
            # JSON column: assign a new object so the change is tracked
            orm.state = state.to_dict()
        self._commit(f"save_world_state({player_id})")

    # === chronicle ===

    def _find_log(self, player_id: str, log_date: date) -> Optional[DailyLogModel]:
        with self._reading(f"load_daily_log({player_id}, {log_date})"):
            return (
                self._db.query(DailyLogModel)
                .filter(
                    DailyLogModel.player_id == player_id,
                    DailyLogModel.log_date == log_date,
                )
                .first()
            )

    def load_daily_log(self, player_id: str, log_date: date) -> Optional[DailyLog]:
        orm = self._find_log(player_id, log_date)
        if orm is None:
            return None
        return self._log_to_core(orm)

    def save_daily_log(self, player_id: str, log: DailyLog) -> None:
        orm = self._find_log(player_id, log.log_date)
        data = asdict(log)
        data.pop("log_date")
        if orm is None:
            self._db.add(
                DailyLogModel(
                    player_id=player_id,
                    log_date=log.log_date,
                    data=data,
                    day_rating=log.day_rating,
                )
            )
        else:
            orm.data = data
            orm.day_rating = log.day_rating
        self._commit(f"save_daily_log({player_id}, {log.log_date})")

    def load_daily_logs(self, player_id: str, start: date, end: date) -> list[DailyLog]:
        with self._reading(f"load_daily_logs({player_id})"):
            orms = (
                self._db.query(DailyLogModel)
                .filter(
                    DailyLogModel.player_id == player_id,
                    DailyLogModel.log_date >= start,
                    DailyLogModel.log_date <= end,
                )
                .order_by(DailyLogModel.log_date)
                .all()
            )
        return [self._log_to_core(o) for o in orms]

    # === ORM <-> core ===

    @staticmethod
    def _player_to_core(orm: PlayerModel) -> PlayerProgress:
        return PlayerProgress(
            player_id=orm.player_id,
            name=orm.name,
            level=orm.level,
            current_xp=orm.current_xp,
            xp_to_next_level=orm.xp_to_next_level,
            credits=orm.credits,
            streak_days=orm.streak_days,
            last_active_date=orm.last_active_date,
            stats=dict(orm.stats or {}),
        )

    @staticmethod
    def _apply_quest(orm: QuestModel, quest: Quest) -> None:
        orm.title = quest.title
        orm.description = quest.description
        orm.cadence = quest.cadence
        orm.difficulty = quest.difficulty
        orm.status = quest.status
        orm.xp_reward = quest.xp_reward
        orm.credit_reward = quest.credit_reward
        orm.stat_rewards = dict(quest.stat_rewards)
        orm.linked_stat = quest.linked_stat
        orm.penalty_description = quest.penalty_description
        orm.created_at = quest.created_at
        orm.last_completed_at = quest.last_completed_at
        orm.last_penalty_at = quest.last_penalty_at

    @staticmethod
    def _quest_to_core(orm: QuestModel) -> Quest:
        return Quest(
            quest_id=orm.quest_id,
            title=orm.title,
            description=orm.description or "",
            cadence=orm.cadence,
            difficulty=orm.difficulty,
            status=orm.status,
            xp_reward=orm.xp_reward,
            credit_reward=orm.credit_reward,
            stat_rewards=dict(orm.stat_rewards or {}),
            linked_stat=orm.linked_stat,
            penalty_description=orm.penalty_description or "",
            created_at=orm.created_at,
            last_completed_at=orm.last_completed_at,
            last_penalty_at=orm.last_penalty_at,
        )

    @staticmethod
    def _log_to_core(orm: DailyLogModel) -> DailyLog:
        data = dict(orm.data)
        data["world_events"] = [
            CompactWorldEvent(**e) for e in data.get("world_events", [])
        ]
        data["day_rating"] = orm.day_rating
        return DailyLog(log_date=orm.log_date, **data)
