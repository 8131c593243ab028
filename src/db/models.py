"""SQLAlchemy declarative base and ORM models."""

from datetime import date, datetime

from sqlalchemy import (
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import JSON


class Base(DeclarativeBase):
    """Base class for all database models."""


class PlayerModel(Base):
    """ORM model for players."""

    __tablename__ = "players"

    player_id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    level: Mapped[int] = mapped_column(Integer, default=1)
    current_xp: Mapped[int] = mapped_column(Integer, default=0)
    xp_to_next_level: Mapped[int] = mapped_column(Integer, default=1000)
    credits: Mapped[int] = mapped_column(Integer, default=0)
    streak_days: Mapped[int] = mapped_column(Integer, default=0)
    last_active_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    stats: Mapped[dict] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class QuestModel(Base):
    """ORM model for quests."""

    __tablename__ = "quests"

    quest_id: Mapped[str] = mapped_column(String, primary_key=True)
    player_id: Mapped[str] = mapped_column(
        String, ForeignKey("players.player_id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(Text, default="")
    cadence: Mapped[str] = mapped_column(String, nullable=False)
    difficulty: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[str] = mapped_column(String, default="PENDING")
    xp_reward: Mapped[int] = mapped_column(Integer, default=0)
    credit_reward: Mapped[int] = mapped_column(Integer, default=0)
    stat_rewards: Mapped[dict] = mapped_column(JSON, default=dict)
    linked_stat: Mapped[str] = mapped_column(String, default="mental")
    penalty_description: Mapped[str] = mapped_column(Text, default="")
    created_at: Mapped[date | None] = mapped_column(Date, nullable=True)
    last_completed_at: Mapped[date | None] = mapped_column(Date, nullable=True)
    last_penalty_at: Mapped[date | None] = mapped_column(Date, nullable=True)


class WorldStateModel(Base):
    """One world document per player."""

    __tablename__ = "world_states"

    player_id: Mapped[str] = mapped_column(
        String, ForeignKey("players.player_id", ondelete="CASCADE"), primary_key=True
    )
    state: Mapped[dict] = mapped_column(JSON, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )


class DailyLogModel(Base):
    """One chronicle row per player per local day."""

    __tablename__ = "daily_logs"
    __table_args__ = (UniqueConstraint("player_id", "log_date"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    player_id: Mapped[str] = mapped_column(
        String, ForeignKey("players.player_id", ondelete="CASCADE"), nullable=False
    )
    log_date: Mapped[date] = mapped_column(Date, nullable=False)
    # DailyLog fields other than log_date, as JSON
    data: Mapped[dict] = mapped_column(JSON, nullable=False)
    day_rating: Mapped[str] = mapped_column(String, nullable=False)
