"""API request/response schemas."""

from datetime import date
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from src.core.player.models import StatKey
from src.core.quest.enums import Cadence, Difficulty


# === Request Schemas ===


class RegisterRequest(BaseModel):
    """Player registration"""

    player_id: str = Field(..., min_length=1, max_length=50, description="Player ID")
    name: str = Field(default="Operative", max_length=50)
    nexus_name: Optional[str] = Field(default=None, max_length=50)


class QuestCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    cadence: Cadence = Cadence.DAILY
    difficulty: Difficulty = Difficulty.MEDIUM
    description: str = ""
    linked_stat: Optional[StatKey] = None


class StructureRequest(BaseModel):
    """Build or repair target"""

    district_id: str
    structure_id: str


class ExpeditionRequest(BaseModel):
    expedition_id: str


class CommentaryRequest(BaseModel):
    message: Optional[str] = Field(default=None, max_length=500)


# === Response Schemas ===


class _FromCore(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class PlayerInfo(_FromCore):
    player_id: str
    name: str
    level: int
    level_title: str = ""
    current_xp: int
    xp_to_next_level: int
    credits: int
    streak_days: int
    last_active_date: Optional[date] = None
    stats: dict[str, int]


class QuestInfo(_FromCore):
    quest_id: str
    title: str
    description: str = ""
    cadence: str
    difficulty: str
    status: str
    xp_reward: int
    credit_reward: int
    stat_rewards: dict[str, int] = {}
    linked_stat: str
    penalty_description: str = ""
    created_at: Optional[date] = None
    last_completed_at: Optional[date] = None


class WorldEventInfo(_FromCore):
    event_id: str
    event_type: str
    title: str
    description: str
    timestamp: str
    district_id: Optional[str] = None
    is_read: bool = False


class ArtifactInfo(_FromCore):
    artifact_type: str
    label: str
    description: str
    rarity: str
    earned_at: Optional[str] = None


class WorldInfo(BaseModel):
    """The Nexus, as stored plus derived labels"""

    nexus_name: str
    era: int
    era_name: str
    world_title: str
    status_narrative: str
    district_narratives: dict[str, str] = {}
    locked_hints: dict[str, str] = {}
    artifacts: list[ArtifactInfo] = []
    state: dict[str, Any]


class StateResponse(BaseModel):
    player: PlayerInfo
    quests: list[QuestInfo]
    world: WorldInfo


class SessionResponse(StateResponse):
    penalty: int = 0
    streak_broken: bool = False
    messages: list[str] = []
    reset_quest_ids: list[str] = []
    decay_days: int = 0
    world_events: list[WorldEventInfo] = []
    day_rating: Optional[str] = None


class ToggleResponse(BaseModel):
    player: PlayerInfo
    quest: QuestInfo
    completed: bool
    xp_delta: int
    credit_delta: int
    levels_gained: int
    world_events: list[WorldEventInfo] = []


class WorldActionResponse(BaseModel):
    player: PlayerInfo
    world: WorldInfo
    credits_cost: int
    world_events: list[WorldEventInfo] = []


class CompactEventInfo(_FromCore):
    event_type: str
    title: str
    district_id: Optional[str] = None


class DailyLogInfo(_FromCore):
    log_date: date
    day_rating: str
    quests_completed: int
    quests_pending: int
    quest_titles: list[str] = []
    stats_touched: list[str] = []
    xp_earned: int
    xp_lost: int
    credits_earned: int
    credits_spent: int
    player_level: int
    streak_count: int
    world_events: list[CompactEventInfo] = []
    narrative_summary: Optional[str] = None


class InsightInfo(_FromCore):
    insight_id: str
    label: str
    detail: str
    tone: str


class StreakClusterInfo(_FromCore):
    start_date: date
    end_date: date
    length: int
    has_recovery: bool


class TimelineItemInfo(_FromCore):
    item_id: str
    log_date: date
    category: str
    title: str
    district_id: Optional[str] = None


class ChronicleResponse(BaseModel):
    logs: list[DailyLogInfo]
    insights: list[InsightInfo] = []
    streak_clusters: list[StreakClusterInfo] = []
    timeline: list[TimelineItemInfo] = []


class CommentaryResponse(BaseModel):
    commentary: str


class NoticeInfo(_FromCore):
    kind: str
    title: str
    body: str = ""


class ReminderInfo(_FromCore):
    tag: str
    title: str
    body: str
    kind: str


class ErrorResponse(BaseModel):
    """Error response"""

    error: str
    detail: Optional[str] = None


class CompanionInfo(BaseModel):
    companion_id: str
    name: str
    role: str
    district_id: str
    is_present: bool
    loyalty: int
    mood: str
    line: str
