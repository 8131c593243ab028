"""Nexus API endpoints: players, quests, world actions and the chronicle."""

from datetime import date, datetime, timedelta
from typing import Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from sqlalchemy.orm import Session

from src.api.schemas import (
    ArtifactInfo,
    ChronicleResponse,
    CommentaryRequest,
    CommentaryResponse,
    CompanionInfo,
    DailyLogInfo,
    ErrorResponse,
    ExpeditionRequest,
    InsightInfo,
    NoticeInfo,
    PlayerInfo,
    QuestCreateRequest,
    QuestInfo,
    RegisterRequest,
    ReminderInfo,
    SessionResponse,
    StateResponse,
    StreakClusterInfo,
    StructureRequest,
    TimelineItemInfo,
    ToggleResponse,
    WorldActionResponse,
    WorldEventInfo,
    WorldInfo,
)
from src.config import settings
from src.core.calendar import CalendarWindow
from src.core.chronicle import (
    build_timeline,
    compute_insights,
    compute_streak_clusters,
    fill_absent_days,
)
from src.core.event_bus import EventBus
from src.core.logging import get_logger
from src.core.player.leveling import level_title
from src.core.player.models import PlayerProgress
from src.core.world.definitions import COMPANIONS, ERA_NAMES
from src.core.world.models import EngineError, WorldEvent, WorldState
from src.core.world.narrative import (
    companion_dialogue,
    district_narrative,
    locked_district_hints,
    world_status_narrative,
)
from src.core.world.summary import world_artifacts, world_title
from src.db.database import get_db
from src.repositories.base import ProgressRepository, RepositoryError
from src.repositories.sql import SqlProgressRepository
from src.services.narrative_service import NarrativeService
from src.services.notification_service import NotificationService
from src.services.progress_service import (
    PlayerNotFoundError,
    ProgressService,
    QuestNotFoundError,
    WorldActionReport,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/nexus", tags=["nexus"])

CHRONICLE_DEFAULT_DAYS = 30
CHRONICLE_MAX_DAYS = 366

_ERRORS = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


# === dependencies ===


def get_event_bus(request: Request) -> EventBus:
    bus: EventBus = request.app.state.event_bus
    return bus


def get_narrative_service(request: Request) -> NarrativeService:
    service: NarrativeService = request.app.state.narrative_service
    return service


def get_notification_service(request: Request) -> NotificationService:
    service: NotificationService = request.app.state.notification_service
    return service


def get_repository(request: Request, db: Session = Depends(get_db)) -> ProgressRepository:
    """SQL repository per request, or the app-wide in-memory one."""
    if settings.PERSISTENCE_BACKEND == "memory":
        repo: ProgressRepository = request.app.state.memory_repository
        return repo
    return SqlProgressRepository(db)


def get_progress_service(
    repository: ProgressRepository = Depends(get_repository),
    event_bus: EventBus = Depends(get_event_bus),
    narrative: NarrativeService = Depends(get_narrative_service),
) -> ProgressService:
    return ProgressService(repository, event_bus, narrative)


# === converters ===


def _player_info(player: PlayerProgress) -> PlayerInfo:
    info = PlayerInfo.model_validate(player)
    info.level_title = level_title(player.level)
    return info


def _event_info(events: list[WorldEvent]) -> list[WorldEventInfo]:
    return [WorldEventInfo.model_validate(e) for e in events]


def _world_info(state: WorldState) -> WorldInfo:
    title = world_title(state)
    return WorldInfo(
        nexus_name=state.nexus_name,
        era=state.era,
        era_name=ERA_NAMES.get(state.era, ERA_NAMES[1]),
        world_title=title,
        status_narrative=world_status_narrative(state, title),
        district_narratives={
            d.district_id: district_narrative(d.district_id, d.vitality)
            for d in state.unlocked_districts()
        },
        locked_hints=locked_district_hints(state),
        artifacts=[
            ArtifactInfo(
                artifact_type=a.artifact_type,
                label=a.label,
                description=a.description,
                rarity=a.rarity.value,
                earned_at=a.earned_at,
            )
            for a in world_artifacts(state)
        ],
        state=state.to_dict(),
    )


def _run(call, *args, **kwargs):
    """Map service exceptions to HTTP errors."""
    try:
        return call(*args, **kwargs)
    except (PlayerNotFoundError, QuestNotFoundError) as e:
        raise HTTPException(status_code=404, detail=str(e))
    except RepositoryError as e:
        logger.error("Repository failure: %s", e)
        raise HTTPException(status_code=503, detail="Persistence unavailable")


def _world_action(
    result: Union[WorldActionReport, EngineError],
) -> WorldActionResponse:
    if isinstance(result, EngineError):
        raise HTTPException(status_code=400, detail=result.error)
    return WorldActionResponse(
        player=_player_info(result.player),
        world=_world_info(result.world_state),
        credits_cost=result.credits_cost,
        world_events=_event_info(result.world_events),
    )


# === players ===


@router.post("/players", response_model=StateResponse, status_code=201, responses=_ERRORS)
def register_player(
    body: RegisterRequest,
    service: ProgressService = Depends(get_progress_service),
) -> StateResponse:
    """Create a player and found their Nexus."""
    snapshot = _run(service.register_player, body.player_id, body.name, body.nexus_name)
    return StateResponse(
        player=_player_info(snapshot.player),
        quests=[QuestInfo.model_validate(q) for q in snapshot.quests],
        world=_world_info(snapshot.world_state),
    )


@router.get("/players/{player_id}", response_model=StateResponse, responses=_ERRORS)
def get_state(
    player_id: str,
    service: ProgressService = Depends(get_progress_service),
) -> StateResponse:
    snapshot = _run(service.get_state, player_id)
    return StateResponse(
        player=_player_info(snapshot.player),
        quests=[QuestInfo.model_validate(q) for q in snapshot.quests],
        world=_world_info(snapshot.world_state),
    )


@router.post("/players/{player_id}/session", response_model=SessionResponse, responses=_ERRORS)
def start_session(
    player_id: str,
    service: ProgressService = Depends(get_progress_service),
) -> SessionResponse:
    """
    Session start

    Rolls quest windows over, applies missed-quest penalties, catches the
    world up on elapsed days and writes today's chronicle entry.
    """
    report = _run(service.start_session, player_id)
    return SessionResponse(
        player=_player_info(report.player),
        quests=[QuestInfo.model_validate(q) for q in report.quests],
        world=_world_info(report.world_state),
        penalty=report.penalty,
        streak_broken=report.streak_broken,
        messages=report.messages,
        reset_quest_ids=report.reset_quest_ids,
        decay_days=report.decay_days,
        world_events=_event_info(report.world_events),
        day_rating=report.daily_log.day_rating if report.daily_log else None,
    )


@router.post(
    "/players/{player_id}/commentary", response_model=CommentaryResponse, responses=_ERRORS
)
def commentary(
    player_id: str,
    body: CommentaryRequest,
    service: ProgressService = Depends(get_progress_service),
    narrative: NarrativeService = Depends(get_narrative_service),
) -> CommentaryResponse:
    snapshot = _run(service.get_state, player_id)
    text = narrative.gm_commentary(
        snapshot.player, snapshot.quests, snapshot.world_state, body.message
    )
    return CommentaryResponse(commentary=text)


# === quests ===


@router.get("/players/{player_id}/quests", response_model=list[QuestInfo], responses=_ERRORS)
def list_quests(
    player_id: str,
    service: ProgressService = Depends(get_progress_service),
) -> list[QuestInfo]:
    snapshot = _run(service.get_state, player_id)
    return [QuestInfo.model_validate(q) for q in snapshot.quests]


@router.post(
    "/players/{player_id}/quests",
    response_model=QuestInfo,
    status_code=201,
    responses=_ERRORS,
)
def create_quest(
    player_id: str,
    body: QuestCreateRequest,
    service: ProgressService = Depends(get_progress_service),
) -> QuestInfo:
    quest = _run(
        service.create_quest,
        player_id,
        body.title,
        body.cadence.value,
        body.difficulty.value,
        description=body.description,
        linked_stat=body.linked_stat.value if body.linked_stat else None,
    )
    return QuestInfo.model_validate(quest)


@router.delete("/players/{player_id}/quests/{quest_id}", status_code=204, responses=_ERRORS)
def delete_quest(
    player_id: str,
    quest_id: str,
    service: ProgressService = Depends(get_progress_service),
) -> Response:
    _run(service.delete_quest, player_id, quest_id)
    return Response(status_code=204)


@router.post(
    "/players/{player_id}/quests/{quest_id}/toggle",
    response_model=ToggleResponse,
    responses=_ERRORS,
)
def toggle_quest(
    player_id: str,
    quest_id: str,
    service: ProgressService = Depends(get_progress_service),
) -> ToggleResponse:
    """Complete a pending quest, or revert a completed one."""
    report = _run(service.toggle_quest, player_id, quest_id)
    return ToggleResponse(
        player=_player_info(report.player),
        quest=QuestInfo.model_validate(report.quest),
        completed=report.completed,
        xp_delta=report.xp_delta,
        credit_delta=report.credit_delta,
        levels_gained=report.levels_gained,
        world_events=_event_info(report.world_events),
    )


# === world ===


@router.post(
    "/players/{player_id}/world/build", response_model=WorldActionResponse, responses=_ERRORS
)
def build_structure(
    player_id: str,
    body: StructureRequest,
    service: ProgressService = Depends(get_progress_service),
) -> WorldActionResponse:
    return _world_action(
        _run(service.build_structure, player_id, body.district_id, body.structure_id)
    )


@router.post(
    "/players/{player_id}/world/repair", response_model=WorldActionResponse, responses=_ERRORS
)
def repair_structure(
    player_id: str,
    body: StructureRequest,
    service: ProgressService = Depends(get_progress_service),
) -> WorldActionResponse:
    return _world_action(
        _run(service.repair_structure, player_id, body.district_id, body.structure_id)
    )


@router.post(
    "/players/{player_id}/world/expedition",
    response_model=WorldActionResponse,
    responses=_ERRORS,
)
def launch_expedition(
    player_id: str,
    body: ExpeditionRequest,
    service: ProgressService = Depends(get_progress_service),
) -> WorldActionResponse:
    return _world_action(_run(service.launch_expedition, player_id, body.expedition_id))


@router.post(
    "/players/{player_id}/world/events/{event_id}/read",
    response_model=WorldInfo,
    responses=_ERRORS,
)
def mark_event_read(
    player_id: str,
    event_id: str,
    service: ProgressService = Depends(get_progress_service),
) -> WorldInfo:
    return _world_info(_run(service.mark_event_read, player_id, event_id))


@router.get(
    "/players/{player_id}/world/companions",
    response_model=list[CompanionInfo],
    responses=_ERRORS,
)
def list_companions(
    player_id: str,
    service: ProgressService = Depends(get_progress_service),
) -> list[CompanionInfo]:
    world = _run(service.get_state, player_id).world_state
    result = []
    for definition in COMPANIONS:
        state = world.companion(definition.companion_id)
        if state is None:
            continue
        result.append(
            CompanionInfo(
                companion_id=definition.companion_id,
                name=definition.name,
                role=definition.role,
                district_id=definition.district_id,
                is_present=state.is_present,
                loyalty=state.loyalty,
                mood=state.mood,
                line=companion_dialogue(definition.companion_id, state.mood),
            )
        )
    return result


# === chronicle / notifications ===


@router.get(
    "/players/{player_id}/chronicle", response_model=ChronicleResponse, responses=_ERRORS
)
def get_chronicle(
    player_id: str,
    start: Optional[date] = Query(default=None),
    end: Optional[date] = Query(default=None),
    service: ProgressService = Depends(get_progress_service),
) -> ChronicleResponse:
    """Daily logs for [start, end] with gaps filled as absent days."""
    end = end or CalendarWindow.now(settings.SYNC_TIMEZONE).today
    start = start or end - timedelta(days=CHRONICLE_DEFAULT_DAYS - 1)
    if start > end:
        raise HTTPException(status_code=400, detail="start must not be after end")
    if (end - start).days >= CHRONICLE_MAX_DAYS:
        raise HTTPException(status_code=400, detail="range too large")

    logs = fill_absent_days(_run(service.get_chronicle, player_id, start, end), start, end)
    return ChronicleResponse(
        logs=[DailyLogInfo.model_validate(log) for log in logs],
        insights=[InsightInfo.model_validate(i) for i in compute_insights(logs)],
        streak_clusters=[
            StreakClusterInfo.model_validate(c) for c in compute_streak_clusters(logs)
        ],
        timeline=[TimelineItemInfo.model_validate(t) for t in build_timeline(logs)],
    )


@router.get("/players/{player_id}/notices", response_model=list[NoticeInfo])
def drain_notices(
    player_id: str,
    notifications: NotificationService = Depends(get_notification_service),
) -> list[NoticeInfo]:
    return [NoticeInfo.model_validate(n) for n in notifications.drain(player_id)]


@router.get(
    "/players/{player_id}/reminders", response_model=list[ReminderInfo], responses=_ERRORS
)
def plan_reminders(
    player_id: str,
    at: datetime = Query(..., description="Player local time"),
    service: ProgressService = Depends(get_progress_service),
    notifications: NotificationService = Depends(get_notification_service),
) -> list[ReminderInfo]:
    quests = _run(service.get_state, player_id).quests
    return [ReminderInfo.model_validate(r) for r in notifications.plan_for(quests, at)]
