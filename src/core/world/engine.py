"""World simulation engine

Pure transitions over WorldState:

    quest completed   -> on_quest_completed   vitality up, unlocks, mood up
    quest reverted    -> on_quest_uncompleted vitality down, silent
    day boundary      -> on_daily_decay       vitality/condition/mood down
    player builds     -> build_structure      credits spent, structure active
    player repairs    -> repair_structure     credits spent, condition restored
    player explores   -> launch_expedition    credits spent, discovery made

Every operation deep-copies its input and returns an EngineResult, or an
EngineError for expected validation failures. Persistence is the caller's
job.
"""

import copy
import logging
import math
import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Iterable, Optional, Union

from src.core.quest.rewards import resolve_affected_stats
from src.core.world.conditions import (
    COMPANION_DEPART_VITALITY,
    companion_mood,
    district_condition,
)
from src.core.world.definitions import (
    COMPANIONS,
    DISTRICTS,
    ERA_NAMES,
    EXPEDITIONS,
    MILESTONES,
    STRUCTURES,
    calculate_era,
    companion_for_district,
    district_for_stat,
    get_district,
    get_expedition,
    get_structure,
    previous_tier,
)
from src.core.world.enums import (
    CRITICAL_CONDITIONS,
    DECAY_CONDITIONS,
    CompanionMood,
    WorldEventType,
)
from src.core.world.models import (
    EVENT_CAP,
    BuildResult,
    CompanionState,
    DistrictState,
    EngineError,
    EngineResult,
    ExpeditionState,
    MilestoneState,
    StructureState,
    WorldEvent,
    WorldInvariantError,
    WorldState,
)
from src.core.world.narrative import (
    decay_description,
    era_transition_narrative,
    recovery_narrative,
)

if TYPE_CHECKING:
    from src.core.player.models import PlayerProgress
    from src.core.quest.models import Quest

logger = logging.getLogger(__name__)

# === Tuning ===

BASE_VITALITY_BOOST = 5
DIFFICULTY_MULTIPLIER = {"EASY": 0.6, "MEDIUM": 1.0, "HARD": 1.5, "EXTREME": 2.0}
CADENCE_MULTIPLIER = {"DAILY": 1.0, "WEEKLY": 1.5, "EPIC": 2.0, "LEGENDARY": 3.0}

UNLOCK_VITALITY = 50
ACTIVE_DAY_BONUS = 2
BASE_DECAY = 3
DECAY_PER_NEGLECT_DAY = 2
MAX_DECAY = 15

STRUCTURE_WEAR_VITALITY = 50  # structures wear below this
HEAVY_WEAR_VITALITY = 25
LIGHT_WEAR = 4
HEAVY_WEAR = 8

COMPANION_RETURN_QUESTS = 3
COMPANION_RETURN_VITALITY = 15

PRISTINE_STREAK_VITALITY = 40

BUILD_VITALITY_BONUS = 5
REPAIR_CONDITION_LIMIT = 95
MIN_REPAIR_COST = 10


# =============================================================================
# Helpers
# =============================================================================


def _clamp(value: int, low: int = 0, high: int = 100) -> int:
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _timestamp(now: Optional[datetime]) -> str:
    return (now or datetime.now(timezone.utc)).isoformat()


def _event(
    event_type: WorldEventType,
    title: str,
    description: str,
    timestamp: str,
    district_id: Optional[str] = None,
) -> WorldEvent:
    return WorldEvent(
        event_id=f"evt-{uuid.uuid4().hex[:12]}",
        event_type=event_type.value,
        title=title,
        description=description,
        timestamp=timestamp,
        district_id=district_id,
    )


def vitality_boost(quest: "Quest") -> int:
    """round(5 x difficulty x cadence). Unknown keys count as 1."""
    return round_half_up(
        BASE_VITALITY_BOOST
        * DIFFICULTY_MULTIPLIER.get(quest.difficulty, 1.0)
        * CADENCE_MULTIPLIER.get(quest.cadence, 1.0)
    )


def neglect_decay(neglect_days: int) -> int:
    return min(MAX_DECAY, BASE_DECAY + neglect_days * DECAY_PER_NEGLECT_DAY)


def repair_cost(build_cost: int, condition: int) -> int:
    """max(10, round(build_cost x damage% x 0.5)), in exact integer math."""
    half_damage = (build_cost * (100 - condition) + 100) // 200
    return max(MIN_REPAIR_COST, half_damage)


def _companion_state(state: WorldState, district_id: str) -> Optional[CompanionState]:
    definition = companion_for_district(district_id)
    if definition is None:
        return None
    return state.companion(definition.companion_id)


def check_milestones(state: WorldState, events: list[WorldEvent], timestamp: str) -> None:
    """Award every newly satisfied milestone. Earned ones are never re-awarded."""
    for definition in MILESTONES:
        milestone = state.milestone(definition.milestone_id)
        if milestone is None or milestone.is_earned:
            continue
        if definition.condition(state):
            milestone.is_earned = True
            milestone.earned_at = timestamp
            events.append(
                _event(
                    WorldEventType.MILESTONE,
                    f"Milestone: {definition.name}",
                    definition.description,
                    timestamp,
                )
            )
            logger.info("Milestone earned: %s", definition.milestone_id)


def _require(condition: bool, message: str) -> None:
    if not condition:
        raise WorldInvariantError(message)


def check_invariants(before: Optional[WorldState], after: WorldState) -> None:
    """Raise WorldInvariantError when `after` is not a legal successor of `before`."""
    for district in after.districts:
        _require(
            0 <= district.vitality <= 100,
            f"{district.district_id} vitality {district.vitality} out of range",
        )
        for structure in district.structures:
            _require(
                0 <= structure.condition <= 100,
                f"{structure.structure_id} condition {structure.condition} out of range",
            )
    for companion in after.companions:
        _require(
            0 <= companion.loyalty <= 100,
            f"{companion.companion_id} loyalty {companion.loyalty} out of range",
        )
    _require(1 <= after.era <= 5, f"era {after.era} out of range")
    _require(len(after.events) <= EVENT_CAP, "event log exceeds cap")

    built = sum(s.is_built for d in after.districts for s in d.structures)
    _require(
        after.total_structures_built == built,
        f"total_structures_built {after.total_structures_built} != {built} built",
    )

    if before is None:
        return

    _require(after.era >= before.era, f"era went back {before.era} -> {after.era}")

    for old in before.districts:
        new = after.district(old.district_id)
        _require(
            not old.is_unlocked or (new is not None and new.is_unlocked),
            f"district {old.district_id} re-locked",
        )
        for old_structure in old.structures:
            new_structure = new.structure(old_structure.structure_id) if new else None
            _require(
                not old_structure.is_built
                or (new_structure is not None and new_structure.is_built),
                f"structure {old_structure.structure_id} un-built",
            )
    for old_exp in before.expeditions:
        new_exp = after.expedition(old_exp.expedition_id)
        _require(
            not old_exp.is_unlocked or (new_exp is not None and new_exp.is_unlocked),
            f"expedition {old_exp.expedition_id} re-locked",
        )
        _require(
            not old_exp.is_completed or (new_exp is not None and new_exp.is_completed),
            f"expedition {old_exp.expedition_id} un-completed",
        )
    for old_ms in before.milestones:
        new_ms = after.milestone(old_ms.milestone_id)
        _require(
            not old_ms.is_earned or (new_ms is not None and new_ms.is_earned),
            f"milestone {old_ms.milestone_id} un-earned",
        )


def _commit(
    before: WorldState,
    after: WorldState,
    events: list[WorldEvent],
    timestamp: str,
) -> None:
    after.events = (events + after.events)[:EVENT_CAP]
    after.last_processed_at = timestamp
    check_invariants(before, after)


# =============================================================================
# Initial state
# =============================================================================


def create_initial_world_state(
    nexus_name: str, now: Optional[datetime] = None
) -> WorldState:
    """Fresh world: level-1 districts unlocked at STABLE, their companions present."""
    timestamp = _timestamp(now)

    districts = []
    for definition in DISTRICTS:
        starts_unlocked = definition.unlock_level <= 1
        districts.append(
            DistrictState(
                district_id=definition.district_id,
                is_unlocked=starts_unlocked,
                vitality=UNLOCK_VITALITY if starts_unlocked else 0,
                structures=[
                    StructureState(structure_id=s.structure_id)
                    for s in STRUCTURES
                    if s.district_id == definition.district_id
                ],
                unlocked_at=timestamp if starts_unlocked else None,
            )
        )

    companions = []
    for definition in COMPANIONS:
        district = get_district(definition.district_id)
        present = district is not None and district.unlock_level <= 1
        companions.append(
            CompanionState(
                companion_id=definition.companion_id,
                is_present=present,
                mood=(CompanionMood.NEUTRAL if present else CompanionMood.ABSENT).value,
                joined_at=timestamp if present else None,
            )
        )

    state = WorldState(
        nexus_name=nexus_name,
        founded_at=timestamp,
        districts=districts,
        companions=companions,
        expeditions=[ExpeditionState(expedition_id=e.expedition_id) for e in EXPEDITIONS],
        milestones=[MilestoneState(milestone_id=m.milestone_id) for m in MILESTONES],
        last_processed_at=timestamp,
    )
    state.events = [
        _event(
            WorldEventType.UNLOCK,
            "The Nexus Awakens",
            f"{nexus_name} has been founded on the frontier. The Forge and Archive "
            "stand ready. Your journey begins.",
            timestamp,
        )
    ]
    check_invariants(None, state)
    return state


# =============================================================================
# Quest completion / un-completion
# =============================================================================


def on_quest_completed(
    state: WorldState,
    quest: "Quest",
    player: "PlayerProgress",
    now: Optional[datetime] = None,
) -> EngineResult:
    new_state = copy.deepcopy(state)
    events: list[WorldEvent] = []
    timestamp = _timestamp(now)
    boost = vitality_boost(quest)

    for stat in resolve_affected_stats(quest):
        definition = district_for_stat(stat)
        if definition is None:
            continue
        district = new_state.district(definition.district_id)
        if district is None or not district.is_unlocked:
            continue

        old_vitality = district.vitality
        old_condition = district_condition(old_vitality)
        district.vitality = _clamp(district.vitality + boost)
        district.consecutive_neglect_days = 0
        new_condition = district_condition(district.vitality)

        if old_condition in CRITICAL_CONDITIONS and new_condition not in CRITICAL_CONDITIONS:
            new_state.total_recoveries += 1
            events.append(
                _event(
                    WorldEventType.RECOVERY,
                    f"{definition.name} Recovering",
                    recovery_narrative(definition.district_id, old_vitality),
                    timestamp,
                    definition.district_id,
                )
            )

        companion = _companion_state(new_state, definition.district_id)
        if companion is None:
            continue
        companion.loyalty = _clamp(companion.loyalty + 1)

        if companion.is_present:
            companion.mood = companion_mood(district.vitality, companion.loyalty).value
            continue

        companion.quests_since_return += 1
        if (
            companion.quests_since_return >= COMPANION_RETURN_QUESTS
            and district.vitality >= COMPANION_RETURN_VITALITY
        ):
            companion.is_present = True
            companion.mood = CompanionMood.NEUTRAL.value
            companion.left_at = None
            companion.quests_since_return = 0
            companion_name = companion_for_district(definition.district_id).name
            events.append(
                _event(
                    WorldEventType.COMPANION,
                    f"{companion_name} Returns",
                    f'{companion_name} has returned to {definition.name}. '
                    '"I knew you\'d come back," they say quietly.',
                    timestamp,
                    definition.district_id,
                )
            )

    # era only moves forward even if the player levels down
    new_era = max(new_state.era, calculate_era(player.level))
    if new_era > new_state.era:
        new_state.era = new_era
        events.append(
            _event(
                WorldEventType.MILESTONE,
                f"Era of {ERA_NAMES[new_era]}",
                era_transition_narrative(new_era),
                timestamp,
            )
        )

    for definition in DISTRICTS:
        district = new_state.district(definition.district_id)
        if district is None or district.is_unlocked or player.level < definition.unlock_level:
            continue
        district.is_unlocked = True
        district.unlocked_at = timestamp
        district.vitality = UNLOCK_VITALITY

        companion = _companion_state(new_state, definition.district_id)
        if companion is not None:
            companion.is_present = True
            companion.mood = CompanionMood.NEUTRAL.value
            companion.joined_at = timestamp

        events.append(
            _event(
                WorldEventType.UNLOCK,
                f"{definition.name} Discovered",
                f"A new region emerges from the fog. {definition.tagline}.",
                timestamp,
                definition.district_id,
            )
        )

    for definition in EXPEDITIONS:
        expedition = new_state.expedition(definition.expedition_id)
        if expedition is None or expedition.is_unlocked:
            continue
        stat_value = player.stats.get(definition.required_stat, 0)
        if (
            player.level >= definition.required_level
            and stat_value >= definition.required_stat_value
        ):
            expedition.is_unlocked = True
            events.append(
                _event(
                    WorldEventType.DISCOVERY,
                    "New Expedition Available",
                    f'"{definition.name}": {definition.silhouette_hint}',
                    timestamp,
                )
            )

    check_milestones(new_state, events, timestamp)
    _commit(state, new_state, events, timestamp)

    logger.debug(
        "Quest %s completed: boost=%d events=%d", quest.quest_id, boost, len(events)
    )
    return EngineResult(state=new_state, events=events)


def on_quest_uncompleted(
    state: WorldState,
    quest: "Quest",
    now: Optional[datetime] = None,
) -> EngineResult:
    """Reverse the completion vitality boost. Emits nothing, awards nothing."""
    new_state = copy.deepcopy(state)
    timestamp = _timestamp(now)
    boost = vitality_boost(quest)

    for stat in resolve_affected_stats(quest):
        definition = district_for_stat(stat)
        if definition is None:
            continue
        district = new_state.district(definition.district_id)
        if district is None or not district.is_unlocked:
            continue

        district.vitality = _clamp(district.vitality - boost)

        companion = _companion_state(new_state, definition.district_id)
        if companion is not None and companion.is_present:
            companion.mood = companion_mood(district.vitality, companion.loyalty).value

    _commit(state, new_state, [], timestamp)
    return EngineResult(state=new_state, events=[])


# =============================================================================
# Daily decay
# =============================================================================


def on_daily_decay(
    state: WorldState,
    completed_stats_today: Iterable[str],
    now: Optional[datetime] = None,
) -> EngineResult:
    """One day boundary. Active districts +2, neglected ones decay faster each day."""
    new_state = copy.deepcopy(state)
    events: list[WorldEvent] = []
    timestamp = _timestamp(now)
    active_stats = set(completed_stats_today)

    for definition in DISTRICTS:
        district = new_state.district(definition.district_id)
        if district is None or not district.is_unlocked:
            continue

        was_active = definition.linked_stat in active_stats
        old_condition = district_condition(district.vitality)

        if was_active:
            district.vitality = _clamp(district.vitality + ACTIVE_DAY_BONUS)
            district.consecutive_neglect_days = 0
        else:
            district.consecutive_neglect_days += 1
            district.vitality = _clamp(
                district.vitality - neglect_decay(district.consecutive_neglect_days)
            )

        new_condition = district_condition(district.vitality)
        if (
            not was_active
            and new_condition != old_condition
            and new_condition in DECAY_CONDITIONS
        ):
            events.append(
                _event(
                    WorldEventType.DECAY,
                    f"{definition.name}: {new_condition.value}",
                    decay_description(definition.district_id, new_condition),
                    timestamp,
                    definition.district_id,
                )
            )

        if district.vitality < STRUCTURE_WEAR_VITALITY:
            wear = HEAVY_WEAR if district.vitality < HEAVY_WEAR_VITALITY else LIGHT_WEAR
            for structure in district.structures:
                if structure.is_built and structure.condition > 0:
                    structure.condition = _clamp(structure.condition - wear)

        companion = _companion_state(new_state, definition.district_id)
        if companion is None or not companion.is_present:
            continue

        if district.vitality < COMPANION_DEPART_VITALITY:
            companion.is_present = False
            companion.mood = CompanionMood.ABSENT.value
            companion.left_at = timestamp
            companion.quests_since_return = 0
            companion_name = companion_for_district(definition.district_id).name
            events.append(
                _event(
                    WorldEventType.COMPANION,
                    f"{companion_name} Has Left",
                    f"{definition.name} has fallen too far. {companion_name} has "
                    "departed, but may return if conditions improve.",
                    timestamp,
                    definition.district_id,
                )
            )
        else:
            companion.mood = companion_mood(district.vitality, companion.loyalty).value
            if not was_active:
                companion.loyalty = _clamp(companion.loyalty - 1)

    unlocked = new_state.unlocked_districts()
    if unlocked and all(d.vitality >= PRISTINE_STREAK_VITALITY for d in unlocked):
        new_state.current_pristine_streak += 1
        new_state.longest_pristine_streak = max(
            new_state.longest_pristine_streak, new_state.current_pristine_streak
        )
    else:
        new_state.current_pristine_streak = 0

    check_milestones(new_state, events, timestamp)
    _commit(state, new_state, events, timestamp)

    logger.debug(
        "Daily decay: active=%s pristine_streak=%d events=%d",
        sorted(active_stats),
        new_state.current_pristine_streak,
        len(events),
    )
    return EngineResult(state=new_state, events=events)


# =============================================================================
# Player actions
# =============================================================================


def build_structure(
    state: WorldState,
    district_id: str,
    structure_id: str,
    player_level: int,
    player_credits: int,
    now: Optional[datetime] = None,
) -> Union[BuildResult, EngineError]:
    definition = get_structure(structure_id)
    if definition is None:
        return EngineError("Structure not found.")
    if definition.district_id != district_id:
        return EngineError("Structure does not belong to this district.")

    district = state.district(district_id)
    if district is None or not district.is_unlocked:
        return EngineError("District is not yet unlocked.")

    structure = district.structure(structure_id)
    if structure is None:
        return EngineError("Structure slot not found.")
    if structure.is_built:
        return EngineError("Structure is already built.")

    if player_level < definition.unlock_level:
        return EngineError(
            f"Requires level {definition.unlock_level}. Current: {player_level}."
        )

    prev = previous_tier(definition)
    if prev is not None:
        prev_state = district.structure(prev.structure_id)
        if prev_state is None or not prev_state.is_built:
            return EngineError(f"Build {prev.name} first (Tier {prev.tier}).")

    if player_credits < definition.build_cost:
        return EngineError(
            f"Not enough credits. Need {definition.build_cost}, have {player_credits}."
        )

    new_state = copy.deepcopy(state)
    events: list[WorldEvent] = []
    timestamp = _timestamp(now)

    new_district = new_state.district(district_id)
    new_structure = new_district.structure(structure_id)
    new_structure.is_built = True
    new_structure.condition = 100
    new_structure.built_at = timestamp
    new_state.total_structures_built += 1
    new_district.vitality = _clamp(new_district.vitality + BUILD_VITALITY_BONUS)

    district_name = get_district(district_id).name
    events.append(
        _event(
            WorldEventType.BUILD,
            f"{definition.name} Constructed",
            f"{definition.description} The {district_name} grows stronger.",
            timestamp,
            district_id,
        )
    )

    check_milestones(new_state, events, timestamp)
    _commit(state, new_state, events, timestamp)

    logger.info("Built %s for %d credits", structure_id, definition.build_cost)
    return BuildResult(state=new_state, events=events, credits_cost=definition.build_cost)


def repair_structure(
    state: WorldState,
    district_id: str,
    structure_id: str,
    player_credits: int,
    now: Optional[datetime] = None,
) -> Union[BuildResult, EngineError]:
    definition = get_structure(structure_id)
    if definition is None:
        return EngineError("Structure not found.")

    district = state.district(district_id)
    if district is None:
        return EngineError("District not found.")

    structure = district.structure(structure_id)
    if structure is None:
        return EngineError("Structure slot not found.")
    if not structure.is_built:
        return EngineError("Structure has not been built yet.")
    if structure.condition >= REPAIR_CONDITION_LIMIT:
        return EngineError("Structure is in good condition.")

    cost = repair_cost(definition.build_cost, structure.condition)
    if player_credits < cost:
        return EngineError(f"Not enough credits. Need {cost}, have {player_credits}.")

    new_state = copy.deepcopy(state)
    events: list[WorldEvent] = []
    timestamp = _timestamp(now)

    new_state.district(district_id).structure(structure_id).condition = 100
    events.append(
        _event(
            WorldEventType.RECOVERY,
            f"{definition.name} Repaired",
            f"{definition.name} has been restored to full operational capacity.",
            timestamp,
            district_id,
        )
    )

    check_milestones(new_state, events, timestamp)
    _commit(state, new_state, events, timestamp)

    logger.info("Repaired %s for %d credits", structure_id, cost)
    return BuildResult(state=new_state, events=events, credits_cost=cost)


def launch_expedition(
    state: WorldState,
    expedition_id: str,
    player_credits: int,
    player_level: int,
    player_stats: dict[str, int],
    now: Optional[datetime] = None,
) -> Union[BuildResult, EngineError]:
    definition = get_expedition(expedition_id)
    if definition is None:
        return EngineError("Expedition not found.")

    expedition = state.expedition(expedition_id)
    if expedition is None:
        return EngineError("Expedition state not found.")
    if expedition.is_completed:
        return EngineError("Expedition already completed.")
    if not expedition.is_unlocked:
        return EngineError("Expedition not yet unlocked.")

    if player_level < definition.required_level:
        return EngineError(f"Requires level {definition.required_level}.")

    stat_value = player_stats.get(definition.required_stat, 0)
    if stat_value < definition.required_stat_value:
        return EngineError(
            f"Requires {definition.required_stat} stat at "
            f"{definition.required_stat_value}. Current: {stat_value}."
        )

    if player_credits < definition.cost:
        return EngineError(
            f"Not enough credits. Need {definition.cost}, have {player_credits}."
        )

    new_state = copy.deepcopy(state)
    events: list[WorldEvent] = []
    timestamp = _timestamp(now)

    new_expedition = new_state.expedition(expedition_id)
    new_expedition.is_completed = True
    new_expedition.completed_at = timestamp

    events.append(
        _event(
            WorldEventType.DISCOVERY,
            f"Expedition Complete: {definition.name}",
            f"{definition.description}\n\n{definition.reward_description}",
            timestamp,
        )
    )

    check_milestones(new_state, events, timestamp)
    _commit(state, new_state, events, timestamp)

    logger.info("Expedition %s completed for %d credits", expedition_id, definition.cost)
    return BuildResult(state=new_state, events=events, credits_cost=definition.cost)


def mark_event_read(state: WorldState, event_id: str) -> WorldState:
    new_state = copy.deepcopy(state)
    for event in new_state.events:
        if event.event_id == event_id:
            event.is_read = True
            break
    return new_state
