"""World core package (the Nexus)"""

from src.core.world.conditions import companion_mood, district_condition
from src.core.world.engine import (
    build_structure,
    check_invariants,
    create_initial_world_state,
    launch_expedition,
    mark_event_read,
    on_daily_decay,
    on_quest_completed,
    on_quest_uncompleted,
    repair_cost,
    repair_structure,
    vitality_boost,
)
from src.core.world.enums import (
    CompanionMood,
    DistrictCondition,
    Rarity,
    WorldEventType,
)
from src.core.world.models import (
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
from src.core.world.summary import world_artifacts, world_context_for_gm, world_title

__all__ = [
    # enums
    "CompanionMood",
    "DistrictCondition",
    "Rarity",
    "WorldEventType",
    # models
    "WorldState",
    "DistrictState",
    "StructureState",
    "CompanionState",
    "ExpeditionState",
    "MilestoneState",
    "WorldEvent",
    "EngineResult",
    "BuildResult",
    "EngineError",
    "WorldInvariantError",
    # conditions
    "district_condition",
    "companion_mood",
    # engine
    "create_initial_world_state",
    "on_quest_completed",
    "on_quest_uncompleted",
    "on_daily_decay",
    "build_structure",
    "repair_structure",
    "launch_expedition",
    "mark_event_read",
    "check_invariants",
    "vitality_boost",
    "repair_cost",
    # summary
    "world_title",
    "world_artifacts",
    "world_context_for_gm",
]
