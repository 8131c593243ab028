"""Static world data: districts, structures, companions, expeditions, milestones

Definitions never change at runtime; WorldState only stores per-player
progress keyed by the ids below.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional

from src.core.world.enums import CompanionMood, Rarity

if TYPE_CHECKING:
    from src.core.world.models import WorldState


ERA_NAMES = {
    1: "Foundation",
    2: "Expansion",
    3: "Prosperity",
    4: "Dominion",
    5: "Transcendence",
}

ERA_DESCRIPTIONS = {
    1: "A fragile beginning. Every choice matters.",
    2: "The settlement grows. New possibilities emerge.",
    3: "Stability breeds ambition. The Nexus thrives.",
    4: "Your influence reshapes the frontier.",
    5: "Beyond mastery. The Nexus transcends its origins.",
}

# (min player level, era), highest first
ERA_THRESHOLDS = ((50, 5), (30, 4), (15, 3), (5, 2), (1, 1))


@dataclass(frozen=True)
class DistrictDefinition:
    district_id: str
    name: str
    tagline: str
    description: str
    linked_stat: str
    unlock_level: int


@dataclass(frozen=True)
class StructureDefinition:
    structure_id: str
    name: str
    description: str
    district_id: str
    tier: int
    unlock_level: int
    build_cost: int


@dataclass(frozen=True)
class CompanionDefinition:
    companion_id: str
    name: str
    role: str
    personality: str
    district_id: str


@dataclass(frozen=True)
class ExpeditionDefinition:
    expedition_id: str
    name: str
    silhouette_hint: str
    description: str
    required_level: int
    required_stat: str
    required_stat_value: int
    cost: int
    reward_description: str


@dataclass(frozen=True)
class MilestoneDefinition:
    milestone_id: str
    name: str
    description: str
    rarity: Rarity
    condition: Callable[["WorldState"], bool]


# =============================================================================
# Districts (one per player stat)
# =============================================================================

DISTRICTS: tuple[DistrictDefinition, ...] = (
    DistrictDefinition(
        "forge",
        "The Forge",
        "Where discipline becomes power",
        "The physical training grounds of your Nexus. Raw potential is "
        "hammered into strength through sweat and perseverance.",
        "physical",
        1,
    ),
    DistrictDefinition(
        "archive",
        "The Archive",
        "Knowledge is the only true currency",
        "A vast repository of knowledge and research. Every insight gathered "
        "strengthens the neural pathways of your settlement.",
        "cognitive",
        1,
    ),
    DistrictDefinition(
        "sanctum",
        "The Sanctum",
        "Still water runs deepest",
        "A place of inner peace and clarity. The Sanctum strengthens the mind "
        "against the storms of daily life.",
        "mental",
        2,
    ),
    DistrictDefinition(
        "command",
        "Command Center",
        "Vision without execution is hallucination",
        "The strategic heart of your Nexus. Operations are coordinated and "
        "ambitions are translated into action.",
        "career",
        3,
    ),
    DistrictDefinition(
        "vault",
        "The Vault",
        "Fortune favors the prepared",
        "Your financial stronghold. Resources flow in and out, but prosperity "
        "is built through consistent stewardship.",
        "financial",
        3,
    ),
    DistrictDefinition(
        "atelier",
        "The Atelier",
        "Create what has never existed",
        "The creative workshop of your Nexus. Ideas are born here, refined, "
        "and unleashed upon the world.",
        "creative",
        5,
    ),
)


# =============================================================================
# Structures (5 tiers per district)
# =============================================================================

BUILD_COSTS = (100, 300, 750, 1500, 3000)

_STRUCTURE_TABLE = {
    "forge": (
        (1, "Training Grounds", "Basic training area for physical conditioning."),
        (5, "Sparring Arena", "A competitive arena for pushing physical limits."),
        (12, "Bio-Enhancement Lab", "Advanced recovery and performance optimization."),
        (22, "Graviton Gym", "Variable-gravity training for peak conditioning."),
        (38, "Nexus Colosseum", "The ultimate proving ground. A monument to physical mastery."),
    ),
    "archive": (
        (1, "Data Terminal", "Access point for basic knowledge queries."),
        (5, "Research Wing", "Dedicated space for deep study and analysis."),
        (12, "Neural Library", "Direct-interface knowledge repository."),
        (22, "Quantum Lab", "Experimental research at the edge of understanding."),
        (38, "Omniscience Core", "The pinnacle of intellectual achievement. Knowledge bends here."),
    ),
    "sanctum": (
        (2, "Meditation Pod", "A quiet space for daily reflection."),
        (6, "Reflection Pool", "Still waters for deep introspection."),
        (13, "Mindscape Garden", "A living garden that mirrors inner tranquility."),
        (24, "Serenity Spire", "A tower of calm rising above all turbulence."),
        (40, "Transcendence Chamber", "The boundary between mind and universe dissolves here."),
    ),
    "command": (
        (3, "Comms Array", "Basic communications and coordination hub."),
        (8, "Operations Deck", "Centralized operations management."),
        (15, "Strategy Room", "Advanced planning and tactical analysis."),
        (25, "Fleet Bridge", "Command and control for all Nexus operations."),
        (42, "Sovereign Throne", "The seat of absolute authority. Your will shapes reality."),
    ),
    "vault": (
        (3, "Lockbox", "Secure storage for basic resources."),
        (8, "Trade Post", "Facilitates resource exchange and growth."),
        (15, "Crypto Forge", "Advanced financial instruments and wealth generation."),
        (25, "Reserve Bank", "Institutional-grade financial infrastructure."),
        (42, "Economic Engine", "The beating heart of prosperity. Wealth flows like water."),
    ),
    "atelier": (
        (5, "Sketch Bench", "Where raw ideas first take shape."),
        (10, "Maker's Workshop", "Tools and materials for bringing visions to life."),
        (16, "Holographic Studio", "Create in three dimensions. Ideas float in light."),
        (28, "Innovation Lab", "Where impossible ideas become prototypes."),
        (45, "Creation Engine", "Reality bends to imagination. The ultimate creative tool."),
    ),
}

STRUCTURES: tuple[StructureDefinition, ...] = tuple(
    StructureDefinition(
        structure_id=f"{district_id}-t{tier}",
        name=name,
        description=description,
        district_id=district_id,
        tier=tier,
        unlock_level=unlock_level,
        build_cost=BUILD_COSTS[tier - 1],
    )
    for district_id, tiers in _STRUCTURE_TABLE.items()
    for tier, (unlock_level, name, description) in enumerate(tiers, start=1)
)

TOTAL_STRUCTURES = len(STRUCTURES)


# =============================================================================
# Companions (one per district)
# =============================================================================

COMPANIONS: tuple[CompanionDefinition, ...] = (
    CompanionDefinition("kael", "Kael", "Combat Trainer",
                        "Disciplined and direct. Respects effort over results.", "forge"),
    CompanionDefinition("lyra", "Lyra", "Chief Archivist",
                        "Endlessly curious. Finds beauty in knowledge.", "archive"),
    CompanionDefinition("sage", "Sage", "Mindkeeper",
                        "Calm and perceptive. Speaks in truths, not judgments.", "sanctum"),
    CompanionDefinition("vex", "Vex", "Operations Officer",
                        "Strategic and pragmatic. Values execution above all.", "command"),
    CompanionDefinition("nyx", "Nyx", "Treasurer",
                        "Shrewd but fair. Sees value in patience.", "vault"),
    CompanionDefinition("echo", "Echo", "Chief Artisan",
                        "Eccentric and passionate. Celebrates every act of creation.", "atelier"),
)


# =============================================================================
# Expeditions
# =============================================================================

EXPEDITIONS: tuple[ExpeditionDefinition, ...] = (
    ExpeditionDefinition(
        "exp-signal",
        "Signal in the Deep",
        "A faint pulse echoes from beneath the surface...",
        "You follow a mysterious signal deep underground, discovering an ancient "
        "training sanctum carved into living rock.",
        5, "physical", 25, 200,
        "Discovered the Sunken Arena, a hidden chamber that accelerates Forge recovery.",
    ),
    ExpeditionDefinition(
        "exp-codex",
        "The Lost Codex",
        "Fragments of an unknown language appear in your data streams...",
        "A corrupted data fragment leads you to an ancient repository of forgotten "
        "knowledge, preserved in crystalline memory.",
        10, "cognitive", 30, 400,
        "Recovered the Codex of Synthesis, knowledge that accelerates Archive growth.",
    ),
    ExpeditionDefinition(
        "exp-ghost",
        "Ghost Fleet",
        "Derelict ships drift at the edge of scanner range...",
        "You investigate abandoned vessels adrift in the void, salvaging command "
        "protocols from a civilization that vanished overnight.",
        8, "career", 25, 300,
        "Salvaged the Admiral's Protocols, command artifacts that bolster operational authority.",
    ),
    ExpeditionDefinition(
        "exp-treasury",
        "The Sunken Treasury",
        "Your sensors detect refined metals in an inaccessible region...",
        "A hidden cache of resources from a bygone era. The wealth within is "
        "staggering, preserved behind ancient cryptographic seals.",
        6, "financial", 20, 250,
        "Found the Midas Catalyst, a relic that reduces all structure build costs by 10%.",
    ),
    ExpeditionDefinition(
        "exp-dream",
        "Dreamwalker's Path",
        "Your dreams have been unusually vivid lately...",
        "Through deep meditation, you access a plane of pure consciousness. You "
        "return with clarity that radiates outward.",
        15, "mental", 35, 500,
        "Achieved Dreamwalker Status. The Sanctum radiates calm that slows decay "
        "across all districts.",
    ),
    ExpeditionDefinition(
        "exp-resonance",
        "The Resonance",
        "Colors appear where none should exist. Something is calling...",
        "You tune into a frequency of pure creative energy that permeates the "
        "frontier. Channeling it transforms the Atelier.",
        12, "creative", 30, 400,
        "Harnessed The Resonance. Structures in the Atelier slowly self-repair over time.",
    ),
)


# =============================================================================
# Milestones (predicates are evaluated at runtime, never persisted)
# =============================================================================


def _ironclad(state: "WorldState") -> bool:
    unlocked = state.unlocked_districts()
    return len(unlocked) >= 2 and all(d.vitality >= 80 for d in unlocked)


def _beloved(state: "WorldState") -> bool:
    present = [c for c in state.companions if c.is_present]
    return len(present) >= 3 and all(
        c.mood == CompanionMood.ELATED.value for c in present
    )


MILESTONES: tuple[MilestoneDefinition, ...] = (
    MilestoneDefinition(
        "ms-first-build", "First Foundation", "Build your first structure.",
        Rarity.COMMON, lambda s: s.total_structures_built >= 1,
    ),
    MilestoneDefinition(
        "ms-all-districts", "Pioneer", "Unlock all six districts.",
        Rarity.UNCOMMON, lambda s: all(d.is_unlocked for d in s.districts),
    ),
    MilestoneDefinition(
        "ms-10-structures", "Architect", "Build 10 structures across your Nexus.",
        Rarity.UNCOMMON, lambda s: s.total_structures_built >= 10,
    ),
    MilestoneDefinition(
        "ms-20-structures", "Master Builder",
        "Build 20 structures. Your Nexus is becoming a wonder.",
        Rarity.RARE, lambda s: s.total_structures_built >= 20,
    ),
    MilestoneDefinition(
        "ms-all-structures", "World Shaper",
        "Build all 30 structures. The Nexus is complete.",
        Rarity.LEGENDARY, lambda s: s.total_structures_built >= TOTAL_STRUCTURES,
    ),
    MilestoneDefinition(
        "ms-phoenix", "Phoenix Rising",
        "Recover a district from critical condition. Resilience matters more "
        "than perfection.",
        Rarity.UNCOMMON, lambda s: s.total_recoveries >= 1,
    ),
    MilestoneDefinition(
        "ms-ironclad", "Ironclad",
        "All unlocked districts in PRISTINE condition simultaneously.",
        Rarity.RARE, _ironclad,
    ),
    MilestoneDefinition(
        "ms-explorer", "Explorer",
        "Complete your first expedition into the unknown.",
        Rarity.UNCOMMON, lambda s: any(e.is_completed for e in s.expeditions),
    ),
    MilestoneDefinition(
        "ms-cartographer", "Cartographer",
        "Complete all expeditions. The frontier holds no more secrets.",
        Rarity.LEGENDARY,
        lambda s: bool(s.expeditions) and all(e.is_completed for e in s.expeditions),
    ),
    MilestoneDefinition(
        "ms-beloved", "Beloved", "All present companions at ELATED mood.",
        Rarity.RARE, _beloved,
    ),
    MilestoneDefinition(
        "ms-streak-7", "Steadfast",
        "Maintain all districts above STABLE for 7 consecutive days.",
        Rarity.UNCOMMON, lambda s: s.current_pristine_streak >= 7,
    ),
    MilestoneDefinition(
        "ms-streak-30", "Unyielding",
        "Maintain all districts above STABLE for 30 consecutive days.",
        Rarity.LEGENDARY, lambda s: s.current_pristine_streak >= 30,
    ),
)


# =============================================================================
# Lookups
# =============================================================================

_DISTRICTS_BY_ID = {d.district_id: d for d in DISTRICTS}
_DISTRICTS_BY_STAT = {d.linked_stat: d for d in DISTRICTS}
_STRUCTURES_BY_ID = {s.structure_id: s for s in STRUCTURES}
_COMPANIONS_BY_DISTRICT = {c.district_id: c for c in COMPANIONS}
_EXPEDITIONS_BY_ID = {e.expedition_id: e for e in EXPEDITIONS}
_MILESTONES_BY_ID = {m.milestone_id: m for m in MILESTONES}


def get_district(district_id: str) -> Optional[DistrictDefinition]:
    return _DISTRICTS_BY_ID.get(district_id)


def district_for_stat(stat: str) -> Optional[DistrictDefinition]:
    return _DISTRICTS_BY_STAT.get(stat)


def get_structure(structure_id: str) -> Optional[StructureDefinition]:
    return _STRUCTURES_BY_ID.get(structure_id)


def previous_tier(structure: StructureDefinition) -> Optional[StructureDefinition]:
    """Tier N-1 in the same district, None for tier 1."""
    if structure.tier <= 1:
        return None
    return _STRUCTURES_BY_ID.get(f"{structure.district_id}-t{structure.tier - 1}")


def companion_for_district(district_id: str) -> Optional[CompanionDefinition]:
    return _COMPANIONS_BY_DISTRICT.get(district_id)


def get_expedition(expedition_id: str) -> Optional[ExpeditionDefinition]:
    return _EXPEDITIONS_BY_ID.get(expedition_id)


def get_milestone(milestone_id: str) -> Optional[MilestoneDefinition]:
    return _MILESTONES_BY_ID.get(milestone_id)


def calculate_era(level: int) -> int:
    for threshold, era in ERA_THRESHOLDS:
        if level >= threshold:
            return era
    return 1
