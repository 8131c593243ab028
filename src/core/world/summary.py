"""Read-only world views: title, shareable artifacts, GM context

Consumers compare what was built, not raw XP.
"""

from dataclasses import dataclass
from typing import Optional

from src.core.world.conditions import district_condition
from src.core.world.definitions import (
    DISTRICTS,
    ERA_NAMES,
    TOTAL_STRUCTURES,
    companion_for_district,
    get_milestone,
)
from src.core.world.enums import Rarity
from src.core.world.models import WorldState

# (min structures, min average vitality, title), first match wins
WORLD_TITLES = (
    (30, 80, "Transcendent Nexus"),
    (25, 70, "Legendary Bastion"),
    (20, 60, "Grand Citadel"),
    (15, 50, "Prosperous Haven"),
    (10, 40, "Thriving Nexus"),
    (5, None, "Growing Colony"),
    (1, None, "Fledgling Settlement"),
)


@dataclass(frozen=True)
class WorldArtifact:
    artifact_type: str  # TITLE | MILESTONE | RECOVERY | SNAPSHOT
    label: str
    description: str
    rarity: Rarity
    earned_at: Optional[str] = None


def average_vitality(state: WorldState) -> float:
    """Mean over all districts, locked ones count as 0."""
    if not state.districts:
        return 0.0
    return sum(d.vitality for d in state.districts) / len(state.districts)


def world_title(state: WorldState) -> str:
    avg = average_vitality(state)
    built = state.total_structures_built

    for min_built, min_vitality, title in WORLD_TITLES:
        if built >= min_built and (min_vitality is None or avg >= min_vitality):
            return title
    if avg < 15 and state.unlocked_districts():
        return "Abandoned Outpost"
    return "Uncharted Territory"


def _tiered_rarity(value: int, tiers: tuple[tuple[int, Rarity], ...], default: Rarity) -> Rarity:
    for floor, rarity in tiers:
        if value >= floor:
            return rarity
    return default


def world_artifacts(state: WorldState) -> list[WorldArtifact]:
    title = world_title(state)
    artifacts = [
        WorldArtifact(
            artifact_type="TITLE",
            label=title,
            description=f"{state.nexus_name}: {title}",
            rarity=_tiered_rarity(
                state.total_structures_built,
                ((25, Rarity.LEGENDARY), (15, Rarity.RARE), (5, Rarity.UNCOMMON)),
                Rarity.COMMON,
            ),
        )
    ]

    for milestone in state.milestones:
        if not milestone.is_earned:
            continue
        definition = get_milestone(milestone.milestone_id)
        if definition is None:
            continue
        artifacts.append(
            WorldArtifact(
                artifact_type="MILESTONE",
                label=definition.name,
                description=definition.description,
                rarity=definition.rarity,
                earned_at=milestone.earned_at,
            )
        )

    recoveries = state.total_recoveries
    if recoveries > 0:
        plural = "s" if recoveries > 1 else ""
        artifacts.append(
            WorldArtifact(
                artifact_type="RECOVERY",
                label=f"{recoveries}x Recovery",
                description=(
                    f"Recovered from critical conditions {recoveries} time{plural}. "
                    "Resilience, not perfection."
                ),
                rarity=_tiered_rarity(
                    recoveries, ((5, Rarity.LEGENDARY), (3, Rarity.RARE)), Rarity.UNCOMMON
                ),
            )
        )

    founded = state.founded_at[:10]  # ISO date part
    artifacts.append(
        WorldArtifact(
            artifact_type="SNAPSHOT",
            label=(
                f"{state.total_structures_built} Structures · "
                f"{len(state.unlocked_districts())} Districts"
            ),
            description=f"Era of {ERA_NAMES.get(state.era, 'Foundation')} · Founded {founded}",
            rarity=Rarity.COMMON,
            earned_at=state.founded_at,
        )
    )
    return artifacts


def world_context_for_gm(state: WorldState) -> str:
    """Plain-text world summary handed to the AI game master."""
    lines = [
        f'[NEXUS STATE: "{state.nexus_name}", {world_title(state)}]',
        f"Era: {ERA_NAMES.get(state.era, 'Foundation')} | "
        f"Structures: {state.total_structures_built}/{TOTAL_STRUCTURES} | "
        f"Recoveries: {state.total_recoveries}",
    ]

    for definition in DISTRICTS:
        district = state.district(definition.district_id)
        if district is None:
            continue
        if not district.is_unlocked:
            lines.append(
                f"  {definition.name}: [LOCKED, requires level {definition.unlock_level}]"
            )
            continue

        built = sum(s.is_built for s in district.structures)
        line = (
            f"  {definition.name}: {district_condition(district.vitality).value} "
            f"({district.vitality}%) | {built}/{len(district.structures)} structures"
        )
        companion_def = companion_for_district(definition.district_id)
        companion = state.companion(companion_def.companion_id) if companion_def else None
        if companion is not None:
            line += f" | {companion_def.name}: {companion.mood}"
        lines.append(line)

        if district.consecutive_neglect_days > 0:
            lines.append(f"    ! {district.consecutive_neglect_days} days neglected")

    unread = [e for e in state.events if not e.is_read][:3]
    if unread:
        lines.append("")
        lines.append("Recent world events:")
        for event in unread:
            lines.append(f"  - {event.title}: {event.description[:80]}...")

    return "\n".join(lines)
