"""World state models (DB independent)

The whole WorldState is persisted as one JSON document; to_dict/from_dict
are the only serialization path.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Optional

EVENT_CAP = 50


@dataclass
class StructureState:
    structure_id: str
    is_built: bool = False
    condition: int = 100  # 0-100
    built_at: Optional[str] = None


@dataclass
class DistrictState:
    district_id: str
    is_unlocked: bool = False
    vitality: int = 0  # 0-100
    structures: list[StructureState] = field(default_factory=list)
    consecutive_neglect_days: int = 0
    unlocked_at: Optional[str] = None

    def structure(self, structure_id: str) -> Optional[StructureState]:
        return next((s for s in self.structures if s.structure_id == structure_id), None)


@dataclass
class CompanionState:
    companion_id: str
    is_present: bool = False
    loyalty: int = 0  # 0-100
    mood: str = "ABSENT"  # CompanionMood value
    quests_since_return: int = 0
    joined_at: Optional[str] = None
    left_at: Optional[str] = None


@dataclass
class ExpeditionState:
    expedition_id: str
    is_unlocked: bool = False
    is_completed: bool = False
    completed_at: Optional[str] = None


@dataclass
class MilestoneState:
    milestone_id: str
    is_earned: bool = False
    earned_at: Optional[str] = None


@dataclass
class WorldEvent:
    event_id: str
    event_type: str  # WorldEventType value
    title: str
    description: str
    timestamp: str
    district_id: Optional[str] = None
    is_read: bool = False


@dataclass
class WorldState:
    """One per player."""

    nexus_name: str
    founded_at: str
    era: int = 1  # 1-5, never decreases

    districts: list[DistrictState] = field(default_factory=list)
    companions: list[CompanionState] = field(default_factory=list)
    expeditions: list[ExpeditionState] = field(default_factory=list)
    milestones: list[MilestoneState] = field(default_factory=list)
    events: list[WorldEvent] = field(default_factory=list)  # newest first

    last_processed_at: str = ""
    last_decay_on: Optional[str] = None  # ISO date of the last daily decay

    total_structures_built: int = 0
    total_recoveries: int = 0
    current_pristine_streak: int = 0
    longest_pristine_streak: int = 0

    # === lookups ===

    def district(self, district_id: str) -> Optional[DistrictState]:
        return next((d for d in self.districts if d.district_id == district_id), None)

    def companion(self, companion_id: str) -> Optional[CompanionState]:
        return next(
            (c for c in self.companions if c.companion_id == companion_id), None
        )

    def expedition(self, expedition_id: str) -> Optional[ExpeditionState]:
        return next(
            (e for e in self.expeditions if e.expedition_id == expedition_id), None
        )

    def milestone(self, milestone_id: str) -> Optional[MilestoneState]:
        return next(
            (m for m in self.milestones if m.milestone_id == milestone_id), None
        )

    def unlocked_districts(self) -> list[DistrictState]:
        return [d for d in self.districts if d.is_unlocked]

    # === serialization ===

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WorldState:
        return cls(
            nexus_name=data["nexus_name"],
            founded_at=data["founded_at"],
            era=data.get("era", 1),
            districts=[
                DistrictState(
                    district_id=d["district_id"],
                    is_unlocked=d.get("is_unlocked", False),
                    vitality=d.get("vitality", 0),
                    structures=[StructureState(**s) for s in d.get("structures", [])],
                    consecutive_neglect_days=d.get("consecutive_neglect_days", 0),
                    unlocked_at=d.get("unlocked_at"),
                )
                for d in data.get("districts", [])
            ],
            companions=[CompanionState(**c) for c in data.get("companions", [])],
            expeditions=[ExpeditionState(**e) for e in data.get("expeditions", [])],
            milestones=[MilestoneState(**m) for m in data.get("milestones", [])],
            events=[WorldEvent(**e) for e in data.get("events", [])],
            last_processed_at=data.get("last_processed_at", ""),
            last_decay_on=data.get("last_decay_on"),
            total_structures_built=data.get("total_structures_built", 0),
            total_recoveries=data.get("total_recoveries", 0),
            current_pristine_streak=data.get("current_pristine_streak", 0),
            longest_pristine_streak=data.get("longest_pristine_streak", 0),
        )


# === Engine results ===


@dataclass
class EngineResult:
    state: WorldState
    events: list[WorldEvent] = field(default_factory=list)


@dataclass
class BuildResult(EngineResult):
    credits_cost: int = 0


@dataclass(frozen=True)
class EngineError:
    """Expected, user-legible validation failure. Returned, never raised."""

    error: str


class WorldInvariantError(AssertionError):
    """Engine produced an impossible state. Always a bug, never bad input."""
