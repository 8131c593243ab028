"""World conditions, narrative and summary tests"""

import random
from datetime import datetime, timezone

import pytest

from src.core.world.conditions import companion_mood, district_condition
from src.core.world.engine import build_structure, create_initial_world_state
from src.core.world.enums import CompanionMood, DistrictCondition, Rarity
from src.core.world.narrative import (
    COMPANION_DIALOGUE,
    companion_dialogue,
    decay_description,
    district_narrative,
    era_transition_narrative,
    locked_district_hints,
    recovery_narrative,
    world_status_narrative,
)
from src.core.world.summary import (
    average_vitality,
    world_artifacts,
    world_context_for_gm,
    world_title,
)

NOW = datetime(2024, 1, 3, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def world():
    return create_initial_world_state("Test Nexus", now=NOW)


class TestConditions:
    @pytest.mark.parametrize(
        "vitality,expected",
        [
            (100, DistrictCondition.PRISTINE),
            (80, DistrictCondition.PRISTINE),
            (79, DistrictCondition.THRIVING),
            (40, DistrictCondition.STABLE),
            (39, DistrictCondition.WORN),
            (10, DistrictCondition.DECAYING),
            (9, DistrictCondition.RUINED),
            (0, DistrictCondition.RUINED),
        ],
    )
    def test_bands(self, vitality, expected):
        assert district_condition(vitality) == expected

    def test_elated_needs_loyalty(self):
        assert companion_mood(90, 50) == CompanionMood.ELATED
        assert companion_mood(90, 49) == CompanionMood.CONTENT

    def test_mood_bands(self):
        assert companion_mood(45, 0) == CompanionMood.NEUTRAL
        assert companion_mood(30, 0) == CompanionMood.CONCERNED
        assert companion_mood(12, 0) == CompanionMood.DISTRESSED
        assert companion_mood(9, 100) == CompanionMood.ABSENT


class TestNarrative:
    def test_dialogue_from_mood_pool(self):
        line = companion_dialogue("kael", "CONTENT", rng=random.Random(1))
        assert line in COMPANION_DIALOGUE["kael"][CompanionMood.CONTENT]

    def test_absent_companion_is_silent(self):
        assert companion_dialogue("kael", "ABSENT") == "..."

    def test_unknown_companion(self):
        assert companion_dialogue("nobody", "NEUTRAL") == "Silence."

    def test_decay_description_fallback(self):
        assert decay_description("vault", DistrictCondition.RUINED).startswith("The Vault stands empty")
        assert "PRISTINE" in decay_description("vault", DistrictCondition.PRISTINE)

    def test_status_narrative_uses_unlocked_only(self, world):
        # locked districts at 0 would drag the average below 40
        text = world_status_narrative(world, "Uncharted Territory")
        assert "holds steady" in text

    def test_district_and_recovery_text(self):
        assert district_narrative("forge", 85).startswith("The Forge is radiant")
        assert "Against the odds" in recovery_narrative("archive", 5)
        assert "pulls back from the brink" in recovery_narrative("archive", 20)

    def test_era_text(self):
        assert "Prosperity" in era_transition_narrative(3)
        assert era_transition_narrative(9) == "A new era dawns."

    def test_locked_hints(self, world):
        hints = locked_district_hints(world)
        assert set(hints) == {"sanctum", "command", "vault", "atelier"}


class TestSummary:
    def test_average_counts_locked_as_zero(self, world):
        assert average_vitality(world) == pytest.approx(100 / 6)

    def test_new_world_title(self, world):
        assert world_title(world) == "Uncharted Territory"

    def test_first_build_title(self, world):
        state = build_structure(world, "forge", "forge-t1", 1, 100, now=NOW).state
        assert world_title(state) == "Fledgling Settlement"

    def test_abandoned_outpost(self, world):
        for district in world.unlocked_districts():
            district.vitality = 5
        assert world_title(world) == "Abandoned Outpost"

    def test_artifacts(self, world):
        state = build_structure(world, "forge", "forge-t1", 1, 100, now=NOW).state
        artifacts = world_artifacts(state)
        kinds = [a.artifact_type for a in artifacts]
        assert kinds == ["TITLE", "MILESTONE", "SNAPSHOT"]
        assert artifacts[1].label == "First Foundation"
        assert artifacts[0].rarity == Rarity.COMMON
        assert "Founded 2024-01-03" in artifacts[-1].description

    def test_gm_context(self, world):
        text = world_context_for_gm(world)
        assert '[NEXUS STATE: "Test Nexus"' in text
        assert "The Sanctum: [LOCKED, requires level 2]" in text
        assert "Kael: NEUTRAL" in text
        assert "The Nexus Awakens" in text
