"""Quest economics tests"""

import pytest

from src.core.quest.models import Quest
from src.core.quest.rewards import (
    fallback_rewards,
    penalty_for,
    resolve_affected_stats,
    stats_from_linked_stat,
    stats_from_reward_map,
)


class TestPenaltyFor:
    @pytest.mark.parametrize(
        "cadence,xp,expected",
        [("DAILY", 100, 10), ("DAILY", 55, 6), ("WEEKLY", 250, 50), ("EPIC", 333, 100)],
    )
    def test_rates_ceil(self, cadence, xp, expected):
        assert penalty_for(Quest(quest_id="q", title="t", cadence=cadence, xp_reward=xp)) == expected

    def test_legendary_free(self):
        assert penalty_for(Quest(quest_id="q", title="t", cadence="LEGENDARY", xp_reward=999)) == 0


class TestFallbackRewards:
    def test_daily_medium(self):
        rewards = fallback_rewards("DAILY", "MEDIUM")
        assert rewards["xp_reward"] == 100
        assert rewards["credit_reward"] == 30
        assert rewards["stat_rewards"] == {"mental": 1}
        assert rewards["penalty_description"].endswith("(-10 XP)")

    def test_epic_extreme(self):
        rewards = fallback_rewards("EPIC", "EXTREME")
        assert rewards["xp_reward"] == 1000
        assert rewards["credit_reward"] == 300
        assert rewards["penalty_description"].endswith("(-300 XP)")

    def test_legendary_has_no_xp_penalty(self):
        rewards = fallback_rewards("LEGENDARY", "HARD")
        assert rewards["xp_reward"] == 1500
        assert "never expire" in rewards["penalty_description"]

    def test_stat_rewards_not_shared(self):
        first = fallback_rewards("DAILY", "EASY")
        first["stat_rewards"]["mental"] = 99
        assert fallback_rewards("DAILY", "EASY")["stat_rewards"] == {"mental": 1}


class TestAffectedStats:
    def test_reward_map_branch(self):
        quest = Quest(
            quest_id="q", title="t", stat_rewards={"physical": 2, "career": 1},
            linked_stat="creative",
        )
        assert resolve_affected_stats(quest) == ["physical", "career"]

    def test_linked_stat_branch(self):
        quest = Quest(quest_id="q", title="t", linked_stat="financial")
        assert resolve_affected_stats(quest) == ["financial"]

    def test_unknown_keys_dropped(self):
        assert stats_from_reward_map({"charisma": 3, "mental": 1}) == ["mental"]

    def test_unknown_linked_stat(self):
        assert stats_from_linked_stat("luck") == []
        assert stats_from_linked_stat(None) == []
