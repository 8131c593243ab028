"""NarrativeService tests: AI path and fallbacks"""

import json
from datetime import date
from unittest.mock import MagicMock

import pytest

from src.core.chronicle.models import CompactWorldEvent, DailyLog
from src.core.player.models import PlayerProgress
from src.core.quest.models import Quest
from src.core.world.engine import create_initial_world_state
from src.services.ai.mock import MOCK_COMMENTARY, MockProvider
from src.services.narrative_service import (
    DEFAULT_DIRECTIVE,
    GM_SYSTEM_PROMPT,
    OFFLINE_COMMENTARY,
    NarrativeService,
    QuestAnalysis,
)


@pytest.fixture()
def player():
    return PlayerProgress(
        player_id="p1",
        level=4,
        stats={"physical": 9, "cognitive": 3, "career": 1, "financial": 4, "mental": 2, "creative": 5},
    )


def _provider(available=True, reply="", error=None):
    provider = MagicMock()
    provider.is_available.return_value = available
    if error is not None:
        provider.generate.side_effect = error
    else:
        provider.generate.return_value = reply
    return provider


class TestCommentary:
    def test_mock_provider(self, player):
        assert NarrativeService(MockProvider()).gm_commentary(player, []) == MOCK_COMMENTARY

    def test_unavailable_is_offline(self, player):
        service = NarrativeService(_provider(available=False))
        assert service.gm_commentary(player, []) == OFFLINE_COMMENTARY
        service.ai.generate.assert_not_called()

    def test_provider_error_is_offline(self, player):
        service = NarrativeService(_provider(error=RuntimeError("quota")))
        assert service.gm_commentary(player, []) == OFFLINE_COMMENTARY

    def test_empty_reply_is_offline(self, player):
        assert NarrativeService(_provider(reply="")).gm_commentary(player, []) == OFFLINE_COMMENTARY

    def test_prompt_context(self, player):
        provider = _provider(reply="Directive received.")
        quests = [
            Quest(quest_id="q1", title="a"),
            Quest(quest_id="q2", title="b", status="COMPLETED"),
        ]
        world = create_initial_world_state("Prompt Nexus")

        NarrativeService(provider).gm_commentary(player, quests, world)

        prompt = provider.generate.call_args.args[0]
        assert "- Player Level: 4" in prompt
        assert "- Strongest Stat: physical" in prompt
        assert "- Weakest Stat: career" in prompt
        assert "- Pending Quests: 1" in prompt
        assert '[NEXUS STATE: "Prompt Nexus"' in prompt
        assert prompt.endswith(f"User Input: {DEFAULT_DIRECTIVE}")
        assert provider.generate.call_args.kwargs["system_prompt"] == GM_SYSTEM_PROMPT

    def test_user_message_passed_through(self, player):
        provider = _provider(reply="ok")
        NarrativeService(provider).gm_commentary(player, [], message="I slept 9 hours")
        assert provider.generate.call_args.args[0].endswith("User Input: I slept 9 hours")


class TestAnalyzeQuest:
    def test_mock_provider_result(self):
        analysis = NarrativeService(MockProvider()).analyze_quest("Run", "DAILY", "MEDIUM", 1)
        assert analysis.from_ai is True
        assert analysis.technical_title == "Protocol: Mock Objective"
        assert analysis.xp_reward == 120

    def test_requests_json(self):
        provider = _provider(
            reply=json.dumps({"technical_title": "Op", "xp_reward": 10, "credit_reward": 3})
        )
        NarrativeService(provider).analyze_quest("Run", "DAILY", "EASY", 1)
        assert provider.generate.call_args.kwargs["json_mode"] is True

    def test_unknown_and_negative_stats_dropped(self):
        reply = json.dumps(
            {
                "technical_title": "Op",
                "stat_rewards": {"physical": 3, "luck": 5, "mental": 0},
                "xp_reward": 100,
                "credit_reward": 30,
            }
        )
        analysis = NarrativeService(_provider(reply=reply)).analyze_quest("Run", "DAILY", "MEDIUM", 1)
        assert analysis.stat_rewards == {"physical": 3}

    def test_blank_title_keeps_original(self):
        reply = json.dumps({"technical_title": "  ", "xp_reward": 100, "credit_reward": 30})
        analysis = NarrativeService(_provider(reply=reply)).analyze_quest("Run", "DAILY", "MEDIUM", 1)
        assert analysis.technical_title == "Run"

    @pytest.mark.parametrize(
        "reply",
        [
            "not json at all",
            json.dumps({"technical_title": "Op", "xp_reward": -5, "credit_reward": 1}),
            json.dumps({"xp_reward": 100}),
        ],
    )
    def test_bad_reply_falls_back(self, reply):
        analysis = NarrativeService(_provider(reply=reply)).analyze_quest("Run", "WEEKLY", "HARD", 1)
        assert analysis == NarrativeService.fallback_analysis("Run", "WEEKLY", "HARD")
        assert analysis.from_ai is False

    def test_provider_error_falls_back(self):
        service = NarrativeService(_provider(error=ConnectionError("offline")))
        analysis = service.analyze_quest("Run", "DAILY", "MEDIUM", 1)
        assert analysis.xp_reward == 100
        assert analysis.from_ai is False

    def test_unavailable_falls_back(self):
        service = NarrativeService(_provider(available=False))
        assert service.analyze_quest("Run", "EPIC", "EASY", 1).technical_title == "Run"
        service.ai.generate.assert_not_called()

    def test_fallback_is_a_quest_analysis(self):
        assert isinstance(NarrativeService.fallback_analysis("Run", "DAILY", "EASY"), QuestAnalysis)


class TestDaySummary:
    def _log(self, **kwargs):
        return DailyLog(log_date=date(2024, 1, 3), **kwargs)

    @pytest.mark.parametrize(
        "rating,expected",
        [
            ("recovery", "Back in motion: 2 quests after a quiet stretch."),
            ("strong", "A strong day. 2 quests, +300 XP, no penalties."),
            ("steady", "Steady progress: 2 quest(s), +300 XP."),
            ("light", "No quests today, but the Nexus kept moving."),
            ("absent", "No signal recorded."),
            ("neutral", "A quiet day."),
        ],
    )
    def test_fallback_text(self, rating, expected):
        log = self._log(day_rating=rating, quests_completed=2, xp_earned=300)
        assert NarrativeService.fallback_day_summary(log) == expected

    def test_ai_summary_prompt(self):
        provider = _provider(reply="The forge burned bright.")
        log = self._log(
            day_rating="steady",
            quest_titles=["Run"],
            world_events=[CompactWorldEvent("BUILD", "Training Grounds Constructed", "forge")],
        )
        assert NarrativeService(provider).summarize_day(log) == "The forge burned bright."
        prompt = provider.generate.call_args.args[0]
        assert "Quests completed: Run" in prompt
        assert "World events: Training Grounds Constructed" in prompt

    def test_ai_failure_uses_fallback(self):
        service = NarrativeService(_provider(error=RuntimeError("boom")))
        assert service.summarize_day(self._log(day_rating="light")) == (
            "No quests today, but the Nexus kept moving."
        )
