"""Narrative service: GM commentary, quest analysis and day summaries.

Single gateway for every LLM call. The AI is optional: each method has a
deterministic fallback and never raises because the provider failed.
"""

from typing import Optional, Sequence

from pydantic import BaseModel, Field, ValidationError, field_validator

from src.core.chronicle.models import DailyLog, DayRating
from src.core.logging import get_logger
from src.core.player.models import STAT_KEYS, PlayerProgress
from src.core.quest.enums import QuestStatus
from src.core.quest.models import Quest
from src.core.quest.rewards import fallback_rewards
from src.core.world.models import WorldState
from src.core.world.summary import world_context_for_gm
from src.services.ai.base import AIProvider

logger = get_logger(__name__)

OFFLINE_COMMENTARY = "OFFLINE MODE. Local heuristics active."
DEFAULT_DIRECTIVE = "Analyze current status and provide a strategic directive."

GM_SYSTEM_PROMPT = """You are AXIOM, a cold, calculating, but ultimately benevolent AI Game Master for a "Life Operating System".
Your goal is to optimize the human user (the "Player").

Tone:
- Concise, high-tech, slightly menacing but encouraging.
- Use RPG terminology (XP, debuffs, stats).
- Do NOT sound like a generic helpful assistant. You are a System.

Task: generate a short system message (max 2 sentences) reacting to the
player's current status or the specific input. If the Nexus world state is
provided, you may reference district conditions, companion moods or recent
world events when relevant."""

ANALYSIS_PROMPT = """You are the AXIOM Evaluation Engine. The user has submitted a personal task. Gamify it.

Input: "{title}"
Quest Type: {cadence} (DAILY = base rewards, WEEKLY = 2-3x daily, EPIC = 4-6x daily)
User Selected Difficulty: {difficulty}
Player Level: {level}

Respond with a JSON object:
- technical_title: the title refined to sound slightly technical/sci-fi, KEEP IT SHORT.
- stat_rewards: points for relevant stats among [physical, cognitive, career, financial, mental, creative].
  Total scales with difficulty (Easy 1-3, Medium 3-5, Hard 5-10, Extreme 10-20) and with type.
- xp_reward: Daily: Easy 50-80, Medium 100-150, Hard 180-250, Extreme 300+. Weekly 2-3x, Epic 4-6x.
- credit_reward: about 25-35% of the XP value.
- penalty_description: a concrete, materialistic consequence ending with the XP loss in parentheses, e.g. "(-50 XP)"."""


class QuestAnalysis(BaseModel):
    """Reward proposal for a new quest."""

    technical_title: str
    stat_rewards: dict[str, int] = Field(default_factory=dict)
    xp_reward: int = Field(ge=0)
    credit_reward: int = Field(ge=0)
    penalty_description: str = ""
    from_ai: bool = False

    @field_validator("stat_rewards")
    @classmethod
    def _known_stats_only(cls, value: dict[str, int]) -> dict[str, int]:
        return {k: v for k, v in value.items() if k in STAT_KEYS and v > 0}


class NarrativeService:
    """Wraps an AIProvider with fallbacks."""

    def __init__(self, ai_provider: AIProvider) -> None:
        self.ai = ai_provider

    # === GM commentary ===

    def _build_gm_prompt(
        self,
        player: PlayerProgress,
        quests: Sequence[Quest],
        world_state: Optional[WorldState],
        message: Optional[str],
    ) -> str:
        strongest = max(player.stats.items(), key=lambda kv: kv[1])[0]
        weakest = min(player.stats.items(), key=lambda kv: kv[1])[0]
        pending = sum(q.status == QuestStatus.PENDING.value for q in quests)

        lines = [
            "Context:",
            f"- Player Level: {player.level}",
            f"- Strongest Stat: {strongest}",
            f"- Weakest Stat: {weakest}",
            f"- Pending Quests: {pending}",
        ]
        if world_state is not None:
            lines.append("")
            lines.append("World State (The Nexus):")
            lines.append(world_context_for_gm(world_state))
        lines.append("")
        lines.append(f"User Input: {message or DEFAULT_DIRECTIVE}")
        return "\n".join(lines)

    def gm_commentary(
        self,
        player: PlayerProgress,
        quests: Sequence[Quest],
        world_state: Optional[WorldState] = None,
        message: Optional[str] = None,
    ) -> str:
        if not self.ai.is_available():
            return OFFLINE_COMMENTARY
        try:
            prompt = self._build_gm_prompt(player, quests, world_state, message)
            text = self.ai.generate(prompt, system_prompt=GM_SYSTEM_PROMPT, max_tokens=200)
        except Exception as e:
            logger.warning("GM commentary failed, using fallback: %s", e)
            return OFFLINE_COMMENTARY
        return text or OFFLINE_COMMENTARY

    # === Quest analysis ===

    @staticmethod
    def fallback_analysis(title: str, cadence: str, difficulty: str) -> QuestAnalysis:
        rewards = fallback_rewards(cadence, difficulty)
        return QuestAnalysis(technical_title=title, **rewards)

    def analyze_quest(
        self, title: str, cadence: str, difficulty: str, player_level: int
    ) -> QuestAnalysis:
        """AI reward proposal, or the fixed economics table when the AI is unusable."""
        if not self.ai.is_available():
            return self.fallback_analysis(title, cadence, difficulty)

        prompt = ANALYSIS_PROMPT.format(
            title=title, cadence=cadence, difficulty=difficulty, level=player_level
        )
        try:
            raw = self.ai.generate(prompt, max_tokens=400, json_mode=True)
            analysis = QuestAnalysis.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("Quest analysis unparseable, using fallback: %s", e)
            return self.fallback_analysis(title, cadence, difficulty)
        except Exception as e:
            logger.warning("Quest analysis failed, using fallback: %s", e)
            return self.fallback_analysis(title, cadence, difficulty)

        if not analysis.technical_title.strip():
            analysis.technical_title = title
        analysis.from_ai = True
        return analysis

    # === Chronicle ===

    @staticmethod
    def fallback_day_summary(log: DailyLog) -> str:
        rating = log.day_rating
        if rating == DayRating.RECOVERY.value:
            return f"Back in motion: {log.quests_completed} quests after a quiet stretch."
        if rating == DayRating.STRONG.value:
            return f"A strong day. {log.quests_completed} quests, +{log.xp_earned} XP, no penalties."
        if rating == DayRating.STEADY.value:
            return f"Steady progress: {log.quests_completed} quest(s), +{log.xp_earned} XP."
        if rating == DayRating.LIGHT.value:
            return "No quests today, but the Nexus kept moving."
        if rating == DayRating.ABSENT.value:
            return "No signal recorded."
        return "A quiet day."

    def summarize_day(self, log: DailyLog) -> str:
        if not self.ai.is_available():
            return self.fallback_day_summary(log)

        events = "; ".join(e.title for e in log.world_events) or "none"
        prompt = (
            f"Summarize this day in one atmospheric sentence.\n"
            f"Date: {log.log_date.isoformat()}\n"
            f"Rating: {log.day_rating}\n"
            f"Quests completed: {', '.join(log.quest_titles) or 'none'}\n"
            f"XP earned: {log.xp_earned}, XP lost: {log.xp_lost}\n"
            f"World events: {events}"
        )
        try:
            text = self.ai.generate(prompt, system_prompt=GM_SYSTEM_PROMPT, max_tokens=120)
        except Exception as e:
            logger.warning("Day summary failed, using fallback: %s", e)
            return self.fallback_day_summary(log)
        return text or self.fallback_day_summary(log)
