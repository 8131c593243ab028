"""Mock AI provider for testing and fallback."""

import json
from typing import Optional

from src.services.ai.base import AIProvider

MOCK_QUEST_ANALYSIS = json.dumps(
    {
        "technical_title": "Protocol: Mock Objective",
        "stat_rewards": {"mental": 2},
        "xp_reward": 120,
        "credit_reward": 36,
        "penalty_description": "No streaming tonight (-12 XP)",
    }
)

MOCK_COMMENTARY = "[Mock] Status nominal. Proceed with pending directives."


class MockProvider(AIProvider):
    """Mock AI provider that returns static text.

    Used for testing and as a fallback when no API key is configured.
    """

    @property
    def name(self) -> str:
        """Return the provider name."""
        return "mock"

    def is_available(self) -> bool:
        """Check if the provider is available."""
        return True

    def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        max_tokens: int = 1000,
        json_mode: bool = False,
    ) -> str:
        """Quest analysis JSON in json_mode, a fixed GM line otherwise."""
        if json_mode:
            return MOCK_QUEST_ANALYSIS
        return MOCK_COMMENTARY
