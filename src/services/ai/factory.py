"""Factory for creating AI provider instances."""

from typing import Optional

from src.config import settings
from src.core.logging import get_logger
from src.services.ai.base import AIProvider
from src.services.ai.gemini import DEFAULT_MODEL, GeminiProvider
from src.services.ai.mock import MockProvider

logger = get_logger(__name__)


def get_ai_provider(provider_name: Optional[str] = None) -> AIProvider:
    """Provider named by `provider_name` or settings.AI_PROVIDER.

    Anything that cannot be built (missing key, unknown name) degrades to
    MockProvider so the app always starts.
    """
    name = (provider_name or settings.AI_PROVIDER).lower()

    if name == "mock":
        logger.debug("Using MockProvider")
        return MockProvider()

    if name == "gemini":
        if not settings.AI_API_KEY:
            logger.warning("AI_API_KEY not set, falling back to MockProvider")
            return MockProvider()
        model = settings.AI_MODEL or DEFAULT_MODEL
        logger.debug("Using GeminiProvider with model: %s", model)
        return GeminiProvider(api_key=settings.AI_API_KEY, model=model)

    logger.warning("Unknown provider '%s', falling back to MockProvider", name)
    return MockProvider()
