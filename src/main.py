"""FastAPI application entrypoint."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from src.api.health import router as health_router
from src.api.nexus import router as nexus_router
from src.config import settings
from src.core.event_bus import EventBus
from src.core.logging import get_logger, setup_logging
from src.db.database import engine as db_engine
from src.db.models import Base
from src.repositories.memory import InMemoryProgressRepository
from src.services.ai import get_ai_provider
from src.services.narrative_service import NarrativeService
from src.services.notification_service import NotificationService

setup_logging(settings.LOG_LEVEL)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown events."""
    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=db_engine)
    logger.info("Database tables created.")

    event_bus = EventBus()
    app.state.event_bus = event_bus

    logger.info("Initializing AI provider...")
    ai_provider = get_ai_provider()
    app.state.ai_provider = ai_provider
    app.state.narrative_service = NarrativeService(ai_provider)
    logger.info("AI provider initialized: %s", ai_provider.name)

    app.state.notification_service = NotificationService(event_bus)

    if settings.PERSISTENCE_BACKEND == "memory":
        logger.info("Using in-memory persistence")
        app.state.memory_repository = InMemoryProgressRepository()

    yield

    logger.info("Shutting down...")
    event_bus.clear()


app = FastAPI(title="Nexus Quest Engine", lifespan=lifespan)

app.include_router(health_router)
app.include_router(nexus_router)
