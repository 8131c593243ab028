"""Health check endpoint."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.config import settings
from src.db.database import get_db

router = APIRouter()


@router.get("/health")
def health_check(request: Request, db: Session = Depends(get_db)) -> dict[str, str]:
    """Return application, database and AI provider status."""
    ai_provider = getattr(request.app.state, "ai_provider", None)
    status = {
        "persistence": settings.PERSISTENCE_BACKEND,
        "ai_provider": ai_provider.name if ai_provider else "none",
    }
    try:
        db.execute(text("SELECT 1"))
        return {"status": "ok", "database": "connected", **status}
    except SQLAlchemyError:
        return {"status": "error", "database": "disconnected", **status}
