import logging

from fastapi import APIRouter
from sqlalchemy import text

from research_oracle.dependencies import SessionDep, SettingsDep

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/ping")
def ping(session: SessionDep, settings: SettingsDep):
    """Liveness check that also touches the database."""
    try:
        session.execute(text("SELECT 1"))
        database = "ok"
    except Exception as e:
        logger.error(f"Health check database query failed: {e}")
        database = "unavailable"

    return {"status": "ok", "version": settings.app_version, "database": database}
