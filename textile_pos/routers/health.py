import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from textile_pos.config import Settings
from textile_pos.dependencies import get_app_settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


def _database_reachable(database) -> bool:
    try:
        with database.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.warning("Health check could not reach the database", exc_info=True)
        return False
    return True


@router.get("/health")
def health_check(request: Request, settings: Settings = Depends(get_app_settings)):
    """Till status: database reachability plus the carts and chats held in memory."""
    state = request.app.state
    database_ok = _database_reachable(state.database)
    body = {
        "status": "ok" if database_ok else "degraded",
        "app": settings.APP_NAME,
        "environment": settings.ENVIRONMENT,
        "database": "ok" if database_ok else "unreachable",
        "open_carts": len(state.carts),
        "chat_sessions": len(state.chat_sessions),
        "allow_oversell": settings.ALLOW_OVERSELL,
        "time": datetime.now(timezone.utc).isoformat(),
    }
    return JSONResponse(body, status_code=200 if database_ok else 503)
