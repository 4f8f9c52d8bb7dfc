"""Health check reporting database connectivity."""

from datetime import datetime, timezone

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from iqx.core.database import check_database_connection

router = APIRouter()


@router.get("")
async def health(request: Request):
    """Return 200 when the database answers, 503 otherwise."""
    config = request.app.state.settings
    db_ok = await check_database_connection(request.app.state.session_factory, max_retries=1)

    body = {
        "status": "healthy" if db_ok else "degraded",
        "database": "connected" if db_ok else "disconnected",
        "version": config.app_version,
        "environment": config.environment,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    return JSONResponse(status_code=200 if db_ok else 503, content=body)
