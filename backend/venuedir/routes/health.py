"""
Venue Directory Backend: Health Check Route
==============================================

What:  GET /health for load balancers and container health checks.
How:   Asks the database for its current time. 200 with that timestamp when
       it answers; 500 otherwise (reason included only in development).
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from venuedir import __version__
from venuedir.config import Settings
from venuedir.dependencies import get_settings
from venuedir.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={500: {"description": "Database unreachable"}},
    summary="Service health check",
)
async def health_check(
    request: Request,
    settings: Settings = Depends(get_settings),
):
    try:
        db_time = await request.app.state.database.ping()
    except Exception as e:
        logger.error("Health check: database unreachable: %s", str(e))
        content = {
            "status": "error",
            "message": "Health check failed",
            "environment": settings.environment,
            "database": "disconnected",
        }
        if settings.is_development:
            content["details"] = {"reason": str(e)}
        return JSONResponse(status_code=500, content=content)

    timestamp = db_time.isoformat() if hasattr(db_time, "isoformat") else str(db_time)
    return HealthResponse(
        status="ok",
        timestamp=timestamp,
        environment=settings.environment,
        database="connected",
        version=__version__,
    )
