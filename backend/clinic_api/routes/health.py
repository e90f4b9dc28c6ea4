"""
Clinic Tracker Backend — Health Check Route
============================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Runs SELECT 1 through the request's session and reports whether
       outbound mail is configured.

Status levels:
    healthy:   database reachable and mail configured
    degraded:  database reachable, mail not configured (codes cannot be sent)
    unhealthy: database unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Depends, Response
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_api import __version__
from clinic_api.config import settings
from clinic_api.database import get_db_session
from clinic_api.schemas.common import HealthResponse
from clinic_api.services.auth_service import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="Returns the status of the backend service and its dependencies.",
)
async def health_check(
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> HealthResponse:
    db_status = "connected"
    overall = "healthy"

    # ── Check Database ────────────────────────────────────────────────────
    try:
        await db.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))
        await db.rollback()

    # ── Check Mail ────────────────────────────────────────────────────────
    mail_status = "configured" if auth_service.sender.is_configured() else "not_configured"
    if mail_status == "not_configured" and overall == "healthy":
        overall = "degraded"

    if overall == "unhealthy":
        response.status_code = 503

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        mail=mail_status,
        steatosis_formula=settings.steatosis_formula,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
