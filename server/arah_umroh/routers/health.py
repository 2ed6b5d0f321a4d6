"""Health check router."""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.observability import SERVICE_VERSION
from ..schemas.health import HealthResponse, HealthStatus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/health", tags=["health"])

DB_DEPENDENCY = Depends(get_db)


async def check_database(db: AsyncSession) -> str:
    """Run a trivial query and report ``ok`` or ``error``."""
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning("Database health check failed", extra={"error": str(e)})
        return "error"
    return "ok"


@router.post("/ping", response_model=HealthResponse)
async def health_ping(db: AsyncSession = DB_DEPENDENCY) -> JSONResponse:
    """
    Health check endpoint.

    Returns current service status, timestamp and database reachability.
    """
    checks = {"database": await check_database(db)}
    healthy = all(result == "ok" for result in checks.values())

    response_data = HealthResponse(
        status=HealthStatus.HEALTHY if healthy else HealthStatus.DEGRADED,
        timestamp=datetime.utcnow(),
        version=SERVICE_VERSION,
        checks=checks,
    )

    logger.debug(
        "Health check requested",
        extra={"status": response_data.status, "checks": checks}
    )

    return JSONResponse(
        status_code=200 if healthy else 503,
        content=response_data.model_dump(mode="json")
    )
