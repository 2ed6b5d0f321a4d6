"""FastAPI application initialization and configuration."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from .core.config import settings
from .core.database import close_db, engine, get_db, init_db
from .core.exceptions import (
    ProblemDetailsException,
    generic_exception_handler,
    problem_details_handler,
    validation_exception_handler,
)
from .core.middleware import setup_middleware
from .core.observability import (
    SERVICE_NAME,
    SERVICE_VERSION,
    instrument_fastapi,
    instrument_sqlalchemy,
    setup_metrics,
    setup_structured_logging,
    setup_tracing,
)
from .routers import (
    admin_router,
    booking_router,
    content_router,
    credit_router,
    featured_router,
    feedback_router,
    health_router,
    inquiry_router,
    membership_router,
    metrics_router,
    notification_router,
    package_router,
    recommendation_router,
    settings_router,
    shop_router,
    subscription_router,
    travel_router,
)
from .routers.health import check_database
from .schemas.common import Problem
from .workers.manager import worker_manager

# Problem responses shared by every API router, for the OpenAPI document
PROBLEM_RESPONSES = {
    status_code: {"model": Problem, "description": description}
    for status_code, description in (
        (400, "Business validation failed"),
        (401, "Missing or invalid bearer token"),
        (403, "Caller lacks the required role or ownership"),
        (404, "Resource not found"),
        (409, "Conflict or business rule violation"),
        (422, "Request validation failed"),
    )
}

# Configure structured logging
setup_structured_logging()

# Configure traditional logging for compatibility
logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

logger = logging.getLogger(__name__)

DB_DEPENDENCY = Depends(get_db)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Sets up observability, creates tables and starts the periodic workers
    when they are enabled.
    """
    logger.info("Starting FastAPI application")
    logger.info(f"Environment: {settings.environment}")

    try:
        setup_tracing(SERVICE_NAME)
        setup_metrics(SERVICE_NAME)
        instrument_sqlalchemy(engine)
        logger.info("Observability setup completed")

        await init_db()
        logger.info("Database initialized successfully")

        if settings.workers_enabled:
            await worker_manager.start_all()
            logger.info("Background workers started successfully")
    except Exception as e:
        logger.error(f"Failed to initialize application: {e}", exc_info=True)
        raise

    logger.info("Application startup complete")

    yield

    logger.info("Shutting down FastAPI application")

    try:
        if settings.workers_enabled:
            await worker_manager.stop_all()
            logger.info("Background workers stopped")

        await close_db()
        logger.info("Database connections closed")
    except Exception as e:
        logger.error(f"Error during application cleanup: {e}", exc_info=True)

    logger.info("Application shutdown complete")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    app = FastAPI(
        title="Arah Umroh API",
        description=(
            "RPC-over-HTTP API for an umroh and hajj package marketplace: travel agencies, "
            "packages and departures, bookings with payment schedules, credits and featured "
            "placements, a seller shop and devotional content"
        ),
        version=SERVICE_VERSION,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "traceparent", "tracestate"],
    )

    setup_middleware(app, enable_logging=True)

    instrument_fastapi(app)

    # Register exception handlers
    app.add_exception_handler(ProblemDetailsException, problem_details_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    @app.get(
        "/health",
        status_code=status.HTTP_200_OK,
        tags=["Health"],
        summary="Health Check",
        description="Check if the service is up",
        response_model=dict,
    )
    async def health_check():
        return {
            "status": "healthy",
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "environment": settings.environment,
        }

    @app.get(
        "/ready",
        tags=["Health"],
        summary="Readiness Check",
        description="Check that the database answers and report worker state",
        response_model=dict,
    )
    async def readiness_check(db: AsyncSession = DB_DEPENDENCY):
        """Returns 503 while the database is unreachable."""
        database = await check_database(db)
        ready = database == "ok"
        return JSONResponse(
            status_code=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "ready" if ready else "not_ready",
                "service": SERVICE_NAME,
                "checks": {"database": database},
                "workers": worker_manager.get_worker_status() if settings.workers_enabled else {},
            },
        )

    @app.get(
        "/info",
        status_code=status.HTTP_200_OK,
        tags=["Info"],
        summary="Service Information",
        description="Get detailed information about the service",
        response_model=dict,
    )
    async def service_info():
        return {
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "description": "Umroh and hajj package marketplace API",
            "environment": settings.environment,
            "debug": settings.debug,
            "features": {
                "authentication": True,
                "idempotency": True,
                "tracing": True,
                "problem_details": True,
                "background_workers": settings.workers_enabled,
            },
            "endpoints": {
                "health": "/health",
                "readiness": "/ready",
                "info": "/info",
                "metrics": "/metrics",
                "docs": "/docs" if settings.debug else None,
            },
        }

    # Register API routers
    for router in (
        health_router,
        travel_router,
        package_router,
        booking_router,
        credit_router,
        featured_router,
        settings_router,
        membership_router,
        subscription_router,
        feedback_router,
        inquiry_router,
        notification_router,
        shop_router,
        content_router,
        recommendation_router,
        admin_router,
        metrics_router,
    ):
        app.include_router(router, responses=PROBLEM_RESPONSES)

    logger.info("FastAPI application created and configured")

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "arah_umroh.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
        access_log=True,
    )
