"""
Hotel CRM API Server

Entry point for the FastAPI application.
"""

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from app.core.config import get_settings
from app.core.database import engine
from app.core.errors import CRMError, crm_error_handler
from app.core.logging import configure_logging
from app.core.middleware import CSRFMiddleware, SecurityHeadersMiddleware
from app.core.redis import close_redis, get_redis
from app.api.v1 import router as api_router
from app.api.v1.auth import router as auth_router
from hotel_crm_shared.schemas.common import ErrorResponse

settings = get_settings()
log = structlog.get_logger()

ERROR_RESPONSES = {
    status: {"model": ErrorResponse} for status in (401, 403, 404, 409)
}


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    configure_logging(settings.log_level, settings.log_format)

    app = FastAPI(
        title="Hotel CRM",
        description="Multi-tenant CRM for hotel sales teams.",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # Middleware (order matters, outermost first)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(CSRFMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "PUT", "DELETE"],
        allow_headers=["Content-Type", "X-CSRF-Token"],
    )

    app.add_exception_handler(CRMError, crm_error_handler)

    # Auth routes
    app.include_router(
        auth_router, prefix="/api/auth", tags=["Authentication"], responses=ERROR_RESPONSES
    )

    # API routes
    app.include_router(api_router, prefix="/api", responses=ERROR_RESPONSES)

    @app.get("/health", tags=["System"])
    async def health_check():
        """Health check endpoint for liveness checks."""
        return {"status": "ok"}

    @app.get("/ready", tags=["System"])
    async def readiness_check():
        """Readiness check: database and Redis must both answer."""
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        redis = await get_redis()
        await redis.ping()
        return {"status": "ready"}

    @app.on_event("startup")
    async def on_startup():
        log.info("hotel_crm.starting", debug=settings.debug)

    @app.on_event("shutdown")
    async def on_shutdown():
        log.info("hotel_crm.shutting_down")
        await close_redis()

    return app


app = create_app()
