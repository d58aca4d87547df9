"""
PetConnect Resource Store

Entry point for the FastAPI application.
"""

import structlog
import uvicorn
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from petconnect_server.core.config import get_settings
from petconnect_server.core.database import get_session
from petconnect_server.core.middleware import CSRFMiddleware, SecurityHeadersMiddleware
from petconnect_server.core.revocation import close_redis
from petconnect_server.api.v1 import router as api_v1_router
from petconnect_server.api.v1.auth import router as auth_router

settings = get_settings()
log = structlog.get_logger()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="PetConnect",
        description="Donation matching between animal-welfare NGOs.",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # Middleware (order matters — outermost first)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(CSRFMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT"],
        allow_headers=["Content-Type", "X-CSRF-Token"],
    )

    # Auth routes (no session required)
    app.include_router(auth_router, prefix="/auth", tags=["Authentication"])

    # API routes
    app.include_router(api_v1_router, prefix="/api/v1")

    @app.get("/health", tags=["System"])
    async def health_check():
        """Health check endpoint for liveness probes."""
        return {"status": "ok"}

    @app.get("/ready", tags=["System"])
    async def readiness_check(session: AsyncSession = Depends(get_session)):
        """Readiness check endpoint: the database answers."""
        await session.execute(text("SELECT 1"))
        return {"status": "ready"}

    @app.on_event("startup")
    async def on_startup():
        log.info("PetConnect starting", debug=settings.debug)

    @app.on_event("shutdown")
    async def on_shutdown():
        log.info("PetConnect shutting down")
        await close_redis()

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    uvicorn.run("petconnect_server.main:app", host=settings.host, port=settings.port)
