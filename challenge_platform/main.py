"""Challenge Platform - Main Application.

FastAPI application that mounts the challenge router and wires logging,
database lifecycle and request middleware.
"""

import time
import uuid
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from challenge_platform.challenges.api import router as challenges_router
from challenge_platform.config import get_settings
from challenge_platform.infrastructure.database.session import close_db, init_db
from challenge_platform.shared.utils.logging import (
    bind_request_context,
    clear_request_context,
    configure_logging,
    get_logger,
)

logger = get_logger(__name__)


# ===========================================
# APPLICATION METADATA
# ===========================================

APP_TITLE = "Challenge Platform"
APP_DESCRIPTION = """
Browse challenges, participate, pause participation and mark challenges
as completed.

| Route | Description |
|-------|-------------|
| `GET /api/v1/challenges` | Paginated listing, newest first |
| `GET /api/v1/challenges/{url_name}` | Challenge details (counts a view) |
| `POST /api/v1/challenges` | Create a challenge |
| `POST /api/v1/challenges/{url_name}/participate` | Start or resume participating |
| `POST /api/v1/challenges/{url_name}/unparticipate` | Pause participation |
| `POST /api/v1/challenges/{url_name}/complete` | Complete the challenge |
"""

APP_VERSION = "1.0.0"
API_PREFIX = "/api/v1"

TAGS_METADATA = [
    {
        "name": "health",
        "description": "Health check and status endpoints",
    },
    {
        "name": "challenges",
        "description": "Challenge listing, details and participation",
    },
]


# ===========================================
# LIFECYCLE MANAGEMENT
# ===========================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""
    settings = get_settings()
    configure_logging(
        level=settings.log_level,
        json_format=settings.log_json,
        service_name=settings.service_name,
    )
    logger.info("service_starting", service=settings.service_name, version=APP_VERSION)

    await init_db()

    yield

    logger.info("service_stopping")
    await close_db()
    logger.info("service_stopped")


# ===========================================
# APPLICATION FACTORY
# ===========================================


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    app = FastAPI(
        title=APP_TITLE,
        description=APP_DESCRIPTION,
        version=APP_VERSION,
        openapi_tags=TAGS_METADATA,
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_request_timing(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        response.headers["X-Process-Time"] = str(time.time() - start_time)
        return response

    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        bind_request_context(request_id)
        try:
            response = await call_next(request)
        finally:
            clear_request_context()
        response.headers["X-Request-ID"] = request_id
        return response

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            error_type=type(exc).__name__,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Internal server error",
                "detail": str(exc) if app.debug else "An unexpected error occurred",
            },
        )

    app.include_router(challenges_router, prefix=API_PREFIX)

    register_root_endpoints(app)

    return app


def register_root_endpoints(app: FastAPI) -> None:
    """Register root-level endpoints."""

    @app.get("/health", tags=["health"])
    async def health_check() -> dict[str, Any]:
        """Basic health check endpoint."""
        return {
            "status": "healthy",
            "version": APP_VERSION,
            "timestamp": time.time(),
        }

    @app.get("/health/live", tags=["health"])
    async def liveness_check() -> dict[str, Any]:
        """Liveness probe."""
        return {
            "alive": True,
            "timestamp": time.time(),
        }


app = create_app()
