"""
FastAPI Application Entry Point

This module builds the FastAPI application and configures:
- Lifespan: database engine, cache client and code generator are created on
  startup and released on shutdown
- Middleware (request logging, CORS)
- Rate limiting and exception handlers
- API routes (health, auth, URLs, and the catch-all redirect last)

Design Decisions:
- create_app() takes explicit settings so tests can build isolated apps
- Clean separation: Routes, middleware, and app config are separate
"""

from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import APIRouter, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from shortlink.api import auth, endpoints
from shortlink.api.errors import register_exception_handlers
from shortlink.core.log_config import configure_logging
from shortlink.core.rate_limit import limiter
from shortlink.core.resources import close_resources, open_resources
from shortlink.core.setting import Settings, settings
from shortlink.middleware.logging import add_logging_middleware
from shortlink.services.cache import URLCache

SERVICE_NAME = "URL Shortener Service"
SERVICE_VERSION = "1.0.0"

# Health endpoints are included before the redirect router so they are
# matched before the catch-all route
health_router = APIRouter(tags=["Health"])


@health_router.get("/")
async def root():
    """
    Root endpoint with service metadata.
    """
    return {
        "message": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "docs": "/docs"
    }


@health_router.get("/health")
async def health_check(request: Request):
    """
    Liveness probe.

    Always answers 200 while the process serves requests; reports the
    database and cache state for monitoring.
    """
    resources = request.app.state.resources
    try:
        await resources.adapter.ping(resources.engine)
        database = "connected"
    except Exception:
        database = "disconnected"

    if resources.redis is None:
        cache = "disabled"
    else:
        cache = "connected" if await URLCache(resources.redis).ping() else "unavailable"

    return {"status": "healthy", "database": database, "cache": cache}


@health_router.get("/db/health")
async def db_health_check(request: Request):
    """
    Database connectivity probe: 200 when a query round-trips, else 503.
    """
    resources = request.app.state.resources
    try:
        await resources.adapter.ping(resources.engine)
    except Exception as e:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "unhealthy",
                "database": "disconnected",
                "error": str(e),
            },
        )
    return {"status": "healthy", "database": "connected"}


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application for the given settings.
    """
    app_settings = app_settings or settings
    configure_logging(app_settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        resources = await open_resources(app_settings)
        app.state.resources = resources
        try:
            yield
        finally:
            await close_resources(resources)

    # Title and description are used in auto-generated API documentation
    app = FastAPI(
        title=SERVICE_NAME,
        description="URL shortening service with cookie-based authentication, built with FastAPI",
        version=SERVICE_VERSION,
        docs_url="/docs",  # Swagger UI documentation
        redoc_url="/redoc",  # ReDoc documentation
        lifespan=lifespan,
    )
    app.state.settings = app_settings

    limiter.enabled = app_settings.RATE_LIMIT_ENABLED
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    register_exception_handlers(app)

    add_logging_middleware(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    app.include_router(health_router)
    app.include_router(auth.router, tags=["Auth"])
    app.include_router(endpoints.router, tags=["URL Shortener"])
    app.include_router(endpoints.redirect_router, tags=["Redirect"])

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the module-level app with uvicorn."""
    uvicorn.run("shortlink.main:app", host="0.0.0.0", port=settings.PORT)
