"""
FastAPI application entry point.

This module sets up:
- FastAPI application with middleware
- Exception handlers
- Rate limiting
- API routes
- CORS configuration
"""

import logging

import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from calendarium.api.routes import (
    auth,
    calendar_events,
    calendars,
    health,
    roles,
    root,
    user_calendars,
    users,
)
from calendarium.core import settings
from calendarium.core.handlers import (
    app_exception_handler,
    general_exception_handler,
    rate_limit_handler,
    validation_exception_handler,
)
from calendarium.core.lifespan import lifespan
from calendarium.core.logging import setup_logging
from calendarium.core.rate_limit import limiter
from calendarium.exceptions import AppException
from calendarium.middleware import (
    RequestIDMiddleware,
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)

# Setup logging
setup_logging()
logger = logging.getLogger(__name__)


# ============================================================================
# FastAPI Application
# ============================================================================
app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    description=settings.description,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan,
)

# Attach rate limiter to app
app.state.limiter = limiter


# ============================================================================
# Exception Handlers
# ============================================================================
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
app.add_exception_handler(Exception, general_exception_handler)


# ============================================================================
# Middleware Setup (last added runs first)
# ============================================================================
app.add_middleware(SlowAPIMiddleware)

app.add_middleware(
    SecurityHeadersMiddleware,
    enable_hsts=settings.is_production,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Logging sees the request id set by the outer middleware
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(RequestIDMiddleware)


# ============================================================================
# API Routes
# ============================================================================
app.include_router(root.router)
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(roles.router)
app.include_router(calendars.router)
app.include_router(calendar_events.router)
app.include_router(user_calendars.router)


def run() -> None:
    """Console entry point: serve the application with uvicorn."""
    uvicorn.run(
        "calendarium.main:app",
        host=settings.host,
        port=settings.port,
        log_config=None,
        reload=settings.is_development and settings.debug,
    )


if __name__ == "__main__":
    run()
