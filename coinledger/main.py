"""
Application entry point.

Creates the FastAPI application and wires together:
- Routers (one per bounded context)
- Error handlers (centralized domain-to-HTTP mapping)
- Security middleware (headers, rate limiting)
- Logging configuration
- Database schema creation at start-up

No business logic belongs here.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIASGIMiddleware

from coinledger.core.config import settings
from coinledger.infrastructure.exchange.schema import create_schema
from coinledger.interfaces.exchange.dependencies import get_db_engine
from coinledger.interfaces.exchange.router import router as exchange_router
from coinledger.interfaces.health import router as health_router
from coinledger.shared.errors.handlers import register_error_handlers
from coinledger.shared.logging import configure_logging
from coinledger.shared.security.headers import SecurityHeadersMiddleware
from coinledger.shared.security.rate_limiting import (
    limiter,
    rate_limit_exceeded_handler,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: make sure the account and session tables exist."""
    engine_provider = app.dependency_overrides.get(get_db_engine, get_db_engine)
    create_schema(engine_provider())
    logger.info(
        "%s %s started (environment=%s)",
        settings.project_name,
        settings.version,
        settings.environment,
    )
    yield


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Registers routers, error handlers, and security middleware.
    This is the composition root of the application.

    Returns:
        A fully configured FastAPI application instance.
    """
    configure_logging(level=settings.log_level)

    app = FastAPI(
        title=settings.project_name,
        version=settings.version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    # --- Rate Limiting ---
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    # default limit for routes without their own @limiter.limit
    app.add_middleware(SlowAPIASGIMiddleware)

    # --- Security Middleware ---
    app.add_middleware(SecurityHeadersMiddleware)

    # --- Error Handlers ---
    register_error_handlers(app)

    # --- Routers ---
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(exchange_router, prefix="/api/v1")

    return app


app = create_app()
