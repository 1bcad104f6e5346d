"""
Rate limiting configuration and setup.

Uses slowapi to enforce per-endpoint rate limits.
Credential checks get a tighter limit to slow password guessing.
"""

import logging

from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.requests import Request
from starlette.responses import JSONResponse

from coinledger.core.config import settings

logger = logging.getLogger(__name__)

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.rate_limit_default],
)


async def rate_limit_exceeded_handler(
    request: Request, exc: RateLimitExceeded
) -> JSONResponse:
    """Turn a tripped limit into the standard 429 error body."""
    logger.warning("Rate limit hit on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=429,
        content={
            "error": "Too many requests",
            "detail": f"Rate limit exceeded: {exc.detail}",
        },
    )
