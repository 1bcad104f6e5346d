"""
Health check router.

Provides a health endpoint for liveness/readiness probes.
Reports application status, version and whether the store answers.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from coinledger.core.config import settings
from coinledger.interfaces.exchange.dependencies import get_db_engine
from coinledger.interfaces.exchange.schemas import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Returns application health status, version and storage status.",
)
def health_check(engine: Engine = Depends(get_db_engine)) -> HealthResponse:
    """Return current application health status."""
    storage = "ok"
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.warning("Health check: storage unavailable (%s)", type(exc).__name__)
        storage = "unavailable"
    return HealthResponse(status="ok", version=settings.version, storage=storage)
