"""
Health check endpoint.

Provides system health status for monitoring and load balancers.
"""

import logging

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from faktur import __version__
from faktur.api.dependencies import SettingsDep
from faktur.api.schemas import HealthResponse
from faktur.infrastructure.database import get_session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
def health_check(settings: SettingsDep) -> HealthResponse:
    """
    Check system health.

    Reports whether the sequence counter database answers. Invoice
    calculation and rendering work without it; only numbering does not.
    """
    try:
        with get_session() as session:
            session.execute(text("SELECT 1"))
        database = "connected"
    except SQLAlchemyError as e:
        logger.warning(f"Database health check failed: {e}")
        database = "unavailable"

    return HealthResponse(
        status="healthy" if database == "connected" else "degraded",
        version=__version__,
        database=database,
        invoice_prefix=settings.invoice_prefix,
    )
