"""
Service banner and health check
"""
import logging
import time

from fastapi import APIRouter
from sqlalchemy.exc import SQLAlchemyError

from kalakari.core.config import settings
from kalakari.core.database import check_database

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/")
async def root():
    """Root endpoint - API status"""
    return {
        "message": "Kalakari API - Handcrafted marketplace",
        "status": "online",
        "version": settings.API_VERSION,
        "environment": settings.ENVIRONMENT,
    }


@router.get("/health")
async def health():
    """Health check for monitoring - tests database connectivity"""
    start_time = time.time()

    db_status = "connected"
    db_latency_ms = None
    db_error = None

    try:
        db_latency_ms = check_database(max_retries=1, retry_delay=0.5)
    except SQLAlchemyError as e:
        logger.warning(f"Health check database failure: {e}")
        db_status = "disconnected"
        db_error = str(e)

    return {
        "status": "healthy" if db_status == "connected" else "degraded",
        "service": "kalakari-api",
        "version": settings.API_VERSION,
        "database": {
            "status": db_status,
            "latency_ms": db_latency_ms,
            "error": db_error,
        },
        "total_latency_ms": round((time.time() - start_time) * 1000, 2),
    }
