"""
Health check endpoint.

Used by load balancers and monitoring to verify the service
is running and can reach its database.
"""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from fintrack.logging_config import get_logger
from fintrack.models.base import get_db

logger = get_logger("api.health")

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check(db: Session = Depends(get_db)):
    """
    Return service health including database connectivity.

    A failing database check reports "degraded" rather than
    raising, so the endpoint itself always answers.
    """
    try:
        db.execute(text("SELECT 1"))
        db_status = "healthy"
    except SQLAlchemyError:
        logger.exception("Database health check failed")
        db_status = "unhealthy"

    return {
        "status": "healthy" if db_status == "healthy" else "degraded",
        "service": "fintrack-api",
        "database": db_status,
    }
