import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func
from sqlmodel import Session, select, text

from fellowship.config import config
from fellowship.models.database import get_db
from fellowship.models.registration_form import RegistrationForm
from fellowship.rate_limit import limiter

health = APIRouter(prefix="/api", tags=["Health"])

logger = logging.getLogger(__name__)

SERVICE_NAME = "fellowship-server"


def _base_status() -> Dict[str, Any]:
    return {
        "status": "healthy",
        "service": SERVICE_NAME,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": config["environment"],
    }


def _check_database(db: Session) -> Dict[str, Any]:
    """Round trip to the database plus a count of stored forms"""
    started = time.perf_counter()
    db.exec(text("SELECT 1")).first()
    form_count = db.exec(select(func.count(RegistrationForm.id))).one()
    return {
        "status": "healthy",
        "latencyMs": round((time.perf_counter() - started) * 1000, 2),
        "registrationForms": form_count,
    }


@health.get("/health")
async def health_check():
    """Liveness check; does not touch the database"""
    return {**_base_status(), "message": "Fellowship Management API is running"}


@health.get("/health/detailed")
async def detailed_health_check(db: Session = Depends(get_db)):
    """Readiness check covering the database and token verification settings"""
    report = _base_status()
    checks: Dict[str, Any] = {}

    try:
        checks["database"] = _check_database(db)
    except Exception as e:
        logger.error(f"Database health check failed: {type(e).__name__}: {e}")
        checks["database"] = {"status": f"unhealthy: {type(e).__name__}"}

    checks["auth"] = {
        "status": "healthy" if config.get("jwt_secret") else "missing: JWT_SECRET"
    }
    checks["rateLimit"] = {
        "status": "healthy",
        "enabled": limiter.enabled,
        "submissionLimit": config["submission_rate_limit"],
    }
    report["checks"] = checks

    if any(check["status"] != "healthy" for check in checks.values()):
        report["status"] = "unhealthy"
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=report
        )

    return report
