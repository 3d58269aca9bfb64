# app/routes/health.py
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from sqlalchemy import text
import psutil
import datetime
import sys
import logging

from app.database import get_db

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/api/health",
    tags=["Health Check"]
)


@router.get("/")
def health_check(db: Session = Depends(get_db)):
    """
    Health check with database connectivity
    """
    health_status = {
        "status": "healthy",
        "timestamp": datetime.datetime.now().isoformat(),
        "service": "DevSphere Backend API",
        "version": "1.0.0",
    }

    try:
        db.execute(text("SELECT 1"))
        health_status["database"] = {"status": "connected", "dialect": db.get_bind().dialect.name}
    except Exception as e:
        logger.error(f"Health check database query failed: {e}")
        health_status["database"] = {"status": "disconnected", "error": str(e)}
        health_status["status"] = "degraded"

    health_status["system"] = {
        "python_version": sys.version,
        "platform": sys.platform,
        "memory_percent": psutil.virtual_memory().percent,
    }

    return JSONResponse(
        content=health_status,
        headers={
            "Cache-Control": "no-cache, no-store, must-revalidate",
            "X-Health-Check": "true"
        }
    )


@router.get("/ping")
def ping():
    """
    Simple ping endpoint for keep-alive
    """
    return JSONResponse(
        content={
            "status": "pong",
            "timestamp": datetime.datetime.now().isoformat(),
        },
        headers={"Cache-Control": "no-cache"}
    )
