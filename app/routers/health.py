# app/routers/health.py

from fastapi import APIRouter, Depends

from app.config import get_settings
from app.core.analysis_queue import CheckAnalyzer
from app.dependencies import get_check_analyzer

router = APIRouter()


@router.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {
        "status": "healthy",
        "service": "checkmate-api",
    }


@router.get("/ready")
async def readiness_check(analyzer: CheckAnalyzer = Depends(get_check_analyzer)):
    """Readiness check - vision capability and rule storage configuration."""
    settings = get_settings()
    vision_ok = getattr(analyzer, "configured", True)
    return {
        "status": "ready" if vision_ok else "degraded",
        "checks": {
            "vision": "ok" if vision_ok else "missing_api_key",
            "rule_store": settings.rule_store,
        },
    }
