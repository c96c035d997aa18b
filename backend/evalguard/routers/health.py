"""Health check endpoints for load balancers and monitoring."""

from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from evalguard.auth.engine import get_engine
from evalguard.config import settings
from evalguard.services.confirmation import get_confirmation_service

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """Lightweight health check (no engine/store check)."""
    return {
        "status": "ok",
        "service": "EvalGuard",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.environment,
    }


@router.get("/health/ready")
async def readiness_check():
    """Ready only when the engine is built and the confirmation store answers."""
    checks = {
        "engine": "unknown",
        "confirmation_store": "unknown",
    }
    overall_healthy = True

    try:
        engine = get_engine()
        checks["engine"] = f"ok ({len(engine.validator.operations)} operations)"
    except Exception as e:
        checks["engine"] = f"error: {str(e)[:100]}"
        overall_healthy = False

    try:
        service = get_confirmation_service()
        if await service.store.ping():
            checks["confirmation_store"] = "ok"
        else:
            checks["confirmation_store"] = "unreachable"
            overall_healthy = False
    except Exception as e:
        checks["confirmation_store"] = f"error: {str(e)[:100]}"
        overall_healthy = False

    return JSONResponse(
        status_code=200 if overall_healthy else 503,
        content={
            "status": "healthy" if overall_healthy else "unhealthy",
            "service": "EvalGuard",
            "checks": checks,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )
