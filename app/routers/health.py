# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Liveness and readiness for the load balancer. Readiness probes Supabase
# (judges table and storage) and the Redis broker used for email jobs.
# =============================================================================

from datetime import datetime, timezone

import redis
from fastapi import APIRouter
from pydantic import BaseModel

from app.config import settings
from core.competition import get_rules
from lib.supabase_client import SupabaseClient

router = APIRouter()


class HealthResponse(BaseModel):
    """Basic health check response."""
    status: str
    timestamp: str
    environment: str
    competition_year: int
    version: str


class ChecksResponse(BaseModel):
    """Individual dependency checks."""
    database: str = "unknown"
    storage: str = "unknown"
    broker: str = "unknown"

    def all_healthy(self) -> bool:
        return all(value == "healthy" for value in (self.database, self.storage, self.broker))


class ReadinessResponse(BaseModel):
    status: str
    checks: ChecksResponse
    timestamp: str


class LivenessResponse(BaseModel):
    status: str
    timestamp: str


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _unhealthy(e: Exception) -> str:
    return f"unhealthy: {str(e)[:50]}"


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Basic health status and the competition year being served."""
    return HealthResponse(
        status="healthy",
        timestamp=_now(),
        environment=settings.ENVIRONMENT,
        competition_year=get_rules().year,
        version="1.0.0",
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check():
    """
    Readiness check endpoint.

    Reports "degraded" when any dependency check fails. The endpoint itself
    always answers 200 so the failing check is visible.
    """
    checks = ChecksResponse()

    try:
        SupabaseClient.get_client().table("judges").select("id").limit(1).execute()
        checks.database = "healthy"
    except Exception as e:
        checks.database = _unhealthy(e)

    try:
        SupabaseClient.get_client().storage.list_buckets()
        checks.storage = "healthy"
    except Exception as e:
        checks.storage = _unhealthy(e)

    try:
        redis.Redis.from_url(settings.REDIS_URL, socket_connect_timeout=2).ping()
        checks.broker = "healthy"
    except Exception as e:
        checks.broker = _unhealthy(e)

    return ReadinessResponse(
        status="ready" if checks.all_healthy() else "degraded",
        checks=checks,
        timestamp=_now(),
    )


@router.get("/health/live", response_model=LivenessResponse)
async def liveness_check():
    """Process is up."""
    return LivenessResponse(status="alive", timestamp=_now())
